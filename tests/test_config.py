"""
Config loading tests: defaults, environment, .env files and validation.
"""

import logging

import pytest

from pypod import ConfigError, DisposalStrategy, LoggingDiagnosticListener, Pod, PodConfig


class TestDefaults:

    def test_default_values(self):
        config = PodConfig()

        assert config.raise_on_disposal_error is True
        assert config.disposal_strategy is DisposalStrategy.LIFO
        assert config.diagnostics is False
        assert config.diagnostics_level == logging.DEBUG

    def test_pod_uses_defaults(self):
        assert Pod().config == PodConfig()

    def test_merge(self):
        config = PodConfig().merge(diagnostics=True)

        assert config.diagnostics is True
        assert config.raise_on_disposal_error is True

    def test_merge_unknown_field(self):
        with pytest.raises(ConfigError, match="unknown_field"):
            PodConfig().merge(unknown_field=1)


class TestFromEnv:

    def test_empty_environment(self):
        assert PodConfig.from_env(environ={}) == PodConfig()

    def test_reads_prefixed_variables(self):
        config = PodConfig.from_env(environ={
            "PYPOD_RAISE_ON_DISPOSAL_ERROR": "false",
            "PYPOD_DISPOSAL_STRATEGY": "FIFO",
            "PYPOD_DIAGNOSTICS": "yes",
            "PYPOD_DIAGNOSTICS_LEVEL": "info",
            "OTHER_DIAGNOSTICS": "no",
        })

        assert config.raise_on_disposal_error is False
        assert config.disposal_strategy is DisposalStrategy.FIFO
        assert config.diagnostics is True
        assert config.diagnostics_level == logging.INFO

    def test_numeric_level(self):
        config = PodConfig.from_env(environ={"PYPOD_DIAGNOSTICS_LEVEL": "30"})

        assert config.diagnostics_level == 30

    def test_custom_prefix(self):
        config = PodConfig.from_env(prefix="APP_", environ={"APP_DIAGNOSTICS": "1"})

        assert config.diagnostics is True

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("PYPOD_DISPOSAL_STRATEGY", "fifo")

        assert PodConfig.from_env().disposal_strategy is DisposalStrategy.FIFO

    @pytest.mark.parametrize("key, value", [
        ("PYPOD_DIAGNOSTICS", "maybe"),
        ("PYPOD_DISPOSAL_STRATEGY", "random"),
        ("PYPOD_DIAGNOSTICS_LEVEL", "loud"),
    ])
    def test_invalid_values(self, key, value):
        with pytest.raises(ConfigError):
            PodConfig.from_env(environ={key: value})


class TestEnvFile:

    def test_loads_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# pod settings\n"
            "PYPOD_DIAGNOSTICS=true\n"
            "PYPOD_DISPOSAL_STRATEGY=\"fifo\"\n"
        )

        config = PodConfig.from_env(env_file=str(env_file), environ={})

        assert config.diagnostics is True
        assert config.disposal_strategy is DisposalStrategy.FIFO

    def test_environment_overrides_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("PYPOD_DIAGNOSTICS=true\n")

        config = PodConfig.from_env(
            env_file=str(env_file),
            environ={"PYPOD_DIAGNOSTICS": "false"},
        )

        assert config.diagnostics is False

    def test_missing_env_file_is_ignored(self, tmp_path):
        config = PodConfig.from_env(env_file=str(tmp_path / "missing.env"), environ={})

        assert config == PodConfig()

    def test_key_without_value_is_ignored(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("PYPOD_DIAGNOSTICS\n")

        assert PodConfig.from_env(env_file=str(env_file), environ={}) == PodConfig()


class TestPodIntegration:

    def test_diagnostics_flag_attaches_logging_listener(self):
        pod = Pod(config=PodConfig(diagnostics=True, diagnostics_level=logging.INFO))

        listeners = pod.diagnostics._listeners

        assert len(listeners) == 1
        assert isinstance(listeners[0], LoggingDiagnosticListener)
        assert listeners[0].log_level == logging.INFO
