"""
Config system - typed pod settings loaded from defaults, .env files and the
process environment.

Merge order (later overrides earlier):
1. Dataclass defaults
2. ``.env`` file (when given)
3. Environment variables
"""

from typing import Any, Dict, Mapping, Optional
from dataclasses import dataclass, fields, replace
from pathlib import Path
import logging
import os

from dotenv import dotenv_values

from .errors import PodError
from .lifecycle import DisposalStrategy

logger = logging.getLogger("pypod.config")

_TRUE = ("true", "yes", "on", "1")
_FALSE = ("false", "no", "off", "0")


class ConfigError(PodError):
    """Raised when configuration validation fails."""
    pass


@dataclass(frozen=True)
class PodConfig:
    """
    Pod behaviour settings.

    Attributes:
        raise_on_disposal_error: Raise ``DisposalError`` when releasing an
            instance fails; when False, failures are logged and swallowed
        disposal_strategy: Release order for ``clear_scope`` and ``dispose``
        diagnostics: Attach a ``LoggingDiagnosticListener`` to new pods
        diagnostics_level: Log level used by that listener
    """

    raise_on_disposal_error: bool = True
    disposal_strategy: DisposalStrategy = DisposalStrategy.LIFO
    diagnostics: bool = False
    diagnostics_level: int = logging.DEBUG

    @classmethod
    def from_env(
        cls,
        prefix: str = "PYPOD_",
        env_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "PodConfig":
        """
        Load configuration from an optional .env file and the environment.

        Args:
            prefix: Prefix for environment variables
            env_file: Path to a .env file; ignored if it does not exist
            environ: Environment mapping, defaults to ``os.environ``

        Returns:
            Validated config

        Raises:
            ConfigError: If a value cannot be parsed
        """
        raw: Dict[str, Optional[str]] = {}

        if env_file is not None:
            env_path = Path(env_file)
            if env_path.exists():
                raw.update(dotenv_values(env_path))
            else:
                logger.debug("Env file %s not found, skipping", env_path)

        raw.update(os.environ if environ is None else environ)

        values: Dict[str, Any] = {}
        for name in (f.name for f in fields(cls)):
            value = raw.get(f"{prefix}{name.upper()}")
            if value is None:
                continue
            values[name] = _parse_field(name, value.strip())

        return cls(**values)

    def merge(self, **overrides: Any) -> "PodConfig":
        """Return a copy with the given fields replaced."""
        unknown = set(overrides) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigError(f"Unknown config field(s): {', '.join(sorted(unknown))}")
        return replace(self, **overrides)


def _parse_field(name: str, value: str) -> Any:
    """Parse string value to the field's type."""
    if name in ("raise_on_disposal_error", "diagnostics"):
        return _parse_bool(name, value)

    if name == "disposal_strategy":
        try:
            return DisposalStrategy(value.lower())
        except ValueError:
            choices = ", ".join(s.value for s in DisposalStrategy)
            raise ConfigError(f"Invalid {name}={value!r}; expected one of: {choices}") from None

    if name == "diagnostics_level":
        if value.isdigit():
            return int(value)
        level = logging.getLevelName(value.upper())
        if not isinstance(level, int):
            raise ConfigError(f"Invalid {name}={value!r}; expected a logging level")
        return level

    raise ConfigError(f"Unknown config field: {name}")


def _parse_bool(name: str, value: str) -> bool:
    if value.lower() in _TRUE:
        return True
    if value.lower() in _FALSE:
        return False
    raise ConfigError(f"Invalid {name}={value!r}; expected a boolean")
