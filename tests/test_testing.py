"""
Tests for the pypod.testing module.

Validates TestPod, override_provider, override_value and spy_provider.
"""

from pypod import TRANSIENT, Provider
from pypod.testing import TestPod, override_provider, override_value, spy_provider

from services import DisposableService, SimpleService


# ============================================================================
# override_provider / override_value
# ============================================================================


class TestOverrideProvider:

    def test_override_replaces_and_restores(self, pod, simple_provider):
        original = pod.resolve(simple_provider)
        mock = SimpleService()

        with override_provider(pod, simple_provider, lambda _: mock):
            assert pod.resolve(simple_provider) is mock

        restored = pod.resolve(simple_provider)
        assert restored is not mock
        assert restored is not original

    def test_nested_overrides_restore_correctly(self, pod, simple_provider):
        first, second = SimpleService(), SimpleService()

        with override_value(pod, simple_provider, first):
            assert pod.resolve(simple_provider) is first

            with override_value(pod, simple_provider, second):
                assert pod.resolve(simple_provider) is second

            assert pod.resolve(simple_provider) is first

        assert pod.resolve(simple_provider) not in (first, second)

    def test_restores_on_error(self, pod, simple_provider):
        mock = SimpleService()

        try:
            with override_value(pod, simple_provider, mock):
                raise RuntimeError("test failure")
        except RuntimeError:
            pass

        assert pod.resolve(simple_provider) is not mock

    def test_disposes_overridden_instance_on_exit(self, pod, disposable_provider):
        with override_provider(pod, disposable_provider, lambda _: DisposableService()):
            fake = pod.resolve(disposable_provider)

        assert fake.dispose_calls == 1

    def test_yields_provider(self, pod, simple_provider):
        with override_value(pod, simple_provider, SimpleService()) as provider:
            assert provider is simple_provider


# ============================================================================
# spy_provider
# ============================================================================


class TestSpyProvider:

    def test_spy_tracks_builds(self, pod, simple_provider):
        with spy_provider(pod, simple_provider) as spy:
            first = pod.resolve(simple_provider)
            pod.resolve(simple_provider)

        assert spy.resolve_count == 1
        assert spy.resolved_values == [first]

    def test_spy_on_transient_counts_every_resolve(self, pod):
        provider = Provider(lambda pod: SimpleService(), scope=TRANSIENT)

        with spy_provider(pod, provider) as spy:
            pod.resolve(provider)
            pod.resolve(provider)

        assert spy.resolve_count == 2

    def test_spy_wraps_existing_override(self, pod, simple_provider):
        mock = SimpleService()
        pod.override_provider(simple_provider, lambda _: mock)

        with spy_provider(pod, simple_provider) as spy:
            assert pod.resolve(simple_provider) is mock

        assert spy.resolved_values == [mock]
        assert pod.resolve(simple_provider) is mock


# ============================================================================
# TestPod
# ============================================================================


class TestTestPod:

    def test_records_resolutions(self, test_pod, dependent_provider):
        test_pod.resolve(dependent_provider)
        test_pod.resolve(dependent_provider)

        assert test_pod.resolution_log == ["dependent", "simple", "dependent"]

    def test_reset_disposes_and_clears_log(self, test_pod, disposable_provider):
        instance = test_pod.resolve(disposable_provider)

        test_pod.reset()

        assert instance.disposed
        assert test_pod.resolution_log == []
        assert test_pod.resolve(disposable_provider) is not instance

    def test_not_collected_as_test_class(self):
        assert TestPod.__test__ is False
