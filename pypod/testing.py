"""
pypod Testing - Pod Testing Utilities.

Provides :class:`TestPod`, :func:`override_provider`,
:func:`override_value`, and :func:`spy_provider` for swapping and observing
providers in tests.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, TypeVar

from .config import PodConfig
from .core import Pod, Provider, Resolver
from .diagnostics import PodDiagnostics

T = TypeVar("T")


class _SpyBuilder:
    """
    Builder that delegates to a real builder and tracks calls.
    """

    def __init__(self, real_builder: Callable[[Resolver], Any]):
        self._real = real_builder
        self.resolve_count = 0
        self.resolved_values: List[Any] = []

    def __call__(self, resolver: Resolver) -> Any:
        self.resolve_count += 1
        result = self._real(resolver)
        self.resolved_values.append(result)
        return result


@contextmanager
def override_provider(
    pod: Pod,
    provider: Provider[T],
    builder: Callable[[Resolver], T],
) -> Iterator[Provider[T]]:
    """
    Temporarily override a provider in a pod.

    Restores the previous state on exit: an override that was installed
    before is reinstated, otherwise the override is removed.

    Usage::

        with override_provider(pod, http_client, lambda pod: FakeClient()):
            api = pod.resolve(api_service)
    """
    previous = pod._overrides.get(provider)
    pod.override_provider(provider, builder)
    try:
        yield provider
    finally:
        if previous is not None:
            pod.override_provider(provider, previous)
        else:
            pod.remove_override(provider)


@contextmanager
def override_value(pod: Pod, provider: Provider[T], value: T) -> Iterator[Provider[T]]:
    """
    Temporarily override a provider with a fixed value.

    Usage::

        with override_value(pod, settings, Settings(debug=True)):
            ...
    """
    with override_provider(pod, provider, lambda _: value) as overridden:
        yield overridden


@contextmanager
def spy_provider(pod: Pod, provider: Provider[T]) -> Iterator[_SpyBuilder]:
    """
    Wrap a provider's effective builder with a spy that tracks builds.

    The real behavior is preserved, including an override that is already
    installed.

    Usage::

        with spy_provider(pod, repo) as spy:
            pod.resolve(repo)
            assert spy.resolve_count == 1
    """
    spy = _SpyBuilder(pod._overrides.get(provider, provider.build))
    with override_provider(pod, provider, spy):
        yield spy


class TestPod(Pod):
    """
    A :class:`Pod` subclass tailored for testing.

    Differences from the production pod:
    - Tracks all resolutions (by label) for debugging.
    - ``reset()`` disposes the pod and clears the resolution log.

    Usage::

        pod = TestPod()
        pod.resolve(service)
        assert pod.resolution_log == ["service"]
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        config: Optional[PodConfig] = None,
        diagnostics: Optional[PodDiagnostics] = None,
    ):
        super().__init__(config=config, diagnostics=diagnostics)
        self.resolution_log: List[str] = []

    def resolve(self, provider: Provider[T]) -> T:
        self.resolution_log.append(provider.debug_label)
        return super().resolve(provider)

    def reset(self) -> None:
        """Dispose all instances and overrides, and clear the resolution log."""
        self.dispose()
        self.resolution_log.clear()
