"""
Core pod types and protocols.

Defines the resolution engine: providers describe how to build a value,
the pod decides whether to build or reuse, detects cycles and releases
instances when scopes are cleared.
"""

from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Protocol,
    Set,
    Tuple,
    TypeVar,
)
from dataclasses import dataclass
import inspect
import logging

from .config import PodConfig
from .diagnostics import LoggingDiagnosticListener, PodDiagnostics, PodEventType
from .errors import PodCycleError
from .lifecycle import is_disposable, run_disposals
from .scopes import SINGLETON, Scope

logger = logging.getLogger("pypod.core")

T = TypeVar("T")


class Resolver(Protocol):
    """
    Resolver capability handed to builders.

    Implemented by ``Pod``; builders depend only on this so they can be
    exercised with any resolver in tests.
    """

    def resolve(self, provider: "Provider[T]") -> T:
        """Resolve an instance from the given provider."""
        ...


@dataclass(frozen=True, eq=False, repr=False)
class Provider(Generic[T]):
    """
    Immutable descriptor of how to build a value.

    Providers are cache keys by identity: two structurally identical
    providers are distinct. They are usually module-level constants.

    Args:
        builder: Creates the value, receiving a resolver for dependencies
        scope: Controls instance lifetime. Defaults to ``SINGLETON``
        on_dispose: Releases an instance. When omitted, instances exposing
            ``dispose()`` are released through it
        debug_name: Name used in diagnostics and cycle errors

    Example:
        http_client = Provider(lambda pod: HttpClient())
        api = Provider(lambda pod: Api(client=pod.resolve(http_client)))
    """

    builder: Callable[[Resolver], T]
    scope: Scope = SINGLETON
    on_dispose: Optional[Callable[[T], None]] = None
    debug_name: Optional[str] = None

    @property
    def debug_label(self) -> str:
        """``debug_name`` if set, otherwise ``Provider[<type>]``."""
        if self.debug_name:
            return self.debug_name
        return f"Provider[{_return_type_name(self.builder)}]"

    def build(self, resolver: Resolver) -> T:
        """Build a new instance using ``resolver`` for dependencies."""
        return self.builder(resolver)

    def dispose_instance(self, instance: T) -> None:
        """
        Release an instance built by this provider.

        Exactly one path runs: the explicit ``on_dispose`` function, else the
        instance's own ``dispose()`` when it is callable, else nothing.
        """
        if self.on_dispose is not None:
            self.on_dispose(instance)
        elif is_disposable(instance):
            instance.dispose()

    def __repr__(self) -> str:
        return f"<Provider {self.debug_label} scope={self.scope.name}>"


def _return_type_name(builder: Callable[..., Any]) -> str:
    try:
        annotation = inspect.signature(builder).return_annotation
    except (TypeError, ValueError):
        return "T"
    if annotation is inspect.Signature.empty:
        return "T"
    if isinstance(annotation, str):
        return annotation
    return getattr(annotation, "__qualname__", None) or repr(annotation)


class ResolveCtx:
    """
    Bookkeeping for one top-level resolve call tree.

    Tracks the in-flight stack for cycle detection and journals cache
    writes so a failed call can be rolled back.
    Uses __slots__ for minimal allocation overhead.
    """
    __slots__ = ("stack", "members", "journal")

    def __init__(self):
        self.stack: List[Provider[Any]] = []
        self.members: Set[Provider[Any]] = set()
        self.journal: List[Tuple[Provider[Any], Any]] = []

    @property
    def active(self) -> bool:
        """True while a resolve call is in progress."""
        return bool(self.stack)

    def push(self, provider: Provider[Any]) -> None:
        """Push provider onto resolution stack."""
        self.stack.append(provider)
        self.members.add(provider)

    def pop(self) -> None:
        """Pop provider from resolution stack."""
        self.members.discard(self.stack.pop())

    def in_cycle(self, provider: Provider[Any]) -> bool:
        """Check if provider is currently being built (cycle)."""
        return provider in self.members

    def cycle_from(self, provider: Provider[Any]) -> List[Provider[Any]]:
        """Chain from the first occurrence of ``provider`` through the repeat."""
        start = self.stack.index(provider)
        return self.stack[start:] + [provider]

    def record(self, provider: Provider[Any], instance: Any) -> None:
        """Journal a cache write made during this call tree."""
        self.journal.append((provider, instance))


class Pod:
    """
    Pod - builds, caches and releases provider instances.

    Every pod is independent: create one per application or per test.
    Not thread-safe; callers needing shared access serialize externally.

    Example:
        with Pod() as pod:
            api = pod.resolve(api_provider)
    """

    __slots__ = (
        "_cache",
        "_overrides",
        "_ctx",
        "_config",
        "_diagnostics",
    )

    def __init__(
        self,
        config: Optional[PodConfig] = None,
        diagnostics: Optional[PodDiagnostics] = None,
    ):
        self._cache: Dict[Provider[Any], Any] = {}  # {provider: instance}, build order
        self._overrides: Dict[Provider[Any], Callable[[Resolver], Any]] = {}
        self._ctx = ResolveCtx()
        self._config = config or PodConfig()
        self._diagnostics = diagnostics or PodDiagnostics()

        if self._config.diagnostics:
            self._diagnostics.add_listener(
                LoggingDiagnosticListener(self._config.diagnostics_level)
            )

    @property
    def config(self) -> PodConfig:
        return self._config

    @property
    def diagnostics(self) -> PodDiagnostics:
        return self._diagnostics

    def resolve(self, provider: Provider[T]) -> T:
        """
        Resolve an instance from the given provider.

        Non-cacheable (transient) providers build on every call; all other
        scopes build once and reuse the cached instance. An installed
        override replaces the builder but keeps the provider's scope.

        Args:
            provider: Provider to resolve

        Returns:
            The resolved instance

        Raises:
            PodCycleError: If the provider is already being built on the
                current call path
        """
        if self._ctx.active:
            return self._resolve(provider)

        # Top-level call: a failure leaves the cache as it was
        try:
            return self._resolve(provider)
        except BaseException:
            self._rollback()
            raise
        finally:
            self._ctx.journal.clear()

    def _resolve(self, provider: Provider[T]) -> T:
        builder = self._overrides.get(provider, provider.build)

        if not provider.scope.cacheable:
            return self._build(provider, builder)

        if provider in self._cache:
            if self._diagnostics.enabled:
                self._diagnostics.emit(
                    PodEventType.CACHE_HIT,
                    provider=provider.debug_label,
                    scope=provider.scope.name,
                )
            return self._cache[provider]

        instance = self._build(provider, builder)
        self._cache[provider] = instance
        self._ctx.record(provider, instance)
        return instance

    def _build(self, provider: Provider[T], builder: Callable[[Resolver], T]) -> T:
        """Invoke ``builder`` with cycle detection."""
        ctx = self._ctx
        if ctx.in_cycle(provider):
            raise PodCycleError(ctx.cycle_from(provider))

        ctx.push(provider)
        try:
            logger.debug("Building %r", provider)
            if self._diagnostics.enabled:
                with self._diagnostics.measure(
                    provider=provider.debug_label,
                    scope=provider.scope.name,
                    metadata={"overridden": provider in self._overrides},
                ):
                    return builder(self)
            return builder(self)
        finally:
            ctx.pop()

    def _rollback(self) -> None:
        """Evict and release cache writes journaled by a failed call."""
        entries = [
            (provider, instance)
            for provider, instance in self._ctx.journal
            if provider in self._cache and self._cache[provider] is instance
        ]
        if not entries:
            return

        for provider, _ in entries:
            del self._cache[provider]
        logger.debug("Rolled back %d cached instance(s) after failed resolve", len(entries))

        run_disposals(
            entries,
            strategy=self._config.disposal_strategy,
            raise_errors=False,
            on_disposed=self._on_disposed,
        )

    def override_provider(self, provider: Provider[T], builder: Callable[[Resolver], T]) -> None:
        """
        Override a provider with a substitute builder, for testing.

        A cached instance is evicted and released before the override takes
        effect, so no caller can observe the stale instance.

        Args:
            provider: Provider to override
            builder: Substitute builder; the provider's scope still applies

        Raises:
            DisposalError: If releasing the stale instance failed. The
                override is installed regardless
        """
        stale = self._evict(provider)
        try:
            self._release(stale)
        finally:
            self._overrides[provider] = builder
            logger.debug("Installed override for %r", provider)
            self._diagnostics.emit(
                PodEventType.OVERRIDE_INSTALLED,
                provider=provider.debug_label,
                scope=provider.scope.name,
            )

    def remove_override(self, provider: Provider[Any]) -> None:
        """
        Remove an override for a provider.

        An instance cached while the override was active is evicted and
        released, so the next resolve uses the original builder. Does nothing
        if no override exists.
        """
        if provider not in self._overrides:
            return

        stale = self._evict(provider)
        try:
            self._release(stale)
        finally:
            self._overrides.pop(provider, None)
            logger.debug("Removed override for %r", provider)
            self._diagnostics.emit(
                PodEventType.OVERRIDE_REMOVED,
                provider=provider.debug_label,
                scope=provider.scope.name,
            )

    def clear_scope(self, scope: Scope) -> None:
        """
        Evict and release cached instances for a scope.

        Instances of descendant scopes are cleared too; ancestors and
        siblings are untouched.

        Args:
            scope: Scope to clear, matched by identity
        """
        matches: Dict[Scope, bool] = {}  # memoized ancestor checks
        evicted: List[Tuple[Provider[Any], Any]] = []

        for provider in list(self._cache):
            provider_scope = provider.scope
            hit = matches.get(provider_scope)
            if hit is None:
                hit = matches[provider_scope] = provider_scope.is_within(scope)
            if hit:
                evicted.append((provider, self._cache.pop(provider)))

        logger.debug("Cleared scope %r: %d instance(s)", scope, len(evicted))
        self._diagnostics.emit(
            PodEventType.SCOPE_CLEARED,
            scope=scope.name,
            metadata={"evicted": len(evicted)},
        )
        self._release(evicted)

    def dispose(self) -> None:
        """
        Release every cached instance and drop all overrides.

        The pod is empty afterwards and rebuilds from the original builders.
        Calling it again is a no-op.
        """
        entries = list(self._cache.items())
        self._cache.clear()
        self._overrides.clear()

        if entries:
            logger.debug("Disposing pod: %d instance(s)", len(entries))
        self._diagnostics.emit(
            PodEventType.POD_DISPOSED,
            metadata={"instances": len(entries)},
        )
        self._release(entries)

    def _evict(self, provider: Provider[Any]) -> List[Tuple[Provider[Any], Any]]:
        if provider in self._cache:
            return [(provider, self._cache.pop(provider))]
        return []

    def _release(self, entries: List[Tuple[Provider[Any], Any]]) -> None:
        if not entries:
            return
        run_disposals(
            entries,
            strategy=self._config.disposal_strategy,
            raise_errors=self._config.raise_on_disposal_error,
            on_disposed=self._on_disposed,
        )

    def _on_disposed(self, provider: Provider[Any], instance: Any) -> None:
        self._diagnostics.emit(
            PodEventType.INSTANCE_DISPOSED,
            provider=provider.debug_label,
            scope=provider.scope.name,
        )

    def __enter__(self) -> "Pod":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.dispose()
        return False
