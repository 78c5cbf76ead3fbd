"""
pypod - Dependency resolution with provider references

A small, synchronous service locator: providers are module-level objects
describing how to build a value, and a pod resolves them lazily.

Key Features:
- Identity-keyed providers: no type lookup, no auto-wiring
- Scopes: singleton, transient, and custom scopes with parent hierarchies
- Cycle detection with the full provider chain in the error
- Overrides for tests that keep the provider's scope rules
- Deterministic disposal on override, scope clear, and pod disposal
- Optional diagnostics events and env-driven configuration

Example:
    http_client = Provider(lambda pod: HttpClient())
    api_service = Provider(lambda pod: ApiService(pod.resolve(http_client)))

    with Pod() as pod:
        api = pod.resolve(api_service)
"""

__version__ = "0.1.0"

from .core import (
    Provider,
    Pod,
    Resolver,
    ResolveCtx,
)

from .scopes import (
    Scope,
    SINGLETON,
    TRANSIENT,
    custom_scope,
)

from .lifecycle import (
    Disposable,
    is_disposable,
    DisposalStrategy,
)

from .config import (
    PodConfig,
    ConfigError,
)

from .diagnostics import (
    PodDiagnostics,
    PodEvent,
    PodEventType,
    LoggingDiagnosticListener,
)

from .errors import (
    PodError,
    PodCycleError,
    DisposalError,
)

__all__ = [
    # Core types
    "Provider",
    "Pod",
    "Resolver",
    "ResolveCtx",

    # Scopes
    "Scope",
    "SINGLETON",
    "TRANSIENT",
    "custom_scope",

    # Lifecycle
    "Disposable",
    "is_disposable",
    "DisposalStrategy",

    # Config
    "PodConfig",
    "ConfigError",

    # Diagnostics
    "PodDiagnostics",
    "PodEvent",
    "PodEventType",
    "LoggingDiagnosticListener",

    # Errors
    "PodError",
    "PodCycleError",
    "DisposalError",
]
