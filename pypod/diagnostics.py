"""
Pod Diagnostics - Observability and event tracking for pods.
"""

import time
from typing import Any, Dict, List, Optional, Protocol
from enum import Enum
import dataclasses
import logging

logger = logging.getLogger("pypod.diagnostics")


class PodEventType(Enum):
    """Types of pod events."""
    RESOLUTION_START = "resolution_start"
    RESOLUTION_SUCCESS = "resolution_success"
    RESOLUTION_FAILURE = "resolution_failure"
    CACHE_HIT = "cache_hit"
    OVERRIDE_INSTALLED = "override_installed"
    OVERRIDE_REMOVED = "override_removed"
    INSTANCE_DISPOSED = "instance_disposed"
    SCOPE_CLEARED = "scope_cleared"
    POD_DISPOSED = "pod_disposed"


@dataclasses.dataclass
class PodEvent:
    """A diagnostic event in the pod."""
    type: PodEventType
    timestamp: float = dataclasses.field(default_factory=time.time)
    provider: Optional[str] = None
    scope: Optional[str] = None
    duration: Optional[float] = None
    error: Optional[BaseException] = None
    metadata: Dict[str, Any] = dataclasses.field(default_factory=dict)


class DiagnosticListener(Protocol):
    """Interface for pod diagnostic listeners."""
    def on_event(self, event: PodEvent) -> None:
        """Called when a pod event occurs."""
        ...


class LoggingDiagnosticListener:
    """Diagnostic listener that writes every event to the ``pypod.diagnostics`` logger."""
    def __init__(self, log_level: int = logging.DEBUG):
        self.log_level = log_level

    def on_event(self, event: PodEvent) -> None:
        if event.type == PodEventType.RESOLUTION_START:
            logger.log(self.log_level, "Resolving %s (scope=%s)...", event.provider, event.scope)
        elif event.type == PodEventType.RESOLUTION_SUCCESS:
            logger.log(self.log_level, "Resolved %s in %.4fs", event.provider, event.duration)
        elif event.type == PodEventType.RESOLUTION_FAILURE:
            logger.log(logging.ERROR, "Failed to resolve %s: %s", event.provider, event.error)
        elif event.type == PodEventType.CACHE_HIT:
            logger.log(self.log_level, "Cache hit for %s", event.provider)
        elif event.type == PodEventType.SCOPE_CLEARED:
            logger.log(
                self.log_level,
                "Cleared scope %s (%d instance(s))",
                event.scope,
                event.metadata.get("evicted", 0),
            )
        else:
            logger.log(self.log_level, "%s: %s", event.type.value, event.provider)


class PodDiagnostics:
    """Coordinator for pod diagnostic listeners."""
    def __init__(self):
        self._listeners: List[DiagnosticListener] = []

    @property
    def enabled(self) -> bool:
        """True when at least one listener is attached."""
        return bool(self._listeners)

    def add_listener(self, listener: DiagnosticListener) -> None:
        """Add a diagnostic listener."""
        self._listeners.append(listener)

    def remove_listener(self, listener: DiagnosticListener) -> None:
        """Remove a previously added listener. Unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event_type: PodEventType, **kwargs) -> None:
        """Emit a diagnostic event to all listeners."""
        if not self._listeners:
            return
        event = PodEvent(type=event_type, **kwargs)
        for listener in list(self._listeners):
            try:
                listener.on_event(event)
            except Exception as e:
                # Diagnostics never break resolution
                logger.error("Diagnostic listener error: %s", e)

    def measure(self, **kwargs):
        """Context manager timing a build and emitting success or failure."""
        return _DiagnosticMeasure(self, **kwargs)


class _DiagnosticMeasure:
    def __init__(self, diagnostics: PodDiagnostics, **kwargs):
        self.diagnostics = diagnostics
        self.kwargs = kwargs
        self.start_time = None

    def __enter__(self):
        self.diagnostics.emit(PodEventType.RESOLUTION_START, **self.kwargs)
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.perf_counter() - self.start_time
        if exc_type:
            self.diagnostics.emit(
                PodEventType.RESOLUTION_FAILURE,
                duration=duration,
                error=exc_val,
                **self.kwargs
            )
        else:
            self.diagnostics.emit(
                PodEventType.RESOLUTION_SUCCESS,
                duration=duration,
                **self.kwargs
            )
        return False
