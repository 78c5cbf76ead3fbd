"""
Lifecycle management for released instances.
"""

from typing import TYPE_CHECKING, Any, Callable, List, Optional, Protocol, Sequence, Tuple, runtime_checkable
from enum import Enum
import logging

from .errors import DisposalError

if TYPE_CHECKING:
    from .core import Provider

logger = logging.getLogger("pypod.lifecycle")


@runtime_checkable
class Disposable(Protocol):
    """
    Capability for objects that hold resources.

    Any object exposing a zero-argument ``dispose()`` qualifies; no
    inheritance is required.
    """

    def dispose(self) -> None:
        """Release any resources held by this object."""
        ...


def is_disposable(instance: Any) -> bool:
    """
    Check that ``instance`` can be released through a bound ``dispose()``.

    Classes are rejected: their ``dispose`` is unbound. So are objects whose
    ``dispose`` attribute is not callable.
    """
    if isinstance(instance, type) or not isinstance(instance, Disposable):
        return False
    return callable(instance.dispose)


class DisposalStrategy(str, Enum):
    """Order in which evicted instances are released."""

    LIFO = "lifo"  # Last built, first released (default)
    FIFO = "fifo"  # First built, first released


def run_disposals(
    entries: Sequence[Tuple["Provider[Any]", Any]],
    *,
    strategy: DisposalStrategy = DisposalStrategy.LIFO,
    raise_errors: bool = True,
    on_disposed: Optional[Callable[["Provider[Any]", Any], None]] = None,
) -> None:
    """
    Release instances, continuing past failures.

    Args:
        entries: ``(provider, instance)`` pairs in build order
        strategy: Release order
        raise_errors: Raise ``DisposalError`` once all entries were released
            if any release failed; otherwise log each failure
        on_disposed: Called after each successful release

    Raises:
        DisposalError: If a release failed and ``raise_errors`` is set
    """
    ordered = reversed(entries) if strategy == DisposalStrategy.LIFO else iter(entries)
    errors: List[Tuple[str, Exception]] = []

    for provider, instance in ordered:
        try:
            provider.dispose_instance(instance)
        except Exception as e:
            errors.append((provider.debug_label, e))
            continue
        if on_disposed is not None:
            on_disposed(provider, instance)

    if not errors:
        return

    if raise_errors:
        raise DisposalError(errors) from errors[0][1]

    for label, error in errors:
        logger.warning("Disposal of %s failed: %s", label, error, exc_info=error)
