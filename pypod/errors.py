"""
Pod-specific error types with rich diagnostics.
"""

from typing import TYPE_CHECKING, Any, List, Sequence, Tuple

if TYPE_CHECKING:
    from .core import Provider


class PodError(Exception):
    """Base exception for pod errors."""
    pass


class PodCycleError(PodError):
    """Circular dependency detected during resolution."""

    def __init__(self, cycle: Sequence["Provider[Any]"]):
        self.cycle: Tuple["Provider[Any]", ...] = tuple(cycle)

        msg = f"Circular dependency detected: {' -> '.join(self.chain)}"
        msg += "\n\nSuggested fixes:"
        msg += "\n  - Pass a factory instead of resolving eagerly inside the builder"
        msg += "\n  - Extract the shared part into a separate provider"
        msg += "\n  - Restructure dependencies to remove the cycle"

        super().__init__(msg)

    @property
    def chain(self) -> List[str]:
        """Human-readable provider labels in the cycle chain."""
        return [provider.debug_label for provider in self.cycle]


class DisposalError(PodError):
    """One or more instances failed to release."""

    def __init__(self, errors: List[Tuple[str, BaseException]]):
        self.errors = errors

        msg = f"Disposal failed for {len(errors)} instance(s):"
        for label, error in errors:
            msg += f"\n  - {label}: {type(error).__name__}: {error}"

        super().__init__(msg)
