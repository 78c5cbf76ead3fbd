"""
Scope definitions.

A scope is an identity node describing how long resolved instances live.
Scopes may declare a parent, forming a forest; clearing a scope also clears
every scope below it.
"""

from typing import Iterator, Optional
from dataclasses import dataclass


@dataclass(frozen=True, eq=False)
class Scope:
    """
    Scope metadata.

    Scopes are matched by identity, never by name. Parent chains must be
    finite and acyclic; this is not checked.
    """

    name: str
    parent: Optional["Scope"] = None
    cacheable: bool = True

    def ancestors(self) -> Iterator["Scope"]:
        """Yield the parent chain, nearest first."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def is_within(self, other: "Scope") -> bool:
        """
        Check whether ``other`` is this scope or one of its ancestors.

        Args:
            other: Candidate ancestor-or-self

        Returns:
            True if clearing ``other`` should clear this scope too
        """
        if self is other:
            return True
        return any(ancestor is other for ancestor in self.ancestors())

    def __repr__(self) -> str:
        if self.parent is None:
            return f"Scope({self.name!r})"
        return f"Scope({self.name!r}, parent={self.parent.name!r})"


# Predefined scopes
SINGLETON = Scope(name="singleton")  # Cached until cleared or disposed
TRANSIENT = Scope(name="transient", cacheable=False)  # New instance every resolve


def custom_scope(name: str, parent: Optional[Scope] = None) -> Scope:
    """
    Create a cacheable scope, optionally nested under ``parent``.

    Example:
        session = custom_scope("session")
        request = custom_scope("request", parent=session)
    """
    return Scope(name=name, parent=parent)

