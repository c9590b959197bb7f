"""Persistence interface for applied decisions."""

from typing import Protocol

from network_branding.domain.decisions import Decision


class DecisionStateStore(Protocol):
    """Holds at most one decision per context id."""

    def get(self, context_id: str) -> Decision | None:
        """Return the last applied decision for a context, if present."""

    def put(self, decision: Decision) -> None:
        """Store a decision, replacing any previous one for its context."""

    def list_all(self) -> list[Decision]:
        """Return every stored decision."""

    def clear(self) -> int:
        """Remove all stored decisions and return how many were removed."""
