"""Local graphical user detection."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from network_branding.domain.sessions import Session


class SessionQuery(Protocol):
    """Read-only view of login sessions and per-user processes."""

    def list_sessions(self) -> list[Session]:
        """Return all login sessions."""

    def shell_process_owners(self) -> list[str]:
        """Return owners of the desktop-shell process, longest running first."""

    def live_bus_owners(self) -> list[str]:
        """Return users that have a live per-user bus socket."""


def _session_order(session: Session) -> tuple[int, int, str]:
    if session.id.isdigit():
        return (0, int(session.id), session.id)
    return (1, 0, session.id)


def locate_graphical_user(
    sessions: Iterable[Session],
    shell_owners: Sequence[str],
    bus_owners: Sequence[str],
    primary_seat: str = "seat0",
    excluded_users: frozenset[str] = frozenset(),
) -> str | None:
    """Return the user that should receive per-user branding.

    Tier one looks for an active, local, graphical session whose user runs
    the desktop shell, preferring the primary seat. Tier two takes the owner
    of the longest-running shell. Tier three takes the first user with a live
    session bus. Sessions are enumerated by numeric id.
    """
    running = set(shell_owners)
    candidate: str | None = None
    for session in sorted(sessions, key=_session_order):
        if session.user_name in excluded_users:
            continue
        if not (session.active and not session.remote):
            continue
        if not session.session_type.is_graphical:
            continue
        if session.user_name not in running:
            continue
        if session.seat == primary_seat:
            return session.user_name
        if candidate is None:
            candidate = session.user_name
    if candidate is not None:
        return candidate

    for owner in shell_owners:
        if owner and owner not in excluded_users:
            return owner

    for owner in bus_owners:
        if owner and owner not in excluded_users:
            return owner
    return None


@dataclass
class SessionLocator:
    """Resolves the local graphical user from a fresh session snapshot."""

    query: SessionQuery
    primary_seat: str = "seat0"
    excluded_users: frozenset[str] = field(default_factory=frozenset)

    def locate(self) -> str | None:
        """Return the local graphical user, or None when there is none."""
        return locate_graphical_user(
            self.query.list_sessions(),
            self.query.shell_process_owners(),
            self.query.live_bus_owners(),
            primary_seat=self.primary_seat,
            excluded_users=self.excluded_users,
        )
