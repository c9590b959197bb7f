"""Domain models for login sessions."""

from dataclasses import dataclass
from enum import Enum


class SessionType(Enum):
    """Login session display type."""

    GRAPHICAL_WAYLAND = "wayland"
    GRAPHICAL_X11 = "x11"
    OTHER = "other"

    @property
    def is_graphical(self) -> bool:
        return self in {SessionType.GRAPHICAL_WAYLAND, SessionType.GRAPHICAL_X11}


@dataclass(frozen=True)
class Session:
    """Represents a logind session."""

    id: str
    user_name: str
    session_type: SessionType
    active: bool
    remote: bool
    seat: str | None = None
