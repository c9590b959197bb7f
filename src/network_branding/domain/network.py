"""Domain models for network connections."""

from dataclasses import dataclass
from enum import Enum


class ConnectionType(Enum):
    """Coarse connection kind used for authoritative selection."""

    VPN = "vpn"
    OTHER = "other"


@dataclass(frozen=True)
class Connection:
    """A NetworkManager connection as seen in one snapshot."""

    name: str
    type: ConnectionType
    device: str | None = None
    active: bool = True


@dataclass(frozen=True)
class NetworkSnapshot:
    """Active connections and default-route device read for one cycle."""

    connections: tuple[Connection, ...]
    default_route_device: str | None = None
