"""Authoritative network connection selection."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from network_branding.domain.network import Connection, ConnectionType, NetworkSnapshot


class NetworkQuery(Protocol):
    """Read-only view of the host's network state."""

    def list_active_connections(self) -> list[Connection]:
        """Return the currently active connections."""

    def default_route_device(self) -> str | None:
        """Return the outbound device of the default route, if any."""


def select_authoritative(
    connections: Iterable[Connection], default_route_device: str | None
) -> str | None:
    """Pick the connection that represents the current network.

    Active connections are considered in lexical order by name. An active VPN
    wins outright. Otherwise, when a default route exists, only the connection
    bound to its device qualifies; with no default route the first active
    connection is used.
    """
    active = sorted((c for c in connections if c.active), key=lambda c: c.name)
    for connection in active:
        if connection.type is ConnectionType.VPN:
            return connection.name
    if default_route_device:
        for connection in active:
            if connection.device == default_route_device:
                return connection.name
        return None
    if active:
        return active[0].name
    return None


@dataclass(frozen=True)
class Selection:
    """Selected connection together with the snapshot it came from."""

    connection_name: str | None
    snapshot: NetworkSnapshot


@dataclass
class ConnectionSelector:
    """Reads a fresh network snapshot and selects the authoritative connection."""

    query: NetworkQuery

    def snapshot(self) -> NetworkSnapshot:
        """Read the active connections and default route once."""
        return NetworkSnapshot(
            connections=tuple(self.query.list_active_connections()),
            default_route_device=self.query.default_route_device(),
        )

    def select(self) -> Selection:
        """Return the authoritative connection for the current state."""
        snapshot = self.snapshot()
        name = select_authoritative(
            snapshot.connections, snapshot.default_route_device
        )
        return Selection(connection_name=name, snapshot=snapshot)
