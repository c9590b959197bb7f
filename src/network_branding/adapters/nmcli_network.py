"""NetworkManager and routing queries via nmcli and ip."""

from dataclasses import dataclass

from network_branding.adapters.commands import CommandRunner
from network_branding.domain.network import Connection, ConnectionType
from network_branding.services.connections import NetworkQuery

_VPN_TYPES = frozenset({"vpn", "wireguard"})


def split_terse_line(line: str) -> list[str]:
    """Split an nmcli terse line on unescaped colons."""
    fields: list[str] = []
    current: list[str] = []
    escaped = False
    for char in line:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == ":":
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    fields.append("".join(current))
    return fields


def parse_active_connections(output: str) -> list[Connection]:
    """Parse `nmcli -t -f NAME,TYPE,DEVICE connection show --active` output."""
    connections: list[Connection] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        fields = split_terse_line(line)
        if len(fields) < 3:  # noqa: PLR2004
            continue
        name, conn_type, device = fields[0], fields[1], fields[2]
        if not name:
            continue
        kind = ConnectionType.VPN if conn_type in _VPN_TYPES else ConnectionType.OTHER
        connections.append(
            Connection(
                name=name,
                type=kind,
                device=device or None,
                active=True,
            )
        )
    return connections


def parse_default_route_device(output: str) -> str | None:
    """Return the `dev` of the first default route in `ip route` output."""
    for line in output.splitlines():
        tokens = line.split()
        if "dev" in tokens:
            index = tokens.index("dev")
            if index + 1 < len(tokens):
                return tokens[index + 1]
    return None


@dataclass
class NmcliNetworkQuery(NetworkQuery):
    """NetworkQuery implementation backed by nmcli and iproute2."""

    runner: CommandRunner

    def list_active_connections(self) -> list[Connection]:
        """Return the active NetworkManager connections."""
        output = self.runner.run(
            ["nmcli", "-t", "-f", "NAME,TYPE,DEVICE", "connection", "show", "--active"]
        )
        return parse_active_connections(output)

    def default_route_device(self) -> str | None:
        """Return the device of the default route, if any."""
        output = self.runner.run(["ip", "route", "show", "default"])
        return parse_default_route_device(output)
