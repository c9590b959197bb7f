"""Session and process queries via loginctl, ps and /run/user."""

import pwd
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from network_branding.adapters.commands import CommandRunner
from network_branding.domain.sessions import Session, SessionType
from network_branding.errors import CommandError
from network_branding.services.sessions import SessionQuery

_SESSION_PROPERTIES = ("Name", "Type", "Active", "Remote", "Seat")
_PS_NO_MATCH = 1


def lookup_user_name(uid: int) -> str | None:
    """Return the account name for a uid, if it exists."""
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return None


def parse_session_ids(output: str) -> list[str]:
    """Return session ids from `loginctl list-sessions --no-legend`."""
    ids: list[str] = []
    for line in output.splitlines():
        tokens = line.split()
        if tokens:
            ids.append(tokens[0])
    return ids


def parse_session_properties(session_id: str, output: str) -> Session | None:
    """Build a Session from `loginctl show-session -p ...` key=value output."""
    properties: dict[str, str] = {}
    for line in output.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            properties[key.strip()] = value.strip()
    user_name = properties.get("Name")
    if not user_name:
        return None
    raw_type = properties.get("Type", "")
    session_type = next(
        (t for t in SessionType if t.value == raw_type), SessionType.OTHER
    )
    return Session(
        id=session_id,
        user_name=user_name,
        session_type=session_type,
        active=properties.get("Active") == "yes",
        remote=properties.get("Remote") == "yes",
        seat=properties.get("Seat") or None,
    )


@dataclass
class LoginctlSessionQuery(SessionQuery):
    """SessionQuery implementation backed by logind tooling."""

    runner: CommandRunner
    shell_process_name: str = "gnome-shell"
    runtime_root: Path = Path("/run/user")
    user_lookup: Callable[[int], str | None] = field(default=lookup_user_name)

    def list_sessions(self) -> list[Session]:
        """Return every logind session with its properties."""
        output = self.runner.run(["loginctl", "list-sessions", "--no-legend"])
        sessions: list[Session] = []
        for session_id in parse_session_ids(output):
            args = ["loginctl", "show-session", session_id]
            for prop in _SESSION_PROPERTIES:
                args.extend(["-p", prop])
            try:
                details = self.runner.run(args)
            except CommandError:
                # Session ended between list and show.
                continue
            session = parse_session_properties(session_id, details)
            if session is not None:
                sessions.append(session)
        return sessions

    def shell_process_owners(self) -> list[str]:
        """Return desktop-shell owners, longest running first."""
        try:
            output = self.runner.run(
                ["ps", "-C", self.shell_process_name, "-o", "uid=", "--sort=-etimes"]
            )
        except CommandError as exc:
            if exc.returncode == _PS_NO_MATCH:
                return []
            raise
        owners: list[str] = []
        for line in output.splitlines():
            value = line.strip()
            if not value.isdigit():
                continue
            name = self.user_lookup(int(value))
            if name and name not in owners:
                owners.append(name)
        return owners

    def live_bus_owners(self) -> list[str]:
        """Return users with a session bus socket, ordered by uid."""
        if not self.runtime_root.is_dir():
            return []
        uids = sorted(
            int(entry.name)
            for entry in self.runtime_root.iterdir()
            if entry.name.isdigit() and (entry / "bus").is_socket()
        )
        owners: list[str] = []
        for uid in uids:
            name = self.user_lookup(uid)
            if name:
                owners.append(name)
        return owners
