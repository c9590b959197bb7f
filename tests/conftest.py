"""Shared test fixtures."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from network_branding.adapters.commands import CommandRunner
from network_branding.config import Settings
from network_branding.domain.decisions import Decision
from network_branding.domain.mapping import ArtifactSet, MappingTable
from network_branding.domain.network import Connection
from network_branding.domain.sessions import Session
from network_branding.errors import CommandError
from network_branding.services.branding import (
    GreeterSettingsWriter,
    UserSettingsWriter,
)
from network_branding.services.connections import NetworkQuery
from network_branding.services.gate import ExclusiveLock
from network_branding.services.sessions import SessionQuery
from network_branding.services.state import DecisionStateStore


@dataclass
class FakeNetworkQuery(NetworkQuery):
    """Network query returning a fixed snapshot."""

    connections: list[Connection] = field(default_factory=list)
    default_device: str | None = None
    reads: int = 0

    def list_active_connections(self) -> list[Connection]:
        self.reads += 1
        return list(self.connections)

    def default_route_device(self) -> str | None:
        return self.default_device


@dataclass
class FakeSessionQuery(SessionQuery):
    """Session query returning fixed sessions and process owners."""

    sessions: list[Session] = field(default_factory=list)
    shell_owners: list[str] = field(default_factory=list)
    bus_owners: list[str] = field(default_factory=list)

    def list_sessions(self) -> list[Session]:
        return list(self.sessions)

    def shell_process_owners(self) -> list[str]:
        return list(self.shell_owners)

    def live_bus_owners(self) -> list[str]:
        return list(self.bus_owners)


@dataclass
class InMemoryDecisionStateStore(DecisionStateStore):
    """In-memory decision store for tests."""

    decisions: dict[str, Decision] = field(default_factory=dict)
    puts: int = 0

    def get(self, context_id: str) -> Decision | None:
        return self.decisions.get(context_id)

    def put(self, decision: Decision) -> None:
        self.puts += 1
        self.decisions[decision.context_id] = decision

    def list_all(self) -> list[Decision]:
        return sorted(self.decisions.values(), key=lambda d: d.context_id)

    def clear(self) -> int:
        count = len(self.decisions)
        self.decisions.clear()
        return count


@dataclass
class FakeLock(ExclusiveLock):
    """Lock that can be pre-held to simulate another process."""

    held: bool = False
    acquisitions: int = 0
    releases: int = 0

    def try_acquire(self) -> bool:
        if self.held:
            return False
        self.held = True
        self.acquisitions += 1
        return True

    def release(self) -> None:
        if self.held:
            self.held = False
            self.releases += 1


@dataclass
class RecordingUserWriter(UserSettingsWriter):
    """User writer that records applied backgrounds."""

    users_with_bus: set[str] = field(default_factory=lambda: {"alice", "bob"})
    applied: list[tuple[str, str]] = field(default_factory=list)
    error: Exception | None = None

    def session_bus_available(self, user_name: str) -> bool:
        return user_name in self.users_with_bus

    def apply_settings(self, user_name: str, background_uri: str) -> None:
        if self.error is not None:
            raise self.error
        self.applied.append((user_name, background_uri))


@dataclass
class RecordingGreeterWriter(GreeterSettingsWriter):
    """Greeter writer that records writes and restart requests."""

    idle: bool = True
    applied: list[tuple[str, str, str | None]] = field(default_factory=list)
    restarts: int = 0
    apply_error: Exception | None = None
    restart_error: Exception | None = None

    def apply_settings(self, background: str, label: str, badge: str | None) -> None:
        if self.apply_error is not None:
            raise self.apply_error
        self.applied.append((background, label, badge))

    def no_interactive_sessions_present(self) -> bool:
        return self.idle

    def restart_greeter(self) -> None:
        self.restarts += 1
        if self.restart_error is not None:
            raise self.restart_error


@dataclass
class FakeRunner(CommandRunner):
    """Command runner answering from a table keyed by the joined command."""

    responses: dict[str, str | Exception] = field(default_factory=dict)
    calls: list[tuple[list[str], dict[str, str] | None]] = field(default_factory=list)

    def run(self, args: Sequence[str], env: Mapping[str, str] | None = None) -> str:
        command = list(args)
        self.calls.append((command, dict(env) if env else None))
        response = self.responses.get(" ".join(command), "")
        if isinstance(response, Exception):
            raise response
        return response

    def commands(self) -> list[str]:
        return [" ".join(command) for command, _ in self.calls]


def command_error(command: str, returncode: int = 1) -> CommandError:
    return CommandError(command.split(), "failed", returncode=returncode)


@pytest.fixture
def mapping() -> MappingTable:
    return MappingTable(
        connections={
            "Corp-Wired": ArtifactSet(
                background="/wallpapers/corp_wired.png",
                badge="/wallpapers/badges/corp_wired_logo.png",
            ),
            "OfficeVPN": ArtifactSet(background="/wallpapers/officevpn.png"),
            "Home Wi-Fi": ArtifactSet(background="/wallpapers/home_wi-fi.png"),
        },
        fallback=ArtifactSet(background="/wallpapers/fallback.png"),
    )


@pytest.fixture
def mapping_file(tmp_path: Path, mapping: MappingTable) -> Path:
    path = tmp_path / "mapping.json"
    path.write_text(mapping.model_dump_json(), encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path: Path, mapping_file: Path) -> Settings:
    return Settings(
        mapping_file=mapping_file,
        state_dir=tmp_path / "state",
        lock_file=tmp_path / "nm-branding.lock",
        settle_delay_seconds=0,
        dconf_profile=tmp_path / "dconf" / "profile" / "gdm",
        dconf_snippet=tmp_path / "dconf" / "db" / "gdm.d" / "90-branding",
        user_runtime_root=tmp_path / "run-user",
        syslog=False,
    )
