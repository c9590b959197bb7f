"""Tests for user-session and greeter branding targets."""

import logging

import pytest

from network_branding.app_logging import CycleLogger
from network_branding.domain.mapping import MappingTable
from network_branding.domain.sessions import Session, SessionType
from network_branding.errors import (
    ApplyFailed,
    NoTargetContext,
    RestartFailed,
)
from network_branding.services.branding import (
    GreeterApplier,
    UserSessionApplier,
    compose_greeter_label,
    greeter_artifact_ref,
)
from network_branding.services.sessions import SessionLocator
from tests.conftest import (
    FakeSessionQuery,
    RecordingGreeterWriter,
    RecordingUserWriter,
    command_error,
)


def _user_applier(
    mapping: MappingTable,
    query: FakeSessionQuery,
    writer: RecordingUserWriter | None = None,
) -> UserSessionApplier:
    return UserSessionApplier(
        mapping=mapping,
        locator=SessionLocator(query),
        writer=writer or RecordingUserWriter(),
    )


def _alice_query() -> FakeSessionQuery:
    return FakeSessionQuery(
        sessions=[
            Session("s1", "alice", SessionType.GRAPHICAL_WAYLAND, True, False, "seat0")
        ],
        shell_owners=["alice"],
    )


def test_user_context_resolves_to_located_user(mapping: MappingTable) -> None:
    applier = _user_applier(mapping, _alice_query())

    assert applier.resolve_context() == "user:alice"


def test_user_context_missing_raises_no_target(mapping: MappingTable) -> None:
    applier = _user_applier(mapping, FakeSessionQuery())

    with pytest.raises(NoTargetContext):
        applier.resolve_context()


def test_user_without_session_bus_raises_no_target(mapping: MappingTable) -> None:
    writer = RecordingUserWriter(users_with_bus=set())
    applier = _user_applier(mapping, _alice_query(), writer)

    with pytest.raises(NoTargetContext):
        applier.resolve_context()


def test_user_apply_uses_mapped_uri(mapping: MappingTable) -> None:
    writer = RecordingUserWriter()
    applier = _user_applier(mapping, _alice_query(), writer)

    artifact = applier.apply("user:alice", "Corp-Wired")

    assert artifact == "file:///wallpapers/corp_wired.png"
    assert writer.applied == [("alice", "file:///wallpapers/corp_wired.png")]


def test_user_apply_unmatched_connection_uses_fallback(mapping: MappingTable) -> None:
    writer = RecordingUserWriter()
    applier = _user_applier(mapping, _alice_query(), writer)

    assert applier.apply("user:alice", "HomeWifi") == "file:///wallpapers/fallback.png"
    assert applier.apply("user:alice", None) == "file:///wallpapers/fallback.png"


def test_user_apply_failure_raises_apply_failed(mapping: MappingTable) -> None:
    writer = RecordingUserWriter(error=command_error("runuser -u alice"))
    applier = _user_applier(mapping, _alice_query(), writer)

    with pytest.raises(ApplyFailed):
        applier.apply("user:alice", "Corp-Wired")


def test_greeter_label_with_and_without_default_route() -> None:
    assert compose_greeter_label("Corp-Wired", "eth0") == "Corp-Wired (defroute: eth0)"
    assert compose_greeter_label("Corp-Wired", None) == "Corp-Wired"
    assert compose_greeter_label(None, None) == "(none)"


def test_greeter_apply_writes_background_label_and_badge(
    mapping: MappingTable,
) -> None:
    writer = RecordingGreeterWriter()
    applier = GreeterApplier(mapping=mapping, writer=writer, is_readable=lambda _: True)

    artifact = applier.apply("greeter", "Corp-Wired", "eth0")

    assert artifact == greeter_artifact_ref(
        "/wallpapers/corp_wired.png",
        "Corp-Wired (defroute: eth0)",
        "/wallpapers/badges/corp_wired_logo.png",
    )
    assert writer.applied == [
        (
            "/wallpapers/corp_wired.png",
            "Corp-Wired (defroute: eth0)",
            "/wallpapers/badges/corp_wired_logo.png",
        )
    ]


def test_greeter_missing_badge_is_omitted(mapping: MappingTable) -> None:
    writer = RecordingGreeterWriter()
    applier = GreeterApplier(
        mapping=mapping,
        writer=writer,
        is_readable=lambda path: "badges" not in path,
    )

    applier.apply("greeter", "Corp-Wired")

    assert writer.applied[0][2] is None


def test_greeter_unreadable_background_uses_fallback(mapping: MappingTable) -> None:
    applier = GreeterApplier(
        mapping=mapping,
        writer=RecordingGreeterWriter(),
        is_readable=lambda path: path == "/wallpapers/fallback.png",
    )

    assert applier.resolve_background("Corp-Wired") == "/wallpapers/fallback.png"
    artifact = applier.resolve_artifact("Corp-Wired")
    assert artifact.startswith("/wallpapers/fallback.png|")


def test_greeter_artifact_changes_with_default_route(mapping: MappingTable) -> None:
    applier = GreeterApplier(
        mapping=mapping, writer=RecordingGreeterWriter(), is_readable=lambda _: True
    )

    assert applier.resolve_artifact("OfficeVPN", "tun0") != applier.resolve_artifact(
        "OfficeVPN", "eth0"
    )


def test_greeter_restarts_only_without_interactive_sessions(
    mapping: MappingTable,
) -> None:
    busy = RecordingGreeterWriter(idle=False)
    idle = RecordingGreeterWriter(idle=True)

    GreeterApplier(mapping=mapping, writer=busy).post_apply("greeter")
    GreeterApplier(mapping=mapping, writer=idle).post_apply("greeter")

    assert busy.restarts == 0
    assert idle.restarts == 1


def test_greeter_restart_failure_raises_restart_failed(mapping: MappingTable) -> None:
    writer = RecordingGreeterWriter(
        restart_error=command_error("systemctl try-restart gdm.service")
    )
    applier = GreeterApplier(mapping=mapping, writer=writer)

    with pytest.raises(RestartFailed):
        applier.post_apply("greeter")


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


def test_greeter_logs_through_the_cycle_logger(mapping: MappingTable) -> None:
    handler = _ListHandler()
    base = logging.getLogger("tests.greeter_cycle")
    base.setLevel(logging.INFO)
    base.propagate = False
    base.addHandler(handler)
    log = CycleLogger(base, {"cycle_id": "abc123", "flavor": "greeter"})
    applier = GreeterApplier(
        mapping=mapping,
        writer=RecordingGreeterWriter(idle=True),
        is_readable=lambda _: True,
    )

    try:
        applier.apply("greeter", "Corp-Wired", "eth0", log=log)
        applier.post_apply("greeter", log=log)
    finally:
        base.removeHandler(handler)

    assert len(handler.messages) == 2
    assert all(
        m.startswith("[cycle=abc123 target=greeter] ") for m in handler.messages
    )
