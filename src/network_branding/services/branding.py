"""Branding targets: the user session and the login greeter."""

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from network_branding.domain.decisions import (
    GREETER_CONTEXT_ID,
    user_context_id,
    user_from_context_id,
)
from network_branding.domain.mapping import MappingTable
from network_branding.errors import (
    ApplyFailed,
    CommandError,
    NoTargetContext,
    RestartFailed,
)
from network_branding.services.sessions import SessionLocator

_logger = logging.getLogger(__name__)

Log = logging.Logger | logging.LoggerAdapter

NO_CONNECTION_LABEL = "(none)"


class BrandingTarget(Protocol):
    """Capabilities the orchestrator needs from one branding flavor."""

    flavor: str

    def resolve_context(self) -> str:
        """Return the context id to brand or raise NoTargetContext."""

    def resolve_artifact(
        self, connection_name: str | None, default_route_device: str | None = None
    ) -> str:
        """Return the artifact reference that would be applied."""

    def apply(
        self,
        context_id: str,
        connection_name: str | None,
        default_route_device: str | None = None,
        log: Log = _logger,
    ) -> str:
        """Write the settings and return the applied artifact reference."""

    def post_apply(self, context_id: str, log: Log = _logger) -> None:
        """Run follow-up work after a successful apply."""


class UserSettingsWriter(Protocol):
    """Writes background settings into a user's desktop session."""

    def session_bus_available(self, user_name: str) -> bool:
        """Return True when the user's session bus socket exists."""

    def apply_settings(self, user_name: str, background_uri: str) -> None:
        """Set desktop and lock screen backgrounds for the user."""


class GreeterSettingsWriter(Protocol):
    """Writes login-greeter branding and controls the greeter process."""

    def apply_settings(self, background: str, label: str, badge: str | None) -> None:
        """Write greeter background, banner label and badge."""

    def no_interactive_sessions_present(self) -> bool:
        """Return True when nobody besides the greeter is logged in."""

    def restart_greeter(self) -> None:
        """Restart the greeter so it picks up new settings."""


@dataclass
class UserSessionApplier:
    """Applies backgrounds to the active local graphical user."""

    mapping: MappingTable
    locator: SessionLocator
    writer: UserSettingsWriter
    flavor: str = "user"

    def resolve_context(self) -> str:
        """Locate the graphical user that should receive branding."""
        user_name = self.locator.locate()
        if user_name is None:
            raise NoTargetContext("No active local graphical user detected")
        if not self.writer.session_bus_available(user_name):
            raise NoTargetContext(f"No session bus for {user_name}")
        return user_context_id(user_name)

    def resolve_artifact(
        self, connection_name: str | None, default_route_device: str | None = None
    ) -> str:
        """Return the background URI for a connection."""
        return self.mapping.resolve(connection_name).background_uri

    def apply(
        self,
        context_id: str,
        connection_name: str | None,
        default_route_device: str | None = None,
        log: Log = _logger,
    ) -> str:
        """Apply the mapped background to the user's session."""
        user_name = user_from_context_id(context_id)
        artifact = self.resolve_artifact(connection_name)
        try:
            self.writer.apply_settings(user_name, artifact)
        except (CommandError, OSError) as exc:
            raise ApplyFailed(
                f"Failed to apply {artifact} for {connection_name} ({user_name}): {exc}"
            ) from exc
        return artifact

    def post_apply(self, context_id: str, log: Log = _logger) -> None:
        """User sessions pick up gsettings changes live."""


def compose_greeter_label(
    connection_name: str | None, default_route_device: str | None
) -> str:
    """Return the banner label shown on the login screen."""
    label = connection_name or NO_CONNECTION_LABEL
    if default_route_device:
        label = f"{label} (defroute: {default_route_device})"
    return label


def greeter_artifact_ref(background: str, label: str, badge: str | None) -> str:
    """Return a reference covering everything written to the greeter."""
    return "|".join((background, label, badge or ""))


def _is_readable(path: str) -> bool:
    return os.access(path, os.R_OK)


@dataclass(frozen=True)
class GreeterBranding:
    """Background, banner label and badge written together."""

    background: str
    label: str
    badge: str | None

    @property
    def reference(self) -> str:
        return greeter_artifact_ref(self.background, self.label, self.badge)


@dataclass
class GreeterApplier:
    """Applies banner, background and badge to the login greeter."""

    mapping: MappingTable
    writer: GreeterSettingsWriter
    is_readable: Callable[[str], bool] = field(default=_is_readable)
    flavor: str = "greeter"

    def resolve_context(self) -> str:
        """The greeter is always a valid target."""
        return GREETER_CONTEXT_ID

    def resolve_background(self, connection_name: str | None) -> str:
        """Return the background path, falling back when it is unreadable."""
        background = self.mapping.resolve(connection_name).background
        if not self.is_readable(background):
            return self.mapping.fallback.background
        return background

    def resolve_badge(self, connection_name: str | None) -> str | None:
        """Return the badge path when one is mapped and readable."""
        badge = self.mapping.resolve(connection_name).badge
        if badge and self.is_readable(badge):
            return badge
        return None

    def resolve_branding(
        self, connection_name: str | None, default_route_device: str | None = None
    ) -> GreeterBranding:
        """Return everything the greeter would show for the current network."""
        return GreeterBranding(
            background=self.resolve_background(connection_name),
            label=compose_greeter_label(connection_name, default_route_device),
            badge=self.resolve_badge(connection_name),
        )

    def resolve_artifact(
        self, connection_name: str | None, default_route_device: str | None = None
    ) -> str:
        """Return the combined background, label and badge reference."""
        return self.resolve_branding(connection_name, default_route_device).reference

    def apply(
        self,
        context_id: str,
        connection_name: str | None,
        default_route_device: str | None = None,
        log: Log = _logger,
    ) -> str:
        """Write greeter branding for the connection."""
        branding = self.resolve_branding(connection_name, default_route_device)
        log.info(
            "Greeter branding: connection=%s background=%s badge=%s label=%r",
            connection_name or NO_CONNECTION_LABEL,
            branding.background,
            branding.badge or "<none>",
            branding.label,
        )
        try:
            self.writer.apply_settings(
                branding.background, branding.label, branding.badge
            )
        except (CommandError, OSError) as exc:
            raise ApplyFailed(f"Failed to write greeter branding: {exc}") from exc
        return branding.reference

    def post_apply(self, context_id: str, log: Log = _logger) -> None:
        """Restart the greeter only when no user would be interrupted."""
        try:
            idle = self.writer.no_interactive_sessions_present()
        except CommandError as exc:
            raise RestartFailed(f"Cannot list sessions, not restarting: {exc}") from exc
        if not idle:
            log.info("User session(s) active; not restarting greeter.")
            return
        log.info("No user sessions detected; restarting greeter.")
        try:
            self.writer.restart_greeter()
        except CommandError as exc:
            raise RestartFailed(f"Greeter restart failed: {exc}") from exc
