"""GDM greeter branding via the system dconf database."""

from dataclasses import dataclass
from pathlib import Path

from network_branding.adapters.commands import CommandRunner
from network_branding.adapters.files import write_atomic
from network_branding.services.branding import GreeterSettingsWriter
from network_branding.services.sessions import SessionQuery

_PROFILE_CONTENT = "user-db:user\nsystem-db:gdm\n"
_BANNER_PREFIX = "ACTIVE NETWORK: "


def gvariant_string(value: str) -> str:
    """Quote a value as a GVariant string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def render_greeter_keyfile(background: str, label: str, badge: str | None) -> str:
    """Render the dconf keyfile snippet for the greeter."""
    picture_uri = gvariant_string(f"file://{background}")
    black = gvariant_string("#000000")
    lines: list[str] = []
    for schema in ("org/gnome/desktop/background", "org/gnome/desktop/screensaver"):
        lines.extend(
            [
                f"[{schema}]",
                f"picture-uri={picture_uri}",
                "picture-options='scaled'",
                f"primary-color={black}",
                f"secondary-color={black}",
                "",
            ]
        )
    lines.extend(
        [
            "[org/gnome/login-screen]",
            "banner-message-enable=true",
            f"banner-message-text={gvariant_string(_BANNER_PREFIX + label)}",
            f"logo={gvariant_string(badge or '')}",
            "",
        ]
    )
    return "\n".join(lines)


@dataclass
class DconfGreeterWriter(GreeterSettingsWriter):
    """Writes greeter branding into dconf and restarts gdm when safe."""

    runner: CommandRunner
    sessions: SessionQuery
    profile_path: Path = Path("/etc/dconf/profile/gdm")
    snippet_path: Path = Path("/etc/dconf/db/gdm.d/90-gdm-login-branding")
    greeter_user: str = "gdm"
    greeter_service: str = "gdm.service"

    def ensure_profile(self) -> None:
        """Create the gdm dconf profile and database directory if missing."""
        if not self.profile_path.exists():
            write_atomic(self.profile_path, _PROFILE_CONTENT)
        self.snippet_path.parent.mkdir(parents=True, exist_ok=True)

    def apply_settings(self, background: str, label: str, badge: str | None) -> None:
        """Write the keyfile snippet and rebuild the dconf database."""
        self.ensure_profile()
        keyfile = render_greeter_keyfile(background, label, badge)
        write_atomic(self.snippet_path, keyfile)
        self.runner.run(["dconf", "update"])

    def no_interactive_sessions_present(self) -> bool:
        """Return True when every session belongs to the greeter user."""
        return all(
            session.user_name == self.greeter_user
            for session in self.sessions.list_sessions()
        )

    def restart_greeter(self) -> None:
        """Restart the greeter service if it is running."""
        self.runner.run(["systemctl", "try-restart", self.greeter_service])

    def remove_branding(self) -> bool:
        """Delete the keyfile snippet and rebuild dconf; return True if removed."""
        if not self.snippet_path.exists():
            return False
        self.snippet_path.unlink()
        self.runner.run(["dconf", "update"])
        return True
