"""GNOME user-session background writer using gsettings."""

import logging
import pwd
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from network_branding.adapters.commands import CommandRunner
from network_branding.errors import CommandError
from network_branding.services.branding import UserSettingsWriter

_logger = logging.getLogger(__name__)

_PICTURE_OPTIONS = "scaled"


def lookup_uid(user_name: str) -> int | None:
    """Return the uid for an account name, if it exists."""
    try:
        return pwd.getpwnam(user_name).pw_uid
    except KeyError:
        return None


@dataclass
class GsettingsUserWriter(UserSettingsWriter):
    """Sets lock screen and desktop backgrounds inside a user's session."""

    runner: CommandRunner
    runtime_root: Path = Path("/run/user")
    uid_lookup: Callable[[str], int | None] = field(default=lookup_uid)

    def _runtime_dir(self, user_name: str) -> Path | None:
        uid = self.uid_lookup(user_name)
        if uid is None:
            return None
        return self.runtime_root / str(uid)

    def session_bus_available(self, user_name: str) -> bool:
        """Return True when the user's session bus socket exists."""
        runtime_dir = self._runtime_dir(user_name)
        return runtime_dir is not None and (runtime_dir / "bus").is_socket()

    def apply_settings(self, user_name: str, background_uri: str) -> None:
        """Set screensaver and desktop pictures for the user."""
        runtime_dir = self._runtime_dir(user_name)
        if runtime_dir is None:
            raise CommandError(["runuser", "-u", user_name], "unknown user")
        env = {
            "XDG_RUNTIME_DIR": str(runtime_dir),
            "DBUS_SESSION_BUS_ADDRESS": f"unix:path={runtime_dir / 'bus'}",
        }
        settings = [
            ("org.gnome.desktop.screensaver", "picture-options", _PICTURE_OPTIONS),
            ("org.gnome.desktop.screensaver", "picture-uri", background_uri),
            ("org.gnome.desktop.background", "picture-options", _PICTURE_OPTIONS),
            ("org.gnome.desktop.background", "picture-uri", background_uri),
        ]
        for schema, key, value in settings:
            self._set(user_name, schema, key, value, env)
        try:
            self._set(
                user_name,
                "org.gnome.desktop.background",
                "picture-uri-dark",
                background_uri,
                env,
            )
        except CommandError as exc:
            # Older GNOME releases have no dark variant.
            _logger.debug("Skipping picture-uri-dark: %s", exc)

    def _set(  # noqa: PLR0913
        self,
        user_name: str,
        schema: str,
        key: str,
        value: str,
        env: dict[str, str],
    ) -> None:
        self.runner.run(
            ["runuser", "-u", user_name, "--", "gsettings", "set", schema, key, value],
            env=env,
        )
