"""Application configuration."""

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Daemon settings loaded from environment variables."""

    mapping_file: Path = Path("/etc/nm-branding/mapping.json")
    state_dir: Path = Path("/run/nm-branding")
    lock_file: Path = Path("/run/nm-branding.lock")
    settle_delay_seconds: float = Field(default=1.0, ge=0.0)
    shell_process_name: str = "gnome-shell"
    primary_seat: str = "seat0"
    greeter_user: str = "gdm"
    greeter_service: str = "gdm.service"
    dconf_profile: Path = Path("/etc/dconf/profile/gdm")
    dconf_snippet: Path = Path("/etc/dconf/db/gdm.d/90-gdm-login-branding")
    user_runtime_root: Path = Path("/run/user")
    log_tag: str = "nm-branding"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    syslog: bool = True
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="NM_BRANDING_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_targets(raw: str) -> tuple[str, ...]:
    """Expand a --target value into the flavors to run."""
    cleaned = raw.strip().lower()
    if cleaned == "all":
        return ("user", "greeter")
    if cleaned in {"user", "greeter"}:
        return (cleaned,)
    raise ValueError(f"Unknown target: {raw}")
