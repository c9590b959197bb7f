"""Host command execution."""

import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from network_branding.errors import CommandError

SYSTEM_PATH = "/usr/sbin:/usr/bin:/sbin:/bin"


class CommandRunner(Protocol):
    """Runs a host command and returns its standard output."""

    def run(self, args: Sequence[str], env: Mapping[str, str] | None = None) -> str:
        """Run a command, raising CommandError on failure."""


@dataclass
class SubprocessRunner(CommandRunner):
    """Synchronous subprocess-backed command runner."""

    path: str = SYSTEM_PATH

    def run(self, args: Sequence[str], env: Mapping[str, str] | None = None) -> str:
        """Run a command with a fixed PATH and optional extra environment."""
        command_env = dict(os.environ)
        command_env["PATH"] = self.path
        if env:
            command_env.update(env)
        try:
            result = subprocess.run(
                list(args),
                capture_output=True,
                text=True,
                env=command_env,
                check=False,
            )
        except OSError as exc:
            raise CommandError(args, str(exc)) from exc
        if result.returncode != 0:
            raise CommandError(
                args, result.stderr.strip() or "failed", returncode=result.returncode
            )
        return result.stdout
