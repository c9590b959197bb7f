"""Error taxonomy for branding cycles."""

from collections.abc import Sequence


class BrandingError(Exception):
    """Base class for errors resolved within a single cycle."""


class MappingError(BrandingError):
    """The mapping table could not be loaded."""


class NoTargetContext(BrandingError):
    """No context is available to receive branding."""


class ApplyFailed(BrandingError):
    """The settings writer reported a failure."""


class RestartFailed(BrandingError):
    """The greeter restart request failed after settings were applied."""


class CommandError(BrandingError):
    """A host command could not be run or exited non-zero."""

    def __init__(
        self, args: Sequence[str], message: str, returncode: int | None = None
    ) -> None:
        self.command = list(args)
        self.returncode = returncode
        super().__init__(f"{' '.join(self.command)}: {message}")
