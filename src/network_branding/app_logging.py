"""Logging configuration helpers."""

import logging
from logging.handlers import SysLogHandler
from pathlib import Path

_SYSLOG_SOCKET = Path("/dev/log")


def configure_logging(
    level: str = "INFO", tag: str = "nm-branding", syslog: bool = False
) -> None:
    """Configure application logging with a stream handler and optional syslog."""
    logger = logging.getLogger("network_branding")
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    if syslog and _SYSLOG_SOCKET.exists():
        syslog_handler = SysLogHandler(address=str(_SYSLOG_SOCKET))
        syslog_handler.setFormatter(
            logging.Formatter(f"{tag}: %(levelname)s: %(message)s")
        )
        logger.addHandler(syslog_handler)
    logger.propagate = False


class CycleLogger(logging.LoggerAdapter):
    """Prefix messages with the cycle id and target flavor."""

    def process(self, msg, kwargs):  # type: ignore[no-untyped-def]
        extra = self.extra or {}
        prefix = f"[cycle={extra.get('cycle_id')} target={extra.get('flavor')}]"
        return f"{prefix} {msg}", kwargs
