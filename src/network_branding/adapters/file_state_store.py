"""Decision records stored as JSON files in a runtime directory."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from network_branding.adapters.files import write_atomic
from network_branding.domain.decisions import Decision
from network_branding.services.state import DecisionStateStore

_logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def record_filename(context_id: str) -> str:
    """Return a filesystem-safe file name for a context id."""
    return f"{_UNSAFE_CHARS.sub('_', context_id).strip('_') or 'context'}.json"


@dataclass
class FileDecisionStateStore(DecisionStateStore):
    """One JSON record per context under a tmpfs directory such as /run."""

    directory: Path

    def _path(self, context_id: str) -> Path:
        return self.directory / record_filename(context_id)

    def _read(self, path: Path) -> Decision | None:
        try:
            return Decision.model_validate_json(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValidationError) as exc:
            _logger.warning("Ignoring unreadable decision record %s: %s", path, exc)
            return None

    def get(self, context_id: str) -> Decision | None:
        """Return the stored decision for a context, if present."""
        decision = self._read(self._path(context_id))
        if decision is None or decision.context_id != context_id:
            return None
        return decision

    def put(self, decision: Decision) -> None:
        """Atomically replace the record for the decision's context."""
        write_atomic(self._path(decision.context_id), decision.model_dump_json())

    def list_all(self) -> list[Decision]:
        """Return every readable record, ordered by context id."""
        if not self.directory.is_dir():
            return []
        decisions = [
            decision
            for path in sorted(self.directory.glob("*.json"))
            if (decision := self._read(path)) is not None
        ]
        return sorted(decisions, key=lambda d: d.context_id)

    def clear(self) -> int:
        """Delete every record and return how many were removed."""
        if not self.directory.is_dir():
            return 0
        removed = 0
        for path in self.directory.glob("*.json"):
            path.unlink(missing_ok=True)
            removed += 1
        return removed
