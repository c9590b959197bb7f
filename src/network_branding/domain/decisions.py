"""Decision records and cycle outcomes."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict

GREETER_CONTEXT_ID = "greeter"
USER_CONTEXT_PREFIX = "user:"


def user_context_id(user_name: str) -> str:
    """Return the context id for a graphical user session."""
    return f"{USER_CONTEXT_PREFIX}{user_name}"


def user_from_context_id(context_id: str) -> str:
    """Return the user name encoded in a user context id."""
    if not context_id.startswith(USER_CONTEXT_PREFIX):
        raise ValueError(f"Not a user context: {context_id}")
    return context_id[len(USER_CONTEXT_PREFIX) :]


class Decision(BaseModel):
    """Last applied branding for one context.

    Equality is structural over all three fields, which is what decides
    whether an apply can be skipped.
    """

    model_config = ConfigDict(frozen=True)

    context_id: str
    connection_name: str | None
    artifact: str


class CycleState(Enum):
    """States a single decision cycle passes through."""

    IDLE = "idle"
    ADMITTED = "admitted"
    RESOLVING = "resolving"
    DECIDING = "deciding"
    APPLYING = "applying"
    DONE = "done"


class CycleOutcome(Enum):
    """Terminal result of a cycle."""

    FILTERED = "filtered"
    BUSY = "busy"
    CHANGED = "changed"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class CycleResult:
    """Outcome of one cycle, with the states it visited."""

    cycle_id: str
    outcome: CycleOutcome
    states: tuple[CycleState, ...] = ()
    decision: Decision | None = None
    detail: str | None = None
