"""Decision cycle: gate, resolve, decide, apply, record."""

import logging
from dataclasses import dataclass, field
from uuid import uuid4

from network_branding.app_logging import CycleLogger
from network_branding.domain.decisions import (
    CycleOutcome,
    CycleResult,
    CycleState,
    Decision,
)
from network_branding.errors import NoTargetContext, RestartFailed
from network_branding.services.branding import BrandingTarget
from network_branding.services.connections import ConnectionSelector
from network_branding.services.gate import TriggerGate
from network_branding.services.state import DecisionStateStore

_logger = logging.getLogger(__name__)


@dataclass
class _Trail:
    states: list[CycleState] = field(default_factory=lambda: [CycleState.IDLE])

    def enter(self, state: CycleState) -> None:
        self.states.append(state)

    def done(
        self,
        cycle_id: str,
        outcome: CycleOutcome,
        decision: Decision | None = None,
        detail: str | None = None,
    ) -> CycleResult:
        if self.states[-1] is not CycleState.DONE:
            self.states.append(CycleState.DONE)
        return CycleResult(
            cycle_id=cycle_id,
            outcome=outcome,
            states=tuple(self.states),
            decision=decision,
            detail=detail,
        )


@dataclass
class Orchestrator:
    """Runs one decision cycle per decisive network event for one target."""

    gate: TriggerGate
    selector: ConnectionSelector
    target: BrandingTarget
    state_store: DecisionStateStore
    use_connection_hint: bool = False

    def handle_event(
        self, interface: str, status: str, connection_hint: str | None = None
    ) -> CycleResult:
        """Process a notifier event; never raises."""
        cycle_id = uuid4().hex[:8]
        if not self.gate.admit(status):
            return _Trail().done(cycle_id, CycleOutcome.FILTERED)
        log = self._cycle_logger(cycle_id)
        log.info("Event IFACE=%s STATUS=%s", interface, status)
        return self._gated_cycle(cycle_id, log, connection_hint)

    def run(self, connection_hint: str | None = None) -> CycleResult:
        """Run a cycle without an event, e.g. once at boot."""
        cycle_id = uuid4().hex[:8]
        log = self._cycle_logger(cycle_id)
        return self._gated_cycle(cycle_id, log, connection_hint)

    def _cycle_logger(self, cycle_id: str) -> CycleLogger:
        extra = {"cycle_id": cycle_id, "flavor": self.target.flavor}
        return CycleLogger(_logger, extra)

    def _gated_cycle(
        self, cycle_id: str, log: CycleLogger, connection_hint: str | None
    ) -> CycleResult:
        try:
            with self.gate.hold() as acquired:
                if not acquired:
                    log.debug("Another cycle is running; dropping event.")
                    return _Trail().done(cycle_id, CycleOutcome.BUSY)
                trail = _Trail()
                trail.enter(CycleState.ADMITTED)
                try:
                    return self._run_cycle(cycle_id, log, trail, connection_hint)
                except Exception as exc:
                    log.exception("Unexpected failure during cycle")
                    return trail.done(cycle_id, CycleOutcome.FAILED, detail=str(exc))
        except OSError as exc:
            log.error("Cannot take the cycle lock: %s", exc)
            return _Trail().done(cycle_id, CycleOutcome.FAILED, detail=str(exc))

    def _run_cycle(
        self,
        cycle_id: str,
        log: CycleLogger,
        trail: _Trail,
        connection_hint: str | None,
    ) -> CycleResult:
        trail.enter(CycleState.RESOLVING)
        selection = self.selector.select()
        connection_name = selection.connection_name
        if connection_name is None and self.use_connection_hint and connection_hint:
            connection_name = connection_hint
        default_device = selection.snapshot.default_route_device
        try:
            context_id = self.target.resolve_context()
        except NoTargetContext as exc:
            log.info("%s; skipping.", exc)
            return trail.done(cycle_id, CycleOutcome.SKIPPED, detail=str(exc))

        trail.enter(CycleState.DECIDING)
        candidate = Decision(
            context_id=context_id,
            connection_name=connection_name,
            artifact=self.target.resolve_artifact(connection_name, default_device),
        )
        if self.state_store.get(context_id) == candidate:
            log.info(
                "No change (CONTEXT=%s ACTIVE_CONN=%s).", context_id, connection_name
            )
            return trail.done(cycle_id, CycleOutcome.UNCHANGED, decision=candidate)

        trail.enter(CycleState.APPLYING)
        log.info(
            "CONTEXT=%s ACTIVE_CONN=%s -> %s",
            context_id,
            connection_name,
            candidate.artifact,
        )
        try:
            artifact = self.target.apply(
                context_id, connection_name, default_device, log=log
            )
        except NoTargetContext as exc:
            log.info("%s; skipping.", exc)
            return trail.done(cycle_id, CycleOutcome.SKIPPED, detail=str(exc))
        except Exception as exc:
            log.error("Apply failed: %s", exc)
            return trail.done(cycle_id, CycleOutcome.FAILED, detail=str(exc))

        applied = candidate.model_copy(update={"artifact": artifact})
        detail = None
        try:
            self.state_store.put(applied)
        except Exception as exc:
            log.error("Cannot record decision: %s", exc)
            detail = f"decision not recorded: {exc}"
        try:
            self.target.post_apply(context_id, log=log)
        except RestartFailed as exc:
            log.warning("%s", exc)
        return trail.done(
            cycle_id, CycleOutcome.CHANGED, decision=applied, detail=detail
        )
