"""Dependency container wiring for the daemon."""

from dataclasses import dataclass

from network_branding.adapters.commands import CommandRunner, SubprocessRunner
from network_branding.adapters.dconf_greeter import DconfGreeterWriter
from network_branding.adapters.file_state_store import FileDecisionStateStore
from network_branding.adapters.flock_lock import FlockLock
from network_branding.adapters.gsettings_applier import GsettingsUserWriter
from network_branding.adapters.loginctl_sessions import LoginctlSessionQuery
from network_branding.adapters.nmcli_network import NmcliNetworkQuery
from network_branding.config import Settings
from network_branding.domain.mapping import MappingTable, load_mapping_table
from network_branding.services.branding import GreeterApplier, UserSessionApplier
from network_branding.services.connections import ConnectionSelector
from network_branding.services.gate import TriggerGate
from network_branding.services.orchestrator import Orchestrator
from network_branding.services.sessions import SessionLocator


@dataclass
class AppContainer:
    """Holds process-wide dependencies."""

    settings: Settings
    mapping: MappingTable
    state_store: FileDecisionStateStore
    greeter_writer: DconfGreeterWriter
    user_orchestrator: Orchestrator
    greeter_orchestrator: Orchestrator

    def orchestrator_for(self, flavor: str) -> Orchestrator:
        """Return the orchestrator for a target flavor."""
        if flavor == "user":
            return self.user_orchestrator
        if flavor == "greeter":
            return self.greeter_orchestrator
        raise ValueError(f"Unknown target: {flavor}")


def build_container(
    settings: Settings | None = None,
    runner: CommandRunner | None = None,
    mapping: MappingTable | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    resolved_runner = runner or SubprocessRunner()
    resolved_mapping = mapping or load_mapping_table(resolved_settings.mapping_file)

    gate = TriggerGate(
        lock=FlockLock(resolved_settings.lock_file),
        settle_delay_seconds=resolved_settings.settle_delay_seconds,
    )
    selector = ConnectionSelector(NmcliNetworkQuery(resolved_runner))
    session_query = LoginctlSessionQuery(
        runner=resolved_runner,
        shell_process_name=resolved_settings.shell_process_name,
        runtime_root=resolved_settings.user_runtime_root,
    )
    locator = SessionLocator(
        query=session_query,
        primary_seat=resolved_settings.primary_seat,
        excluded_users=frozenset({resolved_settings.greeter_user}),
    )
    state_store = FileDecisionStateStore(resolved_settings.state_dir)
    user_writer = GsettingsUserWriter(
        runner=resolved_runner,
        runtime_root=resolved_settings.user_runtime_root,
    )
    greeter_writer = DconfGreeterWriter(
        runner=resolved_runner,
        sessions=session_query,
        profile_path=resolved_settings.dconf_profile,
        snippet_path=resolved_settings.dconf_snippet,
        greeter_user=resolved_settings.greeter_user,
        greeter_service=resolved_settings.greeter_service,
    )
    user_orchestrator = Orchestrator(
        gate=gate,
        selector=selector,
        target=UserSessionApplier(
            mapping=resolved_mapping, locator=locator, writer=user_writer
        ),
        state_store=state_store,
        use_connection_hint=True,
    )
    greeter_orchestrator = Orchestrator(
        gate=gate,
        selector=selector,
        target=GreeterApplier(mapping=resolved_mapping, writer=greeter_writer),
        state_store=state_store,
    )
    return AppContainer(
        settings=resolved_settings,
        mapping=resolved_mapping,
        state_store=state_store,
        greeter_writer=greeter_writer,
        user_orchestrator=user_orchestrator,
        greeter_orchestrator=greeter_orchestrator,
    )
