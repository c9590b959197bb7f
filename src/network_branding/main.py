"""Command-line entry points for the network branding daemon."""

import argparse
import logging
import os
import sys
from collections.abc import Callable, Sequence

from pydantic import ValidationError

from network_branding.app_logging import configure_logging
from network_branding.config import Settings, parse_targets
from network_branding.containers import AppContainer, build_container
from network_branding.errors import CommandError, MappingError

_logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="network-branding",
        description="Re-apply desktop and login-screen branding for the active network",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    dispatch = sub.add_parser(
        "dispatch", help="Handle a NetworkManager dispatcher event"
    )
    dispatch.add_argument("interface", help="Interface name from the dispatcher")
    dispatch.add_argument("status", help="Event status from the dispatcher")
    dispatch.add_argument(
        "--target",
        default="all",
        choices=["user", "greeter", "all"],
        help="Which context to brand (default: all)",
    )

    sub.add_parser("greeter", help="Apply greeter branding now (boot-time oneshot)")
    sub.add_parser("status", help="Show stored decisions")

    clear = sub.add_parser("clear", help="Forget stored decisions")
    clear.add_argument(
        "--remove-greeter-branding",
        action="store_true",
        help="Also delete the greeter dconf snippet",
    )

    sub.add_parser("show-mapping", help="Print the loaded mapping table")
    return parser


def _dispatch(container: AppContainer, args: argparse.Namespace) -> int:
    connection_hint = os.environ.get("CONNECTION_ID") or None
    for flavor in parse_targets(args.target):
        result = container.orchestrator_for(flavor).handle_event(
            args.interface, args.status, connection_hint=connection_hint
        )
        _logger.debug(
            "Cycle %s (%s) finished: %s", result.cycle_id, flavor, result.outcome.value
        )
    return EXIT_OK


def _greeter(container: AppContainer) -> int:
    result = container.greeter_orchestrator.run()
    _logger.debug("Greeter cycle %s: %s", result.cycle_id, result.outcome.value)
    return EXIT_OK


def _status(container: AppContainer) -> int:
    decisions = container.state_store.list_all()
    if not decisions:
        print("No decisions recorded.")
        return EXIT_OK
    for decision in decisions:
        print(
            f"{decision.context_id}\t{decision.connection_name or '-'}"
            f"\t{decision.artifact}"
        )
    return EXIT_OK


def _clear(container: AppContainer, args: argparse.Namespace) -> int:
    removed = container.state_store.clear()
    print(f"Removed {removed} decision record(s).")
    if args.remove_greeter_branding:
        try:
            if container.greeter_writer.remove_branding():
                print("Removed greeter branding.")
        except CommandError as exc:
            _logger.error("Failed to rebuild dconf database: %s", exc)
    return EXIT_OK


def _show_mapping(container: AppContainer) -> int:
    mapping = container.mapping
    for name in sorted(mapping.connections):
        artifacts = mapping.connections[name]
        badge = artifacts.badge or "-"
        print(f"{name!r:30} -> {artifacts.background} (badge: {badge})")
    print(f"{'<fallback>':30} -> {mapping.fallback.background}")
    return EXIT_OK


def main(
    argv: Sequence[str] | None = None,
    container_factory: Callable[[Settings], AppContainer] = build_container,
) -> int:
    """Parse arguments, build the container and run a command."""
    args = build_parser().parse_args(argv)
    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_CONFIG
    configure_logging(settings.log_level, settings.log_tag, syslog=settings.syslog)
    try:
        container = container_factory(settings)
    except MappingError as exc:
        _logger.error("%s", exc)
        return EXIT_CONFIG

    if args.command == "dispatch":
        return _dispatch(container, args)
    if args.command == "greeter":
        return _greeter(container)
    if args.command == "status":
        return _status(container)
    if args.command == "clear":
        return _clear(container, args)
    return _show_mapping(container)


if __name__ == "__main__":
    sys.exit(main())
