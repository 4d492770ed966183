#!/usr/bin/env python3
"""
Command-line host for the OCI machine driver.
"""

import argparse
import logging
import os
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

from .config import CREATE_FLAGS, load_driver_options
from .driver import Driver
from .errors import MachineError
from .polling import EXPONENTIAL, FIXED, PollSchedule
from .store import MachineStore
from .utils.display import (
    display_create_flags,
    display_error,
    display_machine,
    display_state,
    display_success,
    display_warning,
)

console = Console()
logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = Path.home() / ".oci-machine"


def configure_logging(verbose: bool = False) -> None:
    """Configure standard logging with rich handler."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    # The SDK logs every request at DEBUG
    logging.getLogger("oci").setLevel(logging.WARNING)


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return number


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Set up and parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Provision and manage a single OCI compute instance as a Docker host.",
    )
    parser.add_argument(
        "--store-path",
        default=os.environ.get("OCI_MACHINE_STORE_PATH", str(DEFAULT_STORE_PATH)),
        help="Directory holding machine records (default: ~/.oci-machine)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument(
        "--poll-backoff",
        choices=[EXPONENTIAL, FIXED],
        default=EXPONENTIAL,
        help="Backoff between status polls.",
    )
    parser.add_argument(
        "--poll-interval", type=positive_float, default=2.0, help="Base seconds between status polls."
    )
    parser.add_argument(
        "--poll-attempts", type=positive_int, default=60, help="Status polls before giving up."
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Launch a new instance.")
    create.add_argument("name", help="Machine name")
    create.add_argument("--options-file", help="YAML file with flag values.")
    create.add_argument(
        "--skip-firewall",
        action="store_true",
        help="Do not open the Docker port with firewall-cmd after launch.",
    )
    for flag in CREATE_FLAGS:
        create.add_argument(f"--{flag.name}", dest=flag.field, help=flag.usage)

    for command, help_text in (
        ("start", "Start a stopped instance."),
        ("stop", "Stop a running instance."),
        ("restart", "Soft-reset a running instance."),
        ("kill", "Stop the instance (OCI has no hard power-off)."),
        ("rm", "Terminate the instance and forget the machine."),
        ("status", "Show the machine state."),
        ("ip", "Show the public IP."),
        ("url", "Show the Docker engine URL."),
        ("inspect", "Show the stored machine details."),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument("name", help="Machine name")

    subparsers.add_parser("flags", help="List driver options.")
    subparsers.add_parser("ls", help="List stored machines.")

    return parser.parse_args(argv)


def _schedule(args: argparse.Namespace) -> PollSchedule:
    return PollSchedule(
        backoff=args.poll_backoff,
        interval=args.poll_interval,
        max_attempts=args.poll_attempts,
    )


def cmd_create(args: argparse.Namespace) -> int:
    store_path = Path(args.store_path)
    values: Dict[str, Optional[str]] = {
        flag.name: getattr(args, flag.field, None) for flag in CREATE_FLAGS
    }
    options = load_driver_options(values, options_file=args.options_file)

    driver = Driver(args.name, store_path, options, schedule=_schedule(args))
    if driver.store.exists(args.name):
        display_error(f"Machine {args.name} already exists")
        return 1

    driver.create()
    display_success(f"✓ Machine {args.name} created ({driver.instance.instance_id})")

    if not driver.instance.public_ip:
        display_warning("Public IP not yet available; run 'oci-machine ip' later.")
    elif not args.skip_firewall:
        driver.configure_firewall()
        display_success(f"✓ Opened port {driver.instance.docker_port}/tcp")
    return 0


def _run_on_existing(action: Callable[[Driver, argparse.Namespace], int]) -> Callable[[argparse.Namespace], int]:
    def handler(args: argparse.Namespace) -> int:
        driver = Driver.from_store(args.name, Path(args.store_path), schedule=_schedule(args))
        return action(driver, args)

    return handler


def _start(driver: Driver, args: argparse.Namespace) -> int:
    driver.start()
    display_success(f"✓ Machine {args.name} started")
    return 0


def _stop(driver: Driver, args: argparse.Namespace) -> int:
    driver.stop()
    display_success(f"✓ Machine {args.name} stopped")
    return 0


def _restart(driver: Driver, args: argparse.Namespace) -> int:
    driver.restart()
    display_success(f"✓ Restart requested for machine {args.name}")
    return 0


def _kill(driver: Driver, args: argparse.Namespace) -> int:
    driver.kill()
    display_success(f"✓ Machine {args.name} killed")
    return 0


def _remove(driver: Driver, args: argparse.Namespace) -> int:
    if driver.instance.is_created:
        driver.remove()
    driver.store.remove(args.name)
    display_success(f"✓ Machine {args.name} removed")
    return 0


def _status(driver: Driver, args: argparse.Namespace) -> int:
    display_state(args.name, driver.get_state())
    return 0


def _ip(driver: Driver, args: argparse.Namespace) -> int:
    ip = driver.get_ip()
    if not ip:
        display_warning("Public IP not yet available")
        return 1
    console.print(ip)
    return 0


def _url(driver: Driver, args: argparse.Namespace) -> int:
    console.print(driver.get_url())
    return 0


def _inspect(driver: Driver, args: argparse.Namespace) -> int:
    display_machine(args.name, driver.instance)
    return 0


def cmd_flags(args: argparse.Namespace) -> int:
    display_create_flags(Driver.get_create_flags())
    return 0


def cmd_ls(args: argparse.Namespace) -> int:
    store_path = Path(args.store_path)
    for name in MachineStore(store_path).list_names():
        console.print(name)
    return 0


COMMANDS: Dict[str, Callable[[argparse.Namespace], int]] = {
    "create": cmd_create,
    "start": _run_on_existing(_start),
    "stop": _run_on_existing(_stop),
    "restart": _run_on_existing(_restart),
    "kill": _run_on_existing(_kill),
    "rm": _run_on_existing(_remove),
    "status": _run_on_existing(_status),
    "ip": _run_on_existing(_ip),
    "url": _run_on_existing(_url),
    "inspect": _run_on_existing(_inspect),
    "flags": cmd_flags,
    "ls": cmd_ls,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_arguments(argv)
    configure_logging(verbose=args.verbose)

    try:
        return COMMANDS[args.command](args)
    except MachineError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        display_error(f"✗ {e}")
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    try:
        raise SystemExit(main())
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user.[/yellow]")
        raise SystemExit(1)
