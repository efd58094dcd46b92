"""Command line entry point for the Smart Laundry tracker."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional, Sequence

from smart_laundry.enterprise.config.settings import get_settings
from smart_laundry.enterprise.core import MachineSnapshot, ReservationError
from smart_laundry.observability import configure_logging
from smart_laundry.services import LaundryRuntime, ScanSession, build_runtime


def format_snapshot(snapshot: MachineSnapshot) -> str:
    status = snapshot.status
    if status.is_in_use:
        minutes = status.minutes_remaining
        detail = f"In Use ({minutes} min{'s' if minutes != 1 else ''} remaining)"
    else:
        detail = "Available"
    return f"{snapshot.machine.id:<10} {snapshot.machine.kind.value:<7} {detail}"


def _print_status(runtime: LaundryRuntime) -> None:
    for snapshot in runtime.engine.snapshot():
        print(format_snapshot(snapshot))


def _claim(runtime: LaundryRuntime, machine_id: str, minutes: Optional[int]) -> None:
    session = ScanSession(runtime.engine)
    selection = session.scan(machine_id)
    if minutes is not None:
        if selection.set(minutes) != minutes:
            print(f"Duration adjusted to {selection.minutes} minutes.")
    record = session.confirm()
    assert record is not None and record.end_time is not None
    runtime.engine.notifications.fire_due()
    print(f"{machine_id} reserved for {selection.minutes} minutes, until {record.end_time.isoformat()}.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="smart-laundry", description="Track shared washer and dryer reservations.")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    commands.add_parser("status", help="Show every machine's status.")

    claim = commands.add_parser("claim", help="Reserve a machine starting now.")
    claim.add_argument("machine_id")
    claim.add_argument("--minutes", type=int, default=None, help="Duration; defaults to the machine preset.")

    release = commands.add_parser("release", help="Free a machine before its reservation ends.")
    release.add_argument("machine_id")

    commands.add_parser("sweep", help="Rewrite expired reservations to the free state.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.logging)

    if args.command == "serve":
        import uvicorn

        from smart_laundry.server.app import create_app

        uvicorn.run(create_app(settings), host=args.host, port=args.port)
        return 0

    runtime = build_runtime(settings)
    try:
        expired: List[str] = runtime.engine.expire_stale()
        if args.command == "status":
            _print_status(runtime)
        elif args.command == "claim":
            _claim(runtime, args.machine_id, args.minutes)
        elif args.command == "release":
            released = runtime.engine.release(args.machine_id)
            print(f"{args.machine_id} released." if released else f"{args.machine_id} was not in use.")
        elif args.command == "sweep":
            print(f"Expired: {', '.join(expired) or 'none'}")
    except ReservationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        runtime.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
