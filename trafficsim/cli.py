import argparse
import logging
import sys
from contextlib import nullcontext
from pathlib import Path

from trafficsim.builders import default_builders
from trafficsim.config import SimulatorConfig
from trafficsim.errors import Err, Ok, SimulatorError
from trafficsim.listener import SimulatorListener, UpdateEvent
from trafficsim.simulator import TrafficSimulator
from trafficsim.views import render_tables


class ConsoleListener(SimulatorListener):
    """Prints reported errors and remembers the latest snapshot."""

    def __init__(self) -> None:
        self.errors: list[SimulatorError] = []
        self.last: UpdateEvent | None = None

    def registered(self, update: UpdateEvent) -> None:
        self.last = update

    def new_event(self, update: UpdateEvent) -> None:
        self.last = update

    def advanced(self, update: UpdateEvent) -> None:
        self.last = update

    def error(self, update: UpdateEvent, error: SimulatorError) -> None:
        self.errors.append(error)
        print(f"Error: {error}", file=sys.stderr)


def _load(
    scenario: str, config: SimulatorConfig
) -> tuple[TrafficSimulator, ConsoleListener] | None:
    try:
        text = Path(scenario).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Could not read scenario: {e}", file=sys.stderr)
        return None

    sim = TrafficSimulator()
    listener = ConsoleListener()
    sim.add_listener(listener)
    match sim.load_events(text, default_builders(config)):
        case Ok(_):
            return sim, listener
        case Err(_):
            return None


def handle_run(
    scenario: str, ticks: int, output: str | None, config: SimulatorConfig
) -> int:
    """Run a scenario in batch mode, writing reports to ``output`` or stdout."""
    loaded = _load(scenario, config)
    if loaded is None:
        return 1
    sim, listener = loaded

    try:
        ctx = open(output, "w", encoding="utf-8") if output else nullcontext(sys.stdout)
    except OSError as e:
        print(f"Could not open output: {e}", file=sys.stderr)
        return 1
    with ctx as sink:
        sim.set_output(sink)
        sim.run(ticks)

    return 1 if listener.errors else 0


def handle_tables(scenario: str, ticks: int, config: SimulatorConfig) -> int:
    """Run a scenario, then print the events/vehicles/roads/junctions tables."""
    loaded = _load(scenario, config)
    if loaded is None:
        return 1
    sim, listener = loaded
    sim.run(ticks)
    if listener.last is not None:
        print(render_tables(listener.last))
    return 1 if listener.errors else 0


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="trafficsim",
        description="Discrete-time traffic simulator.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Log every tick and event to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Command: run
    run_parser = subparsers.add_parser(
        "run", help="Run a scenario and write the report of every tick."
    )
    run_parser.add_argument("scenario", metavar="SCENARIO", help="Scenario .ini file.")
    run_parser.add_argument(
        "--ticks", "-t", type=int, default=10, help="Number of ticks to run (default: 10)."
    )
    run_parser.add_argument(
        "--output",
        "-o",
        type=str,
        metavar="FILE",
        help="Write reports to FILE instead of stdout.",
    )

    # Command: tables
    tables_parser = subparsers.add_parser(
        "tables", help="Run a scenario and print the state tables."
    )
    tables_parser.add_argument("scenario", metavar="SCENARIO", help="Scenario .ini file.")
    tables_parser.add_argument(
        "--ticks", "-t", type=int, default=10, help="Number of ticks to run (default: 10)."
    )

    args = parser.parse_args()

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    match SimulatorConfig.from_env():
        case Ok(config):
            pass
        case Err(e):
            print(f"Invalid configuration: {e}", file=sys.stderr)
            return 1

    match args.command:
        case "run":
            return handle_run(args.scenario, args.ticks, args.output, config)
        case "tables":
            return handle_tables(args.scenario, args.ticks, config)
        case None:
            parser.print_help()
            return 1
        case _:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            parser.print_help()
            return 1


if __name__ == "__main__":
    sys.exit(main())
