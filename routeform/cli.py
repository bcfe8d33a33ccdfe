"""Command-line interface for routeform."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from time import perf_counter
from typing import Any, Dict, List, Optional

from routeform.logging import get_logger, set_global_log_level
from routeform.scenario import Scenario
from routeform.solver import available_solvers

logger = get_logger(__name__)


def _format_table(headers: List[str], rows: List[List[str]], min_width: int = 6) -> str:
    """Format data as a simple ASCII table."""
    if not rows:
        return ""

    all_data = [headers] + rows
    col_widths = [
        max(max(len(str(row[i])) for row in all_data), min_width)
        for i in range(len(headers))
    ]

    def format_row(row_data: List[str]) -> str:
        return "   " + " | ".join(
            f"{str(item):<{col_widths[i]}}" for i, item in enumerate(row_data)
        )

    lines = [format_row(headers)]
    lines.append("   " + "-+-".join("-" * width for width in col_widths))
    lines.extend(format_row(row) for row in rows)
    return "\n".join(lines)


def _run_scenario(
    path: Path,
    overrides: Dict[str, Any],
    results_path: Optional[Path],
    stdout: bool,
) -> None:
    """Optimize a scenario file and optionally export the allocation as JSON."""
    logger.info(f"Loading scenario from: {path}")
    start = perf_counter()

    try:
        scenario = Scenario.from_yaml(path.read_text())
        report = scenario.run(overrides)
        routes = scenario.network.routes

        print(report)
        table = _format_table(
            ["Demand", "Hops", "Carried", "Links"],
            [
                [
                    str(alloc.demand_id),
                    str(alloc.route.hop_count),
                    f"{alloc.carried:g}",
                    " > ".join(str(e_id) for e_id in alloc.route.edges),
                ]
                for alloc in routes
            ],
        )
        if table:
            print(table)

        payload: Dict[str, Any] = {"scenario": str(path)}
        payload.update(scenario.result.to_dict())
        payload["link_utilization"] = scenario.network.link_utilization()
        json_str = json.dumps(payload, indent=2, default=str)

        if results_path is not None:
            results_path.parent.mkdir(parents=True, exist_ok=True)
            results_path.write_text(json_str)
            logger.info(f"Results written to: {results_path}")
        if stdout:
            print(json_str)

        logger.info(f"Scenario run completed in {perf_counter() - start:.3f} s")

    except FileNotFoundError:
        logger.error(f"Scenario file not found: {path}")
        print(f"ERROR: Scenario file not found: {path}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Failed to run scenario: {type(e).__name__}: {e}")
        print(f"ERROR: Failed to run scenario: {type(e).__name__}: {e}")
        sys.exit(1)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="routeform",
        description="Optimize demand routing over k loopless candidate paths.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug messages"
    )
    verbosity.add_argument(
        "--quiet", action="store_true", help="Log warnings and errors only"
    )

    commands = parser.add_subparsers(dest="command", required=True, metavar="{run}")
    run = commands.add_parser("run", help="Optimize the routing of a scenario file")
    run.add_argument("scenario", type=Path, help="Scenario YAML file")
    run.add_argument("--k", type=int, help="Maximum candidate paths per demand")
    run.add_argument(
        "--non-bifurcated",
        action="store_const",
        const=True,
        help="Place every demand on a single path",
    )
    run.add_argument("--solver", choices=available_solvers(), help="Solver backend")
    run.add_argument("--time-limit", type=float, help="Solver time limit (seconds)")
    run.add_argument(
        "-r", "--results", type=Path, help="Write the allocation as JSON to this file"
    )
    run.add_argument(
        "--stdout", action="store_true", help="Print the JSON allocation as well"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``routeform`` command.

    Args:
        argv: Command-line arguments; ``sys.argv[1:]`` when None.
    """
    parser = _build_parser()
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        parser.print_help()
        raise SystemExit(0)
    args = parser.parse_args(argv)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)
    logger.debug(f"Arguments: {vars(args)}")

    if args.command == "run":
        options = {
            "k": args.k,
            "non_bifurcated": args.non_bifurcated,
            "solver": args.solver,
            "time_limit": args.time_limit,
        }
        overrides = {key: value for key, value in options.items() if value is not None}
        _run_scenario(args.scenario, overrides, args.results, args.stdout)


if __name__ == "__main__":
    main()
