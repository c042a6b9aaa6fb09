import argparse
import logging
import sys
from typing import Optional, Sequence

from planet_atlas import (
    ConsoleReporter,
    ConstraintError,
    SearchLoop,
    SearchOptions,
    get_solve_options,
    load_rules,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Search for distinct 3D planet arrangements matching measured distances"
    )
    parser.add_argument("path", help="Rules file (.xml, .json or A,B,distance text)")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Base random seed; attempts draw independent child streams (default: OS entropy)",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        help="Stop after this many attempts (default: run until interrupted)",
    )
    parser.add_argument(
        "--max-solutions",
        type=int,
        default=None,
        help="Stop after this many distinct solutions",
    )
    parser.add_argument(
        "--max-seconds",
        type=float,
        default=None,
        help="Stop once this much wall-clock time has passed",
    )
    parser.add_argument(
        "--decimals",
        type=int,
        default=2,
        help="Decimal places used when printing coordinates (default: 2)",
    )
    parser.add_argument(
        "--polish",
        action="store_true",
        help="Refine each relaxed placement with least squares",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not print the live attempt/iteration status line",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    try:
        rules = load_rules(args.path)
    except (OSError, ConstraintError) as exc:
        logger.error("Could not load rules from %s: %s", args.path, exc)
        raise SystemExit(1) from exc

    solve_options = get_solve_options()
    solve_options.polish = args.polish
    options = SearchOptions(
        seed=args.seed,
        max_attempts=args.max_attempts,
        max_solutions=args.max_solutions,
        max_seconds=args.max_seconds,
        solve=solve_options,
    )
    reporter = ConsoleReporter(decimals=args.decimals, show_progress=not args.no_progress)

    try:
        loop = SearchLoop(
            rules,
            options,
            on_solution=reporter.solution,
            on_progress=reporter.progress,
        )
    except ConstraintError as exc:
        logger.error("Rules in %s cannot be searched: %s", args.path, exc)
        raise SystemExit(1) from exc

    try:
        report = loop.run()
    except KeyboardInterrupt:
        report = loop.report
        report.stop_reason = "interrupted"
    finally:
        reporter.finish()

    print(
        f"Stopped ({report.stop_reason}): {report.attempts} attempt(s), "
        f"{len(loop.registry)} solution(s), {report.duplicates} duplicate(s)"
    )


if __name__ == "__main__":
    main(sys.argv[1:])
