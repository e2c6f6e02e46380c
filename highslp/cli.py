"""Command-line interface for highslp."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from highslp import __version__
from highslp.constants import Integrality, Sense
from highslp.errors import EngineCallError, HighsError, ValidationError
from highslp.logging import get_logger, set_global_log_level
from highslp.model import Model
from highslp.parameters import Parameters

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_OPTIMAL = 2


def _to_integrality(value: Any) -> Integrality:
    if isinstance(value, str):
        try:
            return Integrality[value]
        except KeyError:
            raise ValidationError(f"unknown integrality flag: {value!r}") from None
    return Integrality(int(value))


def load_problem(path: Path) -> Model:
    """Build a Model from a JSON problem file.

    The file holds ``costs``, ``bounds`` and either ``rows`` with
    ``row_lower``/``row_upper`` or ``bounded_rows``. ``integrality`` and
    ``sense`` ("Minimize" or "Maximize") are optional.

    Args:
        path: Path to the JSON file.

    Returns:
        An unsolved Model.
    """
    data: Dict[str, Any] = json.loads(Path(path).read_text(encoding="utf-8"))

    try:
        costs = [float(v) for v in data["costs"]]
        bounds = [(float(lb), float(ub)) for lb, ub in data["bounds"]]
    except KeyError as exc:
        raise ValidationError(f"problem file is missing {exc.args[0]!r}") from None

    integrality = [_to_integrality(v) for v in data.get("integrality", [])]
    sense = Sense[data.get("sense", "Minimize")]

    if "bounded_rows" in data:
        bounded_rows = [[float(v) for v in row] for row in data["bounded_rows"]]
        return Model.from_bounded_rows(costs, bounds, bounded_rows,
                                       integrality=integrality, sense=sense)

    if "rows" not in data:
        raise ValidationError("problem file needs 'rows' or 'bounded_rows'")
    rows = [[float(v) for v in row] for row in data["rows"]]
    row_lower = [float(v) for v in data.get("row_lower", [])]
    row_upper = [float(v) for v in data.get("row_upper", [])]
    return Model(costs=costs, bounds=bounds, rows=rows,
                 row_lower=row_lower, row_upper=row_upper,
                 integrality=integrality, sense=sense)


def _solve_problem(
    path: Path,
    maximize: bool = False,
    solver: Optional[str] = None,
    time_limit: Optional[float] = None,
    as_json: bool = False,
) -> int:
    """Solve one problem file and print the outcome.

    Returns:
        Process exit code.
    """
    param = Parameters()
    if solver is not None:
        param.solver = solver
    if time_limit is not None:
        param.time_limit = time_limit

    try:
        model = load_problem(path)
    except (OSError, json.JSONDecodeError, HighsError, KeyError, ValueError) as exc:
        logger.error("Cannot load %s: %s", path, exc)
        return EXIT_ERROR

    with model:
        if maximize:
            model.set_objective_sense(Sense.Maximize)
        try:
            results = model.solve(param)
        except ImportError as exc:
            logger.error("HiGHS engine unavailable: %s", exc)
            return EXIT_ERROR
        except (ValidationError, EngineCallError, ValueError) as exc:
            logger.error("Cannot solve %s: %s", path, exc)
            return EXIT_ERROR

    if as_json:
        print(json.dumps(results.to_dict(), indent=2))
    else:
        print(results)

    return EXIT_OK if results.is_optimal() else EXIT_NOT_OPTIMAL


def _print_version() -> int:
    from highslp.engine import HighsEngine

    print(f"highslp {__version__}")
    try:
        engine = HighsEngine()
    except ImportError as exc:
        logger.error("HiGHS engine unavailable: %s", exc)
        return EXIT_ERROR
    handle = engine.create()
    try:
        print(f"HiGHS {engine.version(handle)}")
    finally:
        engine.destroy(handle)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``highslp`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="highslp",
        description="Solve LP and MIP problems with HiGHS.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{solve,version}",
        help="Available commands",
    )

    solve_parser = subparsers.add_parser("solve", help="Solve a JSON problem file")
    solve_parser.add_argument("problem", type=Path, help="Path to problem JSON")
    solve_parser.add_argument(
        "--maximize", action="store_true", help="Maximize instead of minimize"
    )
    solve_parser.add_argument(
        "--solver",
        choices=["choose", "simplex", "ipm", "pdlp"],
        default=None,
        help="LP algorithm used by the engine",
    )
    solve_parser.add_argument(
        "--time-limit", type=float, default=None, help="Time limit in seconds"
    )
    solve_parser.add_argument(
        "--json", action="store_true", help="Print results as JSON"
    )

    subparsers.add_parser("version", help="Show package and engine versions")

    effective_args = sys.argv[1:] if argv is None else argv
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    else:
        set_global_log_level(logging.INFO)

    if args.command == "solve":
        code = _solve_problem(
            path=args.problem,
            maximize=args.maximize,
            solver=args.solver,
            time_limit=args.time_limit,
            as_json=args.json,
        )
    else:
        code = _print_version()

    if code != EXIT_OK:
        raise SystemExit(code)


if __name__ == "__main__":
    main()
