"""Application-layer CLI adapters.

``latticemc`` exposes ``run``, ``generate`` and ``selfcheck`` subcommands;
``potts`` and ``heisenberg`` are per-model executables taking
``inputfile outputfile timesteps``.
"""

from __future__ import annotations

import argparse
import sys

import numpy as np

from ..config import RunConfig, SWEEP_POLICIES, apply_overrides, load_run_config
from ..codec import save_grid
from ..driver import LoadedRun, load_for_run, run_loaded, save_run
from ..errors import ConfigError, FormatError, UnsupportedTypeError, UsageError
from ..generate import random_heisenberg_grid, random_potts_grid
from ..grid import BOUNDARIES, STENCILS
from ..logging_config import setup_logging, verbosity_level
from ..selfcheck import run_selfcheck


class _Parser(argparse.ArgumentParser):
    """Parser that raises UsageError instead of exiting."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=str, default=None, help="YAML run config")
    parser.add_argument("--kT", type=float, default=None, help="Temperature (<= 0: zero-temperature)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--sweep", choices=SWEEP_POLICIES, default=None, help="Site selection policy")
    parser.add_argument("--stencil", choices=STENCILS, default=None, help="Neighborhood stencil")
    parser.add_argument("--arity", type=int, default=None, help="Spin components of vector grids")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v info, -vv debug")


def _add_run_positionals(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("inputfile", type=str, help="Input grid file")
    parser.add_argument("outputfile", type=str, help="Output grid file")
    parser.add_argument("timesteps", type=int, help="Number of Monte Carlo sweeps")


def build_parser() -> argparse.ArgumentParser:
    """Create the umbrella CLI parser."""
    parser = _Parser(prog="latticemc", description="Lattice Monte Carlo microstructure simulator")
    sub = parser.add_subparsers(dest="command", required=True)

    run_p = sub.add_parser("run", help="Update a grid file with any supported model")
    _add_run_positionals(run_p)
    _add_run_options(run_p)

    gen_p = sub.add_parser("generate", help="Write a random initial grid")
    gen_p.add_argument("model", choices=("potts", "heisenberg"), help="Model to generate for")
    gen_p.add_argument("outputfile", type=str, help="Output grid file")
    gen_p.add_argument("--extents", type=int, nargs="+", required=True, help="Extent along each axis")
    gen_p.add_argument("--grains", type=int, default=100, help="Number of Potts grain ids")
    gen_p.add_argument("--arity", type=int, default=3, help="Heisenberg spin components")
    gen_p.add_argument("--seed", type=int, default=None, help="Random seed")
    gen_p.add_argument("--boundary", choices=BOUNDARIES, default="periodic")

    selfcheck_p = sub.add_parser("selfcheck", help="Run dependency and smoke self-check")
    selfcheck_p.add_argument(
        "--no-smoke",
        action="store_true",
        help="Run import checks only (skip smoke simulation).",
    )
    return parser


def build_model_parser(model: str) -> argparse.ArgumentParser:
    """Parser for a per-model executable."""
    parser = _Parser(
        prog=model,
        usage=f"{model} inputfile outputfile timesteps [options]",
        description=f"{model.capitalize()} model Monte Carlo update",
    )
    _add_run_positionals(parser)
    _add_run_options(parser)
    return parser


def _run_config(args: argparse.Namespace) -> RunConfig:
    config = RunConfig() if args.config is None else load_run_config(args.config)
    return apply_overrides(
        config,
        kT=args.kT,
        seed=args.seed,
        sweep=args.sweep,
        stencil=args.stencil,
        vector_arity=args.arity,
    )


def _run(args: argparse.Namespace, models: tuple[str, ...] | None) -> int:
    setup_logging(verbosity_level(args.verbose))
    if args.timesteps < 0:
        print(f"Error: timesteps must be >= 0, got {args.timesteps}.", file=sys.stderr)
        return 2
    try:
        config = _run_config(args)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    try:
        loaded: LoadedRun = load_for_run(args.inputfile, config, models=models)
    except (FormatError, UnsupportedTypeError) as exc:
        print(f"File input error: {exc}", file=sys.stderr)
        return 1
    except OSError:
        print(f"File input error: could not open {args.inputfile}.", file=sys.stderr)
        return 1

    result = run_loaded(loaded, args.timesteps, config)

    try:
        save_run(loaded, result, args.outputfile)
    except OSError as exc:
        print(f"File output error: could not write {args.outputfile}: {exc}", file=sys.stderr)
        return 1

    print(
        f"Done. model={result.model}, grid={result.extents}, sweeps={result.steps}, "
        f"energy={result.energy_before:.6g}->{result.energy_after:.6g}, "
        f"acceptance={result.acceptance_rate:.4f}"
    )
    return 0


def _generate(args: argparse.Namespace) -> int:
    rng = np.random.default_rng(args.seed)
    try:
        if args.model == "potts":
            grid = random_potts_grid(args.extents, args.grains, rng, boundary=args.boundary)
        else:
            grid = random_heisenberg_grid(args.extents, rng, arity=args.arity, boundary=args.boundary)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    try:
        path = save_grid(grid, args.outputfile)
    except OSError as exc:
        print(f"File output error: could not write {args.outputfile}: {exc}", file=sys.stderr)
        return 1
    print(f"Wrote {grid.site_type.tag} grid {grid.extents} to {path}")
    return 0


def _parse(parser: argparse.ArgumentParser, argv: list[str] | None) -> argparse.Namespace | None:
    try:
        return parser.parse_args(argv)
    except UsageError as exc:
        parser.print_usage(sys.stdout)
        print(f"Error: {exc}")
        return None


def main(argv: list[str] | None = None) -> int:
    """Umbrella CLI entrypoint."""
    parser = build_parser()
    args = _parse(parser, argv)
    if args is None:
        return 2

    if args.command == "run":
        return _run(args, models=None)
    if args.command == "generate":
        return _generate(args)
    if args.command == "selfcheck":
        report = run_selfcheck(smoke=not bool(args.no_smoke))
        print(report.to_text())
        return 0 if report.ok else 1
    return 2


def model_main(model: str, argv: list[str] | None = None) -> int:
    """Per-model executable: ``<model> inputfile outputfile timesteps``."""
    parser = build_model_parser(model)
    args = _parse(parser, argv)
    if args is None:
        return 2
    return _run(args, models=(model,))


def potts_main(argv: list[str] | None = None) -> int:
    return model_main("potts", argv)


def heisenberg_main(argv: list[str] | None = None) -> int:
    return model_main("heisenberg", argv)
