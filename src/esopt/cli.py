from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Sequence

from esopt.engine.config import OptimizerConfig, build_optimizer
from esopt.engine.distributions import available_distributions
from esopt.engine.listeners import OptimizerLogger
from esopt.engine.weights import WEIGHTS
from esopt.foundation.exceptions import ESOptError
from esopt.foundation.kernel import KERNELS
from esopt.foundation.logging import configure_esopt_logging
from esopt.foundation.problem import available_problem_names, make_problem
from esopt.foundation.version import describe_runtime


def _parse_positive_int(parser: argparse.ArgumentParser, flag: str, raw: int | None, *, allow_zero: bool) -> int | None:
    if raw is None:
        return None
    if allow_zero:
        if raw < 0:
            parser.error(f"{flag} must be non-negative.")
    elif raw <= 0:
        parser.error(f"{flag} must be positive.")
    return raw


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="esopt",
        description="Run one evolution strategy on a benchmark function and print a JSON summary.",
    )
    parser.add_argument("--problem", default="sphere", choices=available_problem_names(), help="Benchmark function.")
    parser.add_argument("-n", "--dimension", type=int, default=10, help="Search space dimension.")
    parser.add_argument(
        "--distribution", default="cma", choices=available_distributions(), help="Sampling distribution."
    )
    parser.add_argument("--sigma-init", type=float, default=1.0, help="Initial step size.")
    parser.add_argument("--sigma-stop", type=float, default=1e-12, help="Step size below which the run stops.")
    parser.add_argument("--mu", type=int, default=None, help="Number of selected points (requires --lambda).")
    parser.add_argument("--lambda", dest="lam", type=int, default=None, help="Population size (requires --mu).")
    parser.add_argument("--weights", default="log", choices=sorted(WEIGHTS), help="Mean weights generator.")
    parser.add_argument("--kernel", default="numpy", choices=sorted(KERNELS), help="Eigen kernel used by cma.")
    parser.add_argument("--max-evaluations", type=int, default=0, help="Evaluation budget (0 = unlimited).")
    parser.add_argument("--max-retries", type=int, default=32, help="Evaluation attempts per candidate.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (drawn from OS entropy if omitted).")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log one line per generation to stderr.")
    parser.add_argument("--version", action="version", version=describe_runtime())
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)
    _parse_positive_int(parser, "--dimension", args.dimension, allow_zero=False)
    _parse_positive_int(parser, "--max-evaluations", args.max_evaluations, allow_zero=True)
    _parse_positive_int(parser, "--max-retries", args.max_retries, allow_zero=False)
    if (args.mu is None) != (args.lam is None):
        parser.error("--mu and --lambda must be given together.")
    return args


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        configure_esopt_logging(level=logging.INFO)

    builder = (
        OptimizerConfig()
        .distribution(args.distribution)
        .sigma(args.sigma_init, args.sigma_stop)
        .weights(args.weights)
        .kernel(args.kernel)
        .max_evaluations(args.max_evaluations)
        .max_retries(args.max_retries)
    )
    if args.mu is not None:
        builder.mu_lambda(args.mu, args.lam)

    try:
        config = builder.fixed()
        problem = make_problem(args.problem, args.dimension)
        listeners = [OptimizerLogger()] if args.verbose else []
        result = build_optimizer(config, problem, listeners=listeners).run(seed=args.seed)
    except ESOptError as exc:
        print(f"error: {exc}")
        return 2

    summary = {"problem": args.problem, "dimension": args.dimension, "config": config.to_dict(), **result.to_dict()}
    print(json.dumps(summary, indent=2, sort_keys=True))
    return 0


__all__ = ["main", "build_parser", "parse_args"]
