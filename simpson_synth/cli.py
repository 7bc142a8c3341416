"""Search for a multi-stage Simpson's Paradox and write the resulting dataset.

Run:
    simpson-synth --rows 1000 --noise 0.1 --iterations 2000 --seed 0 --out runs/paradox
    simpson-synth --graph "Z1 -> X, Z2 -> X, Z1 -> Y, Z2 -> Y, X -> Y" --covariates Z1,Z2
"""
from __future__ import annotations
import argparse
import os
import sys
from typing import List, Optional

import numpy as np

from .dag import CausalGraph
from .datasets import generate_paradox_dataset
from .errors import SimpsonSynthError
from .presets import default_problem
from .scoring import alternating_target
from .search import AnnealingConfig, ParadoxProblem
from .utils import nested_covariate_sets

def _read_graph(value: str) -> CausalGraph:
    if os.path.isfile(value):
        with open(value) as f:
            value = f.read()
    return CausalGraph.from_edges(value)

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="simpson-synth", description=__doc__.splitlines()[0])
    p.add_argument("--rows", type=int, default=1000)
    p.add_argument("--noise", type=float, default=0.1)
    p.add_argument("--iterations", type=int, default=2000)
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--out", type=str, default="runs/paradox")

    # problem
    p.add_argument("--graph", type=str, default=None, help="edge list ('A -> B, B -> C') or a file holding one")
    p.add_argument("--focal", type=str, default="X")
    p.add_argument("--outcome", type=str, default="Y")
    p.add_argument("--covariates", type=str, default=None, help="comma separated, added one at a time")
    p.add_argument("--confounders", type=int, default=5, help="size of the default confounder fan")
    p.add_argument("--target-magnitude", type=float, default=1.0)
    p.add_argument("--sign-penalty", type=float, default=10.0)

    # annealing knobs
    p.add_argument("--init-scale", type=float, default=1.0)
    p.add_argument("--step-scale", type=float, default=0.5)
    p.add_argument("--t-start", type=float, default=10.0)
    p.add_argument("--t-end", type=float, default=1e-3)
    p.add_argument("--proposals", type=int, default=1)
    p.add_argument("--workers", type=int, default=1)
    p.add_argument("--confirm-draws", type=int, default=2, help="extra draws a new best vector must hold up on")
    p.add_argument("--final-draws", type=int, default=5, help="max draws of the final dataset")
    p.add_argument("--stop-score", type=float, default=None)
    p.add_argument("--log-every", type=int, default=100)
    return p

def _problem_from_args(args: argparse.Namespace) -> ParadoxProblem:
    if args.graph is None and args.covariates is None:
        return default_problem(
            n_rows=args.rows,
            noise_scale=args.noise,
            n_confounders=args.confounders,
            magnitude=args.target_magnitude,
            sign_penalty=args.sign_penalty,
        )
    graph = _read_graph(args.graph) if args.graph is not None else default_problem(n_confounders=args.confounders).graph
    if args.covariates is None:
        covs = list(graph.parents(args.focal))
    else:
        covs = [c.strip() for c in args.covariates.split(",") if c.strip()]
    sets = nested_covariate_sets(covs)
    return ParadoxProblem(
        graph=graph,
        focal=args.focal,
        outcome=args.outcome,
        covariate_sets=sets,
        target=alternating_target(len(sets), args.target_magnitude),
        n_rows=args.rows,
        noise_scale=args.noise,
        sign_penalty=args.sign_penalty,
    )

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        problem = _problem_from_args(args)
        cfg = AnnealingConfig(
            iterations=args.iterations,
            init_scale=args.init_scale,
            step_scale=args.step_scale,
            t_start=args.t_start,
            t_end=args.t_end,
            n_proposals=args.proposals,
            workers=args.workers,
            confirm_draws=args.confirm_draws,
            final_draws=args.final_draws,
            stop_score=args.stop_score,
            seed=args.seed,
            log_every=args.log_every,
        )
        ds, result = generate_paradox_dataset(problem, cfg, out_dir=args.out)
    except (SimpsonSynthError, ValueError, KeyError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    with np.printoptions(precision=3, suppress=True):
        print(f"trajectory: {result.final_trajectory}")
        print(f"target:     {problem.target}")
    print(f"score {result.final_score:.4f} | best search score {result.score:.4f} | fit errors {result.n_fit_errors}"
          f" | final draws {result.final_attempts}")
    if not result.signs_match:
        print("sign pattern not reached; try another --seed or more --iterations")
    print(f"wrote {os.path.join(args.out, 'data.csv')}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
