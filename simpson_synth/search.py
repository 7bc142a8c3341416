from __future__ import annotations

import json
import math
import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .codec import Weights, decode, edge_keys
from .dag import CausalGraph
from .errors import FitError, ParameterLengthError
from .scm import SimulationConfig, simulate
from .scoring import score
from .trajectory import coefficient_trajectory
from .utils import child_seed, rng

Array = np.ndarray

@dataclass
class AnnealingConfig:
    """Simulated annealing schedule.

    Temperature cools geometrically from t_start to t_end over `iterations` steps.
    Each step draws `n_proposals` Gaussian perturbations of the current vector and
    keeps the best one as the candidate for the Metropolis test. The current vector
    is re-scored on the same draw as the proposals, so both sides of the test see
    the same randomness.

    A vector only becomes the best one after `confirm_draws` extra evaluations on
    fresh draws; its best score is the worst of them. The final dataset is drawn
    at most `final_draws` times, stopping at the first draw that shows the target
    sign pattern.
    """
    iterations: int = 2000
    init_scale: float = 1.0
    step_scale: float = 0.5
    t_start: float = 10.0
    t_end: float = 1e-3
    n_proposals: int = 1
    workers: int = 1
    confirm_draws: int = 2
    final_draws: int = 5
    stop_score: Optional[float] = None
    seed: Optional[int] = 0
    log_every: int = 100

    def __post_init__(self):
        if self.iterations < 0:
            raise ValueError("iterations must be >= 0.")
        if self.init_scale < 0 or self.step_scale <= 0:
            raise ValueError("init_scale must be >= 0 and step_scale > 0.")
        if not (0 < self.t_end <= self.t_start):
            raise ValueError("need 0 < t_end <= t_start.")
        if self.n_proposals < 1 or self.workers < 1:
            raise ValueError("n_proposals and workers must be >= 1.")
        if self.confirm_draws < 0 or self.final_draws < 1:
            raise ValueError("confirm_draws must be >= 0 and final_draws >= 1.")
        if self.log_every < 0:
            raise ValueError("log_every must be >= 0.")

    def temperature(self, step: int) -> float:
        if self.iterations <= 1:
            return self.t_end
        frac = min(step, self.iterations - 1) / (self.iterations - 1)
        return self.t_start * (self.t_end / self.t_start) ** frac

@dataclass
class ParadoxProblem:
    """What to search for: the graph, the regression setup and the target pattern."""
    graph: CausalGraph
    focal: str
    outcome: str
    covariate_sets: List[List[str]]
    target: Array
    n_rows: int = 1000
    noise_scale: float = 0.1
    sign_penalty: float = 10.0

    def __post_init__(self):
        self.covariate_sets = [list(c) for c in self.covariate_sets]
        self.target = np.asarray(self.target, dtype=float)
        # validates n_rows / noise_scale
        SimulationConfig(n_rows=self.n_rows, noise_scale=self.noise_scale)
        names = {self.focal, self.outcome, *(v for c in self.covariate_sets for v in c)}
        unknown = sorted(v for v in names if v not in self.graph)
        if unknown:
            raise ValueError(f"not graph nodes: {unknown}")
        if self.focal == self.outcome:
            raise ValueError("focal and outcome must differ.")
        if self.target.ndim != 1 or len(self.target) != len(self.covariate_sets):
            raise ValueError("target needs one entry per covariate set.")
        if np.any(self.target == 0):
            raise ValueError("target entries must be signed (non-zero).")
        if self.graph.n_edges == 0:
            raise ValueError("graph has no edges to search over.")
        if self.sign_penalty < 0:
            raise ValueError("sign_penalty must be >= 0.")

    @property
    def n_params(self) -> int:
        return self.graph.n_edges

    def trajectory(self, data: pd.DataFrame) -> Array:
        return coefficient_trajectory(data, self.focal, self.outcome, self.covariate_sets)

    def simulate(self, vector: Array, r: np.random.Generator) -> pd.DataFrame:
        return simulate(self.graph, decode(vector, self.graph), n=self.n_rows, noise_scale=self.noise_scale, r=r)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "graph": self.graph.as_dict(),
            "focal": self.focal,
            "outcome": self.outcome,
            "covariate_sets": self.covariate_sets,
            "target": self.target.tolist(),
            "n_rows": self.n_rows,
            "noise_scale": self.noise_scale,
            "sign_penalty": self.sign_penalty,
        }

@dataclass
class Evaluation:
    score: float
    trajectory: Optional[Array] = None
    error: Optional[str] = None

def evaluate(problem: ParadoxProblem, vector: Array, seed: int) -> Evaluation:
    """decode -> simulate -> trajectory -> score on a fresh generator.

    A FitError (degenerate data) scores as +inf; every other error propagates.
    """
    data = problem.simulate(vector, rng(seed))
    try:
        traj = problem.trajectory(data)
    except FitError as e:
        return Evaluation(score=math.inf, error=str(e))
    return Evaluation(score=score(traj, problem.target, problem.sign_penalty), trajectory=traj)

@dataclass
class SearchResult:
    vector: Array
    score: float
    weights: Weights
    trajectory: Optional[Array]
    data: pd.DataFrame
    target: Array
    final_trajectory: Array
    final_score: float
    final_attempts: int
    iterations_run: int
    n_accepted: int
    n_fit_errors: int
    history: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def signs_match(self) -> bool:
        """True when the final dataset reproduces the target sign pattern."""
        return bool(np.all(np.sign(self.final_trajectory) == np.sign(self.target)))

def _propose(r: np.random.Generator, x: Array, scale: float) -> Array:
    return x + r.normal(0.0, scale, size=x.shape[0])

def _worst(evals: Sequence[Evaluation]) -> Evaluation:
    return max(evals, key=lambda e: e.score)

def search_paradox(
    problem: ParadoxProblem,
    cfg: Optional[AnnealingConfig] = None,
    x0: Optional[Sequence[float]] = None,
    out_dir: Optional[str] = None,
) -> SearchResult:
    """Anneal over the flat edge-weight vector to match the target coefficient pattern.

    All randomness comes from one generator seeded with cfg.seed; every evaluation
    builds its own generator from a child seed, so results do not depend on
    cfg.workers. After the loop the best vector is simulated again to produce the
    final dataset.
    """
    cfg = cfg or AnnealingConfig()
    r = rng(cfg.seed)
    n = problem.n_params

    if x0 is None:
        x = r.uniform(-cfg.init_scale, cfg.init_scale, size=n)
    else:
        x = np.asarray(x0, dtype=float)
        if x.shape != (n,):
            raise ParameterLengthError(f"x0 has shape {x.shape}, expected ({n},)")

    if out_dir is not None:
        os.makedirs(out_dir, exist_ok=True)
        with open(os.path.join(out_dir, "config.json"), "w") as f:
            json.dump({
                "annealing": asdict(cfg),
                "problem": problem.to_dict(),
                "edge_keys": [list(k) for k in edge_keys(problem.graph)],
            }, f, indent=2)

    pool = ThreadPoolExecutor(max_workers=cfg.workers) if cfg.workers > 1 else None

    def run(jobs):
        if pool is None:
            return [evaluate(problem, v, s) for v, s in jobs]
        return list(pool.map(lambda job: evaluate(problem, *job), jobs))

    n_fit_errors = 0

    def confirm(v: Array, first: Evaluation) -> Evaluation:
        nonlocal n_fit_errors
        extra = run([(v, child_seed(r)) for _ in range(cfg.confirm_draws)])
        n_fit_errors += sum(e.error is not None for e in extra)
        return _worst([first, *extra])

    n_accepted = 0
    history: List[Dict[str, Any]] = []
    steps_run = 0
    t0 = time.time()

    try:
        cur = evaluate(problem, x, child_seed(r))
        n_fit_errors += int(cur.error is not None)
        best_x, best = x, confirm(x, cur)

        for step in range(cfg.iterations):
            if cfg.stop_score is not None and best.score <= cfg.stop_score:
                break
            T = cfg.temperature(step)
            cands = [_propose(r, x, cfg.step_scale) for _ in range(cfg.n_proposals)]
            seed = child_seed(r)
            u = float(r.random())

            # current and proposals share one draw
            evals = run([(v, seed) for v in [x, *cands]])
            n_fit_errors += sum(e.error is not None for e in evals)
            cur, props = evals[0], evals[1:]

            k = int(np.argmin([e.score for e in props]))
            cand, ev = cands[k], props[k]
            # Metropolis rule; an inf candidate never beats a finite current score
            accepted = ev.score <= cur.score or u < math.exp(-(ev.score - cur.score) / T)
            if accepted:
                x, cur = cand, ev
                n_accepted += 1
            if cur.score < best.score:
                checked = confirm(x, cur)
                if checked.score < best.score:
                    best_x, best = x, checked
            steps_run = step + 1

            rec = {
                "step": step + 1,
                "score": cur.score,
                "best": best.score,
                "temperature": T,
                "accepted": bool(accepted),
            }
            history.append(rec)

            if cfg.log_every and (step + 1) % cfg.log_every == 0:
                dt = time.time() - t0
                print(
                    f"step {step+1:>6}/{cfg.iterations} | score {cur.score:.4f} | best {best.score:.4f}"
                    f" | T {T:.4g} | accepted {n_accepted} | fit errors {n_fit_errors} | {dt:.1f}s"
                )
                t0 = time.time()
                if out_dir is not None:
                    with open(os.path.join(out_dir, "history.jsonl"), "a") as f:
                        f.write(json.dumps({**rec, "n_accepted": n_accepted, "n_fit_errors": n_fit_errors}) + "\n")
    finally:
        if pool is not None:
            pool.shutdown()

    signs = np.sign(problem.target)
    for attempt in range(1, cfg.final_draws + 1):
        data = problem.simulate(best_x, r)
        final_traj = problem.trajectory(data)
        if np.all(np.sign(final_traj) == signs):
            break
    final_score = score(final_traj, problem.target, problem.sign_penalty)

    return SearchResult(
        vector=best_x,
        score=best.score,
        weights=decode(best_x, problem.graph),
        trajectory=best.trajectory,
        data=data,
        target=problem.target,
        final_trajectory=final_traj,
        final_score=final_score,
        final_attempts=attempt,
        iterations_run=steps_run,
        n_accepted=n_accepted,
        n_fit_errors=n_fit_errors,
        history=history,
    )
