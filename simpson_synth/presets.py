"""Ready-made problems.

The confounder fan has confounders Z1..Zm, each a parent of both the focal variable
X and the outcome Y, plus the direct edge X -> Y. Adding Z1, Z2, ... one at a time to
the regression of Y on X gives m + 1 focal coefficients, which is the trajectory the
search tries to make alternate in sign.
"""
from __future__ import annotations
from typing import Dict, List, Sequence

import numpy as np

from .codec import Weights
from .dag import CausalGraph
from .scoring import alternating_target
from .search import ParadoxProblem
from .utils import nested_covariate_sets

def confounder_fan(n_confounders: int = 5, focal: str = "X", outcome: str = "Y", prefix: str = "Z") -> CausalGraph:
    if n_confounders < 1:
        raise ValueError("n_confounders must be >= 1.")
    zs = [f"{prefix}{k}" for k in range(1, n_confounders + 1)]
    parents: Dict[str, List[str]] = {z: [] for z in zs}
    parents[focal] = list(zs)
    parents[outcome] = [focal, *zs]
    return CausalGraph(parents)

def default_problem(
    n_rows: int = 1000,
    noise_scale: float = 0.1,
    n_confounders: int = 5,
    magnitude: float = 1.0,
    sign_penalty: float = 10.0,
) -> ParadoxProblem:
    """Fan graph with target [+m, -m, +m, ...], one entry per nested covariate set."""
    graph = confounder_fan(n_confounders)
    zs = [f"Z{k}" for k in range(1, n_confounders + 1)]
    return ParadoxProblem(
        graph=graph,
        focal="X",
        outcome="Y",
        covariate_sets=nested_covariate_sets(zs),
        target=alternating_target(n_confounders + 1, magnitude),
        n_rows=n_rows,
        noise_scale=noise_scale,
        sign_penalty=sign_penalty,
    )

def fan_paradox_weights(
    target: Sequence[float],
    noise_scale: float,
    focal: str = "X",
    outcome: str = "Y",
    prefix: str = "Z",
    root_low: float = 0.0,
    root_high: float = 1.0,
) -> Weights:
    """Closed-form fan weights whose population trajectory equals `target` exactly.

    With every Z_j -> X weight set to 1 and independent uniform roots of variance v,
    the focal coefficient after adjusting for Z1..Zk is
        b + v * sum_{j>k} c_j / (v * (m - k) + noise_scale**2)
    where b is the X -> Y weight and c_j the Z_j -> Y weights. Solving for c from the
    last entry backwards gives the weights. Requires noise_scale > 0 so the full
    regression is not collinear.
    """
    tau = np.asarray(target, dtype=float)
    m = len(tau) - 1
    if m < 1:
        raise ValueError("target needs at least two entries.")
    if noise_scale <= 0:
        raise ValueError("noise_scale must be > 0.")
    v = (root_high - root_low) ** 2 / 12.0
    b = float(tau[-1])

    tail = np.zeros(m + 1)  # tail[k] = sum_{j>k} c_j
    for k in range(m):
        resid = v * (m - k) + noise_scale ** 2
        tail[k] = (tau[k] - b) * resid / v
    c = [float(tail[j - 1] - tail[j]) for j in range(1, m + 1)]

    zs = [f"{prefix}{j}" for j in range(1, m + 1)]
    return {
        focal: {z: 1.0 for z in zs},
        outcome: {focal: b, **{z: cj for z, cj in zip(zs, c)}},
    }
