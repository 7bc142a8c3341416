from __future__ import annotations
from typing import Sequence, Union
import numpy as np

Array = np.ndarray

def sign_mismatches(trajectory: Union[Sequence[float], Array], target: Union[Sequence[float], Array]) -> int:
    t = np.asarray(trajectory, dtype=float)
    g = np.asarray(target, dtype=float)
    if t.shape != g.shape or t.ndim != 1 or t.size == 0:
        raise ValueError(f"trajectory {t.shape} and target {g.shape} must be equal-length 1-d sequences")
    # a zero coefficient counts as a mismatch against a signed target
    return int(np.sum(np.sign(t) != np.sign(g)))

def score(
    trajectory: Union[Sequence[float], Array],
    target: Union[Sequence[float], Array],
    sign_penalty: float = 10.0,
) -> float:
    """sign_penalty * (#sign mismatches) + RMSE(trajectory, target). Lower is better."""
    n_bad = sign_mismatches(trajectory, target)
    t = np.asarray(trajectory, dtype=float)
    g = np.asarray(target, dtype=float)
    rmse = float(np.sqrt(np.mean((t - g) ** 2)))
    return sign_penalty * n_bad + rmse

def alternating_target(length: int, magnitude: float = 1.0, start_positive: bool = True) -> Array:
    """[+m, -m, +m, ...] of the given length."""
    if length < 1:
        raise ValueError("length must be >= 1.")
    if magnitude <= 0:
        raise ValueError("magnitude must be > 0.")
    signs = np.where(np.arange(length) % 2 == 0, 1.0, -1.0)
    return magnitude * signs * (1.0 if start_positive else -1.0)
