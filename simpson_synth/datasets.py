from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
import json
import os
import numpy as np
import pandas as pd

from .codec import Weights
from .presets import default_problem
from .search import AnnealingConfig, ParadoxProblem, SearchResult, search_paradox

Array = np.ndarray

@dataclass
class Dataset:
    frame: pd.DataFrame
    weights: Weights
    trajectory: Array
    target: Array
    score: float
    seed: Optional[int] = None

    def save_csv(self, path: str) -> None:
        """One header row of node names, one row per simulated unit."""
        self.frame.to_csv(path, index=False)

    def save_json(self, path: str) -> None:
        with open(path, "w") as f:
            json.dump({
                "weights": self.weights,
                "trajectory": np.asarray(self.trajectory, dtype=float).tolist(),
                "target": np.asarray(self.target, dtype=float).tolist(),
                "score": float(self.score),
                "seed": self.seed,
            }, f, indent=2)

    def save(self, out_dir: str) -> Dict[str, str]:
        os.makedirs(out_dir, exist_ok=True)
        paths = {
            "data": os.path.join(out_dir, "data.csv"),
            "weights": os.path.join(out_dir, "weights.json"),
        }
        self.save_csv(paths["data"])
        self.save_json(paths["weights"])
        return paths

def generate_paradox_dataset(
    problem: Optional[ParadoxProblem] = None,
    cfg: Optional[AnnealingConfig] = None,
    out_dir: Optional[str] = None,
) -> Tuple[Dataset, SearchResult]:
    """Run the search and return (dataset from the best weights, search result).

    When `out_dir` is given the run config, search history, data.csv and
    weights.json are written there.
    """
    problem = problem or default_problem()
    cfg = cfg or AnnealingConfig()
    result = search_paradox(problem, cfg, out_dir=out_dir)
    ds = Dataset(
        frame=result.data,
        weights=result.weights,
        trajectory=result.final_trajectory,
        target=problem.target,
        score=result.final_score,
        seed=cfg.seed,
    )
    if out_dir is not None:
        ds.save(out_dir)
    return ds, result
