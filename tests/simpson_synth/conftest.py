from typing import Dict, List, Optional

import numpy as np
import pytest

from simpson_synth import CausalGraph


def _sample_graph(d: int, edge_prob: float = 0.3, max_parents: Optional[int] = 3, seed: Optional[int] = None) -> CausalGraph:
    """Random DAG: sample an ordering, then add forward edges only."""
    r = np.random.default_rng(seed)
    order = r.permutation(d).tolist()
    parents: Dict[str, List[str]] = {f"V{k}": [] for k in range(d)}
    for j, node in enumerate(order):
        candidates = order[:j]
        if not candidates:
            continue
        mask = r.random(len(candidates)) < edge_prob
        chosen = [c for c, m in zip(candidates, mask) if m]
        if max_parents and len(chosen) > max_parents:
            chosen = r.choice(chosen, size=max_parents, replace=False).tolist()
        parents[f"V{node}"] = [f"V{p}" for p in chosen]
    return CausalGraph(parents)


@pytest.fixture
def random_graph():
    return _sample_graph
