"""Bijection between a flat parameter vector and per-edge weights.

Edge keys are (child, parent) pairs sorted by child name, then parent name. That
ordering is the only contract shared by `decode` and `encode`.
"""
from __future__ import annotations
from typing import Dict, List, Mapping, Sequence, Union
import numpy as np

from .dag import CausalGraph, EdgeKey
from .errors import ParameterLengthError

Array = np.ndarray
Weights = Dict[str, Dict[str, float]]

def edge_keys(graph: CausalGraph) -> List[EdgeKey]:
    return sorted(graph.edges)

def decode(vector: Union[Sequence[float], Array], graph: CausalGraph) -> Weights:
    v = np.asarray(vector, dtype=float)
    keys = edge_keys(graph)
    if v.ndim != 1 or v.shape[0] != len(keys):
        raise ParameterLengthError(
            f"expected a vector of {len(keys)} edge weights, got shape {v.shape}"
        )
    weights: Weights = {}
    for (child, parent), w in zip(keys, v):
        weights.setdefault(child, {})[parent] = float(w)
    return weights

def encode(weights: Mapping[str, Mapping[str, float]], graph: CausalGraph) -> Array:
    keys = edge_keys(graph)
    given = {(c, p) for c, ws in weights.items() for p in ws}
    missing = [k for k in keys if k not in given]
    extra = sorted(given - set(keys))
    if missing or extra:
        raise ParameterLengthError(f"weights do not match graph edges (missing={missing}, extra={extra})")
    return np.array([weights[c][p] for c, p in keys], dtype=float)
