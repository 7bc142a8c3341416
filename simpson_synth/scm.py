from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Union
import numpy as np
import pandas as pd

from .codec import Weights, decode, encode
from .dag import CausalGraph
from .errors import ParameterLengthError
from .utils import rng, resolve_in_passes

Array = np.ndarray
GraphLike = Union[CausalGraph, Mapping[str, Sequence[str]]]

@dataclass
class SimulationConfig:
    n_rows: int = 1000
    noise_scale: float = 0.1
    root_low: float = 0.0
    root_high: float = 1.0

    def __post_init__(self):
        if self.n_rows < 1:
            raise ValueError("n_rows must be >= 1.")
        if self.noise_scale < 0:
            raise ValueError("noise_scale must be >= 0.")
        if not self.root_low < self.root_high:
            raise ValueError("root_low must be < root_high.")

def _parent_map(graph: GraphLike) -> Dict[str, List[str]]:
    if isinstance(graph, CausalGraph):
        return graph.as_dict()
    return {str(v): [str(p) for p in (pa or ())] for v, pa in graph.items()}

def simulate(
    graph: GraphLike,
    weights: Mapping[str, Mapping[str, float]],
    n: int,
    noise_scale: float = 0.1,
    r: Optional[np.random.Generator] = None,
    max_passes: Optional[int] = None,
    root_low: float = 0.0,
    root_high: float = 1.0,
) -> pd.DataFrame:
    """Generate one dataset from the linear SCM, resolving nodes in repeated passes.

    Roots are Uniform[root_low, root_high]. Every other node is
        x_v = sum_p w[v][p] * x_p + noise_scale * eps_v,   eps_v ~ N(0, 1)
    A raw mapping is accepted in place of a CausalGraph; it is not validated, and
    a pass without progress raises UnresolvedDependencyError.
    """
    if n < 1:
        raise ValueError("n must be >= 1.")
    if noise_scale < 0:
        raise ValueError("noise_scale must be >= 0.")
    r = r if r is not None else rng()
    parents = _parent_map(graph)
    stray = [(v, p) for v, ws in weights.items() for p in ws if p not in parents.get(v, ())]
    if stray:
        raise ParameterLengthError(f"weights for edges not in the graph: {stray}")
    cols: Dict[str, Array] = {}

    def resolve(node: str, pa: Sequence[str]) -> None:
        if len(pa) == 0:
            cols[node] = r.uniform(root_low, root_high, size=n)
            return
        ws = weights.get(node, {})
        missing = [p for p in pa if p not in ws]
        if missing:
            raise ParameterLengthError(f"no weight for edges {[(node, p) for p in missing]}")
        P = np.column_stack([cols[p] for p in pa])
        w = np.array([ws[p] for p in pa], dtype=float)
        cols[node] = P @ w + r.normal(0.0, noise_scale, size=n)

    resolve_in_passes(parents, visit=resolve, max_passes=max_passes)
    return pd.DataFrame({v: cols[v] for v in parents})

class LinearSCM:
    """A weighted linear SCM over a CausalGraph.

    Each dependent variable v is generated as:
        x_v = sum_p w[v][p] * x_p + noise_scale * eps_v
    and each root as an independent uniform draw.
    """

    def __init__(self, graph: CausalGraph, weights: Weights, cfg: Optional[SimulationConfig] = None):
        self.graph = graph
        self.cfg = cfg or SimulationConfig()
        # round trip through the codec to reject missing or stray edges up front
        self.vector = encode(weights, graph)
        self.weights = decode(self.vector, graph)

    @classmethod
    def from_vector(cls, vector, graph: CausalGraph, cfg: Optional[SimulationConfig] = None) -> "LinearSCM":
        return cls(graph, decode(vector, graph), cfg)

    def sample(
        self,
        n: Optional[int] = None,
        seed: Optional[int] = None,
        r: Optional[np.random.Generator] = None,
    ) -> pd.DataFrame:
        """Sample n rows (defaults to cfg.n_rows); pass either a seed or a generator."""
        return simulate(
            self.graph,
            self.weights,
            n=self.cfg.n_rows if n is None else n,
            noise_scale=self.cfg.noise_scale,
            r=r if r is not None else rng(seed),
            root_low=self.cfg.root_low,
            root_high=self.cfg.root_high,
        )

    def __repr__(self) -> str:
        return f"LinearSCM({self.graph!r}, noise_scale={self.cfg.noise_scale})"
