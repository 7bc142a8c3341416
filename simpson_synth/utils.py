from __future__ import annotations
from typing import Callable, List, Mapping, Optional, Sequence
import numpy as np

from .errors import UnresolvedDependencyError

Array = np.ndarray

def rng(seed: Optional[int] = None) -> np.random.Generator:
    return np.random.default_rng(seed)

def child_seed(r: np.random.Generator) -> int:
    return int(r.integers(0, 2**31 - 1))

def resolve_in_passes(
    parents: Mapping[str, Sequence[str]],
    visit: Optional[Callable[[str, Sequence[str]], None]] = None,
    max_passes: Optional[int] = None,
) -> List[List[str]]:
    """Resolve every node after its parents by sweeping the unresolved set repeatedly.

    `visit(node, parents)` is called once per node, in resolution order. Returns the
    nodes resolved by each pass. Raises UnresolvedDependencyError when a whole pass
    makes no progress (a cycle or a parent that is not a node), or when `max_passes`
    is exceeded.
    """
    unresolved = list(parents)
    resolved: List[str] = []
    done = set()
    passes: List[List[str]] = []

    while unresolved:
        if max_passes is not None and len(passes) >= max_passes:
            raise UnresolvedDependencyError(unresolved, resolved)
        progress = []
        for node in unresolved:
            pa = parents[node]
            if all(p in done for p in pa):
                if visit is not None:
                    visit(node, pa)
                done.add(node)
                resolved.append(node)
                progress.append(node)
        if not progress:
            raise UnresolvedDependencyError(unresolved, resolved)
        unresolved = [v for v in unresolved if v not in done]
        passes.append(progress)
    return passes

def nested_covariate_sets(names: Sequence[str]) -> List[List[str]]:
    """[], [Z1], [Z1, Z2], ... up to the full list."""
    names = list(names)
    return [names[:k] for k in range(len(names) + 1)]
