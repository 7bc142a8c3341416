from __future__ import annotations
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Tuple
import re
import numpy as np

from .errors import GraphDefinitionError, UnresolvedDependencyError
from .utils import resolve_in_passes

Array = np.ndarray
EdgeKey = Tuple[str, str]  # (child, parent)

_SEPARATORS = re.compile(r"[,;\n]")

class CausalGraph:
    """Validated, read-only dependency graph: node -> ordered parent names.

    Nodes keep their declaration order. Construction fails with GraphDefinitionError
    on an unknown parent, a repeated parent, a self loop or a cycle. Cycles are found
    by running the repeated-pass resolver without generating any data.
    """

    def __init__(self, parents: Mapping[str, Iterable[str]]):
        spec: Dict[str, Tuple[str, ...]] = {}
        for node, pa in parents.items():
            node = str(node)
            pa = tuple(str(p) for p in (pa or ()))
            if node in pa:
                raise GraphDefinitionError(f"self loop on {node!r}")
            if len(set(pa)) != len(pa):
                raise GraphDefinitionError(f"repeated parent in {node!r}: {list(pa)}")
            spec[node] = pa

        unknown = sorted({p for pa in spec.values() for p in pa if p not in spec})
        if unknown:
            raise GraphDefinitionError(f"parents are not declared nodes: {unknown}")

        try:
            passes = resolve_in_passes(spec)
        except UnresolvedDependencyError as e:
            raise GraphDefinitionError(f"graph has a cycle through {e.pending}") from e

        self._parents = MappingProxyType(spec)
        self._passes = tuple(tuple(p) for p in passes)

    @classmethod
    def from_edges(cls, text: str) -> "CausalGraph":
        return cls(parse_edges(text))

    @property
    def nodes(self) -> Tuple[str, ...]:
        return tuple(self._parents)

    @property
    def roots(self) -> Tuple[str, ...]:
        return tuple(v for v, pa in self._parents.items() if not pa)

    @property
    def edges(self) -> List[EdgeKey]:
        return [(v, p) for v, pa in self._parents.items() for p in pa]

    @property
    def n_edges(self) -> int:
        return sum(len(pa) for pa in self._parents.values())

    @property
    def resolution_passes(self) -> Tuple[Tuple[str, ...], ...]:
        return self._passes

    @property
    def resolution_order(self) -> Tuple[str, ...]:
        return tuple(v for p in self._passes for v in p)

    def parents(self, node: str) -> Tuple[str, ...]:
        return self._parents[node]

    def children(self, node: str) -> Tuple[str, ...]:
        if node not in self._parents:
            raise KeyError(node)
        return tuple(v for v, pa in self._parents.items() if node in pa)

    def as_dict(self) -> Dict[str, List[str]]:
        return {v: list(pa) for v, pa in self._parents.items()}

    def adjacency(self) -> Tuple[Array, List[str]]:
        """adj[i, j] = 1 if names[i] -> names[j]."""
        names = list(self._parents)
        idx = {v: k for k, v in enumerate(names)}
        adj = np.zeros((len(names), len(names)), dtype=np.int8)
        for v, p in self.edges:
            adj[idx[p], idx[v]] = 1
        return adj, names

    def __contains__(self, node: object) -> bool:
        return node in self._parents

    def __iter__(self) -> Iterator[str]:
        return iter(self._parents)

    def __len__(self) -> int:
        return len(self._parents)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CausalGraph):
            return NotImplemented
        return dict(self._parents) == dict(other._parents)

    def __repr__(self) -> str:
        return f"CausalGraph(nodes={len(self)}, edges={self.n_edges})"


def parse_edges(text: str) -> Dict[str, List[str]]:
    """Read `"A -> B, B -> C; D"` into {node: [parents]}.

    Statements are separated by commas, semicolons or newlines. Chains such as
    `A -> B -> C` are allowed and a bare name declares a parentless node.
    """
    parents: Dict[str, List[str]] = {}
    for stmt in _SEPARATORS.split(text):
        stmt = stmt.strip()
        if not stmt or stmt.startswith("#"):
            continue
        names = [s.strip() for s in stmt.split("->")]
        if any(not s for s in names):
            raise GraphDefinitionError(f"malformed edge statement: {stmt!r}")
        for name in names:
            parents.setdefault(name, [])
        for parent, child in zip(names, names[1:]):
            if parent not in parents[child]:
                parents[child].append(parent)
    return parents

