from __future__ import annotations
from collections import deque
from typing import Dict, Iterable, List, Mapping, Sequence, Set

from .dag import CausalGraph

def _children_map(parents: Mapping[str, Sequence[str]]) -> Dict[str, List[str]]:
    out: Dict[str, List[str]] = {v: [] for v in parents}
    for v, pa in parents.items():
        for p in pa:
            out[p].append(v)
    return out

def descendants(graph: CausalGraph, v: str) -> Set[str]:
    kids = _children_map(graph.as_dict())
    stack = [v]
    out: Set[str] = set()
    while stack:
        u = stack.pop()
        for c in kids[u]:
            if c not in out:
                out.add(c)
                stack.append(c)
    return out

def _d_separated(parents: Mapping[str, Sequence[str]], X: Iterable[str], Y: Iterable[str], Z: Iterable[str]) -> bool:
    X, Y, Z = set(X), set(Y), set(Z)
    kids = _children_map(parents)

    # ancestors of Z (Z included): colliders in this set are opened
    anc_Z = set(Z)
    stack = list(Z)
    while stack:
        v = stack.pop()
        for p in parents[v]:
            if p not in anc_Z:
                anc_Z.add(p)
                stack.append(p)

    # "up": arrived from a child, "down": arrived from a parent
    q = deque()
    for x in X:
        q.append((x, "up"))
        q.append((x, "down"))
    visited = set()

    while q:
        v, direction = q.popleft()
        if (v, direction) in visited:
            continue
        visited.add((v, direction))

        if v in Y:
            return False

        if v in Z:
            if direction == "down":
                # observed collider: bounce back up
                for p in parents[v]:
                    q.append((p, "up"))
            continue

        if direction == "up":
            for p in parents[v]:
                q.append((p, "up"))
            for c in kids[v]:
                q.append((c, "down"))
        else:
            for c in kids[v]:
                q.append((c, "down"))
            if v in anc_Z:
                for p in parents[v]:
                    q.append((p, "up"))

    return True

def d_separated(graph: CausalGraph, X: Iterable[str], Y: Iterable[str], Z: Iterable[str] = ()) -> bool:
    """Bayes-ball d-separation test: True if X and Y are d-separated given Z.

    Reference: Koller & Friedman (Bayes-ball algorithm).
    """
    X, Y, Z = list(X), list(Y), list(Z)
    missing = [v for v in X + Y + Z if v not in graph]
    if missing:
        raise KeyError(f"unknown nodes: {missing}")
    return _d_separated(graph.as_dict(), X, Y, Z)

def blocks_backdoor(graph: CausalGraph, treatment: str, outcome: str, adjustment: Iterable[str]) -> bool:
    """Backdoor criterion: `adjustment` has no descendant of `treatment` and blocks
    every path from `treatment` to `outcome` that starts with an arrow into `treatment`.
    """
    adjustment = list(adjustment)
    if set(adjustment) & descendants(graph, treatment):
        return False
    cut = {v: [p for p in pa if p != treatment] for v, pa in graph.as_dict().items()}
    return _d_separated(cut, [treatment], [outcome], adjustment)
