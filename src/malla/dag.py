# dag.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from .model import Catalog


@dataclass(frozen=True)
class Diagnostics:
    """Startup report on a catalog. Never changes how statuses are computed."""
    unknown_requirements: Dict[str, List[str]] = field(default_factory=dict)
    cycle_members: List[str] = field(default_factory=list)
    levels: List[List[str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.unknown_requirements and not self.cycle_members


def build_dag(catalog: Catalog) -> Tuple[Dict[str, Set[str]], Dict[str, int]]:
    """
    Build the requirement DAG over known ids.

    Edge req -> item (req must be completed before item).
    Requirements naming ids outside the catalog are left out.
    """
    adj: Dict[str, Set[str]] = {i.id: set() for i in catalog}
    indeg: Dict[str, int] = {i.id: 0 for i in catalog}

    for item in catalog:
        for req in item.requires:
            if req not in adj:
                continue
            if item.id not in adj[req]:
                adj[req].add(item.id)
                indeg[item.id] += 1

    return adj, indeg


def topo_levels(adj: Dict[str, Set[str]], indeg: Dict[str, int]) -> Tuple[List[List[str]], List[str]]:
    """
    Split the DAG into topological levels.

    Returns (levels, stuck) where `stuck` are the nodes Kahn's algorithm
    could not release: members of a cycle, or downstream of one.
    """
    remaining = dict(indeg)
    frontier = sorted(n for n, d in remaining.items() if d == 0)
    levels: List[List[str]] = []

    while frontier:
        levels.append(frontier)
        released: Set[str] = set()
        for node in frontier:
            del remaining[node]
            for child in adj.get(node, ()):
                remaining[child] -= 1
                if remaining[child] == 0:
                    released.add(child)
        frontier = sorted(released)

    # whatever is left never reached in-degree 0
    return levels, sorted(remaining)


def unknown_requirements(catalog: Catalog) -> Dict[str, List[str]]:
    out: Dict[str, List[str]] = {}
    for item in catalog:
        unknown = [req for req in item.requires if req not in catalog]
        if unknown:
            out[item.id] = unknown
    return out


def diagnose(catalog: Catalog) -> Diagnostics:
    adj, indeg = build_dag(catalog)
    levels, stuck = topo_levels(adj, indeg)
    return Diagnostics(
        unknown_requirements=unknown_requirements(catalog),
        cycle_members=stuck,
        levels=levels,
    )
