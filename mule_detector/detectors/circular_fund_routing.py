"""
Cycle detector: finds money muling rings via circular fund routing.

1. Find all Strongly Connected Components (SCCs): O(V+E)
2. Only enumerate cycles inside SCCs with at least min_length members
   (a cycle can never span two components)
3. Johnson's algorithm with a length bound keeps the search depth-limited

Results do not depend on set iteration order: every cycle is rotated to start
at the account seen first in the ledger and candidates are ordered before
deduplication.
"""
import logging
import networkx as nx
from typing import Dict, List, Set, FrozenSet

log = logging.getLogger(__name__)


def _rotate(cycle: List[str], position: Dict[str, int]) -> List[str]:
    start = min(range(len(cycle)), key=lambda i: position[cycle[i]])
    return cycle[start:] + cycle[:start]


def _component_graph(G: nx.DiGraph, scc: Set[str]) -> nx.DiGraph:
    # Built by hand so node and edge order follow G rather than the set
    ordered = [n for n in G.nodes() if n in scc]
    sub = nx.DiGraph()
    sub.add_nodes_from(ordered)
    sub.add_edges_from((u, v) for u in ordered for v in G.successors(u) if v in scc)
    return sub


def detect_cycles(G: nx.DiGraph, min_length: int = 3, max_length: int = 5) -> List[List[str]]:
    """
    Detect every simple cycle with min_length..max_length distinct accounts.
    Cycles over the same account set are reported once, whatever their edge order.
    """
    position = {node: i for i, node in enumerate(G.nodes())}
    candidates: List[List[str]] = []

    sccs = [scc for scc in nx.strongly_connected_components(G) if len(scc) >= min_length]

    for scc in sccs:
        subgraph = _component_graph(G, scc)
        for cycle in nx.simple_cycles(subgraph, length_bound=max_length):
            # Self-loops and two-account ping-pong are not rings
            if len(cycle) < min_length:
                continue
            candidates.append(_rotate(list(cycle), position))

    candidates.sort(key=lambda c: [position[n] for n in c])

    cycles: List[List[str]] = []
    seen_cycles: Set[FrozenSet[str]] = set()
    for cycle in candidates:
        # Canonical form for deduplication
        canonical = frozenset(cycle)
        if canonical in seen_cycles:
            continue
        seen_cycles.add(canonical)
        cycles.append(cycle)

    log.debug("cycle detector: %d components searched, %d cycles", len(sccs), len(cycles))
    return cycles
