"""
Shell network detector: chains routed through low-activity pass-through
accounts (<= 3 distinct transactions), started by an established account.

A -> B -> C -> D   where B and C are shells
"""
import logging
import networkx as nx
from typing import Dict, List, NamedTuple, Set, Tuple

log = logging.getLogger(__name__)

SHELL_NODE_MAX_TRANSACTIONS = 3  # accounts with <= 3 distinct txns are shells
SHELL_CHAIN_MIN_LENGTH = 3  # accounts, start and end included
SHELL_CHAIN_MAX_LENGTH = 8


class ShellChain(NamedTuple):
    chain: List[str]
    shells: List[str]


def detect_shell_chains(
    G: nx.DiGraph,
    transaction_counts: Dict[str, int],
    shell_threshold: int = SHELL_NODE_MAX_TRANSACTIONS,
    min_chain_length: int = SHELL_CHAIN_MIN_LENGTH,
    max_chain_length: int = SHELL_CHAIN_MAX_LENGTH,
    require_shell_endpoint: bool = False,
) -> List[ShellChain]:
    """
    Depth-limited DFS from every non-shell account:
    - a path is recorded once it spans min_chain_length accounts and all of
      its interior accounts are shells
    - traversal only continues through shell accounts, so the endpoint is
      whatever the last shell hands funds to (a shell or not), unless
      require_shell_endpoint is set
    - no path grows beyond max_chain_length accounts
    """
    chains: List[ShellChain] = []
    seen_chains: Set[Tuple[str, ...]] = set()

    def is_shell(node: str) -> bool:
        return transaction_counts.get(node, 0) <= shell_threshold

    # Shells cannot originate a chain
    sources = [node for node in G.nodes() if not is_shell(node)]

    for source in sources:
        stack = [(source, [source])]
        while stack:
            current, path = stack.pop()
            if len(path) >= max_chain_length:
                continue
            for neighbor in G.successors(current):
                if neighbor in path:
                    continue
                new_path = path + [neighbor]
                neighbor_is_shell = is_shell(neighbor)

                if len(new_path) >= min_chain_length:
                    intermediates = new_path[1:-1]
                    endpoint_ok = neighbor_is_shell or not require_shell_endpoint
                    if intermediates and endpoint_ok and all(is_shell(n) for n in intermediates):
                        canonical = tuple(new_path)
                        if canonical not in seen_chains:
                            seen_chains.add(canonical)
                            chains.append(ShellChain(new_path, intermediates))

                # Continue DFS only through shell territory
                if neighbor_is_shell:
                    stack.append((neighbor, new_path))

    log.debug("shell detector: %d sources, %d chains", len(sources), len(chains))
    return chains
