from datetime import datetime, timedelta

import networkx as nx

from mule_detector.core.graph import build_graph
from mule_detector.detectors.layered_shell_networks import ShellChain, detect_shell_chains
from mule_detector.models import Transaction

BASE = datetime(2024, 1, 1, 9, 0, 0)


def _tx(txn_id, sender, receiver, minutes=0, amount=5000.0):
    return Transaction(
        transaction_id=txn_id, sender_id=sender, receiver_id=receiver,
        amount=amount, timestamp=BASE + timedelta(minutes=minutes),
    )


def layered_ledger():
    """
    A (20 txns) -> B (2 txns) -> C (2 txns) -> D (15 txns).
    A and D trade daily with busy partners P and Q so neither is a shell.
    """
    day = 24 * 60
    txns = [_tx(f"AP_{i}", "A", "P", minutes=i * day) for i in range(19)]
    txns += [_tx(f"DQ_{i}", "D", "Q", minutes=i * day) for i in range(14)]
    txns += [
        _tx("L1", "A", "B", minutes=30 * day),
        _tx("L2", "B", "C", minutes=30 * day + 60),
        _tx("L3", "C", "D", minutes=30 * day + 120),
    ]
    return txns


def test_layered_chain_through_two_shells():
    graph = build_graph(layered_ledger())
    assert graph.transaction_counts["A"] == 20
    assert graph.transaction_counts["D"] == 15

    chains = detect_shell_chains(graph.G, graph.transaction_counts)

    assert ShellChain(["A", "B", "C", "D"], ["B", "C"]) in chains
    # The shorter prefix also qualifies: one shell interior, shell endpoint
    assert ShellChain(["A", "B", "C"], ["B"]) in chains
    assert len(chains) == 2


def test_strict_endpoint_drops_chains_ending_at_busy_accounts():
    graph = build_graph(layered_ledger())

    chains = detect_shell_chains(graph.G, graph.transaction_counts, require_shell_endpoint=True)

    assert chains == [ShellChain(["A", "B", "C"], ["B"])]


def test_shells_cannot_originate_a_chain():
    G = nx.DiGraph()
    G.add_edges_from([("S1", "S2"), ("S2", "S3"), ("S3", "S4")])
    counts = {"S1": 1, "S2": 2, "S3": 2, "S4": 1}

    assert detect_shell_chains(G, counts) == []


def test_busy_interior_breaks_the_chain():
    G = nx.DiGraph()
    G.add_edges_from([("A", "X"), ("X", "Y"), ("Y", "Z")])
    counts = {"A": 10, "X": 10, "Y": 1, "Z": 1}

    # A->X is a single hop; X then starts its own chain
    assert detect_shell_chains(G, counts) == [ShellChain(["X", "Y", "Z"], ["Y"])]


def test_chain_length_is_capped():
    nodes = ["SRC"] + [f"S{i}" for i in range(10)]
    G = nx.DiGraph()
    G.add_edges_from(zip(nodes, nodes[1:]))
    counts = {n: 2 for n in nodes}
    counts["SRC"] = 50

    chains = detect_shell_chains(G, counts, max_chain_length=8)

    assert max(len(c.chain) for c in chains) == 8
    assert [len(c.chain) for c in chains] == [3, 4, 5, 6, 7, 8]


def test_cycles_do_not_loop_forever():
    G = nx.DiGraph()
    G.add_edges_from([("A", "B"), ("B", "C"), ("C", "B"), ("C", "A")])
    counts = {"A": 9, "B": 2, "C": 2}

    chains = detect_shell_chains(G, counts)

    assert ShellChain(["A", "B", "C"], ["B"]) in chains
    assert all(len(set(c.chain)) == len(c.chain) for c in chains)
