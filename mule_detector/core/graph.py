"""
Graph builder: turns a sequence of transactions into a directed NetworkX graph
plus a per-account transaction index.
"""
import networkx as nx
import numpy as np
import pandas as pd
from collections import defaultdict
from typing import Dict, List, Sequence, Set

from ..models import Transaction

FRAME_COLUMNS = ["transaction_id", "sender_id", "receiver_id", "amount", "timestamp"]
EPOCH = pd.Timestamp(0, tz="UTC")


class TransactionGraph:
    """
    Read-only view over one analysed ledger.

    G                     DiGraph, one edge per distinct sender->receiver pair
    account_transactions  account -> touching transactions (input order, duplicates kept)
    transaction_counts    account -> number of distinct transaction ids
    """

    def __init__(self, G: nx.DiGraph, account_transactions: Dict[str, List[Transaction]]):
        self.G = G
        self.account_transactions = account_transactions
        self.transaction_counts: Dict[str, int] = {
            acc: len({t.transaction_id for t in txns})
            for acc, txns in account_transactions.items()
        }

    @property
    def accounts(self) -> List[str]:
        return list(self.G.nodes())

    @property
    def forward(self) -> Dict[str, Set[str]]:
        return {node: set(self.G.successors(node)) for node in self.G.nodes()}

    @property
    def reverse(self) -> Dict[str, Set[str]]:
        return {node: set(self.G.predecessors(node)) for node in self.G.nodes()}


def build_graph(transactions: Sequence[Transaction]) -> TransactionGraph:
    """Builds a directed graph from transaction data."""
    G = nx.DiGraph()
    account_transactions: Dict[str, List[Transaction]] = defaultdict(list)

    for tx in transactions:
        # Add nodes first so both endpoints exist even for self-transfers
        G.add_node(tx.sender_id)
        G.add_node(tx.receiver_id)
        G.add_edge(tx.sender_id, tx.receiver_id)

        account_transactions[tx.sender_id].append(tx)
        account_transactions[tx.receiver_id].append(tx)

    return TransactionGraph(G, dict(account_transactions))


def to_ns(timestamps: Sequence) -> np.ndarray:
    """Nanoseconds since epoch (UTC); naive timestamps are read as UTC."""
    ts = pd.to_datetime(pd.Series(list(timestamps), dtype=object), utc=True)
    return ((ts - EPOCH) // pd.Timedelta(1, "ns")).to_numpy(dtype=np.int64)


def transactions_frame(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """
    Tabular view used by the windowed detectors.
    Adds ts_ns for searchsorted windows.
    """
    df = pd.DataFrame([t.model_dump() for t in transactions], columns=FRAME_COLUMNS)
    df["ts_ns"] = to_ns(df["timestamp"])
    return df
