"""
Full analysis pipeline: graph building, detection, scoring and ring
assignment, producing the final AnalysisReport.
"""
import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from .config import DetectionConfig
from .core.graph import build_graph, transactions_frame
from .core.scorer import compute_scores
from .detectors.circular_fund_routing import detect_cycles
from .detectors.layered_shell_networks import detect_shell_chains
from .detectors.smurfing_patterns import detect_fan_in, detect_fan_out
from .detectors.velocity import detect_high_velocity
from .errors import InputTooLargeError
from .models import AccountNode, AnalysisReport, Transaction, TransactionEdge

log = logging.getLogger(__name__)


def analyze_transactions(
    transactions: Sequence[Transaction], config: Optional[DetectionConfig] = None
) -> AnalysisReport:
    """
    Run every detector over one in-memory ledger.
    An empty ledger yields an empty report; the engine does not validate records.
    """
    config = config or DetectionConfig()
    if config.max_transactions is not None and len(transactions) > config.max_transactions:
        raise InputTooLargeError(len(transactions), config.max_transactions)

    start_time = time.time()

    # 1. Graph construction
    graph = build_graph(transactions)
    df = transactions_frame(transactions)

    # 2. Detectors (independent, read-only over graph and frame)
    cycles = detect_cycles(graph.G, config.cycle_min_length, config.cycle_max_length)
    fan_in = detect_fan_in(df, config.fan_threshold, config.fan_window_hours)
    fan_out = detect_fan_out(df, config.fan_threshold, config.fan_window_hours)
    shell_chains = detect_shell_chains(
        graph.G,
        graph.transaction_counts,
        shell_threshold=config.shell_threshold,
        min_chain_length=config.min_chain_length,
        max_chain_length=config.max_chain_length,
        require_shell_endpoint=config.require_shell_endpoint,
    )
    high_velocity = detect_high_velocity(
        graph.account_transactions, config.velocity_threshold, config.velocity_window_hours
    )

    # 3. Scoring and ring registry
    scoring = compute_scores(graph.accounts, cycles, fan_in, fan_out, shell_chains, high_velocity)

    # 4. Nodes. Totals count each transaction id once, first occurrence wins
    unique: Dict[str, Transaction] = {}
    for tx in transactions:
        unique.setdefault(tx.transaction_id, tx)

    totals_sent: Dict[str, float] = {}
    totals_received: Dict[str, float] = {}
    for tx in unique.values():
        totals_sent[tx.sender_id] = totals_sent.get(tx.sender_id, 0.0) + tx.amount
        totals_received[tx.receiver_id] = totals_received.get(tx.receiver_id, 0.0) + tx.amount

    nodes: List[AccountNode] = []
    for account in graph.accounts:
        score = min(100.0, scoring.scores.get(account, 0.0))
        nodes.append(AccountNode(
            account_id=account,
            transactions=list(graph.account_transactions.get(account, [])),
            suspicion_score=score,
            detected_patterns=scoring.patterns.get(account, []),
            ring_id=scoring.account_rings.get(account),
            is_suspicious=score > 0,
            total_sent=totals_sent.get(account, 0.0),
            total_received=totals_received.get(account, 0.0),
            tx_count=graph.transaction_counts.get(account, 0),
        ))

    # 5. Edges: one per distinct transaction id, never merged by account pair
    edges = [
        TransactionEdge(
            transaction_id=tx.transaction_id,
            source=tx.sender_id,
            target=tx.receiver_id,
            amount=tx.amount,
            timestamp=tx.timestamp,
        )
        for tx in unique.values()
    ]

    processing_time = round(time.time() - start_time, 2)
    flagged = sum(1 for n in nodes if n.is_suspicious)

    log.info(
        "analysed %d transactions: %d accounts, %d flagged, %d rings in %.2fs",
        len(transactions), len(nodes), flagged, len(scoring.fraud_rings), processing_time,
    )

    return AnalysisReport(
        nodes=nodes,
        fraud_rings=scoring.fraud_rings,
        edges=edges,
        processing_time_seconds=processing_time,
        total_accounts_analyzed=len(nodes),
        suspicious_accounts_flagged=flagged,
    )


def build_report_payload(report: AnalysisReport) -> Dict[str, Any]:
    """Build the JSON-exportable payload for download."""
    return report.to_response().model_dump(exclude={"parse_errors", "graph_data"})


def build_graph_payload(report: AnalysisReport) -> Dict[str, Any]:
    """Node and edge data for graph visualisation."""
    return {
        "nodes": [
            {
                "id": n.account_id,
                "suspicion_score": round(n.suspicion_score, 1),
                "ring_id": n.ring_id,
                "patterns": list(n.detected_patterns),
                "total_transactions": n.tx_count,
                "total_sent": round(n.total_sent, 2),
                "total_received": round(n.total_received, 2),
                "is_suspicious": n.is_suspicious,
            }
            for n in report.nodes
        ],
        "edges": [
            {
                "transaction_id": e.transaction_id,
                "source": e.source,
                "target": e.target,
                "amount": round(e.amount, 2),
                "timestamp": e.timestamp.isoformat(),
            }
            for e in report.edges
        ],
    }
