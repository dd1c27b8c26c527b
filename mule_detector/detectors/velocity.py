"""
Velocity detector: accounts with 5+ transactions (sent or received) inside
any one-hour window.
"""
import logging
import numpy as np
from datetime import timedelta
from typing import Dict, List, Set

from ..core.graph import to_ns
from ..models import Transaction

log = logging.getLogger(__name__)

VELOCITY_THRESHOLD = 5
VELOCITY_WINDOW_HOURS = 1


def _has_dense_window(timestamps_ns: np.ndarray, threshold: int, window_ns: int) -> bool:
    n = len(timestamps_ns)
    if n < threshold:
        return False
    ends = np.searchsorted(timestamps_ns, timestamps_ns + window_ns, side="right")
    return bool(np.any(ends - np.arange(n) >= threshold))


def detect_high_velocity(
    account_transactions: Dict[str, List[Transaction]],
    threshold: int = VELOCITY_THRESHOLD,
    window_hours: float = VELOCITY_WINDOW_HOURS,
) -> Set[str]:
    """Counts transaction occurrences, so a self-transfer counts twice for its account."""
    window_ns = int(timedelta(hours=window_hours).total_seconds() * 1e9)
    flagged: Set[str] = set()
    for account, txns in account_transactions.items():
        if len(txns) < threshold:
            continue
        timestamps_ns = np.sort(to_ns(t.timestamp for t in txns), kind="mergesort")
        if _has_dense_window(timestamps_ns, threshold, window_ns):
            flagged.add(account)

    log.debug("velocity: %d accounts flagged", len(flagged))
    return flagged
