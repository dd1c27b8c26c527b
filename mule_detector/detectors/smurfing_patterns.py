"""
Smurfing detector: fan-in and fan-out patterns.
Fan-in: 10+ unique senders -> 1 receiver within a 72-hour window.
Fan-out: 1 sender -> 10+ unique receivers within a 72-hour window.

Transactions are pre-grouped by hub so each hub is scanned once, with
numpy searchsorted locating the end of every window.
"""
import logging
import numpy as np
import pandas as pd
from datetime import timedelta
from typing import Dict, List, Optional

log = logging.getLogger(__name__)

FAN_THRESHOLD = 10
TIME_WINDOW_HOURS = 72


def _window_ns(hours: float) -> int:
    return int(timedelta(hours=hours).total_seconds() * 1e9)


def _first_qualifying_window(
    timestamps_ns: np.ndarray, counterparties: List[str], threshold: int, window_ns: int
) -> Optional[List[str]]:
    """
    Distinct counterparties of the earliest window [t_i, t_i + window] that
    holds at least `threshold` of them, or None.
    """
    n = len(timestamps_ns)
    if n < threshold:
        return None  # shortcut: can't exceed what exists
    for i in range(n):
        j = int(np.searchsorted(timestamps_ns, timestamps_ns[i] + window_ns, side="right"))
        unique = list(dict.fromkeys(counterparties[i:j]))
        if len(unique) >= threshold:
            return unique
    return None


def _detect_fan(
    df: pd.DataFrame, hub_col: str, counterparty_col: str, threshold: int, window_hours: float
) -> Dict[str, List[str]]:
    flagged: Dict[str, List[str]] = {}
    if df.empty:
        return flagged
    window_ns = _window_ns(window_hours)

    # Hubs in first-appearance order
    for hub, grp in df.groupby(hub_col, sort=False):
        grp = grp.sort_values("ts_ns", kind="mergesort")
        members = _first_qualifying_window(
            grp["ts_ns"].to_numpy(), list(grp[counterparty_col]), threshold, window_ns
        )
        if members is not None:
            flagged[hub] = members
    return flagged


def detect_fan_in(
    df: pd.DataFrame, threshold: int = FAN_THRESHOLD, window_hours: float = TIME_WINDOW_HOURS
) -> Dict[str, List[str]]:
    """Receivers aggregating funds from many distinct senders -> {receiver: senders}."""
    aggregators = _detect_fan(df, "receiver_id", "sender_id", threshold, window_hours)
    log.debug("fan-in: %d aggregators", len(aggregators))
    return aggregators


def detect_fan_out(
    df: pd.DataFrame, threshold: int = FAN_THRESHOLD, window_hours: float = TIME_WINDOW_HOURS
) -> Dict[str, List[str]]:
    """Senders distributing funds to many distinct receivers -> {sender: receivers}."""
    distributors = _detect_fan(df, "sender_id", "receiver_id", threshold, window_hours)
    log.debug("fan-out: %d distributors", len(distributors))
    return distributors
