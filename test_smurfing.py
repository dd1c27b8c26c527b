from datetime import datetime, timedelta

from mule_detector.core.graph import transactions_frame
from mule_detector.detectors.smurfing_patterns import detect_fan_in, detect_fan_out
from mule_detector.models import Transaction

BASE = datetime(2024, 1, 1, 9, 0, 0)


def _tx(txn_id, sender, receiver, minutes=0, amount=900.0):
    return Transaction(
        transaction_id=txn_id, sender_id=sender, receiver_id=receiver,
        amount=amount, timestamp=BASE + timedelta(minutes=minutes),
    )


def _fan_in(n_senders, spacing_minutes=1, receiver="R"):
    return [_tx(f"IN_{i}", f"S{i}", receiver, minutes=i * spacing_minutes) for i in range(n_senders)]


def test_ten_distinct_senders_flag_an_aggregator():
    df = transactions_frame(_fan_in(10))

    assert detect_fan_in(df) == {"R": [f"S{i}" for i in range(10)]}
    assert detect_fan_out(df) == {}


def test_nine_senders_are_not_enough():
    assert detect_fan_in(transactions_frame(_fan_in(9))) == {}


def test_repeat_senders_count_once():
    txns = _fan_in(9) + [_tx("DUP", "S0", "R", minutes=30)]

    assert detect_fan_in(transactions_frame(txns)) == {}


def test_window_end_is_inclusive():
    # First and last transactions exactly 72 hours apart
    txns = _fan_in(9) + [_tx("EDGE", "S9", "R", minutes=72 * 60)]
    assert "R" in detect_fan_in(transactions_frame(txns))

    txns = _fan_in(9) + [_tx("LATE", "S9", "R", minutes=72 * 60 + 1)]
    assert detect_fan_in(transactions_frame(txns)) == {}


def test_members_come_from_the_earliest_qualifying_window():
    early = _fan_in(10)
    later = [_tx(f"LATE_{i}", f"L{i}", "R", minutes=10 * 24 * 60 + i) for i in range(15)]

    members = detect_fan_in(transactions_frame(early + later))["R"]

    assert members == [f"S{i}" for i in range(10)]


def test_input_order_does_not_matter_for_window_scan():
    txns = list(reversed(_fan_in(10)))

    assert set(detect_fan_in(transactions_frame(txns))["R"]) == {f"S{i}" for i in range(10)}


def test_account_can_be_aggregator_and_distributor():
    fan_in = _fan_in(10, receiver="H")
    fan_out = [_tx(f"OUT_{i}", "H", f"D{i}", minutes=20 + i) for i in range(12)]
    df = transactions_frame(fan_in + fan_out)

    assert list(detect_fan_in(df)) == ["H"]
    assert detect_fan_out(df) == {"H": [f"D{i}" for i in range(12)]}


def test_custom_threshold_and_window():
    txns = [_tx(f"T{i}", "H", f"D{i}", minutes=i * 30) for i in range(3)]
    df = transactions_frame(txns)

    assert detect_fan_out(df, threshold=3, window_hours=1) == {"H": ["D0", "D1", "D2"]}
    assert detect_fan_out(df, threshold=3, window_hours=0.5) == {}


def test_empty_frame():
    df = transactions_frame([])
    assert detect_fan_in(df) == {}
    assert detect_fan_out(df) == {}
