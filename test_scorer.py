from mule_detector.core.scorer import compute_scores
from mule_detector.detectors.layered_shell_networks import ShellChain


def test_cycle_members_get_forty_and_a_length_tag():
    result = compute_scores(["A", "B", "C", "X"], [["A", "B", "C"]], {}, {}, [], set())

    assert result.scores == {"A": 40.0, "B": 40.0, "C": 40.0, "X": 0.0}
    assert result.patterns["A"] == ["cycle_length_3"]
    assert result.patterns["X"] == []
    ring = result.fraud_rings[0]
    assert (ring.ring_id, ring.pattern_type, ring.risk_score) == ("RING_001", "cycle", 40.0)
    assert ring.description == "Circular fund routing (3 hops)"


def test_every_addition_saturates_at_100():
    cycles = [["A", "B", "C"], ["A", "C", "D"], ["A", "D", "E", "B"]]

    result = compute_scores("ABCDE", cycles, {"A": ["X"]}, {}, [], {"A"})

    assert result.scores["A"] == 100.0
    assert result.patterns["A"] == ["cycle_length_3", "cycle_length_4", "fan_in_aggregator", "high_velocity"]


def test_fan_rings_include_zero_score_counterparties():
    senders = [f"S{i}" for i in range(10)]

    result = compute_scores(["R"] + senders, [], {"R": senders}, {}, [], set())

    ring = result.fraud_rings[0]
    assert ring.member_accounts == ["R"] + senders
    assert ring.pattern_type == "fan_in_smurfing"
    assert ring.risk_score == round(25 / 11, 1)
    assert ring.description == "Smurfing - Fan-in aggregator (10 senders)"
    assert all(result.account_rings[s] == "RING_001" for s in senders)
    assert result.scores["S0"] == 0.0


def test_fan_out_ring():
    result = compute_scores(["H", "D1", "D2"], [], {}, {"H": ["D1", "D2"]}, [], set())

    ring = result.fraud_rings[0]
    assert ring.pattern_type == "fan_out_smurfing"
    assert result.patterns["H"] == ["fan_out_distributor"]
    assert ring.description == "Smurfing - Fan-out distributor (2 receivers)"


def test_first_ring_wins_in_processing_order():
    result = compute_scores(
        ["A", "B", "C", "S"],
        [["A", "B", "C"]],
        {"A": ["S"]},
        {},
        [ShellChain(["S", "B", "C"], ["B"])],
        set(),
    )

    assert [r.ring_id for r in result.fraud_rings] == ["RING_001", "RING_002", "RING_003"]
    assert result.account_rings["A"] == "RING_001"
    assert result.account_rings["S"] == "RING_002"
    assert result.account_rings["B"] == "RING_001"


def test_shell_rings_attribute_only_shells():
    result = compute_scores(
        ["A", "B", "C", "D"], [], {}, {}, [ShellChain(["A", "B", "C", "D"], ["B", "C"])], set()
    )

    ring = result.fraud_rings[0]
    assert ring.pattern_type == "layered_transfer"
    assert ring.description == "Layered transfer chain (4 hops, 2 shells)"
    assert result.scores == {"A": 0.0, "B": 30.0, "C": 30.0, "D": 0.0}
    assert result.account_rings == {"B": "RING_001", "C": "RING_001"}
    assert ring.risk_score == 15.0


def test_duplicate_chain_paths_make_one_ring():
    chain = ShellChain(["A", "B", "C"], ["B"])

    result = compute_scores(["A", "B", "C"], [], {}, {}, [chain, chain], set())

    assert len(result.fraud_rings) == 1
    assert result.scores["B"] == 30.0


def test_ring_risk_uses_final_scores():
    # Velocity is applied after the cycle ring exists
    result = compute_scores(["A", "B", "C"], [["A", "B", "C"]], {}, {}, [], {"A"})

    assert result.scores["A"] == 50.0
    assert result.fraud_rings[0].risk_score == 43.3


def test_velocity_has_no_ring():
    result = compute_scores(["V"], [], {}, {}, [], {"V"})

    assert result.fraud_rings == []
    assert result.scores["V"] == 10.0
    assert "V" not in result.account_rings
