"""
Suspicion scorer: merges detector findings into per-account scores, pattern
tags, ring attribution and the fraud ring registry.

Score components (each addition capped at 100):
  +40  member of a cycle (cycle_length_3/4/5)
  +25  fan-in aggregator / fan-out distributor
  +30  shell account inside a layered chain (per chain)
  +10  high velocity

Findings are applied in a fixed order: cycles, fan-in, fan-out, shell
chains, velocity. Final scores do not depend on it; the ring an account is
attributed to does (first ring wins).
"""
from typing import Dict, Iterable, List, NamedTuple, Optional, Set

from ..detectors.layered_shell_networks import ShellChain
from ..models import FraudRing

MAX_SCORE = 100.0

CYCLE_SCORE = 40.0
FAN_SCORE = 25.0
SHELL_SCORE = 30.0
VELOCITY_SCORE = 10.0


class ScoringResult(NamedTuple):
    scores: Dict[str, float]
    patterns: Dict[str, List[str]]
    account_rings: Dict[str, str]
    fraud_rings: List[FraudRing]


class RingAggregator:
    def __init__(self, accounts: Iterable[str]):
        self.scores: Dict[str, float] = {acc: 0.0 for acc in accounts}
        self.patterns: Dict[str, List[str]] = {acc: [] for acc in self.scores}
        self.account_rings: Dict[str, str] = {}
        self._rings: List[dict] = []
        self._ring_counter = 1

    def add_score(self, account: str, delta: float):
        current = self.scores.get(account, 0.0)
        self.scores[account] = min(MAX_SCORE, current + delta)

    def add_pattern(self, account: str, label: str):
        self.patterns.setdefault(account, [])
        if label not in self.patterns[account]:
            self.patterns[account].append(label)

    def attribute(self, account: str, ring_id: str):
        # First ring wins
        if account not in self.account_rings:
            self.account_rings[account] = ring_id

    def open_ring(self, members: List[str], pattern_type: str, description: str) -> str:
        ring_id = f"RING_{self._ring_counter:03d}"
        self._ring_counter += 1
        self._rings.append({
            "ring_id": ring_id,
            "member_accounts": list(members),
            "pattern_type": pattern_type,
            "description": description,
        })
        return ring_id

    # Detector passes, applied in the order listed in the module docstring

    def add_cycles(self, cycles: List[List[str]]):
        for cycle in cycles:
            length = len(cycle)
            ring_id = self.open_ring(cycle, "cycle", f"Circular fund routing ({length} hops)")
            for account in cycle:
                self.add_score(account, CYCLE_SCORE)
                self.add_pattern(account, f"cycle_length_{length}")
                self.attribute(account, ring_id)

    def add_fan(self, hubs: Dict[str, List[str]], direction: str):
        if direction == "in":
            pattern_type, label = "fan_in_smurfing", "fan_in_aggregator"
        else:
            pattern_type, label = "fan_out_smurfing", "fan_out_distributor"

        for hub, counterparties in hubs.items():
            if direction == "in":
                description = f"Smurfing - Fan-in aggregator ({len(counterparties)} senders)"
            else:
                description = f"Smurfing - Fan-out distributor ({len(counterparties)} receivers)"
            ring_id = self.open_ring([hub] + list(counterparties), pattern_type, description)

            self.add_score(hub, FAN_SCORE)
            self.add_pattern(hub, label)
            self.attribute(hub, ring_id)
            for account in counterparties:
                self.attribute(account, ring_id)

    def add_shell_chains(self, chains: List[ShellChain]):
        seen = set()
        for chain, shells in chains:
            key = tuple(chain)
            if key in seen:
                continue
            seen.add(key)

            ring_id = self.open_ring(
                chain,
                "layered_transfer",
                f"Layered transfer chain ({len(chain)} hops, {len(shells)} shells)",
            )
            for shell in shells:
                self.add_score(shell, SHELL_SCORE)
                self.add_pattern(shell, "shell_account")
                self.attribute(shell, ring_id)

    def add_velocity(self, accounts: Set[str]):
        for account in accounts:
            self.add_score(account, VELOCITY_SCORE)
            self.add_pattern(account, "high_velocity")

    def finalize(self) -> ScoringResult:
        """Second pass: ring risk is the mean of members' final scores."""
        fraud_rings = []
        for ring in self._rings:
            members = ring["member_accounts"]
            member_scores = [self.scores.get(acc, 0.0) for acc in members]
            risk = sum(member_scores) / len(member_scores) if member_scores else 0.0
            fraud_rings.append(FraudRing(risk_score=round(risk, 1), **ring))
        return ScoringResult(
            scores=dict(self.scores),
            patterns={acc: list(p) for acc, p in self.patterns.items()},
            account_rings=dict(self.account_rings),
            fraud_rings=fraud_rings,
        )


def compute_scores(
    accounts: Iterable[str],
    cycles: List[List[str]],
    fan_in: Dict[str, List[str]],
    fan_out: Dict[str, List[str]],
    shell_chains: List[ShellChain],
    high_velocity: Optional[Set[str]] = None,
) -> ScoringResult:
    """
    Apply every detector's findings and return final scores, tags, ring
    attribution and fraud rings with recomputed risk scores.
    """
    aggregator = RingAggregator(accounts)
    aggregator.add_cycles(cycles)
    aggregator.add_fan(fan_in, "in")
    aggregator.add_fan(fan_out, "out")
    aggregator.add_shell_chains(shell_chains)
    aggregator.add_velocity(high_velocity or set())
    return aggregator.finalize()
