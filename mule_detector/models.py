from pydantic import BaseModel, ConfigDict
from typing import List, Optional, Any, Dict
from datetime import datetime


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    transaction_id: str
    sender_id: str
    receiver_id: str
    amount: float
    timestamp: datetime


class ParseResult(BaseModel):
    transactions: List[Transaction]
    errors: List[str]


class AccountNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    account_id: str
    transactions: List[Transaction]
    suspicion_score: float
    detected_patterns: List[str]
    ring_id: Optional[str] = None
    is_suspicious: bool
    total_sent: float
    total_received: float
    tx_count: int


class FraudRing(BaseModel):
    model_config = ConfigDict(frozen=True)

    ring_id: str
    member_accounts: List[str]
    pattern_type: str
    risk_score: float
    description: str


class TransactionEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    transaction_id: str
    source: str
    target: str
    amount: float
    timestamp: datetime


# Export shapes

class AccountSuspicion(BaseModel):
    account_id: str
    suspicion_score: float
    detected_patterns: List[str]
    ring_id: Optional[str] = None


class RingSummary(BaseModel):
    ring_id: str
    member_accounts: List[str]
    pattern_type: str
    risk_score: float


class AnalysisSummary(BaseModel):
    total_accounts_analyzed: int
    suspicious_accounts_flagged: int
    fraud_rings_detected: int
    processing_time_seconds: float


class DetectionResponse(BaseModel):
    suspicious_accounts: List[AccountSuspicion]
    fraud_rings: List[RingSummary]
    summary: AnalysisSummary
    parse_errors: List[str] = []
    graph_data: Optional[Dict[str, Any]] = None


class AnalysisReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    nodes: List[AccountNode]
    fraud_rings: List[FraudRing]
    edges: List[TransactionEdge]
    processing_time_seconds: float
    total_accounts_analyzed: int
    suspicious_accounts_flagged: int

    def node(self, account_id: str) -> Optional[AccountNode]:
        return next((n for n in self.nodes if n.account_id == account_id), None)

    def to_response(self) -> DetectionResponse:
        """Exportable shape: suspicious accounts by score, then rings and summary."""
        suspicious = sorted(
            (n for n in self.nodes if n.is_suspicious),
            key=lambda n: -n.suspicion_score,
        )
        return DetectionResponse(
            suspicious_accounts=[
                AccountSuspicion(
                    account_id=n.account_id,
                    suspicion_score=round(n.suspicion_score, 1),
                    detected_patterns=list(n.detected_patterns),
                    ring_id=n.ring_id,
                )
                for n in suspicious
            ],
            fraud_rings=[
                RingSummary(
                    ring_id=r.ring_id,
                    member_accounts=list(r.member_accounts),
                    pattern_type=r.pattern_type,
                    risk_score=round(r.risk_score, 1),
                )
                for r in self.fraud_rings
            ],
            summary=AnalysisSummary(
                total_accounts_analyzed=self.total_accounts_analyzed,
                suspicious_accounts_flagged=self.suspicious_accounts_flagged,
                fraud_rings_detected=len(self.fraud_rings),
                processing_time_seconds=round(self.processing_time_seconds, 2),
            ),
        )
