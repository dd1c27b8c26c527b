"""
Record parser: reads CSV transaction data into validated Transaction records.
Rejected rows are reported as line-numbered messages instead of failing the upload.
"""
import io
import logging
import pandas as pd
from typing import Dict, List, Optional

from ..errors import CSVSchemaError
from ..models import ParseResult, Transaction

log = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"transaction_id", "sender_id", "receiver_id", "amount", "timestamp"}


def _text(value) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def parse_frame(df: pd.DataFrame, malformed: Optional[Dict[str, int]] = None) -> ParseResult:
    """
    Validate a raw transaction table row by row.
    Line numbers match the CSV file: header is line 1, first data row line 2.
    `malformed` maps placeholder ids left by parse_csv to the field count seen
    on that line.
    """
    malformed = malformed or {}
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise CSVSchemaError(f"CSV missing required columns: {sorted(missing)}")

    transactions: List[Transaction] = []
    errors: List[str] = []

    for position, (_, row) in enumerate(df.iterrows()):
        line = position + 2
        txn_id = _text(row["transaction_id"])
        if txn_id in malformed:
            errors.append(f"Row {line}: Expected {len(df.columns)} fields, saw {malformed[txn_id]}")
            continue
        sender = _text(row["sender_id"])
        receiver = _text(row["receiver_id"])
        if not txn_id or not sender or not receiver:
            errors.append(f"Row {line}: Missing required fields")
            continue

        raw_amount = _text(row["amount"])
        amount = pd.to_numeric(raw_amount, errors="coerce")
        if pd.isna(amount):
            errors.append(f'Row {line}: Invalid amount "{raw_amount}"')
            continue

        raw_ts = row["timestamp"]
        timestamp = pd.to_datetime(raw_ts, errors="coerce") if _text(raw_ts) else pd.NaT
        if pd.isna(timestamp):
            errors.append(f'Row {line}: Invalid timestamp "{_text(raw_ts)}"')
            continue

        transactions.append(Transaction(
            transaction_id=txn_id,
            sender_id=sender,
            receiver_id=receiver,
            amount=float(amount),
            timestamp=timestamp.to_pydatetime(),
        ))

    if errors:
        log.info("parser: %d rows accepted, %d rejected", len(transactions), len(errors))
    return ParseResult(transactions=transactions, errors=errors)


MALFORMED_PREFIX = "\x00malformed:"


def parse_csv(file_content: bytes) -> ParseResult:
    """
    Parse CSV bytes into validated transactions plus per-row errors.
    Lines with too many fields are kept as placeholder rows so they are
    reported with their line number instead of failing the whole ledger.
    """
    try:
        header = pd.read_csv(io.BytesIO(file_content), dtype=str, nrows=0)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise CSVSchemaError(f"Unreadable CSV: {e}") from e
    width = len(header.columns)
    malformed: Dict[str, int] = {}

    def keep_bad_line(fields: List[str]) -> List[str]:
        marker = f"{MALFORMED_PREFIX}{len(malformed)}"
        malformed[marker] = len(fields)
        return [marker] * width

    try:
        df = pd.read_csv(
            io.BytesIO(file_content),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=keep_bad_line,
        )
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise CSVSchemaError(f"Unreadable CSV: {e}") from e
    return parse_frame(df, malformed)
