"""
Snapshot normalizer: turns one raw trust-line record into a Snapshot.

Trust line balances are reported from the issuer's side of the line, so a
holding shows up as a negative number. The sign is flipped here and nowhere
else.
"""

import logging
import math
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from holders.core.exceptions import SnapshotValidationError
from holders.core.models import Snapshot

logger = logging.getLogger(__name__)


def parse_balance(raw_balance) -> float:
    """
    Parse a raw trust line balance and apply the holding sign convention.

    Args:
        raw_balance: Decimal string (or number) as reported by the ledger

    Returns:
        float: The holder's balance

    Raises:
        SnapshotValidationError: If the value is not a finite number
    """
    if raw_balance is None or isinstance(raw_balance, bool):
        raise SnapshotValidationError(f"Invalid balance value: {raw_balance!r}")
    try:
        value = Decimal(str(raw_balance).strip())
    except (InvalidOperation, ValueError):
        raise SnapshotValidationError(f"Invalid balance value: {raw_balance!r}")
    if not value.is_finite():
        raise SnapshotValidationError(f"Non-finite balance value: {raw_balance!r}")
    balance = float(-value)
    # huge exponents pass the Decimal check but overflow the float
    if not math.isfinite(balance):
        raise SnapshotValidationError(f"Balance out of range: {raw_balance!r}")
    # -0.0 is falsy, so this also normalizes negative zero
    return balance or 0.0


def is_iso_timestamp(value: str) -> bool:
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def normalize(raw_snapshot: dict, currency: Optional[str] = None) -> Snapshot:
    """
    Convert a raw snapshot record into a Snapshot.

    Malformed lines are skipped with a warning. A record without a usable
    timestamp or lines collection is rejected as a whole.
    """
    if not isinstance(raw_snapshot, dict):
        raise SnapshotValidationError("Snapshot record must be a mapping")

    timestamp = raw_snapshot.get("timestamp")
    if not timestamp or not isinstance(timestamp, str):
        raise SnapshotValidationError(f"Snapshot has no valid timestamp: {timestamp!r}")
    if not is_iso_timestamp(timestamp):
        raise SnapshotValidationError(f"Snapshot timestamp is not ISO-8601: {timestamp!r}")

    lines = raw_snapshot.get("lines")
    if not isinstance(lines, list):
        raise SnapshotValidationError(f"Snapshot {timestamp} has no lines collection")

    balances = {}
    skipped = 0
    for line in lines:
        if not isinstance(line, dict):
            skipped += 1
            logger.warning(f"Skipping non-object line in snapshot {timestamp}: {line!r}")
            continue
        if currency and line.get("currency", currency) != currency:
            continue
        account = line.get("account")
        if not account or not isinstance(account, str):
            skipped += 1
            logger.warning(f"Skipping line without account in snapshot {timestamp}")
            continue
        try:
            balances[account] = parse_balance(line.get("balance"))
        except SnapshotValidationError as e:
            skipped += 1
            logger.warning(f"Skipping line for {account} in snapshot {timestamp}: {e}")

    if skipped:
        logger.warning(f"Snapshot {timestamp}: skipped {skipped} malformed line(s)")

    ledger_index = raw_snapshot.get("ledger_index")
    return Snapshot(
        timestamp=timestamp,
        balances=balances,
        ledger_index=int(ledger_index) if isinstance(ledger_index, int) else None
    )
