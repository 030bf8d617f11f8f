"""
Account ranking and threshold filtering over a HolderHistory.
"""

import math
from typing import List, Optional, Tuple

from holders.core.exceptions import FilterError
from holders.core.models import HolderHistory

DEFAULT_SELECTION_SIZE = 10


def rank_accounts(history: HolderHistory) -> List[str]:
    """Accounts by descending current balance, ties by descending max holdings."""
    # sorted() is stable, so full ties keep first-seen order
    return sorted(
        history.accounts,
        key=lambda account: (
            -history.accounts[account].now,
            -history.accounts[account].max_holdings
        )
    )


def top_accounts(history: HolderHistory, limit: int = DEFAULT_SELECTION_SIZE) -> List[str]:
    return rank_accounts(history)[:limit]


def within_bounds(value: float, min_amount: Optional[float], max_amount: Optional[float]) -> bool:
    """Exclusive bounds check; a missing bound does not constrain."""
    if min_amount is not None and max_amount is not None:
        return min_amount < value < max_amount
    if min_amount is not None:
        return value > min_amount
    if max_amount is not None:
        return value < max_amount
    return True


def filter_accounts(
    history: HolderHistory,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
    use_max_holdings: bool = False
) -> List[str]:
    """
    Select accounts whose current (or max) holdings fall inside the bounds.

    Args:
        history: Aggregated holder history
        min_amount: Exclusive lower bound, or None
        max_amount: Exclusive upper bound, or None
        use_max_holdings: Threshold max holdings instead of the current balance

    Returns:
        List[str]: Matching accounts in history order
    """
    selected = []
    for account, record in history.accounts.items():
        value = record.max_holdings if use_max_holdings else record.now
        if within_bounds(value, min_amount, max_amount):
            selected.append(account)
    return selected


def _parse_bound(text: Optional[str], label: str) -> Optional[float]:
    if text is None or text.strip() == "":
        return None
    try:
        value = float(text)
    except ValueError:
        raise FilterError(f"Invalid {label} number")
    if not math.isfinite(value):
        raise FilterError(f"Invalid {label} number")
    return value


def parse_bounds(min_text: Optional[str], max_text: Optional[str]) -> Tuple[Optional[float], Optional[float]]:
    """Parse user-entered filter bounds, rejecting non-numbers and empty ranges."""
    min_amount = _parse_bound(min_text, "minimum")
    max_amount = _parse_bound(max_text, "maximum")
    if min_amount is not None and max_amount is not None and min_amount >= max_amount:
        raise FilterError("Minimum must be less than maximum")
    return min_amount, max_amount
