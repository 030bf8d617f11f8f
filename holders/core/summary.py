"""
Cross-account summary statistics per timestamp.

Only strictly positive balances count. Accounts that were back-filled with zero
(or never held anything at that point) would otherwise drag both figures
towards zero.
"""

import statistics
from dataclasses import dataclass
from typing import Iterable, List, Optional

from holders.core.models import HolderHistory


@dataclass(frozen=True)
class TimestampSummary:
    timestamp: str
    median: Optional[float]
    mean: Optional[float]
    holders: int


def _positive(values: Iterable[float]) -> List[float]:
    return [value for value in values if value > 0]


def median(values: Iterable[float]) -> Optional[float]:
    """Median of the positive values; None for fewer than two of them."""
    positives = _positive(values)
    if len(positives) <= 1:
        return None
    return statistics.median(positives)


def mean(values: Iterable[float]) -> Optional[float]:
    """Arithmetic mean of the positive values; None when there are none."""
    positives = _positive(values)
    if not positives:
        return None
    return statistics.mean(positives)


def summarize(history: HolderHistory, timestamp: str) -> TimestampSummary:
    values = history.balances_at(timestamp)
    return TimestampSummary(
        timestamp=timestamp,
        median=median(values),
        mean=mean(values),
        holders=len(_positive(values))
    )


def summary_series(history: HolderHistory) -> List[TimestampSummary]:
    return [summarize(history, timestamp) for timestamp in history.timestamps]
