"""
Holder aggregator.

Folds an ordered sequence of snapshots into a HolderHistory. The fold keeps an
immutable state per step (timestamps, one balance column per snapshot and the
running maxima). Zero back-filling happens once, in finalize(), after the full
account set is known.
"""

import logging
from dataclasses import dataclass, field
from functools import reduce
from typing import Iterable, Mapping, Tuple

from holders.core.models import AccountRecord, HolderHistory, Snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FoldState:
    timestamps: Tuple[str, ...] = ()
    columns: Tuple[Mapping[str, float], ...] = ()
    max_holdings: Mapping[str, float] = field(default_factory=dict)


def fold_snapshot(state: FoldState, snapshot: Snapshot) -> FoldState:
    """Return the state after folding in one snapshot."""
    if snapshot.timestamp in state.timestamps:
        logger.warning(f"Dropping snapshot with duplicate timestamp {snapshot.timestamp}")
        return state

    # Account order is first-seen order across the whole fold
    max_holdings = dict(state.max_holdings)
    for account, balance in snapshot.balances.items():
        previous = max_holdings.get(account)
        max_holdings[account] = balance if previous is None else max(previous, balance)

    return FoldState(
        timestamps=state.timestamps + (snapshot.timestamp,),
        columns=state.columns + (dict(snapshot.balances),),
        max_holdings=max_holdings
    )


def finalize(state: FoldState) -> HolderHistory:
    """Back-fill unobserved balances with zero and derive the summary fields."""
    timestamps = list(state.timestamps)
    if not timestamps:
        return HolderHistory()

    last = timestamps[-1]
    accounts = {}
    for account, running_max in state.max_holdings.items():
        balance_at = {}
        back_filled = False
        for timestamp, column in zip(timestamps, state.columns):
            if account in column:
                balance_at[timestamp] = column[account]
            else:
                balance_at[timestamp] = 0.0
                back_filled = True
        accounts[account] = AccountRecord(
            balance_at=balance_at,
            max_holdings=max(running_max, 0.0) if back_filled else running_max,
            now=balance_at[last]
        )

    return HolderHistory(
        timestamps=timestamps,
        accounts=accounts,
        start_timestamp=timestamps[0],
        end_timestamp=last
    )


def aggregate(snapshots: Iterable[Snapshot]) -> HolderHistory:
    """
    Build a HolderHistory from snapshots in the order given.

    The input is trusted to be chronological; it is never re-sorted.
    """
    state = reduce(fold_snapshot, snapshots, FoldState())
    history = finalize(state)
    logger.info(
        f"Aggregated {len(history.timestamps)} snapshots covering {len(history.accounts)} accounts"
    )
    return history
