"""
Tests for the holder aggregator.
"""

import json

import pytest

from holders.core.aggregator import FoldState, aggregate, finalize, fold_snapshot

T1 = "2024-01-01T00:00:00.000Z"
T2 = "2024-01-02T00:00:00.000Z"
T3 = "2024-01-03T00:00:00.000Z"


@pytest.fixture
def snapshots(make_snapshot):
    return [
        make_snapshot(T1, {"rA": 10.0, "rB": 4.0}),
        make_snapshot(T2, {"rB": 6.0, "rC": 1.0}),
        make_snapshot(T3, {"rA": 3.0, "rC": 2.0}),
    ]


def test_two_snapshot_scenario(make_snapshot):
    """An account leaving and another arriving are both zero-filled"""
    history = aggregate([make_snapshot(T1, {"X": 5.0}), make_snapshot(T2, {"Y": 3.0})])

    assert history.timestamps == [T1, T2]
    assert history.start_timestamp == T1
    assert history.end_timestamp == T2
    assert history.accounts["X"].to_dict() == {T1: 5.0, T2: 0.0, "maxHoldings": 5.0, "now": 0.0}
    assert history.accounts["Y"].to_dict() == {T1: 0.0, T2: 3.0, "maxHoldings": 3.0, "now": 3.0}


def test_zero_fill_completeness(snapshots):
    """Every account has a value at every timestamp"""
    history = aggregate(snapshots)
    for record in history.accounts.values():
        assert list(record.balance_at) == history.timestamps


def test_max_holdings_matches_series(snapshots):
    history = aggregate(snapshots)
    for record in history.accounts.values():
        assert record.max_holdings == max(record.balance_at.values())
    assert history.accounts["rA"].max_holdings == 10.0
    assert history.accounts["rB"].max_holdings == 6.0


def test_now_is_last_timestamp_value(snapshots):
    history = aggregate(snapshots)
    last = history.timestamps[-1]
    for record in history.accounts.values():
        assert record.now == record.balance_at[last]
    assert history.accounts["rB"].now == 0.0
    assert history.accounts["rB"].max_holdings > 0


def test_reobserved_account_keeps_earlier_values(snapshots):
    """rA leaves at T2 and comes back at T3"""
    history = aggregate(snapshots)
    assert history.accounts["rA"].balance_at == {T1: 10.0, T2: 0.0, T3: 3.0}


def test_accounts_keep_first_seen_order(snapshots):
    assert list(aggregate(snapshots).accounts) == ["rA", "rB", "rC"]


def test_aggregation_is_deterministic(snapshots):
    first = json.dumps(aggregate(snapshots).to_dict())
    second = json.dumps(aggregate(list(snapshots)).to_dict())
    assert first == second


def test_input_order_is_preserved(make_snapshot):
    """Timestamps mirror input order; the aggregator does not sort"""
    history = aggregate([make_snapshot(T2, {"rA": 1.0}), make_snapshot(T1, {"rA": 2.0})])
    assert history.timestamps == [T2, T1]
    assert history.accounts["rA"].now == 2.0


def test_empty_input():
    history = aggregate([])
    assert history.timestamps == []
    assert history.accounts == {}
    assert history.start_timestamp is None
    assert history.end_timestamp is None


def test_single_snapshot(make_snapshot):
    history = aggregate([make_snapshot(T1, {"rA": 7.0, "rB": -2.0})])
    assert history.timestamps == [T1]
    assert history.start_timestamp == history.end_timestamp == T1
    for record in history.accounts.values():
        assert record.max_holdings == record.now == record.balance_at[T1]


def test_negative_balance_max_raised_by_back_fill(make_snapshot):
    """A back-filled zero counts towards max holdings"""
    history = aggregate([make_snapshot(T1, {"rA": -2.0}), make_snapshot(T2, {})])
    assert history.accounts["rA"].max_holdings == 0.0


def test_duplicate_timestamp_is_dropped(make_snapshot, caplog):
    history = aggregate([
        make_snapshot(T1, {"rA": 1.0}),
        make_snapshot(T1, {"rA": 9.0}),
        make_snapshot(T2, {"rA": 2.0}),
    ])
    assert history.timestamps == [T1, T2]
    assert history.accounts["rA"].balance_at[T1] == 1.0
    assert "duplicate timestamp" in caplog.text


def test_fold_does_not_mutate_previous_state(make_snapshot):
    start = FoldState()
    first = fold_snapshot(start, make_snapshot(T1, {"rA": 1.0}))
    second = fold_snapshot(first, make_snapshot(T2, {"rA": 5.0, "rB": 2.0}))

    assert start.timestamps == ()
    assert first.timestamps == (T1,)
    assert dict(first.max_holdings) == {"rA": 1.0}
    assert dict(second.max_holdings) == {"rA": 5.0, "rB": 2.0}


def test_finalize_empty_state():
    assert finalize(FoldState()).to_dict() == {"timestamps": [], "accounts": {}}
