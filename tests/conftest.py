"""
Shared fixtures for holder history tests.
"""

import json
import logging

import pytest

from holders.core.models import AccountRecord, HolderHistory, Snapshot


@pytest.fixture(autouse=True, scope="session")
def quiet_holders_logger():
    """Keep the CLI from attaching file/console handlers during tests."""
    logger = logging.getLogger("holders")
    handler = logging.NullHandler()
    logger.addHandler(handler)
    yield
    logger.removeHandler(handler)


@pytest.fixture
def make_snapshot():
    def _make(timestamp, balances, ledger_index=None):
        return Snapshot(timestamp=timestamp, balances=dict(balances), ledger_index=ledger_index)
    return _make


@pytest.fixture
def raw_record():
    """Create a raw trust-line record as stored by the snapshot tracker."""
    def _make(timestamp, balances, ledger_index=None):
        record = {
            "account": "rIssuer",
            "timestamp": timestamp,
            "lines": [
                {"account": account, "balance": balance, "currency": "ELS"}
                for account, balance in balances.items()
            ]
        }
        if ledger_index is not None:
            record["ledger_index"] = ledger_index
        return record
    return _make


@pytest.fixture
def write_snapshot_file(raw_record):
    def _write(directory, prefix, ledger_index, timestamp, balances):
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{prefix}-{ledger_index}.json"
        path.write_text(json.dumps(raw_record(timestamp, balances, ledger_index)))
        return path
    return _write


@pytest.fixture
def ranked_history():
    """Accounts with now {A:10, B:10, C:5} and maxHoldings {A:20, B:30, C:5}."""
    timestamps = ["2024-01-01T00:00:00.000Z", "2024-01-02T00:00:00.000Z"]
    return HolderHistory(
        timestamps=timestamps,
        accounts={
            "rA": AccountRecord(balance_at={timestamps[0]: 20.0, timestamps[1]: 10.0}, max_holdings=20.0, now=10.0),
            "rB": AccountRecord(balance_at={timestamps[0]: 30.0, timestamps[1]: 10.0}, max_holdings=30.0, now=10.0),
            "rC": AccountRecord(balance_at={timestamps[0]: 5.0, timestamps[1]: 5.0}, max_holdings=5.0, now=5.0),
        },
        start_timestamp=timestamps[0],
        end_timestamp=timestamps[1]
    )
