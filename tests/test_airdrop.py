"""
Tests for the NFT airdrop report.
"""

import json
from datetime import datetime, timezone

import pytest

from holders.airdrop.nft_airdrop_tracker import (
    build_airdrop_report,
    collect_nft_holders,
    fetch_airdrop_transactions,
    sum_airdrops,
    write_airdrop_report,
)
from holders.trackers.ledger_client import LedgerInfo

CURRENCY = "5041525259000000000000000000000000000000"


def airdrop_tx(destination, value, currency=CURRENCY, validated=True, api_v2=True):
    body = {"Destination": destination, "TransactionType": "Payment"}
    entry = {
        "validated": validated,
        "meta": {"delivered_amount": {"currency": currency, "issuer": "rIssuer", "value": value}}
    }
    entry["tx_json" if api_v2 else "tx"] = body
    return entry


@pytest.fixture
def nfts():
    return [
        {"owner": "rOne", "metadata": {"name": "Pixel #1"}, "issuedAt": 1},
        {"owner": "rTwo", "metadata": {"name": "Pixel #2"}, "issuedAt": 2},
        {"owner": "rOne", "metadata": {"name": "Pixel #3"}, "issuedAt": 3},
        {"owner": "rThree", "metadata": None, "issuedAt": 4},
    ]


def test_collect_nft_holders(nfts):
    holders = collect_nft_holders(nfts)
    assert holders["rOne"] == {"address": "rOne", "nftAmount": 2, "nfts": ["Pixel #1", "Pixel #3"]}
    assert holders["rThree"]["nfts"] == [None]
    assert len(holders) == 3


def test_sum_airdrops_filters_transactions():
    transactions = [
        airdrop_tx("rOne", "100"),
        airdrop_tx("rOne", "50.5", api_v2=False),
        airdrop_tx("rTwo", "10", validated=False),
        airdrop_tx("rTwo", "10", currency="USD"),
        airdrop_tx("rTwo", "garbage"),
        {"validated": True, "meta": {"delivered_amount": "1000000"}, "tx_json": {"Destination": "rTwo"}},
    ]
    assert sum_airdrops(transactions, CURRENCY) == {"rOne": 150.5}


def test_build_airdrop_report_sorts_by_airdrops(nfts):
    transactions = [airdrop_tx("rOne", "300"), airdrop_tx("rTwo", "20")]
    report = build_airdrop_report(nfts, transactions, CURRENCY)

    assert report["totalHolders"] == 3
    assert report["totalNfts"] == 4
    assert report["transactionsAmount"] == 2
    assert [holder["address"] for holder in report["holders"]] == ["rThree", "rTwo", "rOne"]
    assert report["holders"][0]["recentAirdrops"] is None
    assert report["recentAirdrops"] == {"rOne": {"amount": 300.0}, "rTwo": {"amount": 20.0}}


def test_write_airdrop_report(tmp_path):
    now = datetime(2024, 5, 6, 7, 8, 9, 123000, tzinfo=timezone.utc)
    path = write_airdrop_report({"totalHolders": 0}, tmp_path / "nft", "parrypixel", now=now)
    assert path.name == "parrypixel-balances-2024-05-06T07-08-09-123Z.json"
    assert json.loads(path.read_text()) == {"totalHolders": 0}


class FakeTxClient:
    def __init__(self, validated, pages):
        self.validated = validated
        self.pages = pages
        self.requested = None

    async def ledger_info(self, ledger_index="validated"):
        return LedgerInfo(index=self.validated, close_time="2024-01-01T00:00:00.000Z")

    async def account_tx_pages(self, account, ledger_index_min, ledger_index_max, limit):
        self.requested = (account, ledger_index_min, ledger_index_max, limit)
        for page in self.pages:
            yield page


@pytest.mark.asyncio
async def test_fetch_airdrop_transactions_window():
    client = FakeTxClient(500_000, [[airdrop_tx("rOne", "1")], [airdrop_tx("rTwo", "2")]])
    transactions = await fetch_airdrop_transactions(client, "rAirdrop", window=100_000, page_size=30)

    assert len(transactions) == 2
    assert client.requested == ("rAirdrop", 400_000, 500_000, 30)


@pytest.mark.asyncio
async def test_fetch_airdrop_transactions_short_history():
    client = FakeTxClient(50, [[]])
    assert await fetch_airdrop_transactions(client, "rAirdrop", window=100_000) == []
    assert client.requested[1] == -1
