"""
NFT airdrop report.

Correlates the current owners of an NFT collection with the token amounts the
collection's airdrop account delivered to them recently. The report is
written on its own and never feeds back into holder history aggregation.
"""

import json
import logging
import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from config.settings import AIRDROP_LEDGER_WINDOW, AIRDROP_TX_PAGE_SIZE
from holders.airdrop.bithomp_client import BithompClient
from holders.core.models import NFTCollection
from holders.trackers.ledger_client import LedgerClient

logger = logging.getLogger(__name__)


def collect_nft_holders(nfts: Iterable[Dict]) -> Dict[str, Dict]:
    """Group NFTs by owner: address, number of NFTs and their names."""
    holders = {}
    for nft in nfts:
        owner = nft.get("owner")
        if not owner:
            continue
        holder = holders.setdefault(owner, {"address": owner, "nftAmount": 0, "nfts": []})
        holder["nftAmount"] += 1
        holder["nfts"].append((nft.get("metadata") or {}).get("name"))
    return holders


def _parse_amount(value) -> Optional[float]:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return float(amount) if amount.is_finite() else None


def sum_airdrops(transactions: Iterable[Dict], currency: str) -> Dict[str, float]:
    """Total delivered amount of `currency` per destination, validated transactions only."""
    totals = {}
    for entry in transactions:
        if not entry.get("validated"):
            continue
        delivered = (entry.get("meta") or {}).get("delivered_amount")
        # XRP deliveries are plain drop strings, issued currencies are objects
        if not isinstance(delivered, dict) or delivered.get("currency") != currency:
            continue
        tx = entry.get("tx_json") or entry.get("tx") or {}
        destination = tx.get("Destination")
        if not destination:
            continue
        amount = _parse_amount(delivered.get("value"))
        if amount is None:
            logger.warning(f"Skipping airdrop to {destination} with invalid amount {delivered.get('value')!r}")
            continue
        totals[destination] = totals.get(destination, 0.0) + amount
    return totals


def build_airdrop_report(nfts: List[Dict], transactions: List[Dict], currency: str) -> Dict:
    holders = collect_nft_holders(nfts)
    airdrops = sum_airdrops(transactions, currency)

    enriched = [
        {**holder, "recentAirdrops": airdrops.get(address)}
        for address, holder in holders.items()
    ]
    enriched.sort(key=lambda holder: holder["recentAirdrops"] or 0)

    return {
        "totalHolders": len(holders),
        "totalNfts": len(nfts),
        "transactionsAmount": len(transactions),
        "holders": enriched,
        "recentAirdrops": {address: {"amount": amount} for address, amount in airdrops.items()},
        "nfts": [
            {
                "owner": nft.get("owner"),
                "name": (nft.get("metadata") or {}).get("name"),
                "issuedAt": nft.get("issuedAt")
            }
            for nft in nfts
        ]
    }


def write_airdrop_report(report: Dict, directory: Path, prefix: str,
                         now: Optional[datetime] = None) -> Path:
    now = now or datetime.now(timezone.utc)
    stamp = re.sub(r"[:.]", "-", now.isoformat(timespec='milliseconds').replace('+00:00', 'Z'))
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{prefix}-balances-{stamp}.json"
    with open(path, 'w') as f:
        json.dump(report, f, indent=2)
    logger.info(f"Wrote airdrop report {path}")
    return path


async def fetch_airdrop_transactions(client: LedgerClient, address: str,
                                     window: int = AIRDROP_LEDGER_WINDOW,
                                     page_size: int = AIRDROP_TX_PAGE_SIZE) -> List[Dict]:
    """Transactions of `address` over the last `window` validated ledgers."""
    info = await client.ledger_info("validated")
    ledger_index_min = info.index - window if info.index > window else -1
    transactions = []
    async for page in client.account_tx_pages(address, ledger_index_min, info.index, page_size):
        transactions.extend(page)
    logger.info(f"Fetched {len(transactions)} transactions for {address}")
    return transactions


class NFTAirdropTracker:
    def __init__(self, collection: NFTCollection, bithomp: BithompClient, client: LedgerClient,
                 output_dir: Path):
        self.collection = collection
        self.bithomp = bithomp
        self.client = client
        self.output_dir = Path(output_dir)

    async def run(self) -> Path:
        logger.info(f"Processing NFTs {self.collection.identifier}")
        payload = self.bithomp.get_nfts(self.collection.issuer, self.collection.taxon)
        nfts = payload.get("nfts", [])
        transactions = await fetch_airdrop_transactions(self.client, self.collection.airdrop_address)
        report = build_airdrop_report(nfts, transactions, self.collection.airdrop_currency)
        logger.info(
            f"{report['totalHolders']} holders of {report['totalNfts']} NFTs, "
            f"{len(report['recentAirdrops'])} recent airdrop recipients"
        )
        return write_airdrop_report(report, self.output_dir, self.collection.prefix)
