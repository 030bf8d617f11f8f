"""
Data types shared by the snapshot normalizer, the aggregator and the exporter.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from holders.core.exceptions import HolderHistoryError

MAX_HOLDINGS_KEY = "maxHoldings"
NOW_KEY = "now"


@dataclass(frozen=True)
class TokenDescriptor:
    identifier: str
    supply: float
    prefix: str
    issuer: Optional[str] = None  # Issuing account, required for ledger scans
    currency: Optional[str] = None  # Restricts trust lines to one currency code


@dataclass(frozen=True)
class NFTCollection:
    identifier: str
    issuer: str
    taxon: int
    airdrop_address: str
    airdrop_currency: str
    prefix: str


@dataclass(frozen=True)
class Snapshot:
    timestamp: str
    balances: Mapping[str, float]
    ledger_index: Optional[int] = None


@dataclass
class AccountRecord:
    balance_at: Dict[str, float]
    max_holdings: float
    now: float

    def to_dict(self) -> dict:
        data = dict(self.balance_at)
        data[MAX_HOLDINGS_KEY] = self.max_holdings
        data[NOW_KEY] = self.now
        return data

    @classmethod
    def from_dict(cls, data: dict, timestamps: List[str]) -> 'AccountRecord':
        missing = [t for t in timestamps if t not in data]
        if missing or MAX_HOLDINGS_KEY not in data or NOW_KEY not in data:
            raise HolderHistoryError(f"Incomplete account record, missing timestamps: {missing}")
        return cls(
            balance_at={t: float(data[t]) for t in timestamps},
            max_holdings=float(data[MAX_HOLDINGS_KEY]),
            now=float(data[NOW_KEY])
        )


@dataclass
class HolderHistory:
    timestamps: List[str] = field(default_factory=list)
    accounts: Dict[str, AccountRecord] = field(default_factory=dict)
    start_timestamp: Optional[str] = None
    end_timestamp: Optional[str] = None

    def balances_at(self, timestamp: str) -> List[float]:
        """Balances of every known account at one timestamp, in account order."""
        return [record.balance_at[timestamp] for record in self.accounts.values()]

    def to_dict(self) -> dict:
        data = {}
        if self.start_timestamp is not None:
            data["startTimestamp"] = self.start_timestamp
        if self.end_timestamp is not None:
            data["endTimestamp"] = self.end_timestamp
        data["timestamps"] = list(self.timestamps)
        data["accounts"] = {
            account: record.to_dict() for account, record in self.accounts.items()
        }
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'HolderHistory':
        timestamps = list(data.get("timestamps", []))
        accounts = {
            account: AccountRecord.from_dict(record, timestamps)
            for account, record in data.get("accounts", {}).items()
        }
        return cls(
            timestamps=timestamps,
            accounts=accounts,
            start_timestamp=data.get("startTimestamp"),
            end_timestamp=data.get("endTimestamp")
        )
