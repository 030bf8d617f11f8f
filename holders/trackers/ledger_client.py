"""
Async JSON-RPC client for an XRP Ledger node.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, List, Optional, Union

import aiohttp
import backoff

from config.settings import ACCOUNT_LINES_LIMIT, MAX_RETRIES, REQUEST_TIMEOUT, XRPL_RPC_URL
from holders.core.exceptions import LedgerNotFoundError, LedgerRequestError

logger = logging.getLogger(__name__)

# Ledger close times count seconds from 2000-01-01T00:00:00Z
RIPPLE_EPOCH_OFFSET = 946684800
NOT_FOUND_ERRORS = {"lgrNotFound", "ledgerNotFound"}

LedgerIndex = Union[int, str]


@dataclass(frozen=True)
class LedgerInfo:
    index: int
    close_time: str  # ISO-8601, UTC


def ripple_time_to_iso(close_time: int) -> str:
    moment = datetime.fromtimestamp(close_time + RIPPLE_EPOCH_OFFSET, tz=timezone.utc)
    return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def raise_for_rpc_error(method: str, result: Dict):
    """Raise the matching exception if a JSON-RPC result carries an error."""
    error = result.get("error")
    if not error and result.get("status") != "error":
        return
    message = result.get("error_message") or error or "Unknown error"
    if error in NOT_FOUND_ERRORS or message in NOT_FOUND_ERRORS:
        raise LedgerNotFoundError(f"{method}: {message}", error_code=error)
    raise LedgerRequestError(f"{method}: {message}", error_code=error)


class LedgerClient:
    def __init__(self, rpc_url: str = XRPL_RPC_URL, timeout: int = REQUEST_TIMEOUT,
                 session: Optional[aiohttp.ClientSession] = None):
        self.rpc_url = rpc_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> 'LedgerClient':
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    @backoff.on_exception(
        backoff.expo,
        (aiohttp.ClientError, asyncio.TimeoutError),
        max_tries=MAX_RETRIES,
        logger=logger
    )
    async def request(self, method: str, params: Dict) -> Dict:
        """Send one JSON-RPC request and return its result object."""
        payload = {"method": method, "params": [params]}
        logger.debug(f"Ledger request: {method} {params}")
        session = self._get_session()
        async with session.post(self.rpc_url, json=payload) as response:
            response.raise_for_status()
            body = await response.json(content_type=None)

        result = body.get("result")
        if not isinstance(result, dict):
            raise LedgerRequestError(f"{method}: response has no result object")
        raise_for_rpc_error(method, result)
        return result

    async def ledger_info(self, ledger_index: LedgerIndex = "validated") -> LedgerInfo:
        result = await self.request("ledger", {"ledger_index": ledger_index})
        ledger = result.get("ledger") or {}
        index = result.get("ledger_index") or ledger.get("ledger_index")
        close_time = ledger.get("close_time")
        if index is None or close_time is None:
            raise LedgerRequestError(f"ledger: incomplete ledger header for {ledger_index}")
        return LedgerInfo(index=int(index), close_time=ripple_time_to_iso(int(close_time)))

    async def account_lines(self, account: str, ledger_index: LedgerIndex,
                            limit: int = ACCOUNT_LINES_LIMIT) -> List[Dict]:
        """
        All trust lines of an account at one ledger.

        Pages are requested one after another; each page's marker comes from
        the previous response.
        """
        params = {"account": account, "ledger_index": ledger_index, "limit": limit}
        lines = []
        while True:
            result = await self.request("account_lines", params)
            lines.extend(result.get("lines", []))
            marker = result.get("marker")
            if not marker:
                break
            params = {**params, "marker": marker}
        return lines

    async def account_tx_pages(self, account: str, ledger_index_min: int, ledger_index_max: int,
                               limit: int) -> AsyncIterator[List[Dict]]:
        """Yield pages of an account's transactions, most recent first."""
        params = {
            "account": account,
            "ledger_index_min": ledger_index_min,
            "ledger_index_max": ledger_index_max,
            "limit": limit,
            "forward": False,
            "api_version": 2
        }
        while True:
            result = await self.request("account_tx", params)
            yield result.get("transactions", [])
            marker = result.get("marker")
            if not marker:
                return
            params = {**params, "marker": marker}
