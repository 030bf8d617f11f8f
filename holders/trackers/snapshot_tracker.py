"""
Captures issuer trust-line snapshots at sampled ledger heights.

Scans are strictly sequential with a pause between ledgers. A ledger the node
does not have marks the end of available history and stops a scan normally;
any other failure is logged and stops the scan. Snapshots already written stay
on disk either way.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import aiohttp

from config.settings import NEWEST_LEDGER_STEP, PREVIOUS_LEDGER_STEP, REQUEST_DELAY
from holders.core.exceptions import ConfigurationError, LedgerNotFoundError, LedgerRequestError
from holders.core.models import TokenDescriptor
from holders.trackers.ledger_client import LedgerClient, LedgerIndex
from holders.trackers.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

FETCH_ERRORS = (LedgerRequestError, aiohttp.ClientError, asyncio.TimeoutError, OSError)


class SnapshotTracker:
    def __init__(self, client: LedgerClient, store: SnapshotStore, token: TokenDescriptor,
                 request_delay: float = REQUEST_DELAY):
        if not token.issuer:
            raise ConfigurationError(
                f"No issuer configured for {token.identifier}; "
                f"the {token.identifier.upper()} environment variable is required"
            )
        self.client = client
        self.store = store
        self.token = token
        self.request_delay = request_delay

    async def _pause(self):
        if self.request_delay > 0:
            await asyncio.sleep(self.request_delay)

    async def capture(self, ledger_index: LedgerIndex = "validated") -> Path:
        """Fetch the issuer's trust lines at one ledger and store them."""
        info = await self.client.ledger_info(ledger_index)
        lines = await self.client.account_lines(self.token.issuer, info.index)
        record = {
            "account": self.token.issuer,
            "ledger_index": info.index,
            "timestamp": info.close_time,
            "lines": lines
        }
        return await self.store.write(record)

    async def backfill_previous(self, start_index: Optional[int] = None,
                                step: int = PREVIOUS_LEDGER_STEP) -> int:
        """
        Walk back from start_index (default: the validated ledger) in steps.

        Returns:
            int: Number of snapshots stored
        """
        if start_index is None:
            start_index = (await self.client.ledger_info("validated")).index

        ledger_index = start_index
        stored = 0
        while ledger_index > 0:
            try:
                await self.capture(ledger_index)
            except LedgerNotFoundError:
                logger.info(f"Ledger {ledger_index} is not available, reached the start of history")
                break
            except FETCH_ERRORS as e:
                logger.error(f"Error fetching ledger {ledger_index}: {e}")
                break
            stored += 1
            ledger_index -= step
            await self._pause()

        logger.info(f"Backfill stored {stored} {self.token.identifier} snapshots")
        return stored

    async def scan_newest(self, step: int = NEWEST_LEDGER_STEP) -> int:
        """
        Walk forward from the newest stored ledger until the node runs out of
        ledgers, then capture the validated ledger.

        Returns:
            int: Number of snapshots stored
        """
        ledger_index = self.store.latest_ledger_index()
        if ledger_index is None:
            logger.info(f"No stored {self.token.identifier} snapshots, capturing the validated ledger only")
            try:
                await self.capture("validated")
            except FETCH_ERRORS as e:
                logger.error(f"Error fetching the validated ledger: {e}")
                return 0
            return 1

        logger.info(f"Starting from ledger {ledger_index} + {step}")
        stored = 0
        while True:
            ledger_index += step
            try:
                await self.capture(ledger_index)
            except LedgerNotFoundError:
                logger.info("Reached the end of the ledger, fetching the latest one and quitting")
                try:
                    await self.capture("validated")
                    stored += 1
                except FETCH_ERRORS as e:
                    logger.error(f"Error fetching the validated ledger: {e}")
                break
            except FETCH_ERRORS as e:
                logger.error(f"Error processing ledger {ledger_index}: {e}")
                break
            stored += 1
            await self._pause()

        return stored
