"""
Processing pipeline: stored snapshots -> normalized snapshots -> holder
history -> exported JSON. One generic run per token descriptor.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List

from holders.core.aggregator import aggregate
from holders.core.exceptions import SnapshotValidationError
from holders.core.models import HolderHistory, Snapshot, TokenDescriptor
from holders.core.normalizer import normalize
from holders.exporters.holders_exporter import export_holders
from holders.trackers.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


def normalize_all(records: Iterable[Dict], currency: str = None) -> List[Snapshot]:
    """Normalize raw records, dropping (and logging) the invalid ones."""
    snapshots = []
    for record in records:
        try:
            snapshots.append(normalize(record, currency=currency))
        except SnapshotValidationError as e:
            logger.warning(f"Skipping invalid snapshot record: {e}")
    return snapshots


def build_history(token: TokenDescriptor, store: SnapshotStore, progress: bool = False) -> HolderHistory:
    records = store.load_raw_snapshots(progress=progress)
    snapshots = normalize_all(records, currency=token.currency)
    return aggregate(snapshots)


def process_token(token: TokenDescriptor, store: SnapshotStore, output_path: Path,
                  progress: bool = False) -> HolderHistory:
    """Rebuild a token's holder history from all stored snapshots and export it."""
    logger.info(f"Processing {token.identifier} snapshots from {store.data_dir}")
    history = build_history(token, store, progress=progress)
    export_holders(history, output_path)
    return history
