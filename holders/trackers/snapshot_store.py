"""
File store for raw ledger snapshots.

Each snapshot lives in `<prefix>-<ledger_index>.json`. Files are ordered by the
numeric ledger index, so `ellis-999999.json` comes before `ellis-1000000.json`.
"""

import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import aiofiles
from tqdm import tqdm

logger = logging.getLogger(__name__)


class SnapshotStore:
    def __init__(self, data_dir: Path, prefix: str):
        self.data_dir = Path(data_dir)
        self.prefix = prefix
        self._pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)\.json$")

    def path_for(self, ledger_index: int) -> Path:
        return self.data_dir / f"{self.prefix}-{ledger_index}.json"

    def list_snapshots(self) -> List[Tuple[int, Path]]:
        """Stored snapshot files as (ledger_index, path), oldest ledger first."""
        if not self.data_dir.exists():
            return []
        snapshots = []
        for path in self.data_dir.glob(f"{self.prefix}-*.json"):
            match = self._pattern.match(path.name)
            if not match:
                logger.debug(f"Ignoring {path.name}: not a {self.prefix} snapshot file")
                continue
            snapshots.append((int(match.group(1)), path))
        snapshots.sort()
        return snapshots

    def latest_ledger_index(self) -> Optional[int]:
        snapshots = self.list_snapshots()
        return snapshots[-1][0] if snapshots else None

    async def write(self, record: Dict) -> Path:
        """Persist one snapshot record; its ledger_index names the file."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(int(record["ledger_index"]))
        async with aiofiles.open(path, 'w') as f:
            await f.write(json.dumps(record, indent=2))
        logger.info(f"Writing ledger {record['ledger_index']} at {record.get('timestamp')} to {path.name}")
        return path

    def load_raw_snapshots(self, progress: bool = False) -> List[Dict]:
        """Parsed snapshot records in ledger order; unreadable files are skipped."""
        records = []
        snapshots = self.list_snapshots()
        for ledger_index, path in tqdm(snapshots, desc=f"Loading {self.prefix} snapshots",
                                       disable=not progress):
            try:
                with open(path, 'r') as f:
                    records.append(json.load(f))
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Skipping unreadable snapshot {path.name}: {e}")
        logger.info(f"Loaded {len(records)} of {len(snapshots)} {self.prefix} snapshot files")
        return records
