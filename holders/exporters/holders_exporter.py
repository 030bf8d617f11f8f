"""
Holder history exporter.

Writes the aggregated history in the JSON shape the chart client reads, and
builds chart-ready series (per-timestamp rows, pandas frames, CSV).
"""

import json
import logging
from pathlib import Path
from typing import List

import pandas as pd

from holders.core.models import HolderHistory
from holders.core.summary import summary_series

logger = logging.getLogger(__name__)


def export_holders(history: HolderHistory, path: Path) -> Path:
    """Write the history as indented JSON, creating the parent directory."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(history.to_dict(), f, indent=2)
    logger.info(f"Wrote {path} ({len(history.timestamps)} timestamps, {len(history.accounts)} accounts)")
    return path


def load_holders(path: Path) -> HolderHistory:
    with open(path, 'r') as f:
        return HolderHistory.from_dict(json.load(f))


def chart_rows(history: HolderHistory) -> List[dict]:
    """
    One row per timestamp with median, average and every account's balance.

    Undefined statistics are None (JSON null), never NaN.
    """
    rows = []
    for summary in summary_series(history):
        row = {
            "timestamp": summary.timestamp,
            "median": summary.median,
            "average": summary.mean
        }
        for account, record in history.accounts.items():
            row[account] = record.balance_at[summary.timestamp]
        rows.append(row)
    return rows


def history_to_frame(history: HolderHistory) -> pd.DataFrame:
    """Balances as a frame: one row per timestamp, one column per account."""
    frame = pd.DataFrame(
        {account: [record.balance_at[t] for t in history.timestamps]
         for account, record in history.accounts.items()},
        index=pd.Index(history.timestamps, name="timestamp"),
        columns=list(history.accounts)
    )
    return frame.astype(float)


def summary_frame(history: HolderHistory) -> pd.DataFrame:
    series = summary_series(history)
    frame = pd.DataFrame(
        {
            "median": [s.median for s in series],
            "average": [s.mean for s in series],
            "holders": [s.holders for s in series]
        },
        index=pd.Index(history.timestamps, name="timestamp")
    )
    return frame


def export_chart_csv(history: HolderHistory, path: Path) -> Path:
    """Write summary columns followed by per-account balances as CSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame = pd.concat([summary_frame(history), history_to_frame(history)], axis=1)
    frame.to_csv(path)
    logger.info(f"Wrote chart series to {path}")
    return path
