"""
Configuration file for project paths and directories
"""

import os
from pathlib import Path

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Raw ledger snapshots, one JSON file per sampled ledger
DATA_DIR = Path(os.getenv("DATA_DIR", PROJECT_ROOT / "data"))

# Exported holder histories consumed by the chart client
CLIENT_DIR = Path(os.getenv("CLIENT_DIR", PROJECT_ROOT / "client"))

# NFT airdrop reports
NFT_DATA_DIR = Path(os.getenv("NFT_DATA_DIR", PROJECT_ROOT / "nft_data"))

# Log directory
LOGS_DIR = Path(os.getenv("LOGS_DIR", PROJECT_ROOT / "logs"))


def ensure_directories(*directories: Path):
    """Create the given directories (or all default ones) if they don't exist."""
    for directory in directories or (DATA_DIR, CLIENT_DIR, NFT_DATA_DIR, LOGS_DIR):
        Path(directory).mkdir(parents=True, exist_ok=True)


def holders_export_path(prefix: str, client_dir: Path = CLIENT_DIR) -> Path:
    return Path(client_dir) / f"{prefix}-holders.json"
