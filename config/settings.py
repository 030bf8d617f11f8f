"""
General settings for ledger access and snapshot scans.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Ledger JSON-RPC endpoint
XRPL_RPC_URL = os.getenv("XRPL", "https://s2.ripple.com:51234/")

# Request pacing and retries
REQUEST_DELAY = float(os.getenv("REQUEST_DELAY", "1.0"))  # Seconds between ledger requests
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "30"))  # Seconds per request
MAX_RETRIES = int(os.getenv("MAX_RETRIES", "3"))

# Snapshot scans
ACCOUNT_LINES_LIMIT = 400       # Trust lines per account_lines page
PREVIOUS_LEDGER_STEP = 1000     # Ledgers between snapshots when walking back
NEWEST_LEDGER_STEP = 1500       # Ledgers between snapshots when walking forward

# Airdrop report
AIRDROP_TX_PAGE_SIZE = 30
AIRDROP_LEDGER_WINDOW = 100_000  # How far back airdrop transactions are collected
NFT_PAGE_LIMIT = 100
