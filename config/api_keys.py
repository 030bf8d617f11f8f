"""
API key configuration for external services.
These should be loaded from environment variables in production.
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

BITHOMP_API_KEY = os.getenv("BITHOMP_API_KEY")
BITHOMP_API_URL = os.getenv("BITHOMP_API_URL", "https://xrplexplorer.com/api")


def bithomp_headers(api_key: str) -> dict:
    return {
        "Content-Type": "application/json",
        "x-bithomp-token": api_key
    }
