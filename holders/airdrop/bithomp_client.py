"""
Bithomp explorer API client for NFT ownership data.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from config.api_keys import BITHOMP_API_KEY, BITHOMP_API_URL, bithomp_headers
from config.settings import MAX_RETRIES, NFT_PAGE_LIMIT, REQUEST_TIMEOUT
from holders.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class BithompClient:
    def __init__(self, api_key: Optional[str] = BITHOMP_API_KEY, base_url: str = BITHOMP_API_URL,
                 session: Optional[requests.Session] = None):
        if not api_key:
            raise ConfigurationError("BITHOMP_API_KEY is required")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with retry logic."""
        session = requests.Session()
        retry_strategy = Retry(
            total=MAX_RETRIES,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def get_nfts(self, issuer: str, taxon: int, limit: int = NFT_PAGE_LIMIT) -> Dict[str, Any]:
        """Fetch the NFTs of one issuer/taxon collection."""
        response = self.session.get(
            f"{self.base_url}/v2/nfts",
            params={"issuer": issuer, "taxon": taxon, "limit": limit},
            headers=bithomp_headers(self.api_key),
            timeout=REQUEST_TIMEOUT
        )
        response.raise_for_status()
        payload = response.json()
        nfts: List = payload.get("nfts", [])
        logger.info(f"Fetched {len(nfts)} NFTs for issuer {issuer} taxon {taxon}")
        return payload
