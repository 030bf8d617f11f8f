"""
Registry of tracked tokens and NFT collections.
"""

import os
from typing import Dict
from dotenv import load_dotenv

from holders.core.exceptions import UnknownTokenError
from holders.core.models import NFTCollection, TokenDescriptor

load_dotenv()

TOKENS: Dict[str, TokenDescriptor] = {
    "ellis": TokenDescriptor(
        identifier="ellis",
        supply=58_900_000,
        prefix="ellis",
        issuer=os.getenv("ELLIS")
    ),
    "parry": TokenDescriptor(
        identifier="parry",
        supply=549_000_000,
        prefix="parry",
        issuer=os.getenv("PARRY"),
        currency="5041525259000000000000000000000000000000"
    ),
}

NFT_COLLECTIONS: Dict[str, NFTCollection] = {
    "parry": NFTCollection(
        identifier="parry",
        issuer="rnduQyj5e5KDrJjHrgJc8VkrnaNCJVB4LC",
        taxon=33,
        airdrop_address="rPARRYa275XRBtPQ4wTxvHJuzYjNFS6ibR",
        airdrop_currency="5041525259000000000000000000000000000000",
        prefix="parrypixel"
    ),
}


def get_token(identifier: str) -> TokenDescriptor:
    """Look up a token by identifier (case-insensitive)."""
    token = TOKENS.get((identifier or "").strip().lower())
    if token is None:
        raise UnknownTokenError(
            f"Unknown token '{identifier}'. Available tokens: {', '.join(sorted(TOKENS))}"
        )
    return token


def get_collection(identifier: str) -> NFTCollection:
    collection = NFT_COLLECTIONS.get((identifier or "").strip().lower())
    if collection is None:
        raise UnknownTokenError(
            f"Unknown NFT collection '{identifier}'. Available collections: {', '.join(sorted(NFT_COLLECTIONS))}"
        )
    return collection
