"""
Compact amount formatting for holder listings.
"""

import math
from typing import Optional

# SI prefixes from 1e-24 to 1e24; giga is shown as B (billion)
SI_PREFIXES = ["y", "z", "a", "f", "p", "n", "µ", "m", "", "k", "M", "B", "T", "P", "E", "Z", "Y"]


def format_amount(value: float, significant: int = 2) -> str:
    """Format with two significant digits and an SI suffix, e.g. 58900000 -> '59M'."""
    if value == 0:
        return f"{0:.{significant - 1}f}"
    if not math.isfinite(value):
        return str(value)

    rounded = float(f"{value:.{significant}g}")
    exponent = int(math.floor(math.log10(abs(rounded))))
    group = max(-8, min(8, exponent // 3))
    scaled = rounded / 10 ** (3 * group)
    decimals = max(0, significant - 1 - (exponent - 3 * group))
    return f"{scaled:.{decimals}f}{SI_PREFIXES[group + 8]}"


def supply_share(amount: float, supply: float) -> Optional[str]:
    """Percentage of total supply with one decimal, or None without a supply."""
    if not supply:
        return None
    return f"{amount * 100 / supply:.1f}%"


def describe_account(rank: int, account: str, now: float, max_holdings: float, supply: float) -> str:
    """Listing label: rank, address, current (and max if different) holdings, share."""
    amounts = format_amount(now)
    if now != max_holdings:
        amounts += f", max {format_amount(max_holdings)}"
    label = f"{rank}: {account} ({amounts})"
    share = supply_share(now, supply)
    if share is not None:
        label += f" {share}"
    return label
