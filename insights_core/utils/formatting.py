"""Display helpers shared by report consumers."""

from typing import Optional


def format_number(value: float) -> str:
    """
    Compact number label.

    Example:
        format_number(1234)      # "1.2K"
        format_number(2500000)   # "2.5M"
        format_number(999)       # "999"
    """
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,}"


def format_percentage(value: Optional[float], signed: bool = True) -> str:
    """
    Percentage label for growth and benchmark badges.

    None renders as "n/a" so an unavailable value never reads as "0%".
    """
    if value is None:
        return "n/a"
    if signed and value > 0:
        return f"+{value:.1f}%"
    return f"{value:.1f}%"
