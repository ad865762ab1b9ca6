"""
Utility functions

Number parsing and formatting helpers shared by the layout engine,
the collection and the writers.
"""

from __future__ import annotations
from typing import Iterable, Optional, Union, TYPE_CHECKING
import math
import re

if TYPE_CHECKING:
    from .layout.types import Layer

NumberLike = Union[str, int, float, None]

# Leading decimal number, the same prefix a browser's parseFloat would accept
_LEADING_NUMBER = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')

# Thousands separator positions in a run of digits
_THOUSANDS = re.compile(r'\B(?=(\d{3})+(?!\d))')


def strip_commas(value: NumberLike) -> str:
    """
    Remove thousands separators from a user-entered number

    Args:
        value: Raw value, e.g. '1,000,000'

    Returns:
        String without commas, '' for empty input
    """
    if value is None or value == '':
        return ''
    return str(value).replace(',', '')


def parse_number(value: NumberLike, default: Optional[float] = 0.0) -> Optional[float]:
    """
    Best-effort numeric coercion

    Commas are stripped first, then the leading decimal number is read.
    Trailing garbage is ignored ('12abc' -> 12.0). Anything that does not
    start with a number yields the default.

    Args:
        value: Number, numeric string or None
        default: Returned when no number can be read

    Returns:
        Parsed float or default
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return default
        return number if math.isfinite(number) else default

    match = _LEADING_NUMBER.match(strip_commas(value))
    if not match:
        return default

    number = float(match.group(1))
    return number if math.isfinite(number) else default


def format_number_with_commas(value: NumberLike) -> str:
    """
    Insert thousands separators for display (1000000 -> '1,000,000')

    Only the integer part is grouped; decimals are left as typed.
    """
    if value is None or value == '':
        return ''
    text = strip_commas(value)
    integer, dot, fraction = text.partition('.')
    return _THOUSANDS.sub(',', integer) + dot + fraction


def format_axis_label(value: Optional[float]) -> str:
    """
    Format a currency amount with K/M/B suffix (e.g. '$1.2M')

    Args:
        value: Amount in USD

    Returns:
        Short currency label
    """
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return '$0'
    if value >= 1e9:
        return f"${value / 1e9:.1f}B"
    if value >= 1e6:
        return f"${value / 1e6:.1f}M"
    if value >= 1e3:
        return f"${value / 1e3:.1f}K"
    return f"${value:.0f}"


def total_share(layers: Iterable['Layer']) -> float:
    """Sum of numeric shares across all layers, whatever their type"""
    return sum(parse_number(layer.share) for layer in layers)
