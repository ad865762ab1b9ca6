"""
Layer colors

Color assignment policies for new layers and conversion of stored
color strings (CSS hsl() or anything matplotlib understands) to RGB.
"""

from __future__ import annotations
from typing import List, Optional, Protocol, Sequence
import colorsys
import itertools
import logging
import random
import re

from matplotlib import colors as mcolors

from .config import ColorConfig
from .types import RGBTuple

logger = logging.getLogger(__name__)

_HSL = re.compile(
    r'^\s*hsla?\(\s*([-+]?\d*\.?\d+)(?:deg)?\s*,\s*(\d*\.?\d+)%\s*,\s*(\d*\.?\d+)%\s*(?:,\s*[\d.]+%?\s*)?\)\s*$',
    re.IGNORECASE
)


class ColorPolicy(Protocol):
    """Anything that hands out a color for a newly created layer"""

    def next_color(self) -> str:
        ...


class RandomHueColorPolicy:
    """
    Random hue with fixed saturation and lightness

    Each policy owns its random generator, so a seeded policy gives a
    reproducible color sequence.
    """

    def __init__(self, config: Optional[ColorConfig] = None, seed: Optional[int] = None) -> None:
        self.config: ColorConfig = config or ColorConfig()
        self._rng = random.Random(seed)

    def next_color(self) -> str:
        hue = self._rng.random() * 360
        return f"hsl({hue:.1f}, {self.config.saturation:g}%, {self.config.lightness:g}%)"


class PaletteColorPolicy:
    """Cycles through a fixed palette (Tableau colors by default)"""

    def __init__(self, palette: Optional[Sequence[str]] = None) -> None:
        self.palette: List[str] = list(mcolors.TABLEAU_COLORS.values() if palette is None else palette)
        if not self.palette:
            raise ValueError("Palette must contain at least one color")
        self._cycle = itertools.cycle(self.palette)

    def next_color(self) -> str:
        return next(self._cycle)


def parse_color(color: Optional[str], fallback: str = ColorConfig.fallback_color) -> RGBTuple:
    """
    Convert a stored layer color to an RGB tuple

    Args:
        color: 'hsl(h, s%, l%)', hex string or matplotlib color name
        fallback: Color used when parsing fails

    Returns:
        (r, g, b) normalized to 0-1
    """
    if color:
        match = _HSL.match(str(color))
        if match:
            hue, saturation, lightness = (float(g) for g in match.groups())
            return colorsys.hls_to_rgb(
                (hue % 360) / 360,
                min(lightness, 100.0) / 100,
                min(saturation, 100.0) / 100
            )
        try:
            return mcolors.to_rgb(color)
        except ValueError:
            logger.debug(f"Unparseable color {color!r}, using {fallback}")
    return mcolors.to_rgb(fallback)


def to_rgba_hex(color: Optional[str], alpha: float = 1.0) -> str:
    """
    Convert a stored layer color to '#rrggbbaa'

    Args:
        color: Any color accepted by parse_color
        alpha: Opacity 0-1

    Returns:
        Hex string with alpha channel
    """
    r, g, b = parse_color(color)
    return mcolors.to_hex((r, g, b, alpha), keep_alpha=True)
