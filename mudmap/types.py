"""
Type definitions for MudMap

Common types used throughout the package for type checking and documentation.
"""

from __future__ import annotations
from typing import TypedDict, Literal, Dict, Union, Tuple
from pathlib import Path

# Type aliases
PathLike = Union[str, Path]
"""File path as string or Path object"""

LayerType = Literal['quotashare', 'primary', 'xol']
"""Placement rule of a layer: quota-share, primary or excess-of-loss"""

LAYER_TYPES: Tuple[str, ...] = ('quotashare', 'primary', 'xol')
"""All valid layer types, in placement order"""

RawValue = Union[str, int, float, None]
"""Layer field as entered: number, numeric string (maybe comma formatted) or empty"""

RGBTuple = Tuple[float, float, float]
"""RGB color normalized to 0-1"""


# Structured data types

class LayerRecord(TypedDict, total=False):
    """
    Raw layer fields as stored in intermediate files

    All values except id are kept exactly as entered.
    """
    id: int
    insurer: str
    limit: RawValue
    attachment: RawValue
    premium: RawValue
    share: RawValue
    layer_type: LayerType
    color: str


ExportRow = Dict[str, Union[str, float]]
"""One row of the exported Layers sheet, keyed by column title"""
