"""
Layout types for MudMap
Data structures for layout engine input and results

Layers and placements are immutable (frozen) for safety and testability.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..types import LayerRecord, RawValue
from ..utils import parse_number


@dataclass(frozen=True)
class Layer:
    """
    One coverage band of the insurance tower

    Numeric fields keep the raw value as entered (number, numeric string,
    comma formatted string or empty). They are coerced only when a layout
    is computed.

    Attributes:
        id: Unique identifier assigned by the creating collection
        layer_type: 'quotashare', 'primary' or 'xol'
        limit: Vertical extent as currency amount
        attachment: For xol layers, the limit of the primary below
        premium: Sort key within a type group, shown on quota-share labels
        share: Percentage of total width
        color: Base color (hsl(), hex or matplotlib name)
        insurer: Insurer name for labels
    """
    id: int
    layer_type: str = 'primary'
    limit: RawValue = ''
    attachment: RawValue = ''
    premium: RawValue = ''
    share: RawValue = ''
    color: str = ''
    insurer: str = ''

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'Layer':
        """Build a layer from a dict with raw field names (extra keys ignored)"""
        return cls(
            id=int(record['id']),
            layer_type=str(record.get('layer_type', 'primary')),
            limit=record.get('limit', ''),
            attachment=record.get('attachment', ''),
            premium=record.get('premium', ''),
            share=record.get('share', ''),
            color=str(record.get('color', '') or ''),
            insurer=str(record.get('insurer', '') or ''),
        )

    def to_record(self) -> LayerRecord:
        """Raw field dict, inverse of from_record"""
        return {
            'id': self.id,
            'insurer': self.insurer,
            'limit': self.limit,
            'attachment': self.attachment,
            'premium': self.premium,
            'share': self.share,
            'layer_type': self.layer_type,  # type: ignore[typeddict-item]
            'color': self.color,
        }


@dataclass(frozen=True)
class LayerElement:
    """
    Placed rectangle for a single layer

    Geometry is in percent of the diagram: left/width along the share
    axis, bottom/height along the limit axis.

    Attributes:
        key: 'qs-<id>', 'p-<id>' or 'x-<id>'
        type: Layer type of the source layer
        height: Vertical extent (% of total limit)
        width: Horizontal extent (% share)
        bottom: Vertical offset (% of total limit)
        left: Horizontal offset (%)
        color: Fill color as '#rrggbbaa'
        border_color: Base color of the source layer
        z_index: Stacking order, set for rectangles drawn above others
        insurer: Insurer label
        premium: Parsed premium
        share: Parsed share
        limit: Parsed limit
    """
    key: str
    type: str
    height: float
    width: float
    bottom: float
    left: float
    color: str
    border_color: str
    insurer: str
    premium: float
    share: float
    limit: float
    z_index: Optional[int] = None

    @property
    def top(self) -> float:
        """Upper edge (%)"""
        return self.bottom + self.height

    @property
    def right(self) -> float:
        """Right edge (%)"""
        return self.left + self.width

    @property
    def layer_id(self) -> int:
        """Id of the source layer, recovered from the key"""
        return int(self.key.split('-', 1)[1])

    def style(self) -> Dict[str, str]:
        """CSS-like style mapping with percent strings"""
        style = {
            'height': f"{self.height}%",
            'width': f"{self.width}%",
            'bottom': f"{self.bottom}%",
            'left': f"{self.left}%",
            'backgroundColor': self.color,
            'borderColor': self.border_color,
        }
        if self.z_index is not None:
            style['zIndex'] = str(self.z_index)
        return style


@dataclass(frozen=True)
class LayerGroups:
    """
    Layers partitioned by type, each group sorted by ascending premium

    Attributes:
        quota_share_layers: Quota-share layers
        primary_layers: Primary layers
        xol_layers: Excess-of-loss layers
        quota_share_width: Sum of quota-share shares (informational)
    """
    quota_share_layers: Tuple[Layer, ...]
    primary_layers: Tuple[Layer, ...]
    xol_layers: Tuple[Layer, ...]
    quota_share_width: float

    @property
    def n_layers(self) -> int:
        """Number of layers in all three groups"""
        return len(self.quota_share_layers) + len(self.primary_layers) + len(self.xol_layers)


@dataclass
class TowerLayout:
    """
    Complete layout for one tower

    This is the output of LayoutEngine and input to TowerPlotter and the writers.

    Attributes:
        elements: Placed rectangles in emission order
        groups: Partitioned and sorted layers
        total_limit: Parsed total policy limit
        total_share: Sum of shares over all layers
        share_warning_threshold: Total share above which a warning applies
        layout_stats: Statistics about the layout
    """
    elements: List[LayerElement]
    groups: LayerGroups
    total_limit: float
    total_share: float
    share_warning_threshold: float = 100.0
    layout_stats: Dict[str, Any] = field(default_factory=dict)

    @property
    def n_elements(self) -> int:
        """Number of placed rectangles"""
        return len(self.elements)

    @property
    def share_exceeded(self) -> bool:
        """Whether total share exceeds the warning threshold"""
        return self.total_share > self.share_warning_threshold

    @property
    def placed_layer_ids(self) -> List[int]:
        """Ids of layers that produced a rectangle"""
        return [element.layer_id for element in self.elements]

    @property
    def undrawn_xol_layers(self) -> List[Layer]:
        """XoL layers that were not drawn above any primary"""
        placed = {e.layer_id for e in self.elements if e.type == 'xol'}
        return [layer for layer in self.groups.xol_layers if layer.id not in placed]

    @property
    def unmatched_xol_layers(self) -> List[Layer]:
        """Undrawn xol layers whose attachment equals no placed primary limit"""
        limits = {e.limit for e in self.elements if e.type == 'primary'}
        return [layer for layer in self.undrawn_xol_layers
                if parse_number(layer.attachment) not in limits]

    @property
    def blocked_xol_layers(self) -> List[Layer]:
        """
        Undrawn xol layers that do sit on a placed primary

        Either their own limit/share/attachment is not positive, or an
        xol with a lower premium took the slot above that primary.
        """
        unmatched = {layer.id for layer in self.unmatched_xol_layers}
        return [layer for layer in self.undrawn_xol_layers if layer.id not in unmatched]

    def get_elements_by_type(self, layer_type: str) -> List[LayerElement]:
        """Get all rectangles for one layer type"""
        return [e for e in self.elements if e.type == layer_type]
