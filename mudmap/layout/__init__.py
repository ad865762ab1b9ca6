"""
Layout Module for MudMap
Deterministic layer placement for insurance tower diagrams

Public API:
    - compute_groups: Partition and sort layers by type
    - render_layers: Place layers as percent rectangles
    - LayoutEngine: Layout with aggregates and statistics
    - Layer: Input layer record
    - LayerElement: Placed rectangle
    - LayerGroups: Partitioned layers
    - TowerLayout: Complete layout solution
"""

from .engine import LayoutEngine, compute_groups, render_layers, find_matching_xol
from .types import (
    Layer,
    LayerElement,
    LayerGroups,
    TowerLayout,
)

__all__ = [
    'LayoutEngine',
    'compute_groups',
    'render_layers',
    'find_matching_xol',
    'Layer',
    'LayerElement',
    'LayerGroups',
    'TowerLayout',
]
