"""
Layout Engine for MudMap
Pure layout logic for insurance towers

Algorithm:
1. Partition layers by type (quota-share, primary, xol)
2. Sort each group by ascending premium
3. Place left to right: quota-share layers side by side, then each primary
   with its matching xol layer stacked in the same band
"""
from __future__ import annotations
from typing import Iterable, List, Optional, Sequence
import logging

from ..colors import to_rgba_hex
from ..config import PlotConfig
from ..types import RawValue
from ..utils import parse_number, total_share
from .types import Layer, LayerElement, LayerGroups, TowerLayout

logger = logging.getLogger(__name__)

# Paired xol rectangles stack above the primary band they sit on
XOL_Z_INDEX = 2


def _premium_key(layer: Layer) -> float:
    return parse_number(layer.premium)


def compute_groups(layers: Iterable[Layer]) -> LayerGroups:
    """
    Partition layers by type and sort each group by premium

    Sorting is stable, so layers with equal premium keep their input order.
    Layers with an unknown type belong to no group.

    Args:
        layers: Layer records in any order

    Returns:
        LayerGroups with the three sorted groups and the quota-share width
    """
    layers = list(layers)
    quota_share = sorted((l for l in layers if l.layer_type == 'quotashare'), key=_premium_key)
    primary = sorted((l for l in layers if l.layer_type == 'primary'), key=_premium_key)
    xol = sorted((l for l in layers if l.layer_type == 'xol'), key=_premium_key)

    return LayerGroups(
        quota_share_layers=tuple(quota_share),
        primary_layers=tuple(primary),
        xol_layers=tuple(xol),
        quota_share_width=sum(parse_number(l.share) for l in quota_share)
    )


def _make_element(
    key: str,
    layer: Layer,
    limit: float,
    share: float,
    bottom: float,
    left: float,
    total_limit: float,
    fill_alpha: float,
    z_index: Optional[int] = None
) -> LayerElement:
    return LayerElement(
        key=key,
        type=layer.layer_type,
        height=limit / total_limit * 100,
        width=share,
        bottom=bottom,
        left=left,
        color=to_rgba_hex(layer.color, fill_alpha),
        border_color=layer.color,
        insurer=layer.insurer,
        premium=parse_number(layer.premium),
        share=share,
        limit=limit,
        z_index=z_index
    )


def find_matching_xol(primary_limit: float, xol_layers: Sequence[Layer]) -> Optional[Layer]:
    """
    First xol layer whose attachment equals the primary limit

    Exact numeric equality, no tolerance. The first match is returned even
    if it cannot be drawn.
    """
    for xol in xol_layers:
        if parse_number(xol.attachment) == primary_limit:
            return xol
    return None


def render_layers(
    layers: Iterable[Layer],
    total_limit: RawValue,
    fill_alpha: float = PlotConfig.fill_alpha
) -> List[LayerElement]:
    """
    Compute rectangle placements for a tower

    Pure function: same input, same output, no state kept between calls.
    A layer is drawn only if its limit, its share and the total limit are
    all positive; skipped layers do not move the horizontal position.

    Args:
        layers: Layer records in any order
        total_limit: Total policy limit (number or comma formatted string)
        fill_alpha: Opacity of rectangle fills

    Returns:
        LayerElements in emission order (each paired xol right after its primary)
    """
    groups = compute_groups(layers)
    total = parse_number(total_limit)
    elements: List[LayerElement] = []

    current_position = 0.0

    # Quota-share layers side by side on the floor
    for layer in groups.quota_share_layers:
        limit = parse_number(layer.limit)
        share = parse_number(layer.share)

        if limit > 0 and share > 0 and total > 0:
            elements.append(_make_element(
                f"qs-{layer.id}", layer, limit, share,
                bottom=0.0, left=current_position,
                total_limit=total, fill_alpha=fill_alpha
            ))
            current_position += share

    # Primary layers, each with at most one xol layer on top
    for primary in groups.primary_layers:
        primary_limit = parse_number(primary.limit)
        primary_share = parse_number(primary.share)

        if not (primary_limit > 0 and primary_share > 0 and total > 0):
            continue

        elements.append(_make_element(
            f"p-{primary.id}", primary, primary_limit, primary_share,
            bottom=0.0, left=current_position,
            total_limit=total, fill_alpha=fill_alpha
        ))

        xol = find_matching_xol(primary_limit, groups.xol_layers)
        if xol is not None:
            xol_limit = parse_number(xol.limit)
            xol_share = parse_number(xol.share)
            attachment = parse_number(xol.attachment)

            if xol_limit > 0 and xol_share > 0 and attachment > 0:
                elements.append(_make_element(
                    f"x-{xol.id}", xol, xol_limit, xol_share,
                    bottom=attachment / total * 100, left=current_position,
                    total_limit=total, fill_alpha=fill_alpha,
                    z_index=XOL_Z_INDEX
                ))

        current_position += primary_share

    return elements


class LayoutEngine:
    """
    Layout engine for tower diagrams

    Thin wrapper around compute_groups/render_layers that adds the
    aggregate figures (total share, warning flag) and layout statistics.
    Holds configuration only, never layer state.
    """

    def __init__(self, config=None):
        """
        Initialize layout engine

        Args:
            config: Plot configuration (fill alpha, share warning threshold).
                    Defaults to PlotConfig().
        """
        self.config = config or PlotConfig()

    def calculate_layout(self, layers: Iterable[Layer], total_limit: RawValue) -> TowerLayout:
        """
        Calculate layout for all layers

        Args:
            layers: Layer records (a collection snapshot)
            total_limit: Total policy limit

        Returns:
            TowerLayout with elements, groups and statistics
        """
        layers = list(layers)
        total = parse_number(total_limit)
        groups = compute_groups(layers)
        elements = render_layers(layers, total, fill_alpha=self.config.fill_alpha)

        layout = TowerLayout(
            elements=elements,
            groups=groups,
            total_limit=total,
            total_share=total_share(layers),
            share_warning_threshold=self.config.share_warning_threshold
        )

        placed = set(layout.placed_layer_ids)
        floor_layers = groups.quota_share_layers + groups.primary_layers
        layout.layout_stats = {
            'n_layers': len(layers),
            'n_quota_share': len(groups.quota_share_layers),
            'n_primary': len(groups.primary_layers),
            'n_xol': len(groups.xol_layers),
            'n_elements': len(elements),
            'skipped_layer_ids': [l.id for l in floor_layers if l.id not in placed],
            'unmatched_xol_ids': [l.id for l in layout.unmatched_xol_layers],
            'blocked_xol_ids': [l.id for l in layout.blocked_xol_layers],
            'final_position': sum(e.width for e in elements if e.type != 'xol'),
            'quota_share_width': groups.quota_share_width,
        }

        logger.info(f"Calculated layout for {len(layers)} layers "
                    f"({len(groups.quota_share_layers)} quota-share, "
                    f"{len(groups.primary_layers)} primary, {len(groups.xol_layers)} xol): "
                    f"{len(elements)} rectangles")
        logger.debug(f"Layout stats: {layout.layout_stats}")

        if total <= 0:
            logger.warning("Total policy limit is not positive; nothing to place")
        if layout.share_exceeded:
            logger.warning(f"Total share exceeds {self.config.share_warning_threshold:g}% "
                           f"({layout.total_share:.2f}%)")

        return layout
