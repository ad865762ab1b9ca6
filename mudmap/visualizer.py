"""
Tower visualizer

Draws the insurance tower as a 2-D diagram: share (%) along the x axis,
limit (currency) along the y axis, one rectangle per placed layer.
"""

from __future__ import annotations
from typing import Iterable, Optional, Tuple
from io import BytesIO
from pathlib import Path
import logging

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as patches
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from .colors import parse_color
from .config import PlotConfig
from .layout import Layer, LayerElement, LayoutEngine, TowerLayout
from .types import PathLike, RawValue
from .utils import format_axis_label

logger = logging.getLogger(__name__)


def _plain(text: str) -> str:
    """Escape dollar signs so matplotlib does not switch to mathtext"""
    return text.replace('$', r'\$')


class TowerPlotter:
    """
    Creates tower diagrams from layer collections

    The diagram mirrors the on-screen editor: quota-share and primary
    layers on the floor, xol layers stacked on their primary.
    """

    def __init__(self, config: Optional[PlotConfig] = None) -> None:
        """
        Initialize TowerPlotter

        Args:
            config: Visual configuration for plot styling. If None, uses default settings.

        Example:
            >>> plotter = TowerPlotter()
            >>> plotter = TowerPlotter(PlotConfig.publication())
        """
        self.config: PlotConfig = config or PlotConfig()
        self.layout_engine = LayoutEngine(self.config)

    def element_label(self, element: LayerElement) -> str:
        """
        Three-line label: insurer, amount, share

        Quota-share rectangles show their premium, primary and xol
        rectangles show their limit.
        """
        amount = element.premium if element.type == 'quotashare' else element.limit
        return f"{element.insurer}\n{format_axis_label(amount)}\n{element.share:g}%"

    def plot(
        self,
        layers: Iterable[Layer],
        total_limit: RawValue,
        output_file: Optional[PathLike] = None,
        title: Optional[str] = None,
        figsize: Optional[Tuple[float, float]] = None,
        show: bool = False
    ) -> Figure:
        """
        Generate the tower diagram

        Args:
            layers: Layer records (a collection snapshot)
            total_limit: Total policy limit (number or comma formatted string)
            output_file: Path to save figure (not saved if None)
            title: Plot title (config default if None)
            figsize: Figure size in inches (width, height)
            show: Whether to display the plot

        Returns:
            matplotlib Figure object

        Example:
            >>> fig = plotter.plot(collection.snapshot(), '3,000,000', 'tower.png')
        """
        layout = self.layout_engine.calculate_layout(layers, total_limit)

        fig, ax = plt.subplots(figsize=figsize or self.config.figure_size)

        self._draw_grid(ax, layout.total_limit)
        for element in layout.elements:
            self._draw_element(ax, element)

        ax.set_title(_plain(title or self.config.title), fontsize=self.config.title_fontsize)
        ax.set_xlabel('Share (%)')
        ax.set_ylabel('Limit (USD)')

        self._draw_summary(fig, layout)
        fig.tight_layout(rect=(0, 0.08, 1, 1))

        if output_file:
            Path(output_file).parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(output_file, dpi=self.config.dpi, bbox_inches='tight',
                        facecolor='white', edgecolor='none')
            logger.info(f"Plot saved to {output_file}")

        if show:
            plt.show()

        return fig

    def render_png(self, layers: Iterable[Layer], total_limit: RawValue, title: Optional[str] = None) -> bytes:
        """
        Render the diagram to PNG bytes for packaging

        Resolution is dpi * image_scale. The figure is closed afterwards.
        """
        fig = self.plot(layers, total_limit, title=title)
        buffer = BytesIO()
        try:
            fig.savefig(buffer, format='png', dpi=self.config.dpi * self.config.image_scale,
                        bbox_inches='tight', facecolor='white', edgecolor='none')
        finally:
            plt.close(fig)
        return buffer.getvalue()

    def _draw_grid(self, ax: Axes, total_limit: float) -> None:
        """Percent grid with share labels below and currency labels on the left"""
        cfg = self.config
        ticks = np.asarray(cfg.grid_percents, dtype=float)

        ax.set_xlim(0, 100)
        ax.set_ylim(0, 100)
        ax.set_xticks(ticks)
        ax.set_xticklabels([f"{p:g}%" for p in ticks], fontsize=cfg.tick_fontsize)
        ax.set_yticks(ticks)
        ax.set_yticklabels([_plain(format_axis_label(total_limit * p / 100)) for p in ticks],
                           fontsize=cfg.tick_fontsize)

        ax.set_axisbelow(True)
        ax.grid(True, color=cfg.grid_color, linewidth=cfg.grid_linewidth)
        for spine in ax.spines.values():
            spine.set_edgecolor('#d1d5db')

    def _draw_element(self, ax: Axes, element: LayerElement) -> None:
        """One filled rectangle with its centred label"""
        cfg = self.config
        zorder = 1 + (element.z_index or 0)

        rect = patches.Rectangle(
            (element.left, element.bottom), element.width, element.height,
            facecolor=element.color,
            edgecolor=parse_color(element.border_color),
            linewidth=cfg.border_linewidth,
            zorder=zorder
        )
        ax.add_patch(rect)

        ax.text(element.left + element.width / 2, element.bottom + element.height / 2,
                _plain(self.element_label(element)),
                ha='center', va='center', fontsize=cfg.label_fontsize,
                zorder=zorder + 0.5, clip_on=True)

        logger.debug(f"Drew {element.key}: left={element.left:.2f} bottom={element.bottom:.2f} "
                     f"width={element.width:.2f} height={element.height:.2f}")

    def _draw_summary(self, fig: Figure, layout: TowerLayout) -> None:
        """Footer with total limit and share, plus the share warning"""
        cfg = self.config
        summary = (f"Total Policy Limit: {format_axis_label(layout.total_limit)}    "
                   f"Total Share: {layout.total_share:.2f}%")
        fig.text(0.01, 0.02, _plain(summary), fontsize=cfg.summary_fontsize, ha='left', va='bottom')

        if layout.share_exceeded:
            fig.text(0.99, 0.02,
                     f"Total share exceeds {layout.share_warning_threshold:g}% ({layout.total_share:.2f}%)",
                     fontsize=cfg.summary_fontsize, ha='right', va='bottom',
                     color=cfg.warning_color, fontweight='bold')
