"""
I/O Writers

Handles writing of layers, placements and summaries in various formats.
"""

from __future__ import annotations
from typing import BinaryIO, Iterable, List, Optional, Union
from pathlib import Path
import logging

import numpy as np
import pandas as pd

from ..config import ExportConfig
from ..layout.types import Layer, TowerLayout
from ..types import ExportRow, PathLike, RawValue
from ..utils import format_axis_label, parse_number, strip_commas
from .readers import EXPORT_COLUMNS, LAYER_COLUMNS, METADATA_PREFIX

logger = logging.getLogger(__name__)

LAYOUT_COLUMNS = [
    'key', 'layer_id', 'type', 'insurer', 'left', 'bottom', 'width', 'height',
    'z_index', 'limit', 'premium', 'share', 'color', 'border_color'
]


def layer_to_row(layer: Layer) -> ExportRow:
    """
    Flatten a layer into an export row

    Numbers are parsed; values that cannot be parsed are left blank (NaN).
    """
    titles = {field: title for title, field in EXPORT_COLUMNS.items()}
    return {
        titles['layer_type']: layer.layer_type,
        titles['insurer']: layer.insurer,
        titles['limit']: parse_number(layer.limit, default=np.nan),
        titles['attachment']: parse_number(layer.attachment, default=np.nan),
        titles['premium']: parse_number(layer.premium, default=np.nan),
        titles['share']: parse_number(layer.share, default=np.nan),
        titles['color']: layer.color,
    }


def layers_to_frame(layers: Iterable[Layer]) -> pd.DataFrame:
    """Export rows for all layers, in collection order"""
    return pd.DataFrame([layer_to_row(layer) for layer in layers], columns=list(EXPORT_COLUMNS))


class ExcelWriter:
    """Writes the Layers sheet as an .xlsx workbook"""

    def __init__(self, config: Optional[ExportConfig] = None):
        """
        Initialize Excel writer

        Args:
            config: Export configuration (sheet name)
        """
        self.config = config or ExportConfig()

    def write(self, layers: Iterable[Layer], output: Union[PathLike, BinaryIO]) -> None:
        """
        Write layers to a workbook

        Args:
            layers: Layers in collection order
            output: Output path or binary buffer
        """
        if isinstance(output, (str, Path)):
            Path(output).parent.mkdir(parents=True, exist_ok=True)

        frame = layers_to_frame(layers)
        with pd.ExcelWriter(output, engine='openpyxl') as workbook:
            frame.to_excel(workbook, sheet_name=self.config.sheet_name, index=False)

        if isinstance(output, (str, Path)):
            logger.info(f"Workbook saved to {output} ({len(frame)} layers)")


def write_excel(layers, output, config=None):
    """
    Convenience function to write the Layers workbook

    Args:
        layers: Layers in collection order
        output: Output path or binary buffer
        config: ExportConfig instance
    """
    ExcelWriter(config).write(layers, output)


class IntermediateWriter:
    """Writes layers in full internal format for downstream commands"""

    @staticmethod
    def write(layers: Iterable[Layer], output_file: PathLike, total_limit: RawValue) -> None:
        """
        Write raw layer fields with the total limit as metadata

        Args:
            layers: Layers to save
            output_file: Path to output file
            total_limit: Total policy limit
        """
        Path(output_file).parent.mkdir(parents=True, exist_ok=True)

        frame = pd.DataFrame([layer.to_record() for layer in layers], columns=LAYER_COLUMNS)

        with open(output_file, 'w', encoding='utf-8', newline='') as f:
            f.write(f"{METADATA_PREFIX}{strip_commas(total_limit)}\n")
            frame.to_csv(f, sep='\t', index=False)

        logger.info(f"Layers saved to {output_file}")


def write_intermediate(layers, output_file, total_limit):
    """Convenience function"""
    IntermediateWriter.write(layers, output_file, total_limit)


class LayoutWriter:
    """Writes computed placements in TSV format"""

    @staticmethod
    def to_frame(layout: TowerLayout) -> pd.DataFrame:
        """One row per placed rectangle, in emission order"""
        rows = [{
            'key': e.key,
            'layer_id': e.layer_id,
            'type': e.type,
            'insurer': e.insurer,
            'left': e.left,
            'bottom': e.bottom,
            'width': e.width,
            'height': e.height,
            'z_index': e.z_index,
            'limit': e.limit,
            'premium': e.premium,
            'share': e.share,
            'color': e.color,
            'border_color': e.border_color,
        } for e in layout.elements]
        return pd.DataFrame(rows, columns=LAYOUT_COLUMNS)

    def write(self, layout: TowerLayout, output_file: PathLike) -> None:
        """
        Write placements to TSV

        Args:
            layout: Computed layout
            output_file: Path to output TSV file
        """
        Path(output_file).parent.mkdir(parents=True, exist_ok=True)

        if layout.n_elements == 0:
            logger.warning("No rectangles placed; writing header only")

        frame = self.to_frame(layout)
        frame['z_index'] = frame['z_index'].astype('Int64')
        frame.to_csv(output_file, sep='\t', index=False, float_format='%.4f')
        logger.info(f"Placements saved to {output_file}")


def write_layout(layout, output_file):
    """Convenience function to write placements"""
    LayoutWriter().write(layout, output_file)


class SummaryWriter:
    """Writes a human-readable tower summary"""

    def write(self, layout: TowerLayout, output_file: PathLike, layers: Optional[Iterable[Layer]] = None) -> None:
        """
        Write layout summary

        Args:
            layout: Computed layout
            output_file: Path to output summary file
            layers: Layers in collection order, for the input table
        """
        Path(output_file).parent.mkdir(parents=True, exist_ok=True)

        groups = layout.groups
        stats = layout.layout_stats
        layers = list(layers) if layers is not None else list(
            groups.quota_share_layers + groups.primary_layers + groups.xol_layers)

        with open(output_file, 'w', encoding='utf-8') as f:
            f.write("MudMap Tower Summary\n")
            f.write("=" * 50 + "\n\n")

            f.write("Totals:\n")
            f.write("-" * 20 + "\n")
            f.write(f"Total policy limit: {format_axis_label(layout.total_limit)} "
                    f"({layout.total_limit:,.0f})\n")
            f.write(f"Total share: {layout.total_share:.2f}%\n")
            f.write(f"Quota-share width: {groups.quota_share_width:.2f}%\n")
            if layout.share_exceeded:
                f.write(f"WARNING: Total share exceeds {layout.share_warning_threshold:g}% "
                        f"({layout.total_share:.2f}%)\n")
            f.write("\n")

            f.write("Layers:\n")
            f.write("-" * 20 + "\n")
            f.write(f"Quota-share: {len(groups.quota_share_layers)}\n")
            f.write(f"Primary: {len(groups.primary_layers)}\n")
            f.write(f"Excess-of-loss: {len(groups.xol_layers)}\n")
            f.write(f"Rectangles placed: {layout.n_elements}\n\n")

            if layers:
                f.write(layers_to_frame(layers).to_string(index=False, na_rep=''))
                f.write("\n\n")

            f.write("Placements (% of diagram):\n")
            f.write("-" * 30 + "\n")
            if layout.elements:
                for e in layout.elements:
                    f.write(f"  {e.key:<8} {e.type:<10} left {e.left:6.2f}  bottom {e.bottom:6.2f}  "
                            f"width {e.width:6.2f}  height {e.height:6.2f}  {e.insurer}\n")
            else:
                f.write("No rectangles placed\n")
            f.write("\n")

            skipped: List[int] = stats.get('skipped_layer_ids', [])
            unmatched: List[int] = stats.get('unmatched_xol_ids', [])
            blocked: List[int] = stats.get('blocked_xol_ids', [])
            if skipped or unmatched or blocked:
                f.write("Not drawn:\n")
                f.write("-" * 20 + "\n")
                if skipped:
                    f.write(f"Layers without positive limit/share: {', '.join(map(str, skipped))}\n")
                if unmatched:
                    f.write(f"XoL layers without a matching primary: {', '.join(map(str, unmatched))}\n")
                if blocked:
                    f.write(f"XoL layers on a placed primary but not drawn: {', '.join(map(str, blocked))}\n")

        logger.info(f"Tower summary saved to {output_file}")


def write_summary(layout, output_file, layers=None):
    """
    Convenience function to write summary

    Args:
        layout: Computed layout
        output_file: Output summary file path
        layers: Layers in collection order
    """
    SummaryWriter().write(layout, output_file, layers)
