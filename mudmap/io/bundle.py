"""
Export bundle

Packs the Layers workbook and the rendered diagram into one ZIP archive.
"""

from __future__ import annotations
from typing import Iterable, Optional
from io import BytesIO
from pathlib import Path
import logging
import zipfile

from ..config import PlotConfig
from ..layout.types import Layer
from ..types import PathLike, RawValue
from ..visualizer import TowerPlotter
from .writers import ExcelWriter

logger = logging.getLogger(__name__)


class ExportPackager:
    """Writes workbook + PNG image into a ZIP archive"""

    def __init__(self, config: Optional[PlotConfig] = None, plotter: Optional[TowerPlotter] = None) -> None:
        """
        Initialize packager

        Args:
            config: Plot configuration (export names, image resolution)
            plotter: Renderer to use (default: TowerPlotter(config))
        """
        self.config: PlotConfig = config or PlotConfig()
        self.plotter: TowerPlotter = plotter or TowerPlotter(self.config)

    def write(
        self,
        layers: Iterable[Layer],
        total_limit: RawValue,
        output_file: Optional[PathLike] = None,
        title: Optional[str] = None
    ) -> Path:
        """
        Build the export archive

        Args:
            layers: Layers in collection order
            total_limit: Total policy limit
            output_file: Archive path (default: archive name from config, in cwd)
            title: Plot title

        Returns:
            Path of the written archive
        """
        layers = list(layers)
        export = self.config.export
        output_path = Path(output_file) if output_file else Path(export.archive_name)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        workbook = BytesIO()
        ExcelWriter(export).write(layers, workbook)
        image = self.plotter.render_png(layers, total_limit, title=title)

        with zipfile.ZipFile(output_path, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(export.workbook_name, workbook.getvalue())
            archive.writestr(export.image_name, image)

        logger.info(f"Export bundle saved to {output_path}")
        logger.debug(f"  {export.workbook_name}: {len(workbook.getvalue())} bytes, {export.image_name}: {len(image)} bytes")
        return output_path


def write_export_bundle(layers, total_limit, output_file=None, config=None, title=None):
    """
    Convenience function to write the export archive

    Args:
        layers: Layers in collection order
        total_limit: Total policy limit
        output_file: Archive path
        config: PlotConfig instance
        title: Plot title

    Returns:
        Path of the written archive
    """
    return ExportPackager(config).write(layers, total_limit, output_file, title=title)
