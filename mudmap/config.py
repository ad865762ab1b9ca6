"""
MudMap Configuration
Plot, export and color settings as plain dataclasses
"""
from dataclasses import dataclass, field
from typing import Tuple


@dataclass
class ColorConfig:
    """
    Color assignment for newly created layers
    """

    saturation: float = 70.0
    """HSL saturation (%) used by the random hue policy"""

    lightness: float = 50.0
    """HSL lightness (%) used by the random hue policy"""

    fallback_color: str = '#808080'
    """Color used when a layer color cannot be parsed"""


@dataclass
class ExportConfig:
    """
    File names used by the export bundle
    """

    sheet_name: str = 'Layers'
    """Worksheet name in the exported workbook"""

    workbook_name: str = 'MudMap_Layers.xlsx'
    """Workbook member name inside the ZIP archive"""

    image_name: str = 'MudMap_Visualization.png'
    """Image member name inside the ZIP archive"""

    archive_name: str = 'MudMap_Export.zip'
    """Default archive file name"""


@dataclass
class PlotConfig:
    """
    Complete plot configuration for the tower diagram
    """

    # ============================================================
    # SUB-CONFIGURATIONS
    # ============================================================
    colors: ColorConfig = field(default_factory=ColorConfig)
    """Color configuration"""

    export: ExportConfig = field(default_factory=ExportConfig)
    """Export configuration"""

    # ============================================================
    # LAYER RECTANGLES
    # ============================================================
    fill_alpha: float = 0xb3 / 255
    """Fill opacity of layer rectangles (border stays opaque)"""

    border_linewidth: float = 1.0
    """Border width of layer rectangles (px)"""

    label_fontsize: int = 7
    """Font size for the insurer/amount/share label inside each rectangle"""

    # ============================================================
    # GRID
    # ============================================================
    grid_percents: Tuple[int, ...] = (0, 25, 50, 75, 100)
    """Positions of vertical and horizontal grid lines (% of width/height)"""

    grid_color: str = '#e5e7eb'
    """Grid line color"""

    grid_linewidth: float = 0.8
    """Grid line width (px)"""

    tick_fontsize: int = 9
    """Font size for axis labels"""

    # ============================================================
    # SUMMARY & WARNINGS
    # ============================================================
    share_warning_threshold: float = 100.0
    """Total share (%) above which a warning is shown"""

    warning_color: str = '#dc2626'
    """Color of the share warning text"""

    summary_fontsize: int = 10
    """Font size of the summary footer"""

    # ============================================================
    # FIGURE SETTINGS
    # ============================================================
    figure_size: Tuple[float, float] = (12.0, 6.0)
    """Figure size in inches (width, height)"""

    dpi: int = 150
    """DPI for saved figures"""

    image_scale: float = 2.0
    """Resolution multiplier for images packed into the export bundle"""

    title: str = 'MudMap Layer Configuration'
    """Default plot title"""

    title_fontsize: int = 14
    """Font size for main title"""

    # ============================================================
    # PRESET CONFIGURATIONS
    # ============================================================

    @classmethod
    def publication(cls) -> 'PlotConfig':
        """
        High-quality settings for printed reports

        - 600 DPI
        - Larger figure
        - Thicker borders

        Example:
            >>> config = PlotConfig.publication()
            >>> plotter = TowerPlotter(config)
        """
        config = cls()
        config.dpi = 600
        config.figure_size = (14.0, 7.0)
        config.border_linewidth = 1.5
        config.label_fontsize = 8
        return config

    @classmethod
    def presentation(cls) -> 'PlotConfig':
        """
        Settings optimized for slides

        - Lower DPI for smaller files
        - Larger fonts
        - More opaque fills
        """
        config = cls()
        config.dpi = 120
        config.figure_size = (10.0, 5.6)
        config.title_fontsize = 18
        config.label_fontsize = 10
        config.tick_fontsize = 12
        config.fill_alpha = 0.85
        return config

    @classmethod
    def compact(cls) -> 'PlotConfig':
        """Small figure for towers with many narrow layers"""
        config = cls()
        config.figure_size = (8.0, 4.0)
        config.label_fontsize = 5
        config.tick_fontsize = 7
        config.summary_fontsize = 8
        return config

    @classmethod
    def debug(cls) -> 'PlotConfig':
        """
        Settings for debugging placement issues

        - Opaque fills so overlaps are obvious
        - Dense grid every 10%
        """
        config = cls()
        config.fill_alpha = 1.0
        config.border_linewidth = 2.0
        config.grid_percents = tuple(range(0, 101, 10))
        return config

    @classmethod
    def preset(cls, name: str) -> 'PlotConfig':
        """
        Look up a preset by name ('default', 'publication', 'presentation', 'compact', 'debug')

        Raises:
            ValueError: If the preset is unknown
        """
        if name not in PRESET_NAMES:
            raise ValueError(f"Unknown plot preset: {name}. Use one of {', '.join(PRESET_NAMES)}")
        if name == 'default':
            return cls()
        return getattr(cls, name)()


PRESET_NAMES = ('default', 'publication', 'presentation', 'compact', 'debug')
"""Names accepted by PlotConfig.preset and the CLI --preset option"""
