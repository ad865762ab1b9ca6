"""MudMap: Insurance tower layout and visualization"""

from .config import PlotConfig, ExportConfig, ColorConfig
from .layout import Layer, LayerElement, LayoutEngine, compute_groups, render_layers
from .collection import LayerCollection
from .colors import RandomHueColorPolicy, PaletteColorPolicy
from . import utils
from .visualizer import TowerPlotter

__version__ = "0.1.0"
__all__ = ["PlotConfig", "ExportConfig", "ColorConfig", "Layer", "LayerElement", "LayoutEngine",
           "compute_groups", "render_layers", "LayerCollection", "RandomHueColorPolicy",
           "PaletteColorPolicy", "utils", "TowerPlotter"]
