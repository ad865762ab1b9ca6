"""I/O utilities for MudMap"""

from .readers import (
    LayerReader, read_layers, IntermediateReader, read_intermediate,
    normalize_layer_type, EXPORT_COLUMNS, LAYER_COLUMNS,
)
from .writers import (
    layer_to_row, layers_to_frame,
    ExcelWriter, write_excel,
    IntermediateWriter, write_intermediate,
    LayoutWriter, write_layout,
    SummaryWriter, write_summary,
)
from .bundle import ExportPackager, write_export_bundle

__all__ = [
    'LayerReader', 'read_layers',
    'IntermediateReader', 'read_intermediate',
    'normalize_layer_type', 'EXPORT_COLUMNS', 'LAYER_COLUMNS',
    'layer_to_row', 'layers_to_frame',
    'ExcelWriter', 'write_excel',
    'IntermediateWriter', 'write_intermediate',
    'LayoutWriter', 'write_layout',
    'SummaryWriter', 'write_summary',
    'ExportPackager', 'write_export_bundle']
