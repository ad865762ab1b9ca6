"""
I/O Readers

Handles reading of layer definitions from TSV, CSV and Excel files.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Tuple
from pathlib import Path
import logging
import re

import pandas as pd

from ..colors import ColorPolicy, PaletteColorPolicy
from ..layout.types import Layer
from ..types import LAYER_TYPES, PathLike

logger = logging.getLogger(__name__)

METADATA_PREFIX = '# total_limit='

LAYER_COLUMNS = ['id', 'insurer', 'limit', 'attachment', 'premium', 'share', 'layer_type', 'color']
"""Raw layer fields, in file column order"""

EXPORT_COLUMNS = {
    'Layer Type': 'layer_type',
    'Insurer': 'insurer',
    'Limit (USD)': 'limit',
    'Attachment (USD)': 'attachment',
    'Premium (USD)': 'premium',
    'Share (%)': 'share',
    'Color': 'color',
}
"""Exported sheet column titles mapped to raw field names"""

# Accepts 'Quota Share', 'quota-share', 'XoL', 'excess of loss', ...
_TYPE_ALIASES = {
    'quotashare': 'quotashare',
    'qs': 'quotashare',
    'primary': 'primary',
    'xol': 'xol',
    'excessofloss': 'xol',
    'excess': 'xol',
}


def normalize_layer_type(value: str) -> str:
    """
    Map a layer type label to 'quotashare', 'primary' or 'xol'

    Raises:
        ValueError: If the label is not a known layer type
    """
    key = re.sub(r'[\s_\-]+', '', str(value)).lower()
    if key not in _TYPE_ALIASES:
        raise ValueError(f"Unknown layer type: {value!r}. Use one of {', '.join(LAYER_TYPES)}")
    return _TYPE_ALIASES[key]


def _read_metadata(filepath: PathLike) -> Tuple[Dict[str, str], int]:
    """Read leading '# key=value' lines; returns (metadata, number of lines)"""
    metadata: Dict[str, str] = {}
    n_lines = 0
    with open(filepath, 'r', encoding='utf-8') as f:
        for line in f:
            if not line.startswith('#'):
                break
            n_lines += 1
            key, sep, value = line[1:].strip().partition('=')
            if sep:
                metadata[key.strip()] = value.strip()
    return metadata, n_lines


class IntermediateReader:
    """Reads layers in internal format (raw fields + total limit metadata)"""

    @staticmethod
    def read(filepath: PathLike) -> Tuple[List[Layer], str]:
        """
        Read layers with metadata

        Args:
            filepath: Path to intermediate TSV file

        Returns:
            Tuple of (layers, total_limit)

        Raises:
            ValueError: If the total limit metadata line is missing
        """
        metadata, n_meta = _read_metadata(filepath)
        if 'total_limit' not in metadata:
            raise ValueError(f"No total_limit metadata found in {filepath}")

        # Colors start with '#', so metadata lines are skipped by count rather than as comments
        frame = pd.read_csv(filepath, sep='\t', skiprows=n_meta, dtype=str, keep_default_na=False)
        layers = [Layer.from_record(record) for record in frame.to_dict('records')]
        return layers, metadata['total_limit']


def read_intermediate(filepath: PathLike) -> Tuple[List[Layer], str]:
    """
    Convenience function to read intermediate format

    Args:
        filepath: Path to intermediate TSV file

    Returns:
        Tuple of (layers, total_limit)
    """
    return IntermediateReader.read(filepath)


class LayerReader:
    """
    Reads layer tables from .tsv, .txt, .csv or .xlsx files

    Accepts raw field columns (id, insurer, limit, ...) or the column
    titles of the exported Layers sheet. Missing ids are numbered from 1
    and missing colors come from the color policy.
    """

    def __init__(self, color_policy: Optional[ColorPolicy] = None) -> None:
        self.color_policy: ColorPolicy = color_policy or PaletteColorPolicy()

    def read(self, filepath: PathLike, total_limit: Optional[str] = None) -> Tuple[List[Layer], Optional[str]]:
        """
        Load layers and the total limit

        Args:
            filepath: Input file
            total_limit: Overrides the total limit stored in the file

        Returns:
            Tuple of (layers, total_limit); total_limit is None when neither
            the file nor the caller provides one

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the suffix is unsupported or a layer type is unknown
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Layer file not found: {path}")

        suffix = path.suffix.lower()
        metadata: Dict[str, str] = {}
        if suffix in ('.tsv', '.txt', '.csv'):
            metadata, n_meta = _read_metadata(path)
            sep = ',' if suffix == '.csv' else '\t'
            frame = pd.read_csv(path, sep=sep, skiprows=n_meta, dtype=str, keep_default_na=False)
        elif suffix in ('.xlsx', '.xlsm'):
            frame = pd.read_excel(path, sheet_name=0, engine='openpyxl')
            frame = frame.astype(object).where(frame.notna(), '')
        else:
            raise ValueError(f"Unsupported layer file type: {suffix} (use .tsv, .csv or .xlsx)")

        layers = self.layers_from_frame(frame)

        if total_limit is None:
            total_limit = metadata.get('total_limit')

        logger.info(f"Loaded {len(layers)} layers from {path}")
        return layers, total_limit

    def layers_from_frame(self, frame: pd.DataFrame) -> List[Layer]:
        """
        Convert a table to Layer records

        Rows where every field is blank are skipped.
        """
        frame = frame.rename(columns=lambda c: str(c).strip())
        frame = frame.rename(columns=EXPORT_COLUMNS)

        if 'layer_type' not in frame.columns:
            raise ValueError(f"Layer table needs a 'layer_type' or 'Layer Type' column, got {list(frame.columns)}")

        layers: List[Layer] = []
        used_ids = set()
        for position, record in enumerate(frame.to_dict('records'), start=1):
            values = {key: record.get(key, '') for key in LAYER_COLUMNS}
            if all(str(v).strip() == '' for v in values.values()):
                continue

            values['layer_type'] = normalize_layer_type(values['layer_type'])

            raw_id = str(values['id']).strip()
            layer_id = int(float(raw_id)) if raw_id else position
            while layer_id in used_ids:
                layer_id += 1
            used_ids.add(layer_id)
            values['id'] = layer_id

            if not str(values['color']).strip():
                values['color'] = self.color_policy.next_color()

            layers.append(Layer.from_record(values))

        return layers


def read_layers(filepath: PathLike, total_limit: Optional[str] = None,
                color_policy: Optional[ColorPolicy] = None) -> Tuple[List[Layer], Optional[str]]:
    """Convenience function for LayerReader.read"""
    return LayerReader(color_policy).read(filepath, total_limit)
