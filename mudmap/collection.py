"""
Layer collection

Owned, versioned list of layers plus the total policy limit. Every edit
replaces the affected Layer (layers are frozen) and bumps the version, so
a snapshot handed to the layout engine never changes underneath it.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Iterable, List, Optional, Tuple
import logging

from .colors import ColorPolicy, RandomHueColorPolicy
from .layout.types import Layer
from .types import LAYER_TYPES, RawValue
from .utils import strip_commas, total_share

logger = logging.getLogger(__name__)

# Fields typed into comma formatted currency inputs
NUMBER_FIELDS = ('limit', 'attachment', 'premium')
EDITABLE_FIELDS = ('insurer', 'limit', 'attachment', 'premium', 'share')
# Types that sit on the floor of the tower
FLOOR_TYPES = ('quotashare', 'primary')


class LayerCollection:
    """
    Editable tower definition

    Starts with a single empty primary layer. Layer ids are assigned here
    (max id + 1) and colors come from the injected color policy.
    """

    def __init__(
        self,
        color_policy: Optional[ColorPolicy] = None,
        total_limit: RawValue = '',
        share_warning_threshold: float = 100.0,
        layers: Optional[Iterable[Layer]] = None
    ) -> None:
        """
        Initialize collection

        Args:
            color_policy: Source of colors for new layers (default: random hue)
            total_limit: Total policy limit, may be comma formatted
            share_warning_threshold: Total share (%) above which share_exceeded is True
            layers: Initial layers (default: one empty primary layer)

        Raises:
            ValueError: If layer ids are not unique or a layer type is unknown
        """
        self.color_policy: ColorPolicy = color_policy or RandomHueColorPolicy()
        self.share_warning_threshold = share_warning_threshold
        self._total_limit: str = strip_commas(total_limit)
        self._layers: List[Layer] = list(layers or [])
        if self._layers:
            ids = [layer.id for layer in self._layers]
            if len(ids) != len(set(ids)):
                raise ValueError(f"Duplicate layer ids: {sorted(ids)}")
            for layer in self._layers:
                self._check_type(layer.layer_type)
        else:
            self._layers = [Layer(id=1, layer_type='primary', color=self.color_policy.next_color())]
        self.version: int = 0

    @classmethod
    def from_layers(
        cls,
        layers: Iterable[Layer],
        total_limit: RawValue = '',
        color_policy: Optional[ColorPolicy] = None
    ) -> 'LayerCollection':
        """
        Build a collection from existing layers (e.g. loaded from file)

        An empty iterable gives the default single-layer collection.

        Raises:
            ValueError: If layer ids are not unique or a layer type is unknown
        """
        return cls(color_policy=color_policy, total_limit=total_limit, layers=layers)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self):
        return iter(self.snapshot())

    def snapshot(self) -> Tuple[Layer, ...]:
        """Immutable view of the current layers"""
        return tuple(self._layers)

    def get_layer(self, layer_id: int) -> Layer:
        """
        Get a layer by id

        Raises:
            KeyError: If no layer has this id
        """
        for layer in self._layers:
            if layer.id == layer_id:
                return layer
        raise KeyError(f"No layer with id {layer_id}")

    @property
    def total_limit(self) -> str:
        """Total policy limit without commas"""
        return self._total_limit

    @total_limit.setter
    def total_limit(self, value: RawValue) -> None:
        self._total_limit = strip_commas(value)
        self._touch()

    @property
    def total_share(self) -> float:
        """Sum of shares over all layers"""
        return total_share(self._layers)

    @property
    def share_exceeded(self) -> bool:
        """Whether the total share is above the warning threshold"""
        return self.total_share > self.share_warning_threshold

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def add_layer(self, layer_type: str = 'primary', **fields) -> Layer:
        """
        Append a new layer with the next id and a fresh color

        Args:
            layer_type: Type of the new layer
            **fields: Initial values for editable fields

        Returns:
            The new layer
        """
        self._check_type(layer_type)
        for name in fields:
            self._check_field(name)
        values = {name: strip_commas(value) if name in NUMBER_FIELDS else value
                  for name, value in fields.items()}

        new_id = max((layer.id for layer in self._layers), default=0) + 1
        layer = Layer(
            id=new_id,
            layer_type=layer_type,
            color=self.color_policy.next_color(),
            **values
        )
        self._layers.append(layer)
        self._touch()
        logger.debug(f"Added {layer_type} layer {new_id}")
        return layer

    def remove_layer(self, layer_id: int) -> bool:
        """
        Remove a layer; the last remaining layer is never removed

        Returns:
            True if a layer was removed
        """
        if len(self._layers) <= 1:
            logger.debug(f"Not removing layer {layer_id}: last layer")
            return False

        remaining = [layer for layer in self._layers if layer.id != layer_id]
        if len(remaining) == len(self._layers):
            return False

        self._layers = remaining
        self._touch()
        return True

    def update_layer(self, layer_id: int, field: str, value: RawValue) -> Layer:
        """
        Set one editable field of a layer

        Currency fields are stored without commas.

        Raises:
            KeyError: If no layer has this id
            ValueError: If the field is unknown or immutable
        """
        self._check_field(field)
        if field in NUMBER_FIELDS:
            value = strip_commas(value)
        return self._replace(layer_id, **{field: value})

    def change_layer_type(self, layer_id: int, layer_type: str) -> Layer:
        """
        Change the type of a layer

        Quota-share and primary layers sit on the floor, so their attachment
        is reset to '0'. An xol layer keeps whatever attachment it had.

        Raises:
            KeyError: If no layer has this id
            ValueError: If the type is unknown
        """
        self._check_type(layer_type)
        layer = self.get_layer(layer_id)
        attachment = '0' if layer_type in FLOOR_TYPES else layer.attachment
        return self._replace(layer_id, layer_type=layer_type, attachment=attachment)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _replace(self, layer_id: int, **changes) -> Layer:
        for i, layer in enumerate(self._layers):
            if layer.id == layer_id:
                updated = replace(layer, **changes)
                self._layers[i] = updated
                self._touch()
                return updated
        raise KeyError(f"No layer with id {layer_id}")

    def _touch(self) -> None:
        self.version += 1

    @staticmethod
    def _check_type(layer_type: str) -> None:
        if layer_type not in LAYER_TYPES:
            raise ValueError(f"Unknown layer type: {layer_type}. Use one of {', '.join(LAYER_TYPES)}")

    @staticmethod
    def _check_field(field: str) -> None:
        if field in ('id', 'color', 'layer_type'):
            raise ValueError(f"Field '{field}' cannot be edited directly")
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown layer field: {field}")
