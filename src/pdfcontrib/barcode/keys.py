"""Registry and placement keys.

Both keys are structured tuples rather than concatenated strings, so content
that happens to look like a kind name or a coordinate can never collide with
another entry.
"""

from __future__ import annotations

import hashlib
import json
from typing import NamedTuple

from pdfcontrib.barcodegen.symbol import BarcodeSymbol
from pdfcontrib.model.enums import BarcodeKind

DEFAULT_COORDINATE_PRECISION = 6


class BarcodeKey(NamedTuple):
    """Registry key: one entry per (kind, content)."""

    kind: BarcodeKind
    content: str

    @classmethod
    def of(cls, symbol: BarcodeSymbol) -> BarcodeKey:
        return cls(symbol.kind, symbol.content)

    def __str__(self) -> str:
        return self.kind.value + self.content


def format_coordinate(value: float, precision: int = DEFAULT_COORDINATE_PRECISION) -> str:
    """Fixed-precision decimal text; ``-0`` is folded into ``0``."""
    text = f"{float(value):.{precision}f}"
    if text.startswith("-") and not text.strip("-0."):
        text = text[1:]
    return text


class PlacementKey(NamedTuple):
    """
    Scaled-image key: one raster per (content, x, y).

    Width, height and symbology kind are not part of the key:
    the same content placed at the same position reuses the first raster.
    """

    content: str
    x: str
    y: str

    @classmethod
    def for_placement(
        cls,
        key: BarcodeKey,
        x: float,
        y: float,
        precision: int = DEFAULT_COORDINATE_PRECISION,
    ) -> PlacementKey:
        return cls(key.content, format_coordinate(x, precision), format_coordinate(y, precision))

    @property
    def image_name(self) -> str:
        """Name the raster is registered under in the host document."""
        payload = json.dumps(list(self), ensure_ascii=False).encode("utf-8")
        return "barcode-" + hashlib.sha1(payload).hexdigest()
