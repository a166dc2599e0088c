"""
RU: Абстрактный символ штрихкода (матрица модулей) и его перевод в растр.
EN: Abstract barcode symbol (module grid) plus scaling and lossless rasterization.

A symbol is what an encoder returns before any pixels exist: rows of dark
(``"1"``) and light (``"0"``) modules. Linear symbologies are a single row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import reduce
from io import BytesIO
from math import gcd
from typing import Final, Iterable, List, Sequence, Tuple

from PIL import Image
from PIL.Image import Resampling

from pdfcontrib.exceptions import BarcodeRasterError, BarcodeScaleError
from pdfcontrib.model.enums import BarcodeKind

logger = logging.getLogger(__name__)

__all__ = [
    "BarcodeSymbol",
    "scale_symbol",
    "rasterize",
    "MAX_IMAGE_WIDTH",
    "MAX_IMAGE_HEIGHT",
]

# ~100MB для RGB изображения при максимальных размерах
MAX_IMAGE_WIDTH: Final[int] = 10000
MAX_IMAGE_HEIGHT: Final[int] = 10000

_DARK_THRESHOLD: Final[int] = 128


@dataclass(frozen=True)
class BarcodeSymbol:
    """Encoded barcode as a grid of modules.

    Attributes:
        kind: Symbology the content was encoded with.
        content: Encoded payload as given to the encoder.
        modules: Rows of ``"1"`` (dark) / ``"0"`` (light), all the same length.

    Example:
        >>> sym = BarcodeSymbol(BarcodeKind.CODE128, "A", ("1101",))
        >>> sym.width, sym.height
        (4, 1)
    """

    kind: BarcodeKind
    content: str
    modules: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.modules:
            width = len(self.modules[0])
            for row in self.modules:
                if len(row) != width:
                    raise ValueError("All module rows must have the same length")
                if row.strip("01"):
                    raise ValueError("Module rows may only contain '0' and '1'")

    @property
    def width(self) -> int:
        return len(self.modules[0]) if self.modules else 0

    @property
    def height(self) -> int:
        return len(self.modules)

    @property
    def is_2d(self) -> bool:
        return self.kind.is_2d

    @property
    def is_empty(self) -> bool:
        return self.width == 0

    @classmethod
    def empty(cls, kind: BarcodeKind, content: str) -> BarcodeSymbol:
        """Zero value registered when encoding fails."""
        return cls(kind, content, ())

    @classmethod
    def from_rows(
        cls, kind: BarcodeKind, content: str, rows: Iterable[Iterable[bool]]
    ) -> BarcodeSymbol:
        """Build a symbol from boolean rows (``True`` = dark)."""
        modules = tuple("".join("1" if dark else "0" for dark in row) for row in rows)
        return cls(kind, content, modules)

    @classmethod
    def from_image(
        cls, kind: BarcodeKind, content: str, image: Image.Image
    ) -> BarcodeSymbol:
        """Recover the module grid from a rendered barcode image.

        The module size is the greatest common divisor of all dark runs and
        inner light runs, so renderers that draw several pixels per module
        (BWIPP via treepoem, pdf417gen) collapse back to one cell per module.
        Linear symbologies keep only the middle pixel row.
        """
        gray = image.convert("L")
        bbox = gray.point(lambda v: 255 if v < _DARK_THRESHOLD else 0).getbbox()
        if bbox is None:
            return cls.empty(kind, content)
        gray = gray.crop(bbox)
        w, h = gray.size
        pixels = gray.load()
        grid: List[List[bool]] = [
            [pixels[x, y] < _DARK_THRESHOLD for x in range(w)] for y in range(h)
        ]
        if not kind.is_2d:
            grid = [grid[h // 2]] if h else []

        runs: List[int] = []
        for row in grid:
            runs.extend(_inner_runs(row))
        if kind.is_2d:
            for col in zip(*grid):
                runs.extend(_inner_runs(col))
        if not runs:
            return cls.empty(kind, content)

        size = reduce(gcd, runs)
        offset = size // 2
        rows = grid[offset::size] if kind.is_2d else grid
        sampled = [row[offset::size] for row in rows]
        return cls.from_rows(kind, content, sampled)

    def to_image(self) -> Image.Image:
        """Render at one pixel per module (mode ``L``)."""
        if self.is_empty:
            raise BarcodeScaleError(
                f"Can not render an empty {self.kind.value} barcode",
                key=self.content,
            )
        img = Image.new("L", (self.width, self.height), 255)
        img.putdata([0 if m == "1" else 255 for row in self.modules for m in row])
        return img


def _inner_runs(line: Sequence[bool]) -> List[int]:
    """Lengths of dark runs and of light runs enclosed by dark ones."""
    runs: List[int] = []
    first = next((i for i, dark in enumerate(line) if dark), None)
    if first is None:
        return runs
    last = len(line) - next(i for i, dark in enumerate(reversed(line)) if dark)
    current, length = line[first], 0
    for dark in line[first:last]:
        if dark == current:
            length += 1
        else:
            runs.append(length)
            current, length = dark, 1
    runs.append(length)
    return runs


def scale_symbol(symbol: BarcodeSymbol, width: int, height: int) -> Image.Image:
    """
    Scale a symbol to exactly ``width`` x ``height`` pixels.

    2D symbols grow by the largest integer module factor that fits and are
    centred. Linear symbols grow their bars by an integer factor (centred)
    and stretch to the full height. Modules are never resampled, only
    repeated, so no grey edges appear.

    Raises:
        BarcodeScaleError: empty symbol, non-positive or oversized target,
            or a target smaller than the symbol's intrinsic size.
    """
    if symbol.is_empty:
        raise BarcodeScaleError(
            f"Can not scale an empty {symbol.kind.value} barcode", key=symbol.content
        )
    if width <= 0 or height <= 0:
        raise BarcodeScaleError(
            f"Target size must be positive, got {width}x{height}", key=symbol.content
        )
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise BarcodeScaleError(
            f"Target size {width}x{height} exceeds maximum "
            f"{MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT}px",
            key=symbol.content,
        )

    if symbol.is_2d:
        factor = min(width // symbol.width, height // symbol.height)
        target = (symbol.width * factor, symbol.height * factor)
    else:
        factor = width // symbol.width
        target = (symbol.width * factor, height)
    if factor < 1:
        raise BarcodeScaleError(
            f"Can not scale barcode to an image smaller than "
            f"{symbol.width}x{symbol.height}",
            key=symbol.content,
        )

    scaled = symbol.to_image().resize(target, resample=Resampling.NEAREST)
    if scaled.size == (width, height):
        return scaled
    canvas = Image.new("L", (width, height), 255)
    canvas.paste(scaled, ((width - target[0]) // 2, (height - target[1]) // 2))
    return canvas


def rasterize(image: Image.Image, output_format: str = "PNG") -> bytes:
    """Compress a scaled barcode losslessly.

    Raises:
        BarcodeRasterError: if Pillow can not write the format.
    """
    buf = BytesIO()
    try:
        image.save(buf, format=output_format, optimize=True)
    except (OSError, KeyError, ValueError) as e:
        raise BarcodeRasterError(
            f"Barcode rasterization to {output_format} failed: {e}"
        ) from e
    logger.debug("Rasterized %dx%d barcode to %d bytes", *image.size, buf.tell())
    return buf.getvalue()
