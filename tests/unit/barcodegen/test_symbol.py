from typing import Tuple

import pytest
from PIL import Image
from PIL.Image import Resampling

from pdfcontrib.barcodegen.symbol import (
    MAX_IMAGE_WIDTH,
    BarcodeSymbol,
    rasterize,
    scale_symbol,
)
from pdfcontrib.exceptions import BarcodeRasterError, BarcodeScaleError
from pdfcontrib.model.enums import BarcodeKind

GRID_2D: Tuple[str, ...] = ("101", "011", "110")


def qr_symbol() -> BarcodeSymbol:
    return BarcodeSymbol(BarcodeKind.QR, "q", GRID_2D)


def linear_symbol() -> BarcodeSymbol:
    return BarcodeSymbol(BarcodeKind.CODE128, "c", ("1011",))


class TestBarcodeSymbol:
    def test_dimensions(self) -> None:
        sym = qr_symbol()
        assert (sym.width, sym.height) == (3, 3)
        assert sym.is_2d and not sym.is_empty
        assert not linear_symbol().is_2d

    def test_empty(self) -> None:
        sym = BarcodeSymbol.empty(BarcodeKind.EAN13, "123")
        assert sym.is_empty
        assert (sym.width, sym.height) == (0, 0)
        assert sym.content == "123"

    def test_ragged_rows_rejected(self) -> None:
        with pytest.raises(ValueError, match="same length"):
            BarcodeSymbol(BarcodeKind.QR, "x", ("10", "1"))

    def test_bad_module_chars_rejected(self) -> None:
        with pytest.raises(ValueError, match="only contain"):
            BarcodeSymbol(BarcodeKind.QR, "x", ("12",))

    def test_from_rows(self) -> None:
        sym = BarcodeSymbol.from_rows(
            BarcodeKind.QR, "x", [[True, False], [False, True]]
        )
        assert sym.modules == ("10", "01")

    def test_to_image(self) -> None:
        img = linear_symbol().to_image()
        assert img.mode == "L"
        assert img.size == (4, 1)
        assert list(img.getdata()) == [0, 255, 0, 0]

    def test_to_image_empty_raises(self) -> None:
        with pytest.raises(BarcodeScaleError):
            BarcodeSymbol.empty(BarcodeKind.QR, "x").to_image()

    # === from_image ===

    @pytest.mark.parametrize("factor", [1, 2, 3, 5])
    def test_from_image_recovers_2d_grid(self, factor: int) -> None:
        sym = qr_symbol()
        img = sym.to_image().resize((3 * factor, 3 * factor), resample=Resampling.NEAREST)
        assert BarcodeSymbol.from_image(BarcodeKind.QR, "q", img) == sym

    def test_from_image_strips_quiet_zone(self) -> None:
        sym = qr_symbol()
        inner = sym.to_image().resize((6, 6), resample=Resampling.NEAREST)
        padded = Image.new("RGB", (20, 20), "white")
        padded.paste(inner.convert("RGB"), (7, 7))
        assert BarcodeSymbol.from_image(BarcodeKind.QR, "q", padded) == sym

    def test_from_image_linear_uses_single_row(self) -> None:
        bars = linear_symbol().to_image().resize((8, 30), resample=Resampling.NEAREST)
        sym = BarcodeSymbol.from_image(BarcodeKind.CODE128, "c", bars)
        assert sym.modules == ("1011",)

    def test_from_image_blank(self) -> None:
        blank = Image.new("L", (10, 10), 255)
        assert BarcodeSymbol.from_image(BarcodeKind.QR, "q", blank).is_empty


class TestScaleSymbol:
    def test_2d_integer_factor_centred(self) -> None:
        img = scale_symbol(qr_symbol(), 10, 11)
        assert img.size == (10, 11)
        # factor 3 -> 9x9 placed at (0, 1)
        assert img.getpixel((0, 0)) == 255
        assert img.getpixel((0, 1)) == 0
        assert img.getpixel((3, 1)) == 255
        assert img.getpixel((9, 5)) == 255

    def test_2d_exact_fit(self) -> None:
        img = scale_symbol(qr_symbol(), 6, 6)
        assert img.size == (6, 6)
        assert img.getpixel((5, 0)) == 0

    def test_linear_stretches_height(self) -> None:
        img = scale_symbol(linear_symbol(), 9, 5)
        assert img.size == (9, 5)
        row = [img.getpixel((x, 4)) for x in range(9)]
        # factor 2 -> 8 px of bars, 1 px of padding split (0 left, 1 right)
        assert row == [0, 0, 255, 255, 0, 0, 0, 0, 255]

    def test_only_black_and_white(self) -> None:
        img = scale_symbol(qr_symbol(), 37, 41)
        assert set(img.getdata()) <= {0, 255}

    def test_empty_symbol(self) -> None:
        with pytest.raises(BarcodeScaleError, match="empty"):
            scale_symbol(BarcodeSymbol.empty(BarcodeKind.QR, "x"), 10, 10)

    @pytest.mark.parametrize("size", [(0, 10), (10, 0), (-1, 5)])
    def test_non_positive_size(self, size: Tuple[int, int]) -> None:
        with pytest.raises(BarcodeScaleError, match="positive"):
            scale_symbol(qr_symbol(), *size)

    def test_oversized(self) -> None:
        with pytest.raises(BarcodeScaleError, match="exceeds"):
            scale_symbol(qr_symbol(), MAX_IMAGE_WIDTH + 1, 10)

    def test_smaller_than_symbol(self) -> None:
        with pytest.raises(BarcodeScaleError, match="smaller"):
            scale_symbol(qr_symbol(), 2, 2)
        with pytest.raises(BarcodeScaleError, match="smaller"):
            scale_symbol(linear_symbol(), 3, 50)


class TestRasterize:
    def test_png(self) -> None:
        data = rasterize(scale_symbol(qr_symbol(), 30, 30))
        assert data.startswith(b"\x89PNG")

    def test_unknown_format(self) -> None:
        with pytest.raises(BarcodeRasterError):
            rasterize(qr_symbol().to_image(), "NOPE")
