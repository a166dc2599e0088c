from unittest.mock import patch

import pytest
from PIL import Image
from PIL.Image import Resampling

from pdfcontrib.barcodegen.matrix2d import (
    Matrix2DCodeGenerator,
    Matrix2DCodeGenError,
    encode_datamatrix,
    encode_pdf417,
    encode_qr,
)
from pdfcontrib.barcodegen.symbol import BarcodeSymbol
from pdfcontrib.model.enums import BarcodeKind, QREncoding, QRErrorCorrection

TREEPOEM = "pdfcontrib.barcodegen.matrix2d.treepoem.generate_barcode"

DM_GRID = ("1010", "1001", "1100", "1111")


def datamatrix_image(module_px: int = 2) -> Image.Image:
    sym = BarcodeSymbol(BarcodeKind.DATAMATRIX, "", DM_GRID)
    size = 4 * module_px
    inner = sym.to_image().resize((size, size), resample=Resampling.NEAREST)
    img = Image.new("RGB", (size + 4, size + 4), "white")
    img.paste(inner.convert("RGB"), (2, 2))
    return img


class TestQR:
    def test_basic(self) -> None:
        sym = encode_qr("test123")
        assert sym.kind == BarcodeKind.QR
        assert sym.width == sym.height == 21

    def test_higher_level_needs_bigger_symbol(self) -> None:
        data = "https://example.com/orders/42"
        low = encode_qr(data, QRErrorCorrection.L)
        high = encode_qr(data, QRErrorCorrection.H)
        assert high.width > low.width

    def test_capacity_exceeded(self) -> None:
        with pytest.raises(Matrix2DCodeGenError, match="capacity exceeded at level H"):
            encode_qr("x" * 3000, QRErrorCorrection.H)

    def test_version_overflow_reported_as_capacity(self) -> None:
        """qrcode 8.x raises ValueError for a fitted version above 40."""
        overflow = ValueError("Invalid version (was 41, expected 1 to 40)")
        with patch("pdfcontrib.barcodegen.matrix2d.qrcode.QRCode.make", side_effect=overflow):
            with pytest.raises(Matrix2DCodeGenError, match="capacity exceeded at level Q"):
                encode_qr("data", QRErrorCorrection.Q)

    def test_other_value_error_reported_as_mode(self) -> None:
        with patch(
            "pdfcontrib.barcodegen.matrix2d.qrcode.QRCode.make",
            side_effect=ValueError("bad data"),
        ):
            with pytest.raises(Matrix2DCodeGenError, match="can not be encoded"):
                encode_qr("data")

    def test_numeric_mode(self) -> None:
        sym = encode_qr("0123456789", encoding=QREncoding.NUMERIC)
        assert sym.width == 21

    def test_mode_mismatch(self) -> None:
        with pytest.raises(Matrix2DCodeGenError, match="numeric mode"):
            encode_qr("abc", encoding=QREncoding.NUMERIC)

    def test_accepts_string_options(self) -> None:
        gen = Matrix2DCodeGenerator(
            BarcodeKind.QR, "abc", {"error_correction": "Q", "encoding": "byte"}
        )
        assert gen.encode().width == 21


class TestPDF417:
    def test_basic(self) -> None:
        sym = encode_pdf417("test PDF417")
        assert sym.kind == BarcodeKind.PDF417
        assert sym.is_2d
        assert sym.width > sym.height > 0

    def test_more_columns_is_wider(self) -> None:
        narrow = encode_pdf417("BIGDATA" * 10, columns=3)
        wide = encode_pdf417("BIGDATA" * 10, columns=8)
        assert wide.width > narrow.width

    @pytest.mark.parametrize("columns", [0, 31])
    def test_columns_range(self, columns: int) -> None:
        with pytest.raises(Matrix2DCodeGenError, match="columns"):
            encode_pdf417("abc", columns=columns)

    @pytest.mark.parametrize("level", [-1, 9])
    def test_security_level_range(self, level: int) -> None:
        with pytest.raises(Matrix2DCodeGenError, match="security level"):
            encode_pdf417("abc", security_level=level)


class TestDataMatrix:
    def test_encode_via_treepoem(self) -> None:
        with patch(TREEPOEM, return_value=datamatrix_image(3)) as gen:
            sym = encode_datamatrix("test DM")
        assert sym.modules == DM_GRID
        assert sym.kind == BarcodeKind.DATAMATRIX
        gen.assert_called_once_with(
            barcode_type="datamatrix", data="test DM", options={}, scale=1
        )

    def test_library_failure_wrapped(self) -> None:
        with patch(TREEPOEM, side_effect=RuntimeError("boom")):
            with pytest.raises(Matrix2DCodeGenError, match="DataMatrix generation failed"):
                encode_datamatrix("x")


class TestGenerator:
    def test_invalid_type(self) -> None:
        with pytest.raises(TypeError):
            Matrix2DCodeGenerator("invalid_type", "abc")  # type: ignore[arg-type]

    def test_linear_kind_rejected(self) -> None:
        with pytest.raises(TypeError):
            Matrix2DCodeGenerator(BarcodeKind.CODE128, "abc")

    @pytest.mark.parametrize("kind", [BarcodeKind.QR, BarcodeKind.DATAMATRIX, BarcodeKind.PDF417])
    def test_empty_data_error(self, kind: BarcodeKind) -> None:
        with pytest.raises(Matrix2DCodeGenError, match="non-empty"):
            Matrix2DCodeGenerator(kind, "").encode()

    def test_all_supported_types(self) -> None:
        assert Matrix2DCodeGenerator.all_supported_types() == {
            BarcodeKind.QR,
            BarcodeKind.DATAMATRIX,
            BarcodeKind.PDF417,
        }
