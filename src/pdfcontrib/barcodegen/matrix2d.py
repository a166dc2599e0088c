"""
RU: Кодирование 2D-штрихкодов (QR, DataMatrix, PDF417) в матрицу модулей.
EN: 2D barcode encoders (QR, DataMatrix, PDF417) producing module grids.

Provides:
- QR via qrcode, with error correction level and data mode
- DataMatrix via treepoem (BWIPP, needs Ghostscript)
- PDF417 via pdf417gen

Requirements: Pillow, qrcode, pdf417gen, treepoem
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Final, Optional, Set

import pdf417gen
import qrcode
import treepoem
from qrcode.constants import (
    ERROR_CORRECT_H,
    ERROR_CORRECT_L,
    ERROR_CORRECT_M,
    ERROR_CORRECT_Q,
)
from qrcode.exceptions import DataOverflowError
from qrcode.util import MODE_8BIT_BYTE, MODE_ALPHA_NUM, MODE_NUMBER, QRData

from pdfcontrib.barcodegen.symbol import BarcodeSymbol
from pdfcontrib.exceptions import BarcodeEncodeError
from pdfcontrib.model.enums import BarcodeKind, QREncoding, QRErrorCorrection

logger = logging.getLogger(__name__)

__all__ = [
    "Matrix2DCodeGenerator",
    "Matrix2DCodeGenError",
    "encode_datamatrix",
    "encode_pdf417",
    "encode_qr",
]

_QR_ERROR_CORRECTION: Final[Dict[QRErrorCorrection, int]] = {
    QRErrorCorrection.L: ERROR_CORRECT_L,
    QRErrorCorrection.M: ERROR_CORRECT_M,
    QRErrorCorrection.Q: ERROR_CORRECT_Q,
    QRErrorCorrection.H: ERROR_CORRECT_H,
}

_QR_MODES: Final[Dict[QREncoding, int]] = {
    QREncoding.NUMERIC: MODE_NUMBER,
    QREncoding.ALPHANUMERIC: MODE_ALPHA_NUM,
    QREncoding.BYTE: MODE_8BIT_BYTE,
}

# qrcode 8.x reports a symbol past version 40 as ValueError, not DataOverflowError
_QR_VERSION_OVERFLOW: Final[str] = "Invalid version"


class Matrix2DCodeGenError(BarcodeEncodeError):
    """2D barcode generation error (Ошибка генерации 2D-штрихкода)."""


class Matrix2DCodeGenerator:
    """2D-code encoder for QR/DataMatrix/PDF417.

    Args:
        kind: 2D symbology.
        data: Source data to encode.
        options: Per-type options:
            QR: ``error_correction`` (QRErrorCorrection), ``encoding`` (QREncoding);
            PDF417: ``columns`` (1-30), ``security_level`` (0-8).

    Examples:
        >>> sym = Matrix2DCodeGenerator(BarcodeKind.QR, "test123").encode()
        >>> sym.width == sym.height
        True
    """

    _supported: Set[BarcodeKind] = {
        BarcodeKind.QR,
        BarcodeKind.DATAMATRIX,
        BarcodeKind.PDF417,
    }

    def __init__(
        self,
        kind: BarcodeKind,
        data: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not isinstance(kind, BarcodeKind) or kind not in self._supported:
            logger.error("kind must be a 2D BarcodeKind, got %r", kind)
            raise TypeError("kind must be a 2D BarcodeKind")
        self.kind = kind
        self.data = data
        self.options = options or {}

    def validate(self) -> None:
        """Validate data and options for this generator instance.

        Raises:
            Matrix2DCodeGenError: For empty data or out-of-range options.
        """
        if not isinstance(self.data, str) or not self.data:
            raise Matrix2DCodeGenError("Data must be a non-empty string", key=self.data)
        if self.kind == BarcodeKind.PDF417:
            columns = self.options.get("columns", 6)
            level = self.options.get("security_level", 2)
            if not 1 <= columns <= 30:
                raise Matrix2DCodeGenError(
                    f"PDF417 columns must be between 1 and 30, got {columns}",
                    key=self.data,
                )
            if not 0 <= level <= 8:
                raise Matrix2DCodeGenError(
                    f"PDF417 security level must be between 0 and 8, got {level}",
                    key=self.data,
                )

    def encode(self) -> BarcodeSymbol:
        """
        Encode the data into a module grid.

        Raises:
            Matrix2DCodeGenError: invalid data, capacity exceeded or library failure.
        """
        self.validate()
        logger.debug("Encoding [%s] data=%s", self.kind.value, self.data)

        if self.kind == BarcodeKind.QR:
            symbol = self._encode_qr()
        elif self.kind == BarcodeKind.DATAMATRIX:
            symbol = self._encode_datamatrix()
        else:
            symbol = self._encode_pdf417()

        if symbol.is_empty:
            raise Matrix2DCodeGenError(
                f"{self.kind.value} encoder produced no modules", key=self.data
            )
        return symbol

    # --- QR
    def _encode_qr(self) -> BarcodeSymbol:
        level = QRErrorCorrection(self.options.get("error_correction", QRErrorCorrection.M))
        encoding = QREncoding(self.options.get("encoding", QREncoding.AUTO))
        qr = qrcode.QRCode(
            version=None,
            error_correction=_QR_ERROR_CORRECTION[level],
            box_size=1,
            border=0,
        )
        try:
            if encoding == QREncoding.AUTO:
                qr.add_data(self.data)
            else:
                qr.add_data(QRData(self.data, mode=_QR_MODES[encoding]))
            qr.make(fit=True)
        except DataOverflowError as e:
            raise Matrix2DCodeGenError(
                f"QR capacity exceeded at level {level.value}", key=self.data
            ) from e
        except ValueError as e:
            if str(e).startswith(_QR_VERSION_OVERFLOW):
                raise Matrix2DCodeGenError(
                    f"QR capacity exceeded at level {level.value}", key=self.data
                ) from e
            raise Matrix2DCodeGenError(
                f"QR data can not be encoded in {encoding.value} mode: {e}",
                key=self.data,
            ) from e
        return BarcodeSymbol.from_rows(self.kind, self.data, qr.get_matrix())

    # --- DataMatrix
    def _encode_datamatrix(self) -> BarcodeSymbol:
        try:
            dm_img = treepoem.generate_barcode(
                barcode_type="datamatrix", data=self.data, options={}, scale=1
            )
        except Exception as e:
            logger.error("DataMatrix generation error: %r", e)
            raise Matrix2DCodeGenError(
                f"DataMatrix generation failed: {e}", key=self.data
            ) from e
        return BarcodeSymbol.from_image(self.kind, self.data, dm_img)

    # --- PDF417
    def _encode_pdf417(self) -> BarcodeSymbol:
        try:
            codes = pdf417gen.encode(
                self.data,
                columns=self.options.get("columns", 6),
                security_level=self.options.get("security_level", 2),
            )
            # ratio=3: three pixel rows per codeword row, one pixel per module
            image = pdf417gen.render_image(codes, scale=1, ratio=3, padding=0)
        except Exception as e:
            logger.error("PDF417 generation error: %r", e)
            raise Matrix2DCodeGenError(
                f"PDF417 generation failed: {e}", key=self.data
            ) from e
        return BarcodeSymbol.from_image(self.kind, self.data, image)

    @classmethod
    def all_supported_types(cls) -> Set[BarcodeKind]:
        return set(cls._supported)


def encode_qr(
    code: str,
    error_correction: QRErrorCorrection = QRErrorCorrection.M,
    encoding: QREncoding = QREncoding.AUTO,
) -> BarcodeSymbol:
    return Matrix2DCodeGenerator(
        BarcodeKind.QR,
        code,
        {"error_correction": error_correction, "encoding": encoding},
    ).encode()


def encode_datamatrix(code: str) -> BarcodeSymbol:
    return Matrix2DCodeGenerator(BarcodeKind.DATAMATRIX, code).encode()


def encode_pdf417(code: str, columns: int = 6, security_level: int = 2) -> BarcodeSymbol:
    return Matrix2DCodeGenerator(
        BarcodeKind.PDF417,
        code,
        {"columns": columns, "security_level": security_level},
    ).encode()
