"""
barcodegen

Кодировщики символик: превращают содержимое в абстрактный символ (матрицу модулей)
до того, как появятся пиксели.

- Линейные: Codabar, Code 128, Code 39 (с full ASCII), EAN-8/13, 2 of 5 (обычный и чередующийся).
- 2D: QR, DataMatrix, PDF417.
- Масштабирование символа до точного размера в пикселях и сжатие в PNG без потерь.

Public API:
    - BarcodeSymbol: неизменяемая матрица модулей (dataclass)
    - BarcodeGenerator / BarcodeGenError: линейные символики
    - Matrix2DCodeGenerator / Matrix2DCodeGenError: 2D символики
    - encode_*: по одной функции на символику
    - scale_symbol, rasterize: перевод символа в растр

Примеры:
    >>> from pdfcontrib.barcodegen import encode_ean, scale_symbol, rasterize
    >>> sym = encode_ean("4006381333931")
    >>> png = rasterize(scale_symbol(sym, sym.width * 2, 60))

Зависимости:
    Pillow, python-barcode, qrcode, pdf417gen, treepoem
"""

from pdfcontrib.barcodegen.linear import (
    BarcodeGenerator,
    BarcodeGenError,
    LinearOptions,
    ean_kind,
    encode_codabar,
    encode_code39,
    encode_code128,
    encode_ean,
    encode_two_of_five,
)
from pdfcontrib.barcodegen.matrix2d import (
    Matrix2DCodeGenerator,
    Matrix2DCodeGenError,
    encode_datamatrix,
    encode_pdf417,
    encode_qr,
)
from pdfcontrib.barcodegen.symbol import BarcodeSymbol, rasterize, scale_symbol

__all__ = [
    "BarcodeSymbol",
    "BarcodeGenerator",
    "BarcodeGenError",
    "LinearOptions",
    "Matrix2DCodeGenerator",
    "Matrix2DCodeGenError",
    "ean_kind",
    "encode_codabar",
    "encode_code128",
    "encode_code39",
    "encode_datamatrix",
    "encode_ean",
    "encode_pdf417",
    "encode_qr",
    "encode_two_of_five",
    "rasterize",
    "scale_symbol",
]
