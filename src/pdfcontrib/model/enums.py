"""
model/enums.py

(Краткое RU: Перечисления символик штрихкодов, параметров QR и границ страниц PDF.)

EN: Domain enums shared by the barcode encoders, the placement pipeline and the
page importer. NO encoding or PDF logic here.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal


class BarcodeKind(str, Enum):
    """Symbology identifier; the value is part of every registry key."""

    CODABAR = "Codabar"
    CODE128 = "Code 128"
    CODE39 = "Code 39"
    DATAMATRIX = "DataMatrix"
    EAN8 = "EAN 8"
    EAN13 = "EAN 13"
    QR = "QR Code"
    TWO_OF_FIVE = "2 of 5"
    TWO_OF_FIVE_INTERLEAVED = "2 of 5 (interleaved)"
    PDF417 = "PDF417"

    @property
    def is_2d(self) -> bool:
        return self in {BarcodeKind.DATAMATRIX, BarcodeKind.QR, BarcodeKind.PDF417}

    def localized_name(self, lang: Literal["ru", "en"] = "ru") -> str:
        names_ru = {
            BarcodeKind.CODABAR: "Codabar",
            BarcodeKind.CODE128: "Code 128",
            BarcodeKind.CODE39: "Code 39",
            BarcodeKind.DATAMATRIX: "DataMatrix",
            BarcodeKind.EAN8: "EAN-8",
            BarcodeKind.EAN13: "EAN-13",
            BarcodeKind.QR: "QR код",
            BarcodeKind.TWO_OF_FIVE: "Промышленный 2 из 5",
            BarcodeKind.TWO_OF_FIVE_INTERLEAVED: "Чередующийся 2 из 5",
            BarcodeKind.PDF417: "PDF417",
        }
        return names_ru.get(self, self.value) if lang == "ru" else self.value


class QRErrorCorrection(str, Enum):
    """QR error correction level (recovers ~7/15/25/30% of the symbol)."""

    L = "L"
    M = "M"
    Q = "Q"
    H = "H"


class QREncoding(str, Enum):
    """QR data mode; AUTO lets the encoder pick the most compact one."""

    AUTO = "auto"
    NUMERIC = "numeric"
    ALPHANUMERIC = "alphanumeric"
    BYTE = "byte"


class PageBox(str, Enum):
    """Page boundary used as the bounding box of an imported template."""

    MEDIA_BOX = "/MediaBox"
    CROP_BOX = "/CropBox"
    BLEED_BOX = "/BleedBox"
    TRIM_BOX = "/TrimBox"
    ART_BOX = "/ArtBox"

    @property
    def attribute(self) -> str:
        """Matching pypdf ``PageObject`` attribute name (``mediabox`` etc.)."""
        return self.value.lstrip("/").lower()


__all__ = [
    "BarcodeKind",
    "QRErrorCorrection",
    "QREncoding",
    "PageBox",
]
