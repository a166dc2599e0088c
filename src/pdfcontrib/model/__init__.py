"""Domain enums for pdfcontrib."""

from pdfcontrib.model.enums import BarcodeKind, PageBox, QREncoding, QRErrorCorrection

__all__ = ["BarcodeKind", "PageBox", "QREncoding", "QRErrorCorrection"]
