"""
barcode

Регистрация штрихкодов и их размещение на странице хост-документа растровым
изображением точного размера.

Public API:
    - BarcodeSession: реестр и размещение для одной сборки документа
    - BarcodeRegistry: кеш закодированных символов, register_* на каждую символику
    - BarcodePlacer / ScaledImageCache: размещение с кешем растров по позиции
    - BarcodeKey / PlacementKey: структурированные ключи
    - to_device_resolution: перевод единиц документа в пиксели 96 dpi
    - FPDFBarcodeHost: адаптер fpdf2

Примеры:
    >>> from fpdf import FPDF
    >>> from pdfcontrib.barcode import BarcodeSession, FPDFBarcodeHost
    >>> pdf = FPDF(); pdf.add_page()
    >>> host = FPDFBarcodeHost(pdf)
    >>> session = BarcodeSession()
    >>> key = session.registry.register_qr(host, "https://example.com")
    >>> session.barcode(host, key, 10, 10, 30, 30)
    True
"""

from pdfcontrib.barcode.host import FPDFBarcodeHost
from pdfcontrib.barcode.keys import BarcodeKey, PlacementKey, format_coordinate
from pdfcontrib.barcode.placement import BarcodePlacer, ScaledImageCache
from pdfcontrib.barcode.registry import BarcodeRegistry
from pdfcontrib.barcode.session import BarcodeSession
from pdfcontrib.barcode.units import to_device_pixels, to_device_resolution

__all__ = [
    "BarcodeKey",
    "BarcodePlacer",
    "BarcodeRegistry",
    "BarcodeSession",
    "FPDFBarcodeHost",
    "PlacementKey",
    "ScaledImageCache",
    "format_coordinate",
    "to_device_pixels",
    "to_device_resolution",
]
