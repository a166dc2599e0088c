# -*- coding: utf-8 -*-
"""
RU: Централизованная иерархия исключений pdfcontrib с узкими подклассами для каждого
вида сбоя (кодирование, поиск, масштабирование, растеризация, импорт страниц).

EN: Centralized exception hierarchy for pdfcontrib. Barcode and page-import failures
are raised internally and funnelled into the host document's error slot at the public
boundary, so a single failed call never aborts a document build.

Guidelines:
- Raise the narrowest subclass at the failure site.
- Chain library exceptions with ``raise ... from exc``.
"""

from __future__ import annotations

from typing import Any, Optional


class PdfContribError(Exception):
    """Base exception for all pdfcontrib failures."""

    def __init__(
        self, message: str = "", *, cause: Optional[BaseException] = None
    ) -> None:
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


# Barcodes
class BarcodeError(PdfContribError):
    """Base class for barcode registration and placement errors.

    Attributes:
        key: Registry or placement key the failure relates to, if known.
    """

    def __init__(
        self,
        message: str = "",
        *,
        key: Any = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.key = key


class BarcodeEncodeError(BarcodeError):
    """Content is invalid for the symbology (characters, length, capacity)."""


class BarcodeNotFoundError(BarcodeError):
    """Placement requested for a key that was never registered."""


class BarcodeScaleError(BarcodeError):
    """Degenerate or invalid target dimensions for a symbol."""


class BarcodeRasterError(BarcodeError):
    """Image compression or host registration rejected the raster."""


# Page import
class FpdiError(PdfContribError):
    """Base class for page import errors."""


class SourceFileError(FpdiError):
    """Source PDF is missing, unreadable or not a PDF."""


class PageNotFoundError(FpdiError):
    """Requested page number does not exist in the source PDF."""


class TemplateNotFoundError(FpdiError):
    """Template id was never produced by ``import_page``."""


__all__ = [
    "PdfContribError",
    "BarcodeError",
    "BarcodeEncodeError",
    "BarcodeNotFoundError",
    "BarcodeScaleError",
    "BarcodeRasterError",
    "FpdiError",
    "SourceFileError",
    "PageNotFoundError",
    "TemplateNotFoundError",
]
