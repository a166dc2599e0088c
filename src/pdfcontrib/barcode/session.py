"""Per-document barcode session: one registry plus the placer bound to it."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pdfcontrib.barcodegen.symbol import BarcodeSymbol
from pdfcontrib.barcode.keys import DEFAULT_COORDINATE_PRECISION, BarcodeKey
from pdfcontrib.barcode.placement import BarcodePlacer, ScaledImageCache
from pdfcontrib.barcode.registry import BarcodeRegistry
from pdfcontrib.barcode.units import BARCODE_DPI, HOST_DPI
from pdfcontrib.model.enums import QRErrorCorrection
from pdfcontrib.protocols import BarcodePdf


class BarcodeSession:
    """
    Construct once per document build and pass it around.

    Example:
        >>> session = BarcodeSession()
        >>> key = session.registry.register_ean(host, "4006381333931")
        >>> session.barcode(host, key, 10, 10, 40, 20)
        True
    """

    def __init__(
        self,
        registry: Optional[BarcodeRegistry] = None,
        placer: Optional[BarcodePlacer] = None,
    ) -> None:
        self.registry = registry if registry is not None else BarcodeRegistry()
        self.placer = placer if placer is not None else BarcodePlacer(self.registry)

    @classmethod
    def from_config(cls, config: Dict[str, Any], *, strict: bool = False) -> BarcodeSession:
        """Build from a ``pdfcontrib.load_config()`` dictionary."""
        registry = BarcodeRegistry(
            strict=strict,
            qr_error_correction=QRErrorCorrection(config.get("qr_error_correction", "M")),
        )
        placer = BarcodePlacer(
            registry,
            ScaledImageCache(config.get("raster_format", "PNG")),
            coordinate_precision=int(
                config.get("coordinate_precision", DEFAULT_COORDINATE_PRECISION)
            ),
            host_dpi=float(config.get("host_dpi", HOST_DPI)),
            device_dpi=float(config.get("barcode_dpi", BARCODE_DPI)),
            strict=strict,
        )
        return cls(registry, placer)

    def register(self, symbol: BarcodeSymbol) -> BarcodeKey:
        return self.registry.register(symbol)

    def barcode(
        self,
        pdf: BarcodePdf,
        key: BarcodeKey,
        x: float,
        y: float,
        w: float,
        h: float,
        flow: bool = False,
    ) -> bool:
        return self.placer.place(pdf, key, x, y, w, h, flow)
