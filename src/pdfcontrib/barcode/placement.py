"""
RU: Размещение штрихкода на странице: поиск в реестре, кеш масштабированных растров,
вызов отрисовки хоста.

EN: Placement pipeline. Per request::

    lookup ─ miss ─> BarcodeNotFoundError
       │
    placement key ─ host has image ─> draw
       │ (no image)
    scale ─> rasterize ─> register with host ─> draw

Every failure is terminal for that call, reported once through the host's
error slot, and never retried.
"""

from __future__ import annotations

import logging
import threading
from io import BytesIO
from typing import Optional

from pdfcontrib.barcodegen.symbol import BarcodeSymbol, rasterize, scale_symbol
from pdfcontrib.barcode.keys import (
    DEFAULT_COORDINATE_PRECISION,
    BarcodeKey,
    PlacementKey,
)
from pdfcontrib.barcode.registry import BarcodeRegistry
from pdfcontrib.barcode.units import BARCODE_DPI, HOST_DPI, to_device_pixels
from pdfcontrib.exceptions import (
    BarcodeError,
    BarcodeNotFoundError,
    BarcodeRasterError,
)
from pdfcontrib.protocols import BarcodePdf

logger = logging.getLogger(__name__)

__all__ = ["ScaledImageCache", "BarcodePlacer"]


class ScaledImageCache:
    """
    Rasters registered with a host document, one per placement key.

    The host's own image table is the store; this class serialises the
    check-then-insert so concurrent placements of the same key through this
    cache scale and register exactly once. Placers with separate caches on
    one document rely on the host keeping the first image per name, as
    ``FPDFBarcodeHost`` does.
    """

    def __init__(self, raster_format: str = "PNG") -> None:
        self._lock = threading.RLock()
        self.raster_format = raster_format.upper()

    @property
    def image_type(self) -> str:
        return self.raster_format.lower()

    def get_or_create(
        self,
        pdf: BarcodePdf,
        placement: PlacementKey,
        symbol: BarcodeSymbol,
        width: int,
        height: int,
    ) -> str:
        """
        Return the registered image name for ``placement``, creating the
        raster at ``width`` x ``height`` pixels on a miss.

        Raises:
            BarcodeScaleError: the symbol can not be scaled to that size.
            BarcodeRasterError: compression failed or the host rejected it.
        """
        name = placement.image_name
        with self._lock:
            if pdf.get_image_info(name) is not None:
                logger.debug("Scaled barcode cache hit: %s", name)
                return name

            image = scale_symbol(symbol, width, height)
            data = rasterize(image, self.raster_format)
            info = pdf.register_image_reader(name, self.image_type, BytesIO(data))
            if info is None:
                raise BarcodeRasterError(
                    f"Host document rejected barcode image {name}", key=placement
                )
        logger.debug("Registered scaled barcode %s at %dx%d px", name, width, height)
        return name


class BarcodePlacer:
    """
    Кладёт зарегистрированные штрихкоды на текущую страницу хоста.

    Args:
        registry: Реестр, в котором ищутся ключи.
        cache: Кеш масштабированных растров (по умолчанию свой).
        coordinate_precision: Знаков после точки для x/y в ключе размещения.
        host_dpi: Разрешение, которое хост подразумевает для изображений.
        device_dpi: Разрешение растра штрихкода.
        strict: Если True, ошибки пробрасываются вместо записи в слот ошибок.
    """

    def __init__(
        self,
        registry: BarcodeRegistry,
        cache: Optional[ScaledImageCache] = None,
        *,
        coordinate_precision: int = DEFAULT_COORDINATE_PRECISION,
        host_dpi: float = HOST_DPI,
        device_dpi: float = BARCODE_DPI,
        strict: bool = False,
    ) -> None:
        self.registry = registry
        self.cache = cache if cache is not None else ScaledImageCache()
        self.coordinate_precision = coordinate_precision
        self.host_dpi = host_dpi
        self.device_dpi = device_dpi
        self.strict = strict

    def place(
        self,
        pdf: BarcodePdf,
        key: BarcodeKey,
        x: float,
        y: float,
        w: float,
        h: float,
        flow: bool = False,
    ) -> bool:
        """
        Put a registered barcode on the current page.

        Size is given in the document's units; position and ``flow`` behave
        as in the host's image call.

        Returns:
            True if the barcode was drawn. On failure the error goes to
            ``pdf.set_error`` and False is returned.
        """
        try:
            self._place(pdf, key, x, y, w, h, flow)
        except BarcodeError as e:
            logger.warning("Barcode placement failed for %s: %s", key, e)
            if self.strict:
                raise
            pdf.set_error(e)
            return False
        return True

    def _place(
        self,
        pdf: BarcodePdf,
        key: BarcodeKey,
        x: float,
        y: float,
        w: float,
        h: float,
        flow: bool,
    ) -> None:
        symbol = self.registry.lookup(key)
        if symbol is None:
            raise BarcodeNotFoundError("Barcode not found", key=key)

        placement = PlacementKey.for_placement(key, x, y, self.coordinate_precision)
        ratio = pdf.get_conversion_ratio()
        name = self.cache.get_or_create(
            pdf,
            placement,
            symbol,
            to_device_pixels(ratio, w, self.host_dpi, self.device_dpi),
            to_device_pixels(ratio, h, self.host_dpi, self.device_dpi),
        )
        # w=h=0: the raster already has the exact pixel size
        pdf.image(name, x, y, 0, 0, flow, self.cache.image_type, 0, "")
