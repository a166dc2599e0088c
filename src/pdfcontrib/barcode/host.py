"""
RU: Адаптер fpdf2 (FPDF) к протоколу BarcodePdf.
EN: fpdf2 host adapter: gives ``fpdf.FPDF`` the named image table and the
single-slot error channel the placement pipeline expects.
"""

from __future__ import annotations

import logging
import threading
from io import BytesIO
from typing import Any, BinaryIO, Dict, Optional, Union

from fpdf import FPDF
from PIL import Image, UnidentifiedImageError

from pdfcontrib.barcode.units import BARCODE_DPI, HOST_DPI
from pdfcontrib.protocols import ImageInfo

logger = logging.getLogger(__name__)

__all__ = ["FPDFBarcodeHost"]


class FPDFBarcodeHost:
    """
    Wraps an ``FPDF`` document for barcode placement.

    Registered images are drawn at their intrinsic size at ``image_dpi``
    when the draw call passes ``w = h = 0``, which is what the pipeline does.
    ``host_dpi`` and ``image_dpi`` must match the placer's ``host_dpi`` and
    ``device_dpi``; build both with ``from_config`` from the same dictionary.

    Image registration is serialised on the host, so several placers
    writing to one document register each image name once.

    Attributes:
        pdf: The wrapped fpdf2 document.
        error: Last error reported through ``set_error`` (None if none).

    Example:
        >>> pdf = FPDF(unit="mm")
        >>> pdf.add_page()
        >>> host = FPDFBarcodeHost(pdf)
        >>> host.get_conversion_ratio()  # points per millimetre
        2.834645669291339
    """

    def __init__(
        self,
        pdf: FPDF,
        *,
        host_dpi: float = HOST_DPI,
        image_dpi: float = BARCODE_DPI,
    ) -> None:
        self.pdf = pdf
        self.host_dpi = host_dpi
        self.image_dpi = image_dpi
        self.error: Optional[BaseException] = None
        self._lock = threading.RLock()
        self._images: Dict[str, ImageInfo] = {}
        self._data: Dict[str, bytes] = {}

    @classmethod
    def from_config(cls, pdf: FPDF, config: Dict[str, Any]) -> FPDFBarcodeHost:
        """Build with the dpi keys of a ``pdfcontrib.load_config()`` dictionary."""
        return cls(
            pdf,
            host_dpi=float(config.get("host_dpi", HOST_DPI)),
            image_dpi=float(config.get("barcode_dpi", BARCODE_DPI)),
        )

    @property
    def ok(self) -> bool:
        return self.error is None

    def set_error(self, err: BaseException) -> None:
        logger.debug("Host error slot set: %s", err)
        self.error = err

    def clear_error(self) -> None:
        self.error = None

    def get_conversion_ratio(self) -> float:
        return float(self.pdf.k)

    def get_image_info(self, name: str) -> Optional[ImageInfo]:
        return self._images.get(name)

    def register_image_reader(
        self, name: str, image_type: str, stream: BinaryIO
    ) -> Optional[ImageInfo]:
        """
        Keep the encoded bytes under ``name``; None if Pillow can not read them.

        A name that is already registered keeps its first image.
        """
        with self._lock:
            existing = self._images.get(name)
            if existing is not None:
                logger.debug("Image %s already registered", name)
                return existing
            data = stream.read()
            try:
                with Image.open(BytesIO(data)) as img:
                    width, height = img.size
            except (UnidentifiedImageError, OSError) as e:
                logger.warning("Rejected image %s (%s): %s", name, image_type, e)
                return None
            info = ImageInfo(name=name, image_type=image_type, width=width, height=height)
            self._data[name] = data
            self._images[name] = info
        return info

    def image(
        self,
        name: str,
        x: float,
        y: float,
        w: float = 0,
        h: float = 0,
        flow: bool = False,
        image_type: str = "",
        link: int = 0,
        link_url: str = "",
    ) -> None:
        """
        Draw a registered image.

        ``w = h = 0`` draws at the intrinsic size; a single zero side keeps
        the aspect ratio. With ``flow`` the image goes at the current y and
        the cursor moves below it.
        """
        info = self._images.get(name)
        if info is None:
            self.set_error(KeyError(f"Image {name!r} is not registered"))
            return

        k = self.get_conversion_ratio()
        if w == 0 and h == 0:
            w = info.width * self.host_dpi / self.image_dpi / k
            h = info.height * self.host_dpi / self.image_dpi / k
        elif w == 0:
            w = h * info.width / info.height
        elif h == 0:
            h = w * info.height / info.width

        target: Union[str, int] = link_url or link or ""
        self.pdf.image(
            BytesIO(self._data[name]),
            x=x,
            y=None if flow else y,
            w=w,
            h=h,
            link=target,
        )
