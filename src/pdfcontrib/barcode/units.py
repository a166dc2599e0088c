"""Unit conversion between host document units and barcode raster pixels."""

from __future__ import annotations

from typing import Final

HOST_DPI: Final[float] = 72
BARCODE_DPI: Final[float] = 96


def to_device_resolution(
    ratio: float,
    value: float,
    host_dpi: float = HOST_DPI,
    device_dpi: float = BARCODE_DPI,
) -> float:
    """
    Convert a length in host units to barcode pixels.

    The host resolves images at 72 dpi and the raster is built at 96 dpi
    with the exact pixel count, so the host draws it unscaled.

    Args:
        ratio: Host unit-to-point ratio (``FPDF.k``).
        value: Length in host units.

    Example:
        >>> to_device_resolution(1.0, 72)
        96.0
    """
    return value * ratio / host_dpi * device_dpi


def to_device_pixels(
    ratio: float,
    value: float,
    host_dpi: float = HOST_DPI,
    device_dpi: float = BARCODE_DPI,
) -> int:
    """``to_device_resolution`` truncated to whole pixels."""
    return int(to_device_resolution(ratio, value, host_dpi, device_dpi))
