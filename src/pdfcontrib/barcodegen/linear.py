from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Set, Tuple, TypedDict

import barcode as pybarcode
import treepoem
from barcode.errors import BarcodeNotFoundError

from pdfcontrib.barcodegen.symbol import BarcodeSymbol
from pdfcontrib.exceptions import BarcodeEncodeError
from pdfcontrib.model.enums import BarcodeKind

logger = logging.getLogger(__name__)

__all__ = [
    "BarcodeGenerator",
    "BarcodeGenError",
    "LinearOptions",
    "ean_kind",
    "encode_codabar",
    "encode_code128",
    "encode_code39",
    "encode_ean",
    "encode_two_of_five",
]


class LinearOptions(TypedDict, total=False):
    """
    Типобезопасные опции линейных символик.

    Example:
        >>> options: LinearOptions = {"include_checksum": True}
        >>> gen = BarcodeGenerator(BarcodeKind.CODE39, "TEST", options)
    """

    include_checksum: bool  # Code 39: добавить контрольный символ (mod 43)
    full_ascii: bool  # Code 39: расширенный режим, весь ASCII 0-127


class BarcodeGenError(BarcodeEncodeError):
    """Linear barcode generation/validation error."""


_CODE39_CHARS = set("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-.$/+% ")
_CODABAR_CHARS = set("0123456789-$:/.+")
_CODABAR_START_STOP = set("ABCD")


def ean_kind(code: str) -> BarcodeKind:
    """EAN-8 for 7/8 digits, EAN-13 otherwise (including invalid lengths)."""
    return BarcodeKind.EAN8 if len(code) in (7, 8) else BarcodeKind.EAN13


def _ean_checksum(digits: str) -> int:
    total = sum(
        int(d) * (3 if i % 2 == 0 else 1) for i, d in enumerate(reversed(digits))
    )
    return (10 - total % 10) % 10


class BarcodeGenerator:
    """
    Linear (1D) barcode encoder producing a one-row module grid.

    python-barcode handles the symbologies it supports; Code 39 full ASCII
    and standard (non-interleaved) 2 of 5 go through BWIPP via treepoem.

    Args:
        kind: Linear symbology.
        data: Payload string.
        options: Symbology options (see ``LinearOptions``).
    """

    _pybarcode_support: Dict[BarcodeKind, str] = {
        BarcodeKind.CODABAR: "codabar",
        BarcodeKind.CODE128: "code128",
        BarcodeKind.CODE39: "code39",
        BarcodeKind.EAN8: "ean8",
        BarcodeKind.EAN13: "ean13",
        BarcodeKind.TWO_OF_FIVE_INTERLEAVED: "itf",
    }

    _treepoem_support: Dict[BarcodeKind, str] = {
        BarcodeKind.CODE39: "code39ext",
        BarcodeKind.TWO_OF_FIVE: "code2of5",
    }

    def __init__(
        self,
        kind: BarcodeKind,
        data: str,
        options: Optional[LinearOptions] = None,
    ) -> None:
        if not isinstance(kind, BarcodeKind):
            raise TypeError(f"kind must be BarcodeKind enum, got {type(kind)!r}")
        if kind not in self.supported_types():
            raise TypeError(f"{kind.value} is not a linear symbology")
        self.kind = kind
        self.data = data
        self.options: Dict[str, Any] = dict(options) if options else {}

    def validate(self) -> None:
        """
        Validate data against the symbology's character set and length rules.

        Raises:
            BarcodeGenError: при ошибке данных.
        """
        if not isinstance(self.data, str) or not self.data:
            raise BarcodeGenError("Barcode data must be non-empty string", key=self.data)

        if self.kind in (BarcodeKind.EAN8, BarcodeKind.EAN13):
            if not self.data.isdigit():
                raise BarcodeGenError(
                    f"{self.kind.value} barcode requires digits only.", key=self.data
                )
            lengths = (7, 8) if self.kind == BarcodeKind.EAN8 else (12, 13)
            if len(self.data) not in lengths:
                raise BarcodeGenError(
                    f"{self.kind.value} must be {lengths[0]} or {lengths[1]} digits.",
                    key=self.data,
                )
            if len(self.data) == lengths[1] and _ean_checksum(
                self.data[:-1]
            ) != int(self.data[-1]):
                raise BarcodeGenError(
                    f"{self.kind.value} checksum mismatch.", key=self.data
                )

        elif self.kind == BarcodeKind.CODE39:
            if self.options.get("full_ascii"):
                if not self.data.isascii():
                    raise BarcodeGenError(
                        "CODE39 full ASCII mode supports only ASCII 0-127", key=self.data
                    )
            elif not all(c in _CODE39_CHARS for c in self.data):
                raise BarcodeGenError(
                    "CODE39 supports only uppercase A-Z, 0-9, and -.$/+% chars",
                    key=self.data,
                )

        elif self.kind == BarcodeKind.CODE128 and not self.data.isascii():
            raise BarcodeGenError("CODE128 supports only ASCII chars", key=self.data)

        elif self.kind == BarcodeKind.TWO_OF_FIVE_INTERLEAVED and (
            not self.data.isdigit() or len(self.data) % 2 != 0
        ):
            raise BarcodeGenError(
                "Interleaved 2 of 5 must be even number of digits.", key=self.data
            )

        elif self.kind == BarcodeKind.TWO_OF_FIVE and not self.data.isdigit():
            raise BarcodeGenError("2 of 5 must contain only digits.", key=self.data)

        elif self.kind == BarcodeKind.CODABAR:
            code = self.data
            if (
                len(code) < 3
                or code[0] not in _CODABAR_START_STOP
                or code[-1] not in _CODABAR_START_STOP
                or not all(c in _CODABAR_CHARS for c in code[1:-1])
            ):
                raise BarcodeGenError(
                    "Codabar supports only 0-9, -$:/.+ between start/stop chars A-D",
                    key=self.data,
                )

    def _backend(self) -> Tuple[str, str]:
        if self.kind == BarcodeKind.CODE39 and self.options.get("full_ascii"):
            return "treepoem", self._treepoem_support[self.kind]
        if self.kind in self._pybarcode_support:
            return "pybarcode", self._pybarcode_support[self.kind]
        return "treepoem", self._treepoem_support[self.kind]

    def _pybarcode_kwargs(self) -> Dict[str, Any]:
        # narrow=1 / wide=3 keeps one pixel per narrow module
        if self.kind in (BarcodeKind.CODABAR, BarcodeKind.TWO_OF_FIVE_INTERLEAVED):
            return {"narrow": 1, "wide": 3}
        if self.kind == BarcodeKind.CODE39:
            return {"add_checksum": bool(self.options.get("include_checksum", False))}
        return {}

    def encode(self) -> BarcodeSymbol:
        """
        Encode the data into a one-row symbol.

        Raises:
            BarcodeGenError: invalid data or library failure.
        """
        self.validate()
        backend, name = self._backend()
        logger.debug(
            "Encoding [%s] via %s:%s data=%s", self.kind.value, backend, name, self.data
        )

        try:
            if backend == "treepoem":
                opts: Dict[str, Any] = {}
                if self.options.get("include_checksum"):
                    opts["includecheck"] = True
                image = treepoem.generate_barcode(
                    barcode_type=name, data=self.data, options=opts, scale=1
                )
                symbol = BarcodeSymbol.from_image(self.kind, self.data, image)
            else:
                bclass = pybarcode.get_barcode_class(name)
                rows = bclass(self.data, writer=None, **self._pybarcode_kwargs()).build()
                symbol = BarcodeSymbol(self.kind, self.data, (rows[0],))
        except BarcodeNotFoundError as e:
            raise BarcodeGenError(
                f"Barcode class not found for type: {self.kind.value}", key=self.data
            ) from e
        except Exception as e:
            raise BarcodeGenError(
                f"{self.kind.value} encoding failed: {e}", key=self.data
            ) from e

        if symbol.is_empty:
            raise BarcodeGenError(
                f"{self.kind.value} encoder produced no modules", key=self.data
            )
        return symbol

    @classmethod
    def supported_types(cls) -> Set[BarcodeKind]:
        return set(cls._pybarcode_support) | set(cls._treepoem_support)


def encode_codabar(code: str) -> BarcodeSymbol:
    return BarcodeGenerator(BarcodeKind.CODABAR, code).encode()


def encode_code128(code: str) -> BarcodeSymbol:
    return BarcodeGenerator(BarcodeKind.CODE128, code).encode()


def encode_code39(
    code: str, include_checksum: bool = False, full_ascii: bool = False
) -> BarcodeSymbol:
    return BarcodeGenerator(
        BarcodeKind.CODE39,
        code,
        {"include_checksum": include_checksum, "full_ascii": full_ascii},
    ).encode()


def encode_ean(code: str) -> BarcodeSymbol:
    """EAN-8 or EAN-13, picked from the number of digits."""
    return BarcodeGenerator(ean_kind(code), code).encode()


def encode_two_of_five(code: str, interleaved: bool = False) -> BarcodeSymbol:
    kind = BarcodeKind.TWO_OF_FIVE_INTERLEAVED if interleaved else BarcodeKind.TWO_OF_FIVE
    return BarcodeGenerator(kind, code).encode()
