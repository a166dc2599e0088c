"""
Реестр закодированных штрихкодов.

Хранит по одному символу на пару (символика, содержимое), чтобы один и тот же
штрихкод, запрошенный несколько раз, кодировался однажды. Реестр создаётся на
сеанс сборки документа и передаётся явно; глобального состояния нет.

Example:
    >>> registry = BarcodeRegistry()
    >>> key = registry.register_code128(pdf, "ORDER-42")
    >>> registry.lookup(key).kind
    <BarcodeKind.CODE128: 'Code 128'>

Thread Safety:
    Все публичные методы thread-safe благодаря RLock.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Iterator, Optional

from pdfcontrib.barcodegen import (
    BarcodeSymbol,
    ean_kind,
    encode_codabar,
    encode_code39,
    encode_code128,
    encode_datamatrix,
    encode_ean,
    encode_pdf417,
    encode_qr,
    encode_two_of_five,
)
from pdfcontrib.barcode.keys import BarcodeKey
from pdfcontrib.exceptions import BarcodeEncodeError
from pdfcontrib.model.enums import BarcodeKind, QREncoding, QRErrorCorrection
from pdfcontrib.protocols import ErrorSink

logger = logging.getLogger(__name__)

Encoder = Callable[..., BarcodeSymbol]


class BarcodeRegistry:
    """
    Thread-safe реестр символов штрихкодов.

    Attributes:
        strict: Если True, ошибки кодирования пробрасываются вызывающему
            вместо записи в слот ошибок документа.
        qr_error_correction: Уровень коррекции QR, если register_qr его не задаёт.
    """

    def __init__(
        self,
        *,
        strict: bool = False,
        qr_error_correction: QRErrorCorrection = QRErrorCorrection.M,
    ) -> None:
        self._lock = threading.RLock()
        self._barcodes: Dict[BarcodeKey, BarcodeSymbol] = {}
        self.strict = strict
        self.qr_error_correction = QRErrorCorrection(qr_error_correction)

    def register(self, symbol: BarcodeSymbol) -> BarcodeKey:
        """
        Зарегистрировать символ, не размещая его на странице.

        Повторная регистрация той же пары (символика, содержимое) перезаписывает
        запись; кодирование детерминировано, так что это ненаблюдаемо.

        Returns:
            Ключ для BarcodePlacer.place().
        """
        key = BarcodeKey.of(symbol)
        with self._lock:
            self._barcodes[key] = symbol
        logger.debug("Registered barcode %s (%dx%d)", key, symbol.width, symbol.height)
        return key

    def lookup(self, key: BarcodeKey) -> Optional[BarcodeSymbol]:
        with self._lock:
            return self._barcodes.get(key)

    def register_encoded(
        self,
        pdf: ErrorSink,
        kind: BarcodeKind,
        content: str,
        encoder: Encoder,
        *args: Any,
        **kwargs: Any,
    ) -> BarcodeKey:
        """
        Закодировать содержимое и зарегистрировать результат.

        Ошибка кодирования не возвращается вызывающему: она записывается в
        слот ошибок документа, а под ключом регистрируется пустой символ.
        Ключ возвращается всегда.

        Raises:
            BarcodeEncodeError: только если strict=True.
        """
        try:
            symbol = encoder(content, *args, **kwargs)
        except BarcodeEncodeError as e:
            logger.warning("Barcode encoding failed [%s] %r: %s", kind.value, content, e)
            if self.strict:
                raise
            pdf.set_error(e)
            symbol = BarcodeSymbol.empty(kind, content)
        return self.register(symbol)

    def register_codabar(self, pdf: ErrorSink, code: str) -> BarcodeKey:
        return self.register_encoded(pdf, BarcodeKind.CODABAR, code, encode_codabar)

    def register_code128(self, pdf: ErrorSink, code: str) -> BarcodeKey:
        return self.register_encoded(pdf, BarcodeKind.CODE128, code, encode_code128)

    def register_code39(
        self,
        pdf: ErrorSink,
        code: str,
        include_checksum: bool = False,
        full_ascii: bool = False,
    ) -> BarcodeKey:
        return self.register_encoded(
            pdf, BarcodeKind.CODE39, code, encode_code39, include_checksum, full_ascii
        )

    def register_datamatrix(self, pdf: ErrorSink, code: str) -> BarcodeKey:
        return self.register_encoded(pdf, BarcodeKind.DATAMATRIX, code, encode_datamatrix)

    def register_ean(self, pdf: ErrorSink, code: str) -> BarcodeKey:
        """EAN-8 or EAN-13, detected from the number of digits."""
        return self.register_encoded(pdf, ean_kind(code), code, encode_ean)

    def register_qr(
        self,
        pdf: ErrorSink,
        code: str,
        error_correction: Optional[QRErrorCorrection] = None,
        encoding: QREncoding = QREncoding.AUTO,
    ) -> BarcodeKey:
        level = error_correction or self.qr_error_correction
        return self.register_encoded(pdf, BarcodeKind.QR, code, encode_qr, level, encoding)

    def register_two_of_five(
        self, pdf: ErrorSink, code: str, interleaved: bool = False
    ) -> BarcodeKey:
        kind = BarcodeKind.TWO_OF_FIVE_INTERLEAVED if interleaved else BarcodeKind.TWO_OF_FIVE
        return self.register_encoded(pdf, kind, code, encode_two_of_five, interleaved)

    def register_pdf417(
        self,
        pdf: ErrorSink,
        code: str,
        columns: int = 6,
        security_level: int = 2,
    ) -> BarcodeKey:
        return self.register_encoded(
            pdf, BarcodeKind.PDF417, code, encode_pdf417, columns, security_level
        )

    def clear(self) -> None:
        with self._lock:
            self._barcodes.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._barcodes)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._barcodes

    def __iter__(self) -> Iterator[BarcodeKey]:
        with self._lock:
            return iter(list(self._barcodes))
