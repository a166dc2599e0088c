"""
Протокольные интерфейсы хост-документа.

Определяет, какие возможности pdfcontrib требует от генератора PDF. Хост не обязан
наследоваться от этих классов: typing.Protocol даёт structural subtyping, а
@runtime_checkable позволяет проверять соответствие через isinstance().

- ErrorSink: однослотовый канал ошибок (последняя запись побеждает)
- BarcodePdf: регистрация и вывод растровых изображений
- TemplatePdf: приём импортированных объектов и шаблонов страниц

Example:
    >>> from pdfcontrib.barcode import FPDFBarcodeHost
    >>> isinstance(FPDFBarcodeHost(FPDF()), BarcodePdf)
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Dict, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class ImageInfo:
    """
    Image registered with a host document.

    Attributes:
        name: Registration name used by later draw calls.
        image_type: Format tag (``"png"``).
        width: Intrinsic width in pixels.
        height: Intrinsic height in pixels.
    """

    name: str
    image_type: str
    width: int
    height: int


@runtime_checkable
class ErrorSink(Protocol):
    """Single-slot, last-write-wins error channel; never aborts the build."""

    def set_error(self, err: BaseException) -> None: ...


@runtime_checkable
class BarcodePdf(ErrorSink, Protocol):
    """
    Подмножество хост-документа, нужное для вывода штрихкодов.

    Validation Rules:
        - get_image_info: None означает, что имя ещё не зарегистрировано
        - register_image_reader: None означает, что хост отверг изображение
        - image: w=0 и h=0 означают "собственный размер изображения"
    """

    def get_conversion_ratio(self) -> float: ...

    def get_image_info(self, name: str) -> Optional[ImageInfo]: ...

    def register_image_reader(
        self, name: str, image_type: str, stream: BinaryIO
    ) -> Optional[ImageInfo]: ...

    def image(
        self,
        name: str,
        x: float,
        y: float,
        w: float,
        h: float,
        flow: bool,
        image_type: str,
        link: int,
        link_url: str,
    ) -> None: ...


@runtime_checkable
class TemplatePdf(ErrorSink, Protocol):
    """
    Подмножество хост-документа, принимающее импортированные страницы.

    Объекты передаются сериализованными; ссылки между ними заменены 40-символьными
    хешами, позиции которых хост получает через import_obj_pos и подставляет
    собственные номера объектов при выводе.
    """

    def get_conversion_ratio(self) -> float: ...

    def import_objects(self, objs: Dict[str, bytes]) -> None: ...

    def import_obj_pos(self, positions: Dict[str, Dict[int, str]]) -> None: ...

    def import_templates(self, templates: Dict[str, str]) -> None: ...

    def use_imported_template(
        self, name: str, scale_x: float, scale_y: float, tx: float, ty: float
    ) -> None: ...


__all__ = [
    "ImageInfo",
    "ErrorSink",
    "BarcodePdf",
    "TemplatePdf",
]
