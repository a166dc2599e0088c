"""
RU: Импорт страниц существующих PDF как шаблонов (form XObject) на базе pypdf.

EN: Page import engine. A source page becomes a form XObject whose content is
the page's content stream and whose resources are copied object by object.
Copied objects are handed over serialized, with every indirect reference
replaced by the 40-character SHA-1 hash of the referenced object; the host
numbers the objects itself and rewrites the placeholders at the recorded
byte offsets.

Example:
    >>> importer = TemplateImporter()
    >>> importer.set_source_file("letterhead.pdf")
    >>> tpl_id = importer.import_page(1)
    >>> templates = importer.put_form_xobjects()
    >>> importer.use_template(tpl_id, 0, 0, 210, 0, k=72 / 25.4)
    ('/TPL0', ...)
"""

from __future__ import annotations

import hashlib
import logging
import os
import zlib
from dataclasses import dataclass
from io import BytesIO
from typing import BinaryIO, Dict, List, Tuple, Union

from pypdf import PageObject, PdfReader
from pypdf.errors import PyPdfError
from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    FloatObject,
    IndirectObject,
    NameObject,
    NullObject,
    NumberObject,
    PdfObject,
    StreamObject,
)

from pdfcontrib.exceptions import (
    FpdiError,
    PageNotFoundError,
    SourceFileError,
    TemplateNotFoundError,
)
from pdfcontrib.model.enums import PageBox

logger = logging.getLogger(__name__)

__all__ = ["ImportedTemplate", "TemplateImporter", "HASH_LENGTH", "TEMPLATE_PREFIX"]

HASH_LENGTH = 40
TEMPLATE_PREFIX = "/TPL"

Source = Union[str, "os.PathLike[str]", BinaryIO]
Matrix = Tuple[float, float, float, float, float, float]


def _digest(*parts: object) -> str:
    return hashlib.sha1("|".join(str(p) for p in parts).encode("utf-8")).hexdigest()


def _rotation_matrix(
    rotation: int, llx: float, lly: float, urx: float, ury: float
) -> Matrix:
    """Map the page box onto ``(0, 0)`` upright, as a viewer would show it."""
    if rotation == 90:
        return (0.0, -1.0, 1.0, 0.0, -lly, urx)
    if rotation == 180:
        return (-1.0, 0.0, 0.0, -1.0, urx, ury)
    if rotation == 270:
        return (0.0, 1.0, -1.0, 0.0, ury, -llx)
    return (1.0, 0.0, 0.0, 1.0, -llx, -lly)


@dataclass(frozen=True)
class ImportedTemplate:
    """
    One imported page.

    Attributes:
        name: Resource name of the form XObject (``/TPL0``).
        source: Key of the source the page came from.
        page_no: 1-based page number in the source.
        box: Page boundary used as the form BBox.
        bbox: ``(llx, lly, urx, ury)`` in source page space.
        matrix: Form matrix undoing the page rotation.
        width: Upright width in points.
        height: Upright height in points.
        obj_hash: Hash standing for the form XObject.
    """

    name: str
    source: str
    page_no: int
    box: PageBox
    bbox: Tuple[float, float, float, float]
    matrix: Matrix
    width: float
    height: float
    obj_hash: str


class TemplateImporter:
    """
    Импортёр страниц: читает исходные PDF и готовит объекты для хоста.

    Ids шаблонов последовательные, с нуля, в порядке импорта; один и тот же
    импортёр может брать страницы из нескольких файлов.
    """

    def __init__(self) -> None:
        self._readers: Dict[str, PdfReader] = {}
        self._current: str = ""
        self._templates: List[ImportedTemplate] = []
        self._pages: Dict[str, PageObject] = {}
        self._objects: Dict[str, bytes] = {}
        self._positions: Dict[str, Dict[int, str]] = {}
        self._pending: List[Tuple[str, IndirectObject]] = []

    # === Sources ===

    def set_source_file(self, source: Source) -> None:
        """
        Select the PDF following ``import_page`` calls read from.

        Readers are cached per path, so switching back to a file is free.

        Raises:
            SourceFileError: missing, unreadable, encrypted or not a PDF.
        """
        if hasattr(source, "read"):
            key = f"stream-{id(source)}"
        else:
            key = os.fspath(source)  # type: ignore[arg-type]
        if key not in self._readers:
            self._readers[key] = self._open(source, key)
        self._current = key

    def _open(self, source: Source, key: str) -> PdfReader:
        try:
            reader = PdfReader(source)
            if reader.is_encrypted and not reader.decrypt(""):
                raise SourceFileError(f"Source PDF is encrypted: {key}")
            len(reader.pages)
        except OSError as e:
            raise SourceFileError(f"Can not open source PDF {key}: {e}", cause=e) from e
        except PyPdfError as e:
            raise SourceFileError(f"Can not read source PDF {key}: {e}", cause=e) from e
        logger.debug("Opened source PDF %s (%d pages)", key, len(reader.pages))
        return reader

    def _reader(self) -> PdfReader:
        if not self._current:
            raise SourceFileError("No source file selected")
        return self._readers[self._current]

    def page_count(self) -> int:
        return len(self._reader().pages)

    # === Import ===

    def import_page(self, page_no: int, box: Union[PageBox, str] = PageBox.MEDIA_BOX) -> int:
        """
        Import a page of the current source as a template.

        Args:
            page_no: 1-based page number.
            box: Boundary to use. Missing boxes fall back the usual way
                (CropBox to MediaBox, the others to CropBox).

        Returns:
            Template id for ``use_template``.

        Raises:
            PageNotFoundError: page_no outside the document.
            FpdiError: unknown box name.
        """
        reader = self._reader()
        try:
            box = PageBox(box)
        except ValueError as e:
            raise FpdiError(f"Unknown page box {box!r}", cause=e) from e
        if not 1 <= page_no <= len(reader.pages):
            raise PageNotFoundError(
                f"Page {page_no} not in {self._current} ({len(reader.pages)} pages)"
            )
        page = reader.pages[page_no - 1]

        # pypdf resolves inherited and defaulted boxes
        rect = getattr(page, box.attribute)
        llx, lly = float(rect.left), float(rect.bottom)
        urx, ury = float(rect.right), float(rect.top)
        rotation = int(page.rotation or 0) % 360
        width, height = urx - llx, ury - lly
        if rotation in (90, 270):
            width, height = height, width

        tpl_id = len(self._templates)
        template = ImportedTemplate(
            name=f"{TEMPLATE_PREFIX}{tpl_id}",
            source=self._current,
            page_no=page_no,
            box=box,
            bbox=(llx, lly, urx, ury),
            matrix=_rotation_matrix(rotation, llx, lly, urx, ury),
            width=width,
            height=height,
            obj_hash=_digest(self._current, page_no, box.value, tpl_id, "form"),
        )
        self._templates.append(template)
        self._pages[template.obj_hash] = page
        logger.info(
            "Imported page %d of %s as %s (%s, %.2fx%.2f pt, rotate %d)",
            page_no, self._current, template.name, box.value, width, height, rotation,
        )
        return tpl_id

    def put_form_xobjects(self) -> Dict[str, str]:
        """
        Serialize form XObjects of templates not yet written, together with
        every object their resources reach.

        Returns:
            Template name -> form XObject hash, for all templates so far.
        """
        for template in self._templates:
            if template.obj_hash in self._objects:
                continue
            self._put_form(template, self._pages[template.obj_hash])
        self._drain()
        return {t.name: t.obj_hash for t in self._templates}

    def get_imported_objects(self) -> Dict[str, bytes]:
        return dict(self._objects)

    def get_imported_obj_hash_pos(self) -> Dict[str, Dict[int, str]]:
        return {h: dict(pos) for h, pos in self._positions.items()}

    # === Placement ===

    def template(self, tpl_id: int) -> ImportedTemplate:
        if not 0 <= tpl_id < len(self._templates):
            raise TemplateNotFoundError(f"Template {tpl_id} was never imported")
        return self._templates[tpl_id]

    def get_template_size(
        self, tpl_id: int, w: float = 0, h: float = 0, k: float = 1.0
    ) -> Tuple[float, float]:
        """
        Size in user units (points divided by ``k``).

        Both zero gives the template size; one zero side is derived from the
        aspect ratio.
        """
        tpl = self.template(tpl_id)
        tpl_w, tpl_h = tpl.width / k, tpl.height / k
        if w == 0 and h == 0:
            return tpl_w, tpl_h
        if w == 0:
            return h * tpl_w / tpl_h, h
        if h == 0:
            return w, w * tpl_h / tpl_w
        return w, h

    def use_template(
        self,
        tpl_id: int,
        x: float,
        y: float,
        w: float = 0,
        h: float = 0,
        k: float = 1.0,
    ) -> Tuple[str, float, float, float, float]:
        """
        Placement parameters for drawing a template.

        The host draws ``scale_x 0 0 scale_y tx*k (ty + page_height)*k cm``
        followed by the template name, so ``ty`` is ``-y - h`` in the
        top-down user space.

        Returns:
            ``(name, scale_x, scale_y, tx, ty)``
        """
        tpl = self.template(tpl_id)
        w, h = self.get_template_size(tpl_id, w, h, k)
        scale_x = w / (tpl.width / k)
        scale_y = h / (tpl.height / k)
        return tpl.name, scale_x, scale_y, x, -y - h

    # === Serialization ===

    def _put_form(self, template: ImportedTemplate, page: PageObject) -> None:
        contents = page.get_contents()
        data = contents.get_data() if contents is not None else b""
        resources = page.get("/Resources")

        header = DictionaryObject()
        header[NameObject("/Type")] = NameObject("/XObject")
        header[NameObject("/Subtype")] = NameObject("/Form")
        header[NameObject("/FormType")] = NumberObject(1)
        header[NameObject("/BBox")] = ArrayObject(FloatObject(v) for v in template.bbox)
        header[NameObject("/Matrix")] = ArrayObject(FloatObject(v) for v in template.matrix)
        header[NameObject("/Resources")] = (
            resources if resources is not None else DictionaryObject()
        )
        header[NameObject("/Filter")] = NameObject("/FlateDecode")

        self._store(template.obj_hash, template.source, header, zlib.compress(data))

    def _drain(self) -> None:
        while self._pending:
            source, ref = self._pending.pop()
            digest = _digest(source, ref.idnum, ref.generation)
            if digest in self._objects:
                continue
            obj = ref.get_object()
            if obj is None:
                obj = NullObject()
            if isinstance(obj, StreamObject):
                header = DictionaryObject(
                    (k, obj.raw_get(k)) for k in obj if k != "/Length"
                )
                # encoded bytes for the copied /Filter; get_data() would decode them
                self._store(digest, source, header, obj._data)
            else:
                self._store(digest, source, obj, None)

    def _store(
        self, digest: str, source: str, obj: PdfObject, stream: Union[bytes, None]
    ) -> None:
        out = bytearray()
        refs: Dict[int, str] = {}
        if stream is not None:
            obj[NameObject("/Length")] = NumberObject(len(stream))  # type: ignore[index]
        self._write(obj, source, out, refs)
        if stream is not None:
            out += b"\nstream\n" + stream + b"\nendstream"
        self._objects[digest] = bytes(out)
        self._positions[digest] = refs

    def _write(
        self, obj: object, source: str, out: bytearray, refs: Dict[int, str]
    ) -> None:
        if isinstance(obj, IndirectObject):
            digest = _digest(source, obj.idnum, obj.generation)
            refs[len(out)] = digest
            out += digest.encode("ascii")
            if digest not in self._objects:
                self._pending.append((source, obj))
        elif isinstance(obj, DictionaryObject):
            out += b"<<"
            for key in obj:
                self._write(NameObject(key), source, out, refs)
                out += b" "
                self._write(obj.raw_get(key), source, out, refs)
            out += b">>"
        elif isinstance(obj, ArrayObject):
            out += b"["
            for i, item in enumerate(obj):
                if i:
                    out += b" "
                self._write(item, source, out, refs)
            out += b"]"
        else:
            buf = BytesIO()
            obj.write_to_stream(buf)  # type: ignore[attr-defined]
            out += buf.getvalue()
