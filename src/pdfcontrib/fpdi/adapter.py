"""Glue between the page import engine and a host document."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

from pypdf.errors import PyPdfError

from pdfcontrib.exceptions import FpdiError
from pdfcontrib.fpdi.importer import Source, TemplateImporter
from pdfcontrib.model.enums import PageBox
from pdfcontrib.protocols import TemplatePdf

logger = logging.getLogger(__name__)

__all__ = ["PageImporter"]


class PageImporter:
    """
    Импортирует страницы в хост-документ и размещает их.

    Один экземпляр на документ: ids шаблонов действуют только внутри него.

    Example:
        >>> importer = PageImporter()
        >>> tpl = importer.import_page(pdf, "letterhead.pdf", 1)
        >>> importer.use_imported_template(pdf, tpl, 0, 0, 210, 0)
        True
    """

    def __init__(
        self,
        importer: Optional[TemplateImporter] = None,
        *,
        default_box: Union[PageBox, str] = PageBox.MEDIA_BOX,
        strict: bool = False,
    ) -> None:
        self.importer = importer if importer is not None else TemplateImporter()
        self.default_box = PageBox(default_box)
        self.strict = strict

    @classmethod
    def from_config(cls, config: Dict[str, Any], *, strict: bool = False) -> PageImporter:
        return cls(
            default_box=config.get("default_page_box", PageBox.MEDIA_BOX),
            strict=strict,
        )

    def import_page(
        self,
        pdf: TemplatePdf,
        source_file: Source,
        page_no: int,
        box: Union[PageBox, str, None] = None,
    ) -> int:
        """
        Import one page and hand templates, objects and reference positions
        over to the host.

        Returns:
            Template id, or -1 with the error in ``pdf.set_error``.
        """
        try:
            self.importer.set_source_file(source_file)
            tpl_id = self.importer.import_page(page_no, box or self.default_box)
            pdf.import_templates(self.importer.put_form_xobjects())
            pdf.import_objects(self.importer.get_imported_objects())
            pdf.import_obj_pos(self.importer.get_imported_obj_hash_pos())
        except (FpdiError, PyPdfError) as e:
            self._fail(pdf, e, f"Page import failed for page {page_no} of {source_file}")
            return -1
        return tpl_id

    def use_imported_template(
        self,
        pdf: TemplatePdf,
        tpl_id: int,
        x: float,
        y: float,
        w: float = 0,
        h: float = 0,
    ) -> bool:
        """Draw an imported page; w or h of 0 keeps the page aspect ratio."""
        try:
            name, scale_x, scale_y, tx, ty = self.importer.use_template(
                tpl_id, x, y, w, h, pdf.get_conversion_ratio()
            )
        except FpdiError as e:
            self._fail(pdf, e, f"Template {tpl_id} can not be placed")
            return False
        pdf.use_imported_template(name, scale_x, scale_y, tx, ty)
        return True

    def _fail(self, pdf: TemplatePdf, err: Exception, message: str) -> None:
        logger.warning("%s: %s", message, err)
        if self.strict:
            raise err
        pdf.set_error(err)
