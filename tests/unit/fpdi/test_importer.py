"""Tests for TemplateImporter on PDFs built in the test."""

import zlib
from io import BytesIO
from pathlib import Path
from typing import Dict

import pytest
from fpdf import FPDF
from PIL import Image
from pypdf import PdfWriter
from pypdf.generic import RectangleObject

from pdfcontrib.exceptions import (
    FpdiError,
    PageNotFoundError,
    SourceFileError,
    TemplateNotFoundError,
)
from pdfcontrib.fpdi.importer import HASH_LENGTH, TemplateImporter
from pdfcontrib.model.enums import PageBox


def stream_data(body: bytes) -> bytes:
    return body.split(b"\nstream\n", 1)[1].rsplit(b"\nendstream", 1)[0]


@pytest.fixture
def source_pdf(tmp_path: Path) -> Path:
    """Two 100x200 pt pages with text; the first also carries an image."""
    pdf = FPDF(unit="pt", format=(100, 200))
    pdf.set_font("helvetica", size=12)
    for page_no in (1, 2):
        pdf.add_page()
        pdf.text(10, 50, f"Page {page_no}")
        if page_no == 1:
            buf = BytesIO()
            Image.new("L", (8, 8), 0).save(buf, format="PNG")
            pdf.image(buf, x=10, y=60, w=20, h=20)
    path = tmp_path / "source.pdf"
    pdf.output(str(path))
    return path


@pytest.fixture
def rotated_pdf(tmp_path: Path) -> Path:
    """200x100 pt media box, crop box 100x50, rotated 90 degrees."""
    writer = PdfWriter()
    page = writer.add_blank_page(width=200, height=100)
    page.cropbox = RectangleObject([10, 20, 110, 70])
    page.rotate(90)
    path = tmp_path / "rotated.pdf"
    with open(path, "wb") as f:
        writer.write(f)
    return path


@pytest.fixture
def importer(source_pdf: Path) -> TemplateImporter:
    imp = TemplateImporter()
    imp.set_source_file(source_pdf)
    return imp


class TestSourceFile:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SourceFileError):
            TemplateImporter().set_source_file(tmp_path / "missing.pdf")

    def test_not_a_pdf(self, tmp_path: Path) -> None:
        path = tmp_path / "junk.pdf"
        path.write_bytes(b"hello world, not a pdf")
        with pytest.raises(SourceFileError):
            TemplateImporter().set_source_file(path)

    def test_no_source_selected(self) -> None:
        with pytest.raises(SourceFileError, match="No source"):
            TemplateImporter().import_page(1)

    def test_page_count(self, importer: TemplateImporter) -> None:
        assert importer.page_count() == 2

    def test_stream_source(self, source_pdf: Path) -> None:
        imp = TemplateImporter()
        imp.set_source_file(BytesIO(source_pdf.read_bytes()))
        assert imp.import_page(2) == 0

    def test_reader_cached_per_path(self, source_pdf: Path, rotated_pdf: Path) -> None:
        imp = TemplateImporter()
        imp.set_source_file(source_pdf)
        imp.set_source_file(rotated_pdf)
        imp.set_source_file(str(source_pdf))
        assert len(imp._readers) == 2
        assert imp.page_count() == 2


class TestImportPage:
    def test_ids_are_sequential(self, importer: TemplateImporter) -> None:
        assert importer.import_page(1) == 0
        assert importer.import_page(2) == 1
        assert importer.import_page(1) == 2

    @pytest.mark.parametrize("page_no", [0, 3, -1])
    def test_page_out_of_range(self, importer: TemplateImporter, page_no: int) -> None:
        with pytest.raises(PageNotFoundError):
            importer.import_page(page_no)

    def test_unknown_box(self, importer: TemplateImporter) -> None:
        with pytest.raises(FpdiError, match="Unknown page box"):
            importer.import_page(1, "/NoSuchBox")

    def test_template_geometry(self, importer: TemplateImporter) -> None:
        tpl = importer.template(importer.import_page(1))
        assert tpl.name == "/TPL0"
        assert (tpl.width, tpl.height) == pytest.approx((100, 200))
        assert tpl.bbox == pytest.approx((0, 0, 100, 200))
        assert tpl.matrix == (1.0, 0.0, 0.0, 1.0, -0.0, -0.0)
        assert len(tpl.obj_hash) == HASH_LENGTH

    def test_rotated_page_swaps_size(self, rotated_pdf: Path) -> None:
        imp = TemplateImporter()
        imp.set_source_file(rotated_pdf)
        tpl = imp.template(imp.import_page(1, PageBox.CROP_BOX))
        assert tpl.bbox == pytest.approx((10, 20, 110, 70))
        assert (tpl.width, tpl.height) == pytest.approx((50, 100))
        assert tpl.matrix == pytest.approx((0, -1, 1, 0, -20, 110))

    def test_media_box(self, rotated_pdf: Path) -> None:
        imp = TemplateImporter()
        imp.set_source_file(rotated_pdf)
        tpl = imp.template(imp.import_page(1, "/MediaBox"))
        assert (tpl.width, tpl.height) == pytest.approx((100, 200))

    @pytest.mark.parametrize("box", [PageBox.TRIM_BOX, PageBox.BLEED_BOX, PageBox.ART_BOX])
    def test_missing_box_falls_back_to_crop_box(self, rotated_pdf: Path, box: PageBox) -> None:
        imp = TemplateImporter()
        imp.set_source_file(rotated_pdf)
        tpl = imp.template(imp.import_page(1, box))
        assert tpl.bbox == pytest.approx((10, 20, 110, 70))

    def test_crop_box_falls_back_to_media_box(self, importer: TemplateImporter) -> None:
        tpl = importer.template(importer.import_page(1, PageBox.CROP_BOX))
        assert tpl.bbox == pytest.approx((0, 0, 100, 200))


class TestSerialization:
    def test_form_xobject(self, importer: TemplateImporter) -> None:
        importer.import_page(1)
        templates = importer.put_form_xobjects()
        assert list(templates) == ["/TPL0"]

        body = importer.get_imported_objects()[templates["/TPL0"]]
        assert body.startswith(b"<<")
        assert b"/Subtype /Form" in body
        assert b"/Filter /FlateDecode" in body
        assert b"BT" in zlib.decompress(stream_data(body))

    def test_references_become_hashes(self, importer: TemplateImporter) -> None:
        importer.import_page(1)
        importer.put_form_xobjects()
        objects = importer.get_imported_objects()
        positions = importer.get_imported_obj_hash_pos()

        assert set(positions) == set(objects)
        assert any(positions.values())
        for obj_hash, refs in positions.items():
            body = objects[obj_hash]
            for offset, ref in refs.items():
                assert body[offset : offset + HASH_LENGTH] == ref.encode("ascii")
                assert ref in objects

    def test_no_object_numbers_left(self, importer: TemplateImporter) -> None:
        importer.import_page(2)
        templates = importer.put_form_xobjects()
        for obj_hash, body in importer.get_imported_objects().items():
            if obj_hash not in templates.values():
                assert b" 0 R" not in body

    def test_streams_copied_with_length(self, importer: TemplateImporter) -> None:
        importer.import_page(1)
        templates = importer.put_form_xobjects()
        streams: Dict[str, bytes] = {
            h: body
            for h, body in importer.get_imported_objects().items()
            if b"\nstream\n" in body and h not in templates.values()
        }
        assert streams, "image XObject expected among resources"
        for body in streams.values():
            data = stream_data(body)
            assert f"/Length {len(data)}".encode() in body

    def test_shared_resources_written_once(self, importer: TemplateImporter) -> None:
        importer.import_page(1)
        importer.put_form_xobjects()
        before = len(importer.get_imported_objects())

        importer.import_page(1)
        templates = importer.put_form_xobjects()

        assert list(templates) == ["/TPL0", "/TPL1"]
        assert templates["/TPL0"] != templates["/TPL1"]
        assert len(importer.get_imported_objects()) == before + 1

    def test_results_are_copies(self, importer: TemplateImporter) -> None:
        importer.import_page(1)
        importer.put_form_xobjects()
        importer.get_imported_objects().clear()
        importer.get_imported_obj_hash_pos().clear()
        assert importer.get_imported_objects()
        assert importer.get_imported_obj_hash_pos()

    def test_blank_page(self, rotated_pdf: Path) -> None:
        imp = TemplateImporter()
        imp.set_source_file(rotated_pdf)
        imp.import_page(1)
        templates = imp.put_form_xobjects()
        body = imp.get_imported_objects()[templates["/TPL0"]]
        assert zlib.decompress(stream_data(body)) == b""


class TestUseTemplate:
    def test_natural_size(self, importer: TemplateImporter) -> None:
        tpl_id = importer.import_page(1)
        assert importer.use_template(tpl_id, 5, 10) == ("/TPL0", 1.0, 1.0, 5, -210)

    def test_width_only_keeps_aspect(self, importer: TemplateImporter) -> None:
        tpl_id = importer.import_page(1)
        name, sx, sy, tx, ty = importer.use_template(tpl_id, 0, 0, w=50)
        assert (sx, sy) == pytest.approx((0.5, 0.5))
        assert ty == pytest.approx(-100)

    def test_height_only_keeps_aspect(self, importer: TemplateImporter) -> None:
        tpl_id = importer.import_page(1)
        assert importer.get_template_size(tpl_id, h=400) == pytest.approx((200, 400))

    def test_both_sides_stretch(self, importer: TemplateImporter) -> None:
        tpl_id = importer.import_page(1)
        _, sx, sy, _, ty = importer.use_template(tpl_id, 0, 20, w=200, h=100)
        assert (sx, sy) == pytest.approx((2.0, 0.5))
        assert ty == pytest.approx(-120)

    def test_user_units(self, importer: TemplateImporter) -> None:
        """With k=2 the 100x200 pt page is 50x100 user units."""
        tpl_id = importer.import_page(1)
        assert importer.get_template_size(tpl_id, k=2.0) == pytest.approx((50, 100))
        _, sx, sy, _, ty = importer.use_template(tpl_id, 0, 0, k=2.0)
        assert (sx, sy) == pytest.approx((1.0, 1.0))
        assert ty == pytest.approx(-100)

    def test_unknown_template(self, importer: TemplateImporter) -> None:
        with pytest.raises(TemplateNotFoundError):
            importer.use_template(0, 0, 0)
        importer.import_page(1)
        with pytest.raises(TemplateNotFoundError):
            importer.use_template(1, 0, 0)
