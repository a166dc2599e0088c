"""Tests for pdfcontrib.model.enums."""

import pytest

from pdfcontrib.model.enums import BarcodeKind, PageBox, QREncoding, QRErrorCorrection


class TestBarcodeKind:
    @pytest.mark.parametrize(
        "kind,value",
        [
            (BarcodeKind.CODABAR, "Codabar"),
            (BarcodeKind.CODE128, "Code 128"),
            (BarcodeKind.CODE39, "Code 39"),
            (BarcodeKind.DATAMATRIX, "DataMatrix"),
            (BarcodeKind.EAN8, "EAN 8"),
            (BarcodeKind.EAN13, "EAN 13"),
            (BarcodeKind.QR, "QR Code"),
            (BarcodeKind.TWO_OF_FIVE, "2 of 5"),
            (BarcodeKind.TWO_OF_FIVE_INTERLEAVED, "2 of 5 (interleaved)"),
            (BarcodeKind.PDF417, "PDF417"),
        ],
    )
    def test_values(self, kind: BarcodeKind, value: str) -> None:
        assert kind.value == value
        assert BarcodeKind(value) is kind

    def test_values_unique(self) -> None:
        values = [k.value for k in BarcodeKind]
        assert len(values) == len(set(values))

    def test_is_2d(self) -> None:
        two_d = {k for k in BarcodeKind if k.is_2d}
        assert two_d == {BarcodeKind.QR, BarcodeKind.DATAMATRIX, BarcodeKind.PDF417}

    def test_localized_name(self) -> None:
        assert BarcodeKind.QR.localized_name("ru") == "QR код"
        assert BarcodeKind.QR.localized_name("en") == "QR Code"
        for kind in BarcodeKind:
            assert kind.localized_name()


class TestQREnums:
    def test_error_correction_levels(self) -> None:
        assert [e.value for e in QRErrorCorrection] == ["L", "M", "Q", "H"]

    def test_encoding_from_string(self) -> None:
        assert QREncoding("auto") is QREncoding.AUTO
        assert QREncoding("numeric") is QREncoding.NUMERIC

    def test_invalid_level(self) -> None:
        with pytest.raises(ValueError):
            QRErrorCorrection("X")


class TestPageBox:
    @pytest.mark.parametrize(
        "box,attr",
        [
            (PageBox.MEDIA_BOX, "mediabox"),
            (PageBox.CROP_BOX, "cropbox"),
            (PageBox.BLEED_BOX, "bleedbox"),
            (PageBox.TRIM_BOX, "trimbox"),
            (PageBox.ART_BOX, "artbox"),
        ],
    )
    def test_attribute(self, box: PageBox, attr: str) -> None:
        assert box.attribute == attr

    def test_from_pdf_name(self) -> None:
        assert PageBox("/CropBox") is PageBox.CROP_BOX
