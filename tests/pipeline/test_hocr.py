"""Tests for pipeline/ocr_derivatives/tools/hocr.py"""

import pytest

from pipeline.ocr_derivatives.tools.hocr import (
    HocrDocument,
    is_valid_hocr,
    parse_title,
    strip_doctype,
)


@pytest.fixture
def hocr_file(tmp_path, sample_hocr):
    path = tmp_path / "page.html"
    path.write_text(sample_hocr)
    return path


class TestValidation:

    def test_valid(self, hocr_file):
        assert is_valid_hocr(hocr_file)

    def test_invalid(self, tmp_path, invalid_hocr):
        path = tmp_path / "bad.html"
        path.write_text(invalid_hocr)
        assert not is_valid_hocr(path)

    def test_missing_file(self, tmp_path):
        assert not is_valid_hocr(tmp_path / "missing.html")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.html"
        path.write_text("")
        assert not is_valid_hocr(path)


class TestStripDoctype:

    def test_removes_doctype(self, hocr_file):
        assert b"<!DOCTYPE" in hocr_file.read_bytes()
        strip_doctype(hocr_file)
        assert b"<!DOCTYPE" not in hocr_file.read_bytes()

    def test_keeps_content_valid(self, hocr_file):
        strip_doctype(hocr_file)

        assert is_valid_hocr(hocr_file)
        document = HocrDocument.from_file(hocr_file)
        assert [w.text for w in document.words()] == ["Theodore", "Roosevelt,", "An", "Autobiography"]

    def test_html_entities_become_characters(self, tmp_path, sample_hocr):
        path = tmp_path / "page.html"
        path.write_text(sample_hocr.replace("Roosevelt,", "Roosevelt,&nbsp;"))
        assert is_valid_hocr(path)

        strip_doctype(path)

        assert is_valid_hocr(path)
        markup = path.read_text(encoding="utf-8")
        assert "&nbsp;" not in markup
        assert "Roosevelt,\u00a0" in markup

    def test_xml_entities_untouched(self, tmp_path, sample_hocr):
        path = tmp_path / "page.html"
        path.write_text(sample_hocr.replace("An<", "An &amp; A<"))

        strip_doctype(path)

        assert is_valid_hocr(path)
        assert "An &amp; A" in path.read_text(encoding="utf-8")

    def test_unknown_entity_leaves_invalid_markup(self, tmp_path, sample_hocr):
        path = tmp_path / "page.html"
        path.write_text(sample_hocr.replace("Roosevelt,", "Roosevelt,&bogus;"))

        strip_doctype(path)

        assert not is_valid_hocr(path)

    def test_idempotent(self, hocr_file):
        strip_doctype(hocr_file)
        first = hocr_file.read_bytes()
        strip_doctype(hocr_file)
        assert hocr_file.read_bytes() == first


def test_parse_title():
    props = parse_title('bbox 100 100 300 150; x_wconf 93')
    assert props == {"bbox": "100 100 300 150", "x_wconf": "93"}
    assert parse_title("") == {}


class TestHocrDocument:

    def test_page_dimensions(self, sample_hocr):
        assert HocrDocument(sample_hocr).page_dimensions() == (1000, 1500)

    def test_page_dimensions_missing(self):
        assert HocrDocument("<html><body></body></html>").page_dimensions() is None

    def test_lines(self, sample_hocr):
        lines = HocrDocument(sample_hocr).lines()

        assert [line.id for line in lines] == ["line_1_1", "line_1_2"]
        assert lines[0].bbox == (100, 100, 900, 150)
        assert lines[1].text == "An Autobiography"

    def test_words_have_confidence(self, sample_hocr):
        words = HocrDocument(sample_hocr).words()

        assert len(words) == 4
        assert words[0].bbox == (100, 100, 300, 150)
        assert words[0].confidence == pytest.approx(0.93)

    def test_text(self, sample_hocr):
        assert HocrDocument(sample_hocr).text() == "Theodore Roosevelt,\nAn Autobiography"

    def test_search_ignores_case_and_punctuation(self, sample_hocr):
        matches = HocrDocument(sample_hocr).search("ROOSEVELT")

        assert len(matches) == 1
        assert matches[0].text == "Roosevelt,"
        assert matches[0].bbox == (320, 100, 600, 150)
        assert matches[0].line_id == "line_1_1"

    def test_search_partial_word(self, sample_hocr):
        assert [w.text for w in HocrDocument(sample_hocr).search("auto")] == ["Autobiography"]

    def test_search_no_match(self, sample_hocr):
        assert HocrDocument(sample_hocr).search("lincoln") == []
        assert HocrDocument(sample_hocr).search("!!") == []
