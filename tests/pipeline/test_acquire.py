"""Tests for pipeline/ocr_derivatives/tools/acquire.py"""

from pipeline.ocr_derivatives.tools.acquire import (
    SourceAcquirer,
    extension_for_mimetype,
    scratch_name,
)


def test_extension_for_mimetype():
    assert extension_for_mimetype("image/jpeg") == ".jpg"
    assert extension_for_mimetype("image/tiff") == ".tif"
    assert extension_for_mimetype("image/png; charset=binary") == ".png"
    assert extension_for_mimetype(None) == ".bin"
    assert extension_for_mimetype("application/x-not-a-type") == ".bin"


def test_scratch_name_is_deterministic_and_safe():
    assert scratch_name("islandora:12", "OBJ", "image/jpeg") == "islandora_12_OBJ.jpg"
    assert scratch_name("book:1/2", "OBJ", "image/png") == "book_1_2_OBJ.png"


def test_acquire_copies_bytes(page_object, scratch_dir, logger):
    image = SourceAcquirer(scratch_dir).acquire(page_object, "OBJ", logger)

    assert image is not None
    assert image.path == (scratch_dir / "test_1_OBJ.jpg").resolve()
    assert image.path.read_bytes() == page_object.datastream("OBJ").read_bytes()
    assert image.depth is None, "probing is the normalizer's job"


def test_missing_datastream_returns_none(page_object, scratch_dir, logger, read_log):
    image = SourceAcquirer(scratch_dir).acquire(page_object, "TN", logger)

    assert image is None
    entries = read_log(logger.log_file)
    assert entries[-1]["level"] == "ERROR"
    assert entries[-1]["dsid"] == "TN"


def test_missing_content_file_returns_none(page_object, scratch_dir, logger, read_log):
    page_object.datastream("OBJ").content_path.unlink()

    image = SourceAcquirer(scratch_dir).acquire(page_object, "OBJ", logger)

    assert image is None
    assert list(scratch_dir.iterdir()) == []
    assert "Could not fetch OBJ" in read_log(logger.log_file)[-1]["message"]
