"""
Tests for pipeline/ocr_derivatives/reconcile.py

Planning reads hasLanguage and generate_ocr from RELS-EXT; writing puts a
successful artifact into its datastream and clears the batch directive after
HOCR.
"""

import pytest

from infra.config import DerivativeDefaults, PagetextConfig
from infra.pipeline.registry import get_derivative_definition
from pipeline.ocr_derivatives.reconcile import DerivativeReconciler, guess_mimetype
from pipeline.ocr_derivatives.schemas import (
    Channel,
    DerivativeAction,
    DerivativeErrorKind,
    DerivativeResult,
    GenerateOcrFlag,
    GENERATE_OCR_PREDICATE,
    HAS_LANGUAGE_PREDICATE,
    ISLANDORA_RELS_EXT_URI as NS,
)


@pytest.fixture
def reconciler(config):
    return DerivativeReconciler(config)


OCR = get_derivative_definition("OCR")
HOCR = get_derivative_definition("HOCR")


class TestFlags:

    def test_from_relationship(self):
        assert GenerateOcrFlag.from_relationship(None) is GenerateOcrFlag.DEFAULT
        assert GenerateOcrFlag.from_relationship("TRUE") is GenerateOcrFlag.GENERATE
        assert GenerateOcrFlag.from_relationship(" false ") is GenerateOcrFlag.SUPPRESS
        assert GenerateOcrFlag.from_relationship("maybe") is GenerateOcrFlag.SUPPRESS
        assert GenerateOcrFlag.from_relationship("") is GenerateOcrFlag.SUPPRESS

    def test_allows_generation(self):
        assert GenerateOcrFlag.DEFAULT.allows_generation
        assert GenerateOcrFlag.GENERATE.allows_generation
        assert not GenerateOcrFlag.SUPPRESS.allows_generation


class TestReadRelationships:

    def test_language_defaults_to_config(self, page_object, scratch_dir):
        config = PagetextConfig(scratch_dir=scratch_dir, defaults=DerivativeDefaults(language="deu"))
        assert DerivativeReconciler(config).read_language(page_object) == "deu"

    def test_language_from_rels(self, reconciler, page_object):
        page_object.relationships.set_value(NS, HAS_LANGUAGE_PREDICATE, "fra")
        assert reconciler.read_language(page_object) == "fra"

    def test_flag_absent_is_default(self, reconciler, page_object):
        assert reconciler.read_flag(page_object) is GenerateOcrFlag.DEFAULT


class TestPlan:

    def test_generate_when_absent(self, reconciler, page_object):
        plan = reconciler.plan(page_object, OCR)
        assert plan.action == DerivativeAction.GENERATE
        assert plan.source_dsid == "OBJ"
        assert plan.language == "eng"

    def test_already_present_without_force(self, reconciler, page_object, tmp_path):
        existing = tmp_path / "old.txt"
        existing.write_text("old")
        page_object.write_datastream("OCR", existing, "text/plain")

        assert reconciler.plan(page_object, OCR).action == DerivativeAction.ALREADY_PRESENT
        assert reconciler.plan(page_object, OCR, force=True).action == DerivativeAction.GENERATE

    def test_no_ocr_language_skips(self, reconciler, page_object):
        page_object.relationships.set_value(NS, HAS_LANGUAGE_PREDICATE, "no_ocr")

        plan = reconciler.plan(page_object, HOCR, force=True)

        assert plan.action == DerivativeAction.SKIP
        assert "no_ocr" in plan.reason

    def test_suppress_flag_skips_even_with_force(self, reconciler, page_object):
        page_object.relationships.set_value(NS, GENERATE_OCR_PREDICATE, "FALSE")
        assert reconciler.plan(page_object, OCR, force=True).action == DerivativeAction.SKIP

    def test_unrecognised_flag_skips(self, reconciler, page_object):
        page_object.relationships.set_value(NS, GENERATE_OCR_PREDICATE, "yes please")

        plan = reconciler.plan(page_object, OCR)

        assert plan.action == DerivativeAction.SKIP
        assert plan.flag is GenerateOcrFlag.SUPPRESS

    def test_generate_flag(self, reconciler, page_object):
        page_object.relationships.set_value(NS, GENERATE_OCR_PREDICATE, "TRUE")
        plan = reconciler.plan(page_object, OCR)
        assert plan.action == DerivativeAction.GENERATE
        assert plan.flag is GenerateOcrFlag.GENERATE


class TestReports:

    def test_skip_and_already_present_messages_differ(self, reconciler, page_object, logger, tmp_path):
        page_object.relationships.set_value(NS, GENERATE_OCR_PREDICATE, "FALSE")
        skipped = reconciler.skip_report(page_object, reconciler.plan(page_object, OCR), logger)

        page_object.relationships.remove(NS, GENERATE_OCR_PREDICATE)
        existing = tmp_path / "old.txt"
        existing.write_text("old")
        page_object.write_datastream("OCR", existing, "text/plain")
        present = reconciler.skip_report(page_object, reconciler.plan(page_object, OCR), logger)

        assert skipped.success and present.success
        assert "Skipped" in skipped.messages[0].text
        assert "already exists" in present.messages[0].text
        assert skipped.messages[0].channel == Channel.USER

    def test_failure_report_names_dsids_and_pid(self, reconciler, page_object):
        plan = reconciler.plan(page_object, HOCR)
        report = reconciler.failure_report(
            page_object, plan, DerivativeErrorKind.TOOL_FAILURE, "tesseract exited with 1"
        )

        assert not report.success
        assert report.error_kind == DerivativeErrorKind.TOOL_FAILURE
        [message] = report.messages
        assert message.channel == Channel.LOG
        assert "HOCR" in message.text and "OBJ" in message.text and "test:1" in message.text


class TestReconcile:

    def test_writes_successful_artifact(self, reconciler, page_object, logger, scratch_dir):
        artifact = scratch_dir / "test_1_OBJ_OCR.txt"
        artifact.write_text("Theodore Roosevelt")
        plan = reconciler.plan(page_object, OCR)

        report = reconciler.reconcile(page_object, plan, OCR, DerivativeResult.success(artifact), logger)

        assert report.success
        assert report.messages[-1].text == "Created OCR derivative for test:1."
        datastream = page_object.datastream("OCR")
        assert datastream.label == "OCR"
        assert datastream.mimetype == "text/plain"
        assert datastream.control_group == "M"
        assert datastream.read_bytes() == b"Theodore Roosevelt"
        assert not artifact.exists()

    def test_hocr_success_clears_generate_flag(self, reconciler, page_object, logger, scratch_dir):
        page_object.relationships.set_value(NS, GENERATE_OCR_PREDICATE, "TRUE")
        page_object.relationships.set_value(NS, HAS_LANGUAGE_PREDICATE, "eng")
        artifact = scratch_dir / "test_1_OBJ_HOCR.html"
        artifact.write_text("<html/>")

        reconciler.reconcile(
            page_object, reconciler.plan(page_object, HOCR), HOCR, DerivativeResult.success(artifact), logger
        )

        assert page_object.datastream("HOCR").mimetype == "text/html"
        assert page_object.relationships.get(NS, GENERATE_OCR_PREDICATE) == []
        assert page_object.relationships.get_value(NS, HAS_LANGUAGE_PREDICATE) == "eng"

    def test_ocr_success_keeps_generate_flag(self, reconciler, page_object, logger, scratch_dir):
        page_object.relationships.set_value(NS, GENERATE_OCR_PREDICATE, "TRUE")
        artifact = scratch_dir / "out.txt"
        artifact.write_text("text")

        reconciler.reconcile(
            page_object, reconciler.plan(page_object, OCR), OCR, DerivativeResult.success(artifact), logger
        )

        assert page_object.relationships.get_value(NS, GENERATE_OCR_PREDICATE) == "TRUE"

    def test_failed_result_writes_nothing(self, reconciler, page_object, logger):
        result = DerivativeResult.failure(DerivativeErrorKind.TOOL_FAILURE, "tesseract exited with 1", exit_code=1)

        report = reconciler.reconcile(page_object, reconciler.plan(page_object, OCR), OCR, result, logger)

        assert not report.success
        assert "tesseract exited with 1" in report.messages[0].text
        assert report.error_kind == DerivativeErrorKind.TOOL_FAILURE
        assert "OCR" not in page_object

    def test_reported_path_must_exist(self, reconciler, page_object, logger, scratch_dir):
        result = DerivativeResult.success(scratch_dir / "never-written.txt")

        report = reconciler.reconcile(page_object, reconciler.plan(page_object, OCR), OCR, result, logger)

        assert not report.success
        assert "OCR" not in page_object


def test_guess_mimetype(tmp_path):
    assert guess_mimetype(tmp_path / "a.txt") == "text/plain"
    assert guess_mimetype(tmp_path / "a.html") == "text/html"
    assert guess_mimetype(tmp_path / "a.unknownext") == "application/octet-stream"
