import mimetypes
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from infra.config import PagetextConfig
from infra.pipeline.logger import PipelineLogger
from infra.storage import ObjectStorage

from .schemas import (
    Channel,
    DerivativeAction,
    DerivativeErrorKind,
    DerivativeResult,
    GenerateOcrFlag,
    GENERATE_OCR_PREDICATE,
    HAS_LANGUAGE_PREDICATE,
    ISLANDORA_RELS_EXT_URI,
    NO_OCR_LANGUAGE,
    OutcomeReport,
    Severity,
)


class DerivativePlan(BaseModel):
    """What one derivative run will do for one object, decided before any tool runs."""
    dsid: str = Field(..., description="Destination datastream (OCR, HOCR)")
    source_dsid: str = Field("OBJ", description="Datastream holding the page image")
    action: DerivativeAction
    language: str
    flag: GenerateOcrFlag = GenerateOcrFlag.DEFAULT
    reason: Optional[str] = None


def guess_mimetype(path: Path) -> str:
    mimetype, _ = mimetypes.guess_type(str(path))
    return mimetype or "application/octet-stream"


class DerivativeReconciler:
    """Reads the object's OCR directives and writes generated artifacts back."""

    def __init__(self, config: PagetextConfig):
        self.config = config

    def read_language(self, obj: ObjectStorage) -> str:
        value = obj.relationships.get_value(ISLANDORA_RELS_EXT_URI, HAS_LANGUAGE_PREDICATE)
        if value is None or not value.strip():
            return self.config.defaults.language
        return value.strip()

    def read_flag(self, obj: ObjectStorage) -> GenerateOcrFlag:
        value = obj.relationships.get_value(ISLANDORA_RELS_EXT_URI, GENERATE_OCR_PREDICATE)
        return GenerateOcrFlag.from_relationship(value)

    def plan(self, obj: ObjectStorage, definition: dict, force: bool = False) -> DerivativePlan:
        dsid = definition['destination_dsid']
        source_dsid = definition['source_dsid']
        language = self.read_language(obj)
        flag = self.read_flag(obj)

        def make(action: DerivativeAction, reason: Optional[str] = None) -> DerivativePlan:
            return DerivativePlan(
                dsid=dsid,
                source_dsid=source_dsid,
                action=action,
                language=language,
                flag=flag,
                reason=reason,
            )

        if language == NO_OCR_LANGUAGE:
            return make(DerivativeAction.SKIP, f"language is {NO_OCR_LANGUAGE}")
        if not flag.allows_generation:
            return make(DerivativeAction.SKIP, f"{GENERATE_OCR_PREDICATE} is not {GenerateOcrFlag.GENERATE.value}")
        if not force and dsid in obj:
            return make(DerivativeAction.ALREADY_PRESENT, f"{dsid} already exists")
        return make(DerivativeAction.GENERATE)

    def skip_report(self, obj: ObjectStorage, plan: DerivativePlan, logger: PipelineLogger) -> OutcomeReport:
        report = OutcomeReport()
        if plan.action == DerivativeAction.ALREADY_PRESENT:
            text = f"{plan.dsid} already exists for {obj.pid}; not regenerated (use force to replace)."
        else:
            text = f"Skipped {plan.dsid} derivative for {obj.pid}: {plan.reason}."
        logger.info(text, dsid=plan.dsid, action=plan.action.value)
        return report.add(text, severity=Severity.INFO, channel=Channel.USER)

    def failure_report(
        self,
        obj: ObjectStorage,
        plan: DerivativePlan,
        kind: DerivativeErrorKind,
        detail: Optional[str] = None
    ) -> OutcomeReport:
        text = f"Failed to create {plan.dsid} derivative from {plan.source_dsid} on {obj.pid}."
        if detail:
            text = f"{text} {detail}"
        return OutcomeReport().fail(text, channel=Channel.LOG, kind=kind)

    def reconcile(
        self,
        obj: ObjectStorage,
        plan: DerivativePlan,
        definition: dict,
        result: DerivativeResult,
        logger: PipelineLogger
    ) -> OutcomeReport:
        """Write a generated artifact into its datastream, or report why not.

        Repository errors raised by the write propagate to the caller.
        """
        if not result.ok:
            if result.error:
                return self.failure_report(obj, plan, result.error.kind, result.error.message)
            return self.failure_report(
                obj, plan, DerivativeErrorKind.OUTPUT_MISSING, "no output was produced"
            )

        mimetype = guess_mimetype(result.path)
        obj.write_datastream(
            plan.dsid,
            result.path,
            mimetype,
            label=plan.dsid,
            control_group="M",
        )
        logger.info(f"Wrote {plan.dsid} ({mimetype})", dsid=plan.dsid)

        if definition.get('clears_generate_flag'):
            if obj.relationships.remove(ISLANDORA_RELS_EXT_URI, GENERATE_OCR_PREDICATE):
                logger.info(f"Removed {GENERATE_OCR_PREDICATE} relationship", dsid=plan.dsid)

        return OutcomeReport().add(f"Created {plan.dsid} derivative for {obj.pid}.")
