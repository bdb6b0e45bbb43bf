import shutil
import tempfile
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from infra.config import PagetextConfig, get_config
from infra.pipeline.logger import PipelineLogger
from infra.pipeline.registry import (
    DERIVATIVE_DSIDS,
    get_derivative_definition,
    get_invoker_instance,
)
from infra.process import ProcessRunner, SubprocessRunner
from infra.storage import ObjectStorage, safe_identifier

from .reconcile import DerivativePlan, DerivativeReconciler
from .schemas import (
    ConversionOptions,
    DerivativeAction,
    DerivativeErrorKind,
    DerivativeResult,
    OutcomeReport,
    PageImage,
    PageOutcome,
)
from .tools.acquire import SourceAcquirer
from .tools.normalize import ImageNormalizer
from .tools.tesseract import TesseractTool


PlannedDerivative = Tuple[DerivativePlan, dict]


class OcrDerivativePipeline:
    """Creates OCR and HOCR datastreams for a page object.

    One source acquisition and one normalization feed every derivative that
    needs generating; scratch files are removed on every exit path.
    """
    name = "ocr-derivatives"

    def __init__(
        self,
        config: Optional[PagetextConfig] = None,
        runner: Optional[ProcessRunner] = None,
    ):
        self.config = config or get_config()
        self.runner = runner or SubprocessRunner(default_timeout=self.config.tools.timeout_seconds)

        self.scratch_dir = self.config.resolve_scratch_dir()
        self.acquirer = SourceAcquirer(self.scratch_dir)
        self.normalizer = ImageNormalizer(self.config, self.runner)
        self.tesseract = TesseractTool(self.config, self.runner)
        self.invokers = {
            dsid: get_invoker_instance(dsid, self.config, self.runner, tool=self.tesseract)
            for dsid in DERIVATIVE_DSIDS
        }
        self.reconciler = DerivativeReconciler(self.config)

    def derive_ocr(self, obj: ObjectStorage, force: bool = False) -> OutcomeReport:
        return self.derive_page(obj, force=force, dsids=["OCR"]).reports["OCR"]

    def derive_hocr(self, obj: ObjectStorage, force: bool = False) -> OutcomeReport:
        return self.derive_page(obj, force=force, dsids=["HOCR"]).reports["HOCR"]

    def derive_page(
        self,
        obj: ObjectStorage,
        force: bool = False,
        dsids: Optional[List[str]] = None
    ) -> PageOutcome:
        dsids = list(dsids or DERIVATIVE_DSIDS)
        logger = obj.logger(self.name)
        reports: Dict[str, OutcomeReport] = {}

        try:
            by_source: Dict[str, List[PlannedDerivative]] = OrderedDict()
            for dsid in dsids:
                definition = get_derivative_definition(dsid)
                plan = self.reconciler.plan(obj, definition, force=force)
                if plan.action == DerivativeAction.GENERATE:
                    by_source.setdefault(plan.source_dsid, []).append((plan, definition))
                else:
                    reports[dsid] = self.reconciler.skip_report(obj, plan, logger)

            for source_dsid, planned in by_source.items():
                reports.update(self._generate(obj, source_dsid, planned, logger))
        finally:
            logger.close()

        return PageOutcome(pid=obj.pid, reports={dsid: reports[dsid] for dsid in dsids})

    def _check_language(self, language: str, logger: PipelineLogger):
        enabled = set(self.config.defaults.enabled_languages)
        missing = [code for code in language.split('+') if code not in enabled]
        if missing:
            logger.warning(
                f"Language {language} is not in enabled_languages; tesseract may not have it installed",
                missing=missing,
            )

    def _output_base(self, image: PageImage, dsid: str) -> Path:
        return image.path.with_name(f"{image.path.stem}_{dsid}")

    def _generate(
        self,
        obj: ObjectStorage,
        source_dsid: str,
        planned: List[PlannedDerivative],
        logger: PipelineLogger
    ) -> Dict[str, OutcomeReport]:
        reports: Dict[str, OutcomeReport] = {}
        # Every file of this run lives here, so concurrent runs on the same
        # object never touch each other's working image.
        run_dir = Path(tempfile.mkdtemp(prefix=f"{safe_identifier(obj.pid)}_", dir=self.scratch_dir))

        try:
            language = planned[0][0].language
            self._check_language(language, logger)

            image = self.acquirer.acquire(obj, source_dsid, logger, scratch_dir=run_dir)
            if image is None:
                for plan, _ in planned:
                    reports[plan.dsid] = self.reconciler.failure_report(
                        obj, plan, DerivativeErrorKind.SOURCE_UNAVAILABLE,
                        f"Source datastream {source_dsid} is unavailable."
                    )
                return reports

            working = self.normalizer.normalize(image, logger)
            if working is None:
                for plan, _ in planned:
                    reports[plan.dsid] = self.reconciler.failure_report(
                        obj, plan, DerivativeErrorKind.NORMALIZATION_FAILED,
                        f"Could not normalize {source_dsid} for OCR."
                    )
                return reports

            options = ConversionOptions(language=language)
            bases = {plan.dsid: self._output_base(working, plan.dsid) for plan, _ in planned}

            results = self._invoke_all(working, bases, options, logger)

            for plan, definition in planned:
                reports[plan.dsid] = self.reconciler.reconcile(
                    obj, plan, definition, results[plan.dsid], logger
                )
            return reports
        finally:
            self._cleanup(run_dir, logger)

    def _invoke_all(
        self,
        image: PageImage,
        bases: Dict[str, Path],
        options: ConversionOptions,
        logger: PipelineLogger
    ) -> Dict[str, DerivativeResult]:
        if not self.config.defaults.parallel_invocations or len(bases) < 2:
            return {
                dsid: self.invokers[dsid].invoke(image, base, options, logger)
                for dsid, base in bases.items()
            }

        results = {}
        executor = ThreadPoolExecutor(max_workers=len(bases))
        try:
            future_to_dsid = {
                executor.submit(self.invokers[dsid].invoke, image, base, options, logger): dsid
                for dsid, base in bases.items()
            }
            for future in as_completed(future_to_dsid):
                results[future_to_dsid[future]] = future.result()
        except KeyboardInterrupt:
            # Workers' tools are killed first so joining them is quick and
            # scratch cleanup never races a running tesseract.
            self.runner.cancel()
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return results

    def _cleanup(self, run_dir: Path, logger: PipelineLogger):
        try:
            shutil.rmtree(run_dir)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove scratch directory {run_dir}", error=str(e))


__all__ = [
    "OcrDerivativePipeline",
    "DerivativePlan",
    "DerivativeReconciler",
]
