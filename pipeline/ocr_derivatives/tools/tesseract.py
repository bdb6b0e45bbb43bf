import re
import shutil
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Tuple

from infra.config import PagetextConfig
from infra.pipeline.logger import PipelineLogger
from infra.process import ProcessResult, ProcessRunner

from ..schemas import ConversionOptions, DerivativeErrorKind, DerivativeResult, PageImage
from .hocr import is_valid_hocr, strip_doctype


def parse_version(output: str) -> Optional[str]:
    """First dotted number in `tesseract --version` output ("tesseract 4.1.1" -> "4.1.1")."""
    match = re.search(r'(\d+(?:\.\d+)+)', output or "")
    return match.group(1) if match else None


def version_key(version: str) -> Tuple[int, ...]:
    return tuple(int(part) for part in re.findall(r'\d+', version))


def is_newer_than(version: str, baseline: str) -> bool:
    """Dotted numeric comparison: "3.10" is newer than "3.2"."""
    left, right = version_key(version), version_key(baseline)
    width = max(len(left), len(right))
    left += (0,) * (width - len(left))
    right += (0,) * (width - len(right))
    return left > right


def failure_reason(result: ProcessResult) -> str:
    if result.cancelled:
        return "was cancelled"
    if result.timed_out:
        return "timed out"
    return f"exited with {result.exit_code}"


class TesseractTool:
    """Version and language queries against the configured tesseract binary."""

    def __init__(self, config: PagetextConfig, runner: ProcessRunner):
        self.executable = config.tools.resolved().tesseract
        self.timeout = config.tools.timeout_seconds
        self.runner = runner
        self._version: Optional[str] = None
        self._version_queried = False
        self._lock = threading.Lock()

    def version(self, logger: Optional[PipelineLogger] = None) -> Optional[str]:
        """Tesseract version string, queried once per instance."""
        with self._lock:
            if not self._version_queried:
                result = self.runner.run([self.executable, "--version"], timeout=self.timeout)
                if result.ok:
                    self._version = parse_version(result.output)
                if self._version is None and logger:
                    logger.warning(
                        "Could not determine tesseract version",
                        exit_code=result.exit_code,
                        command=result.command_line,
                        output=result.output,
                    )
                self._version_queried = True
            return self._version

    def list_languages(self) -> List[str]:
        result = self.runner.run([self.executable, "--list-langs"], timeout=self.timeout)
        if not result.ok:
            raise RuntimeError(
                f"`{result.command_line}` failed (exit {result.exit_code}): {result.output.strip()}"
            )

        languages = []
        for line in result.output.splitlines():
            line = line.strip()
            # Header line reads 'List of available languages in "/usr/share/..." (3):'
            if not line or line.lower().startswith("list of available languages"):
                continue
            languages.append(line)
        return sorted(set(languages))


class TesseractInvoker(ABC):
    dsid: str = None
    output_format: Optional[str] = None

    def __init__(self, config: PagetextConfig, runner: ProcessRunner, tool: Optional[TesseractTool] = None):
        self.config = config
        self.runner = runner
        self.tool = tool or TesseractTool(config, runner)

    def build_command(self, image_path: Path, output_base: Path, language: str) -> List[str]:
        command = [self.tool.executable, str(image_path), str(output_base), "-l", language]
        if self.output_format:
            command.append(self.output_format)
        return command

    def _run(self, image: PageImage, output_base: Path, options: ConversionOptions) -> ProcessResult:
        command = self.build_command(image.path, output_base, options.language)
        return self.runner.run(command, timeout=self.tool.timeout)

    def _failure(
        self,
        kind: DerivativeErrorKind,
        message: str,
        result: ProcessResult,
        logger: PipelineLogger
    ) -> DerivativeResult:
        logger.error(
            message,
            dsid=self.dsid,
            exit_code=result.exit_code,
            command=result.command_line,
            output=result.output,
            timed_out=result.timed_out,
            cancelled=result.cancelled,
        )
        return DerivativeResult.failure(
            kind,
            message,
            exit_code=result.exit_code,
            command=result.command_line,
            output=result.output,
        )

    @abstractmethod
    def invoke(
        self,
        image: PageImage,
        output_base: Path,
        options: ConversionOptions,
        logger: PipelineLogger
    ) -> DerivativeResult:
        pass


class OcrInvoker(TesseractInvoker):
    dsid = "OCR"

    def invoke(
        self,
        image: PageImage,
        output_base: Path,
        options: ConversionOptions,
        logger: PipelineLogger
    ) -> DerivativeResult:
        result = self._run(image, output_base, options)
        output_file = Path(f"{output_base}.txt")

        if not result.ok:
            reason = failure_reason(result)
            return self._failure(
                DerivativeErrorKind.TOOL_FAILURE,
                f"Tesseract {reason} creating OCR for {image.path.name}",
                result,
                logger
            )

        if not output_file.exists():
            return self._failure(
                DerivativeErrorKind.OUTPUT_MISSING,
                f"Tesseract reported success but {output_file.name} was not written",
                result,
                logger
            )

        logger.info(
            f"Tesseract OCR complete: {output_file.name}",
            dsid=self.dsid,
            duration_seconds=result.duration_seconds
        )
        return DerivativeResult.success(output_file)


class HocrInvoker(TesseractInvoker):
    dsid = "HOCR"
    output_format = "hocr"

    def invoke(
        self,
        image: PageImage,
        output_base: Path,
        options: ConversionOptions,
        logger: PipelineLogger
    ) -> DerivativeResult:
        version = self.tool.version(logger)
        result = self._run(image, output_base, options)

        if not result.ok:
            reason = failure_reason(result)
            return self._failure(
                DerivativeErrorKind.TOOL_FAILURE,
                f"Tesseract {reason} creating HOCR for {image.path.name}",
                result,
                logger
            )

        # The .html name lets the repository infer text/html for the datastream.
        html_file = Path(f"{output_base}.html")
        hocr_file = Path(f"{output_base}.hocr")
        baseline = self.config.defaults.hocr_version_baseline
        writes_hocr_extension = (
            is_newer_than(version, baseline) if version is not None else hocr_file.exists()
        )
        if writes_hocr_extension and hocr_file.exists():
            shutil.move(str(hocr_file), str(html_file))

        if not html_file.exists():
            expected = hocr_file if writes_hocr_extension else html_file
            return self._failure(
                DerivativeErrorKind.OUTPUT_MISSING,
                f"Tesseract reported success but {expected.name} was not written",
                result,
                logger
            )

        if not is_valid_hocr(html_file):
            return self._failure(
                DerivativeErrorKind.OUTPUT_INVALID,
                f"Tesseract {version or 'of unknown version'} produced invalid HOCR for "
                f"{image.path.name}; install tesseract {baseline} or newer",
                result,
                logger
            )

        strip_doctype(html_file)
        if not is_valid_hocr(html_file):
            return self._failure(
                DerivativeErrorKind.OUTPUT_INVALID,
                f"HOCR for {image.path.name} is not well-formed once its DOCTYPE is removed "
                f"(undeclared entity references)",
                result,
                logger
            )

        logger.info(
            f"Tesseract HOCR complete: {html_file.name}",
            dsid=self.dsid,
            tesseract_version=version,
            duration_seconds=result.duration_seconds
        )
        return DerivativeResult.success(html_file)
