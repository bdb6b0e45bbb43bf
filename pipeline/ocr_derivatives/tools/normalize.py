import re
from pathlib import Path
from typing import Callable, List, Optional

from infra.config import PagetextConfig
from infra.pipeline.logger import PipelineLogger
from infra.process import ProcessRunner

from ..schemas import PageImage


# hook(args, image, destination) -> replacement args, or None to keep them
ArgumentHook = Callable[[List[str], PageImage, Path], Optional[List[str]]]

ALPHA_PRESENT_VALUES = {"true", "blend"}


def parse_depth(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    match = re.match(r'\s*(\d+)', raw)
    if not match:
        return None
    depth = int(match.group(1))
    return depth if depth > 0 else None


def parse_alpha(raw: Optional[str]) -> Optional[bool]:
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() in ALPHA_PRESENT_VALUES


class ImageNormalizer:
    """Brings a page image inside the OCR tool's supported input profile.

    Probing and conversion are separate identify/convert invocations so the
    profile (codecs, depth, convert arguments) can change without touching
    the OCR step.
    """

    def __init__(self, config: PagetextConfig, runner: ProcessRunner):
        self.tools = config.tools.resolved()
        self.profile = config.normalization
        self.runner = runner
        self._argument_hooks: List[ArgumentHook] = []

    def add_argument_hook(self, hook: ArgumentHook) -> None:
        self._argument_hooks.append(hook)

    def _identify(self, path: Path, fmt: str, logger: PipelineLogger) -> Optional[str]:
        result = self.runner.run(
            [self.tools.identify, "-format", fmt, f"{path}[0]"],
            timeout=self.tools.timeout_seconds,
        )
        if not result.ok:
            logger.warning(
                f"Probe {fmt} failed for {path.name}",
                exit_code=result.exit_code,
                command=result.command_line,
                output=result.output,
            )
            return None
        return result.output.strip()

    def probe(self, image: PageImage, logger: PipelineLogger) -> PageImage:
        depth = parse_depth(self._identify(image.path, "%z", logger))
        codec = self._identify(image.path, "%m", logger) or None
        has_alpha = parse_alpha(self._identify(image.path, "%A", logger))

        logger.debug(
            f"Probed {image.path.name}",
            depth=depth,
            codec=codec,
            has_alpha=has_alpha
        )
        return image.model_copy(update={"depth": depth, "codec": codec, "has_alpha": has_alpha})

    def needs_conversion(self, image: PageImage) -> bool:
        # An attribute the probe could not read is treated as unsupported.
        if image.depth is None or image.codec is None or image.has_alpha is None:
            return True
        if image.depth > self.profile.max_depth:
            return True
        if image.codec.upper() not in self.profile.supported_codecs:
            return True
        return image.has_alpha

    def destination_for(self, image: PageImage) -> Path:
        return image.path.with_name(f"{image.path.stem}_normalized.tif")

    def conversion_command(self, image: PageImage, destination: Path) -> List[str]:
        args = list(self.profile.convert_args)
        for hook in self._argument_hooks:
            altered = hook(list(args), image, destination)
            if altered is not None:
                args = list(altered)

        return [self.tools.convert, f"{image.path}[0]", *args, str(destination)]

    def convert(self, image: PageImage, logger: PipelineLogger) -> Optional[PageImage]:
        destination = self.destination_for(image)
        command = self.conversion_command(image, destination)
        result = self.runner.run(command, timeout=self.tools.timeout_seconds)

        if not result.ok or not destination.exists():
            logger.error(
                f"Image conversion failed for {image.path.name}",
                exit_code=result.exit_code,
                command=result.command_line,
                output=result.output,
                timed_out=result.timed_out,
            )
            if destination.exists():
                destination.unlink()
            return None

        if image.path.exists() and image.path != destination:
            image.path.unlink()

        logger.info(
            f"Normalized {image.path.name} -> {destination.name}",
            depth=image.depth,
            codec=image.codec,
            has_alpha=image.has_alpha,
            duration_seconds=result.duration_seconds,
        )
        return PageImage(path=destination, depth=8, codec="TIFF", has_alpha=False)

    def normalize(self, image: PageImage, logger: PipelineLogger) -> Optional[PageImage]:
        """Return the image to OCR: unchanged if supported, else a converted TIFF.

        None means conversion failed; the original scratch file is left for
        the caller's cleanup.
        """
        probed = self.probe(image, logger)
        if not self.needs_conversion(probed):
            return probed
        return self.convert(probed, logger)
