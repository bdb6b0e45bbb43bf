"""
Configuration schemas for pagetext.

Defines the structure of the repository configuration file.
All config is stored in ~/Documents/pagetext/config.yaml (or PAGETEXT_STORAGE_ROOT).
"""

from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
import os
import re
import tempfile


DEFAULT_CONVERT_ARGS = [
    "-colorspace", "Gray",
    "-depth", "8",
    "-compress", "None",
    "-alpha", "Off",
]


def resolve_env_vars(value: str) -> str:
    """
    Resolve ${ENV_VAR} references in a string.

    Missing variables resolve to an empty string.
    """
    if not isinstance(value, str):
        return value

    pattern = r'\$\{([^}]+)\}'

    def replace(match):
        var_name = match.group(1)
        return os.environ.get(var_name, "")

    return re.sub(pattern, replace, value)


class ToolsConfig(BaseModel):
    """External executables and how long each invocation may run."""
    tesseract: str = Field("tesseract", description="OCR tool executable (may use ${ENV_VAR})")
    convert: str = Field("convert", description="Image conversion executable")
    identify: str = Field("identify", description="Image probe executable")
    timeout_seconds: Optional[float] = Field(
        300.0,
        gt=0,
        description="Per-invocation timeout; None waits forever"
    )

    def resolved(self) -> "ToolsConfig":
        """Copy with ${ENV_VAR} references expanded (falls back to the default name)."""
        defaults = ToolsConfig()
        return self.model_copy(update={
            "tesseract": resolve_env_vars(self.tesseract) or defaults.tesseract,
            "convert": resolve_env_vars(self.convert) or defaults.convert,
            "identify": resolve_env_vars(self.identify) or defaults.identify,
        })


class NormalizationConfig(BaseModel):
    """Input profile the OCR tool accepts, and how to convert outside it."""
    supported_codecs: List[str] = Field(
        default=["JPEG", "TIFF", "PNG"],
        description="Codecs passed to the OCR tool unchanged (case-insensitive)"
    )
    max_depth: int = Field(8, ge=1, description="Highest bit depth passed unchanged")
    convert_args: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CONVERT_ARGS),
        description="Arguments placed between source and destination in the convert call"
    )

    @field_validator('supported_codecs')
    @classmethod
    def upper_codecs(cls, v: List[str]) -> List[str]:
        return [codec.strip().upper() for codec in v if codec.strip()]


class DerivativeDefaults(BaseModel):
    """Defaults applied when an object carries no overriding relationship."""
    language: str = Field("eng", description="Language used when hasLanguage is absent")
    enabled_languages: List[str] = Field(
        default=["eng"],
        description="Languages expected to be installed for the OCR tool"
    )
    hocr_version_baseline: str = Field(
        "3.02.02",
        description="Tesseract versions above this write .hocr instead of .html"
    )
    parallel_invocations: bool = Field(
        True,
        description="Run OCR and HOCR for one page concurrently"
    )
    max_workers: int = Field(4, ge=1, description="Pages processed concurrently by batch runs")

    @field_validator('language')
    @classmethod
    def validate_language(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("language must not be empty")
        return v.strip()


class PagetextConfig(BaseModel):
    """
    Repository-level configuration.

    Stored at: {storage_root}/config.yaml
    Frozen: a pipeline run sees one configuration for its whole lifetime.
    """
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    normalization: NormalizationConfig = Field(default_factory=NormalizationConfig)
    defaults: DerivativeDefaults = Field(default_factory=DerivativeDefaults)
    scratch_dir: Optional[Path] = Field(
        None,
        description="Directory for scratch files (defaults to the system temp dir)"
    )

    model_config = {
        "frozen": True,
    }

    @field_validator('scratch_dir')
    @classmethod
    def expand_scratch_dir(cls, v: Optional[Path]) -> Optional[Path]:
        if v is None:
            return None
        return Path(resolve_env_vars(str(v))).expanduser()

    def resolve_scratch_dir(self) -> Path:
        scratch = self.scratch_dir or Path(tempfile.gettempdir()) / "pagetext"
        scratch.mkdir(parents=True, exist_ok=True)
        return scratch

    @classmethod
    def with_defaults(cls) -> "PagetextConfig":
        """Create a config whose tool paths can be overridden from the environment."""
        return cls(
            tools=ToolsConfig(
                tesseract="${TESSERACT_PATH}",
                convert="${CONVERT_PATH}",
                identify="${IDENTIFY_PATH}",
            ),
        )
