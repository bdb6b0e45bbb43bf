from enum import Enum
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field


class DerivativeErrorKind(str, Enum):
    TOOL_FAILURE = "tool_failure"
    OUTPUT_MISSING = "output_missing"
    OUTPUT_INVALID = "output_invalid"
    SOURCE_UNAVAILABLE = "source_unavailable"
    NORMALIZATION_FAILED = "normalization_failed"


class DerivativeError(BaseModel):
    kind: DerivativeErrorKind
    message: str
    exit_code: Optional[int] = None
    command: Optional[str] = Field(None, description="Exact command line that failed")
    output: str = Field("", description="Captured combined stdout/stderr")


class DerivativeResult(BaseModel):
    """Path to a generated artifact, or an explicit failure."""
    path: Optional[Path] = None
    error: Optional[DerivativeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.path is not None and self.path.exists()

    @classmethod
    def success(cls, path: Path) -> "DerivativeResult":
        return cls(path=path)

    @classmethod
    def failure(cls, kind: DerivativeErrorKind, message: str, **details) -> "DerivativeResult":
        return cls(error=DerivativeError(kind=kind, message=message, **details))
