from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field


class PageImage(BaseModel):
    """Scratch copy of one page's raster image, owned by a single pipeline run."""
    path: Path = Field(..., description="Absolute path of the scratch file")
    depth: Optional[int] = Field(None, ge=1, description="Bits per channel (None until probed)")
    codec: Optional[str] = Field(None, description="Image format reported by the probe (e.g. JPEG)")
    has_alpha: Optional[bool] = Field(None, description="Alpha channel present (None until probed)")


class ConversionOptions(BaseModel):
    """Options passed to the OCR tool."""
    language: str = Field("eng", description="Tesseract language model (e.g. eng, fra, eng+fra)")
