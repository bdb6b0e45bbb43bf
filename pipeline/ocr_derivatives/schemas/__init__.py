from .page_image import PageImage, ConversionOptions
from .result import DerivativeError, DerivativeErrorKind, DerivativeResult
from .outcome import Channel, OutcomeMessage, OutcomeReport, PageOutcome, Severity
from .flags import (
    DerivativeAction,
    GenerateOcrFlag,
    GENERATE_OCR_PREDICATE,
    HAS_LANGUAGE_PREDICATE,
    ISLANDORA_RELS_EXT_URI,
    NO_OCR_LANGUAGE,
)

__all__ = [
    "PageImage",
    "ConversionOptions",
    "DerivativeError",
    "DerivativeErrorKind",
    "DerivativeResult",
    "Channel",
    "OutcomeMessage",
    "OutcomeReport",
    "PageOutcome",
    "Severity",
    "DerivativeAction",
    "GenerateOcrFlag",
    "GENERATE_OCR_PREDICATE",
    "HAS_LANGUAGE_PREDICATE",
    "ISLANDORA_RELS_EXT_URI",
    "NO_OCR_LANGUAGE",
]
