from .acquire import SourceAcquirer, scratch_name
from .normalize import ImageNormalizer
from .tesseract import HocrInvoker, OcrInvoker, TesseractInvoker, TesseractTool
from .hocr import HocrDocument, is_valid_hocr, strip_doctype

__all__ = [
    "SourceAcquirer",
    "scratch_name",
    "ImageNormalizer",
    "TesseractTool",
    "TesseractInvoker",
    "OcrInvoker",
    "HocrInvoker",
    "HocrDocument",
    "is_valid_hocr",
    "strip_doctype",
]
