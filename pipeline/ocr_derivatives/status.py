from enum import Enum
from typing import Any, Dict

from infra.config import PagetextConfig
from infra.pipeline.registry import DERIVATIVE_DEFINITIONS
from infra.storage import ObjectStorage

from .reconcile import DerivativeReconciler
from .schemas import NO_OCR_LANGUAGE


class DerivativeStatus(str, Enum):
    MISSING = "missing"
    PRESENT = "present"
    SUPPRESSED = "suppressed"

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        """Nothing left to generate for this derivative."""
        return status in [cls.PRESENT.value, cls.SUPPRESSED.value]


class DerivativeStatusTracker:
    def __init__(self, config: PagetextConfig):
        self.reconciler = DerivativeReconciler(config)

    def get_status(self, obj: ObjectStorage) -> Dict[str, Any]:
        language = self.reconciler.read_language(obj)
        flag = self.reconciler.read_flag(obj)
        suppressed = language == NO_OCR_LANGUAGE or not flag.allows_generation

        derivatives = {}
        for definition in DERIVATIVE_DEFINITIONS:
            dsid = definition['destination_dsid']
            datastream = obj.datastream(dsid)

            if datastream is not None:
                status = DerivativeStatus.PRESENT
            elif suppressed:
                status = DerivativeStatus.SUPPRESSED
            else:
                status = DerivativeStatus.MISSING

            derivatives[dsid] = {
                "status": status.value,
                "source": definition['source_dsid'],
                "mimetype": datastream.mimetype if datastream else None,
                "size": datastream.size if datastream else None,
                "modified": datastream.modified if datastream else None,
            }

        remaining = [
            dsid for dsid, info in derivatives.items()
            if not DerivativeStatus.is_terminal(info["status"])
        ]

        return {
            "pid": obj.pid,
            "label": obj.label,
            "language": language,
            "generate_ocr": flag.value,
            "derivatives": derivatives,
            "remaining": remaining,
            "has_source": all(d['source_dsid'] in obj for d in DERIVATIVE_DEFINITIONS),
        }
