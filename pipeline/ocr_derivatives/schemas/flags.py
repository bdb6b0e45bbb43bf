from enum import Enum
from typing import Optional


ISLANDORA_RELS_EXT_URI = "http://islandora.ca/ontology/relsext#"
HAS_LANGUAGE_PREDICATE = "hasLanguage"
GENERATE_OCR_PREDICATE = "generate_ocr"

NO_OCR_LANGUAGE = "no_ocr"


class GenerateOcrFlag(str, Enum):
    GENERATE = "TRUE"
    SUPPRESS = "FALSE"
    DEFAULT = "default"

    @classmethod
    def from_relationship(cls, value: Optional[str]) -> "GenerateOcrFlag":
        """Parse the stored literal.

        Absent means DEFAULT. Only TRUE asks for generation, so any other
        stored literal (FALSE, typos) suppresses it.
        """
        if value is None:
            return cls.DEFAULT

        if value.strip().upper() == cls.GENERATE.value:
            return cls.GENERATE
        return cls.SUPPRESS

    @property
    def allows_generation(self) -> bool:
        return self is not GenerateOcrFlag.SUPPRESS


class DerivativeAction(str, Enum):
    SKIP = "skip"
    GENERATE = "generate"
    ALREADY_PRESENT = "already_present"
