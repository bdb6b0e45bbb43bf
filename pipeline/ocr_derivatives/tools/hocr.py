import re
from html.entities import name2codepoint
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup
from lxml import etree
from pydantic import BaseModel, Field


def _parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
        recover=False,
    )


def is_valid_hocr(path: Path) -> bool:
    """True when the file parses as well-formed XML markup."""
    try:
        etree.parse(str(path), _parser())
    except (etree.XMLSyntaxError, OSError):
        return False
    return True


XML_PREDEFINED_ENTITIES = {"amp", "lt", "gt", "quot", "apos"}


def numeric_entities(markup: bytes) -> bytes:
    """Replace HTML named entities (&nbsp;) with numeric references XML understands."""
    def replace(match):
        name = match.group(1).decode("ascii")
        if name in XML_PREDEFINED_ENTITIES or name not in name2codepoint:
            return match.group(0)
        return f"&#{name2codepoint[name]};".encode("ascii")

    return re.sub(rb"&([A-Za-z][A-Za-z0-9]*);", replace, markup)


def strip_doctype(path: Path) -> None:
    """Rewrite the document in place without its DOCTYPE declaration.

    Entities the DOCTYPE would have declared are written out as characters;
    anything left unresolved makes the result fail is_valid_hocr().
    """
    path = Path(path)
    root = etree.fromstring(numeric_entities(path.read_bytes()), _parser())
    path.write_bytes(etree.tostring(root, xml_declaration=True, encoding="UTF-8"))


BBox = Tuple[int, int, int, int]


class HocrWord(BaseModel):
    text: str
    bbox: BBox = Field(..., description="x0, y0, x1, y1 in page pixels")
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    line_id: Optional[str] = None


class HocrLine(BaseModel):
    id: Optional[str] = None
    bbox: Optional[BBox] = None
    words: List[HocrWord] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return " ".join(word.text for word in self.words)


def parse_title(title: str) -> Dict[str, str]:
    """Split an hOCR title ("bbox 1 2 3 4; x_wconf 93") into properties."""
    props = {}
    for prop in title.split(';'):
        prop = prop.strip()
        if ' ' in prop:
            key, value = prop.split(maxsplit=1)
            props[key] = value
    return props


def _bbox(props: Dict[str, str]) -> Optional[BBox]:
    match = re.match(r'(-?\d+) (-?\d+) (-?\d+) (-?\d+)', props.get('bbox', ''))
    if not match:
        return None
    x0, y0, x1, y1 = map(int, match.groups())
    return (x0, y0, x1, y1)


LINE_CLASSES = ['ocr_line', 'ocr_caption', 'ocr_textfloat', 'ocr_header']


class HocrDocument:
    """Read-only view over an hOCR file: page size, lines, words and search."""

    def __init__(self, markup: str):
        self.soup = BeautifulSoup(markup, 'html.parser')

    @classmethod
    def from_file(cls, path: Path) -> "HocrDocument":
        return cls(Path(path).read_text(encoding='utf-8', errors='replace'))

    def page_dimensions(self) -> Optional[Tuple[int, int]]:
        page = self.soup.find(class_='ocr_page')
        if page is None:
            return None
        bbox = _bbox(parse_title(page.get('title', '')))
        if bbox is None:
            return None
        return (bbox[2] - bbox[0], bbox[3] - bbox[1])

    def lines(self) -> List[HocrLine]:
        lines = []
        for line_elem in self.soup.find_all(class_=LINE_CLASSES):
            props = parse_title(line_elem.get('title', ''))
            line = HocrLine(id=line_elem.get('id'), bbox=_bbox(props))
            line.words = self._words_in(line_elem, line.id)
            if line.words:
                lines.append(line)
        return lines

    def _words_in(self, element, line_id: Optional[str] = None) -> List[HocrWord]:
        words = []
        for word_elem in element.find_all(class_=['ocrx_word', 'ocr_word']):
            text = word_elem.get_text().strip()
            if not text:
                continue

            props = parse_title(word_elem.get('title', ''))
            bbox = _bbox(props)
            if bbox is None:
                continue

            confidence = None
            if 'x_wconf' in props:
                try:
                    confidence = max(0.0, min(1.0, float(props['x_wconf']) / 100.0))
                except ValueError:
                    confidence = None

            word_line_id = line_id
            if word_line_id is None:
                parent = word_elem.find_parent(class_=LINE_CLASSES)
                word_line_id = parent.get('id') if parent is not None else None

            words.append(HocrWord(text=text, bbox=bbox, confidence=confidence, line_id=word_line_id))
        return words

    def words(self) -> List[HocrWord]:
        return self._words_in(self.soup)

    def text(self) -> str:
        return "\n".join(line.text for line in self.lines())

    def search(self, term: str) -> List[HocrWord]:
        """Words containing term (case-insensitive, punctuation ignored)."""
        needle = _normalize_token(term)
        if not needle:
            return []
        return [word for word in self.words() if needle in _normalize_token(word.text)]


def _normalize_token(text: str) -> str:
    return re.sub(r'[^\w]', '', text.lower())
