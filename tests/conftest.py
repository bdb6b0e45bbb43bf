"""
Shared fixtures for all tests.

External tools are replaced by FakeProcessRunner, which emulates the
identify/convert/tesseract command-line contracts against real files
(Pillow reads and writes the images). Storage is always a real repository
under tmp_path - no mocking of the filesystem.
"""

import threading
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import pytest
from PIL import Image

from infra.config import PagetextConfig
from infra.process import ProcessResult, ProcessRunner


SAMPLE_HOCR = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Transitional//EN"
    "http://www.w3.org/TR/xhtml1/DTD/xhtml1-transitional.dtd">
<html xmlns="http://www.w3.org/1999/xhtml" xml:lang="en" lang="en">
 <head>
  <title></title>
  <meta http-equiv="Content-Type" content="text/html;charset=utf-8" />
  <meta name='ocr-system' content='tesseract' />
 </head>
 <body>
  <div class='ocr_page' id='page_1' title='image "page.tif"; bbox 0 0 1000 1500; ppageno 0'>
   <div class='ocr_carea' id='block_1_1' title="bbox 100 100 900 200">
    <p class='ocr_par' dir='ltr' id='par_1_1' title="bbox 100 100 900 200">
     <span class='ocr_line' id='line_1_1' title="bbox 100 100 900 150; baseline 0 -5">
      <span class='ocrx_word' id='word_1_1' title='bbox 100 100 300 150; x_wconf 93'>Theodore</span>
      <span class='ocrx_word' id='word_1_2' title='bbox 320 100 600 150; x_wconf 88'>Roosevelt,</span>
     </span>
     <span class='ocr_line' id='line_1_2' title="bbox 100 160 900 200; baseline 0 -4">
      <span class='ocrx_word' id='word_1_3' title='bbox 100 160 400 200; x_wconf 91'>An</span>
      <span class='ocrx_word' id='word_1_4' title='bbox 420 160 900 200; x_wconf 85'>Autobiography</span>
     </span>
    </p>
   </div>
  </div>
 </body>
</html>
"""

SAMPLE_TEXT = "Theodore Roosevelt,\nAn Autobiography\n"

INVALID_HOCR = "<html><body><div class='ocr_page'><span class='ocrx_word'>broken</div></body>"


def _image_path(arg: str) -> Path:
    """Strip the ImageMagick frame selector: page.png[0] -> page.png."""
    return Path(arg[:-3] if arg.endswith("[0]") else arg)


def _version_tuple(version: str) -> Tuple[int, ...]:
    return tuple(int(part) for part in version.split("."))


class FakeProcessRunner(ProcessRunner):
    """Emulates identify, convert and tesseract; records every command."""

    def __init__(self):
        self.calls: List[List[str]] = []
        self.tesseract_version = "3.03.00"
        self.languages = ["eng", "fra", "osd"]
        self.hocr_markup = SAMPLE_HOCR
        self.ocr_text = SAMPLE_TEXT
        self.probe_overrides: Dict[str, str] = {}
        self.failures: Dict[str, Tuple[int, str]] = {}
        self.timeouts: Set[str] = set()
        self.skip_outputs: Set[str] = set()
        self.cancelled = False
        self._lock = threading.Lock()

    def run(self, command: List[str], timeout: Optional[float] = None) -> ProcessResult:
        command = [str(part) for part in command]
        with self._lock:
            self.calls.append(command)

        tool = Path(command[0]).name
        if self.cancelled:
            return ProcessResult(command=command, exit_code=None, cancelled=True)
        if tool in self.timeouts:
            return ProcessResult(command=command, exit_code=None, timed_out=True, output="")
        if tool in self.failures:
            exit_code, output = self.failures[tool]
            return ProcessResult(command=command, exit_code=exit_code, output=output)

        handler = {
            "identify": self._identify,
            "convert": self._convert,
            "tesseract": self._tesseract,
        }.get(tool)
        if handler is None:
            return ProcessResult(command=command, exit_code=127, output=f"{tool}: command not found")

        exit_code, output = handler(command)
        return ProcessResult(command=command, exit_code=exit_code, output=output)

    def cancel(self):
        self.cancelled = True

    def calls_to(self, tool: str) -> List[List[str]]:
        return [call for call in self.calls if Path(call[0]).name == tool]

    def _identify(self, command: List[str]) -> Tuple[int, str]:
        fmt = command[2]
        if fmt in self.probe_overrides:
            return 0, self.probe_overrides[fmt]

        path = _image_path(command[3])
        try:
            with Image.open(path) as img:
                mode, codec, info = img.mode, img.format, dict(img.info)
        except (OSError, ValueError):
            return 1, f"identify: unable to open image '{path}'"

        if fmt == "%z":
            if mode.startswith("I") or mode == "F":
                return 0, "16"
            return 0, "1" if mode == "1" else "8"
        if fmt == "%m":
            return 0, codec
        if fmt == "%A":
            has_alpha = mode in ("RGBA", "LA", "PA") or "transparency" in info
            return 0, "True" if has_alpha else "False"
        return 1, f"identify: unsupported format {fmt}"

    def _convert(self, command: List[str]) -> Tuple[int, str]:
        source, destination = _image_path(command[1]), Path(command[-1])
        try:
            with Image.open(source) as img:
                img.convert("L").save(destination, format="TIFF")
        except (OSError, ValueError) as e:
            return 1, f"convert: {e}"
        return 0, ""

    def _tesseract(self, command: List[str]) -> Tuple[int, str]:
        if command[1] == "--version":
            return 0, f"tesseract {self.tesseract_version}\n leptonica-1.78.0\n"
        if command[1] == "--list-langs":
            header = f'List of available languages in "/usr/share/tessdata/" ({len(self.languages)}):'
            return 0, "\n".join([header] + self.languages) + "\n"

        image, base = Path(command[1]), command[2]
        language = command[command.index("-l") + 1]
        output_format = command[5] if len(command) > 5 else "txt"

        if not image.exists():
            return 1, f"Error, cannot read input file {image}: No such file or directory"
        if any(code not in self.languages for code in language.split("+")):
            return 1, f"Failed loading language '{language}'"
        if output_format in self.skip_outputs:
            return 0, ""

        if output_format == "hocr":
            newer = _version_tuple(self.tesseract_version) > (3, 2, 2)
            Path(f"{base}{'.hocr' if newer else '.html'}").write_text(self.hocr_markup)
        else:
            Path(f"{base}.txt").write_text(self.ocr_text)
        return 0, ""


@pytest.fixture
def fake_runner():
    return FakeProcessRunner()


@pytest.fixture
def scratch_dir(tmp_path):
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def config(scratch_dir):
    """Default config with plain tool names and an isolated scratch dir."""
    return PagetextConfig(scratch_dir=scratch_dir)


@pytest.fixture
def make_image(tmp_path):
    """Write a real image file: make_image("page.jpg", mode="RGB", fmt="JPEG")."""
    images_dir = tmp_path / "images"
    images_dir.mkdir(exist_ok=True)

    def _make(name: str, mode: str = "RGB", fmt: str = "JPEG", size=(120, 160)) -> Path:
        path = images_dir / name
        if mode == "I;16":
            img = Image.new("I;16", size)
        elif mode in ("RGBA", "LA"):
            img = Image.new(mode, size, color=(255, 255, 255, 128) if mode == "RGBA" else (255, 128))
        else:
            img = Image.new(mode, size, color="white")
        img.save(path, format=fmt)
        return path

    return _make


@pytest.fixture
def repository(tmp_path):
    from infra.storage import Repository
    return Repository(storage_root=tmp_path / "repo")


@pytest.fixture
def ingest_page(repository, make_image):
    """Create a page object whose OBJ datastream holds a real image."""
    from pipeline.ocr_derivatives.reconcile import guess_mimetype

    def _ingest(pid: str = "test:1", name: str = "page.jpg", mode: str = "RGB", fmt: str = "JPEG"):
        image = make_image(name, mode=mode, fmt=fmt)
        obj = repository.ingest_object(pid, label=f"Page {pid}")
        datastream = obj.construct_datastream("OBJ")
        datastream.set_content_from_file(image)
        datastream.mimetype = guess_mimetype(image)
        obj.ingest_datastream(datastream)
        return obj

    return _ingest


@pytest.fixture
def page_object(ingest_page):
    """8-bit RGB JPEG page with no derivatives and no relationships."""
    return ingest_page()


@pytest.fixture
def sample_hocr():
    return SAMPLE_HOCR


@pytest.fixture
def invalid_hocr():
    return INVALID_HOCR
