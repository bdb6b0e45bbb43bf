#!/usr/bin/env python3
"""
pagetext CLI - OCR and HOCR derivatives for scanned page objects

Commands:
  pagetext init                       Initialize repository config
  pagetext repo ingest <pid> <image>  Create a page object
  pagetext object <pid> derive        Create OCR/HOCR derivatives
  pagetext batch                      Derive every object in the repository
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from cli import main


if __name__ == '__main__':
    main()
