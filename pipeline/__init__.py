"""
Derivative pipelines.

Current pipelines:
- ocr_derivatives - plain-text OCR and positional HOCR from a page object's
  master image (OBJ), written back as the OCR and HOCR datastreams
"""
