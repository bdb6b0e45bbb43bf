"""Fixtures for pipeline tests: a JSONL logger and a reader for what it wrote."""

import json

import pytest

from infra.pipeline.logger import PipelineLogger


@pytest.fixture
def logger(tmp_path):
    pipeline_logger = PipelineLogger(
        pid="test:1",
        stage="ocr-derivatives",
        log_dir=tmp_path / "logs",
        level="DEBUG",
    )
    yield pipeline_logger
    pipeline_logger.close()


@pytest.fixture
def read_log():
    """Parse every entry of a JSONL log file (empty list if it was never written)."""
    def _read(log_file):
        if log_file is None or not log_file.exists():
            return []
        return [json.loads(line) for line in log_file.read_text().splitlines() if line.strip()]
    return _read
