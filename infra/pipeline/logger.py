import json
import logging
import sys
import threading
from datetime import datetime
from pathlib import Path


STRUCTURED_FIELDS = (
    'pid',
    'stage',
    'dsid',
    'exit_code',
    'command',
    'output',
    'duration_seconds',
    'error',
)


class FlushingFileHandler(logging.FileHandler):
    """FileHandler that flushes after every emit for real-time log visibility."""
    def emit(self, record):
        super().emit(record)
        self.flush()


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now().astimezone().isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        for field in STRUCTURED_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        extra_fields = getattr(record, 'fields', None)
        if extra_fields:
            log_data.update(extra_fields)

        return json.dumps(log_data, default=str)


class PipelineLogger:
    """Logger that writes to a single append-only JSONL file per object and stage.

    File handlers are created lazily on first log message to avoid
    creating empty log files when nothing is logged.
    """
    def __init__(
        self,
        pid: str,
        stage: str,
        log_dir: Path,
        console_output: bool = False,
        json_output: bool = True,
        level: str = "INFO",
        filename: str = None
    ):
        self.pid = pid
        self.stage = stage
        self.log_dir = Path(log_dir)
        self.console_output = console_output
        self.json_output = json_output
        self.level = level
        self.filename = filename or f"{stage}.jsonl"

        self._logger = None
        self._initialized = False
        self._init_lock = threading.Lock()
        self.log_file = None

    def _ensure_initialized_unsafe(self):
        if self._initialized:
            return

        logger_name = f"pipeline.{self.pid}.{self.stage}.{id(self)}"
        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(getattr(logging, self.level.upper()))
        self._logger.propagate = False

        if self.console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
            self._logger.addHandler(console_handler)

        if self.json_output:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            json_file = self.log_dir / self.filename
            json_handler = FlushingFileHandler(json_file, mode='a')
            json_handler.setFormatter(JSONFormatter())
            self._logger.addHandler(json_handler)
            self.log_file = json_file

        self._initialized = True

    @property
    def logger(self):
        """Get the underlying logger, initializing if needed."""
        with self._init_lock:
            self._ensure_initialized_unsafe()
            return self._logger

    def _log(self, level: str, message: str, **kwargs):
        reserved_params = {}
        for param in ['exc_info', 'stack_info', 'stacklevel']:
            if param in kwargs:
                reserved_params[param] = kwargs.pop(param)

        # Known fields become record attributes, anything else is nested
        # under `fields` so it cannot collide with LogRecord internals.
        extra = {'pid': self.pid, 'stage': self.stage}
        fields = {}
        for key, value in kwargs.items():
            if key in STRUCTURED_FIELDS:
                extra[key] = value
            else:
                fields[key] = value
        if fields:
            extra['fields'] = fields

        self.logger.log(
            getattr(logging, level.upper()),
            message,
            extra=extra,
            **reserved_params
        )

    def debug(self, message: str, **kwargs):
        self._log('DEBUG', message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log('INFO', message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log('WARNING', message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log('ERROR', message, **kwargs)

    def close(self):
        with self._init_lock:
            if self._initialized and self._logger:
                for handler in self._logger.handlers[:]:
                    handler.close()
                    self._logger.removeHandler(handler)
                self._initialized = False
                self._logger = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def create_logger(pid: str, stage: str, **kwargs) -> PipelineLogger:
    return PipelineLogger(pid, stage, **kwargs)
