from infra.process.runner import ProcessResult, ProcessRunner, SubprocessRunner

__all__ = [
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
]
