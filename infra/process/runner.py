import shlex
import subprocess
import threading
import time
from abc import ABC, abstractmethod
from typing import List, Optional, Set

from pydantic import BaseModel, Field


class ProcessResult(BaseModel):
    """Outcome of one external tool invocation (stdout and stderr combined)."""
    command: List[str] = Field(..., description="Exact argv that was executed")
    exit_code: Optional[int] = Field(None, description="Process exit code (None if it never finished)")
    output: str = Field("", description="Combined stdout/stderr")
    timed_out: bool = Field(False, description="Killed after exceeding the timeout")
    cancelled: bool = Field(False, description="Killed, or never started, because the runner was cancelled")
    duration_seconds: float = Field(0.0, ge=0.0)

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out and not self.cancelled

    @property
    def command_line(self) -> str:
        return shlex.join(self.command)


class ProcessRunner(ABC):
    """Runs external tools synchronously. Swap implementations for testing."""

    @abstractmethod
    def run(self, command: List[str], timeout: Optional[float] = None) -> ProcessResult:
        pass

    def cancel(self) -> None:
        """Stop running tools and refuse new ones. Called when a run is interrupted."""


class SubprocessRunner(ProcessRunner):
    """subprocess-backed runner; safe to share between worker threads.

    cancel() kills every child still running (they may belong to other
    threads) and makes later run() calls return a cancelled result without
    starting anything.
    """

    def __init__(self, default_timeout: Optional[float] = None):
        self.default_timeout = default_timeout
        self._active: Set[subprocess.Popen] = set()
        self._cancelled = False
        self._lock = threading.Lock()

    def _cancelled_result(self, command: List[str], start_time: float, output: str = "") -> ProcessResult:
        return ProcessResult(
            command=command,
            exit_code=None,
            output=output,
            cancelled=True,
            duration_seconds=time.time() - start_time,
        )

    def run(self, command: List[str], timeout: Optional[float] = None) -> ProcessResult:
        command = [str(part) for part in command]
        timeout = timeout if timeout is not None else self.default_timeout
        start_time = time.time()

        with self._lock:
            if self._cancelled:
                return self._cancelled_result(command, start_time)
            try:
                proc = subprocess.Popen(
                    command,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                    errors="replace",
                )
            except FileNotFoundError:
                return ProcessResult(
                    command=command,
                    exit_code=127,
                    output=f"{command[0]}: command not found",
                    duration_seconds=time.time() - start_time,
                )
            self._active.add(proc)

        try:
            try:
                output, _ = proc.communicate(timeout=timeout)
            except subprocess.TimeoutExpired:
                proc.kill()
                output, _ = proc.communicate()
                return ProcessResult(
                    command=command,
                    exit_code=None,
                    output=output or "",
                    timed_out=True,
                    duration_seconds=time.time() - start_time,
                )
            except BaseException:
                # KeyboardInterrupt in this thread: the child must not outlive us.
                proc.kill()
                proc.wait()
                raise
        finally:
            with self._lock:
                self._active.discard(proc)

        with self._lock:
            cancelled = self._cancelled
        if cancelled and proc.returncode != 0:
            return self._cancelled_result(command, start_time, output or "")

        return ProcessResult(
            command=command,
            exit_code=proc.returncode,
            output=output or "",
            duration_seconds=time.time() - start_time,
        )

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
            running = list(self._active)

        for proc in running:
            if proc.poll() is None:
                proc.kill()

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._active)
