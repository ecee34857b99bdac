# runner.py
from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Protocol, Tuple

from .errors import ExecutionError

TIMEOUT_EXIT_CODE = 124
NOT_FOUND_EXIT_CODE = 127


class CommandRunner(Protocol):
    """Runs one external command to completion and returns its exit status."""

    def run(self, command: str, *, cwd: Path, env: Dict[str, str]) -> int:
        ...


class SubprocessRunner:
    """
    Run commands through the system shell.

    Output goes straight to the terminal unless capture_output is set; the
    exit status is the only thing the executor looks at. With no timeout a
    hung command blocks forever.
    """

    def __init__(self, timeout: float | None = None, capture_output: bool = False):
        self.timeout = timeout
        self.capture_output = capture_output
        self.last_output: str = ""

    def run(self, command: str, *, cwd: Path, env: Dict[str, str]) -> int:
        try:
            proc = subprocess.run(
                command,
                shell=True,
                cwd=str(cwd),
                env=env,
                text=True,
                errors="replace",
                capture_output=self.capture_output,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ExecutionError(
                step_index=None,
                step=None,
                command=command,
                exit_code=TIMEOUT_EXIT_CODE,
                reason=f"timed out after {e.timeout}s",
            ) from e
        except OSError as e:
            # missing cwd, no /bin/sh, ...
            raise ExecutionError(
                step_index=None,
                step=None,
                command=command,
                exit_code=NOT_FOUND_EXIT_CODE,
                reason=str(e),
            ) from e

        if self.capture_output:
            self.last_output = ((proc.stdout or "") + (proc.stderr or ""))[-4000:]
        return proc.returncode


@dataclass
class DryRunRunner:
    """Records commands instead of running them; everything succeeds."""
    calls: List[Tuple[str, Path]] = field(default_factory=list)

    def run(self, command: str, *, cwd: Path, env: Dict[str, str]) -> int:
        self.calls.append((command, cwd))
        return 0
