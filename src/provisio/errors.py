# errors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class ProvisioError(Exception):
    """Base class for every error a recipe run can surface."""


@dataclass
class ParseError(ProvisioError):
    """A recipe line that matches no known instruction form."""
    line_no: int
    line: str
    reason: str

    def __str__(self) -> str:
        return f"line {self.line_no}: {self.reason}: {self.line.strip()!r}"


@dataclass
class ExecutionError(ProvisioError):
    """An external command exited non-zero, timed out or could not start."""
    step_index: Optional[int]
    step: Optional[str]
    command: str
    exit_code: int
    reason: str = ""

    def __str__(self) -> str:
        where = f"step {self.step_index + 1} " if self.step_index is not None else ""
        msg = f"{where}failed (exit={self.exit_code}): {self.command}"
        if self.reason:
            msg += f" ({self.reason})"
        return msg


@dataclass
class EnvError(ProvisioError):
    """A referenced directory or variable does not exist."""
    step_index: Optional[int]
    step: Optional[str]
    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        if self.step_index is None:
            return self.message
        return f"step {self.step_index + 1} ({self.step}): {self.message}"


TOOL_HINTS = {
    "apt-get": "Run as root inside a Debian/Ubuntu image, or set PROVISIO_INSTALL_COMMAND.",
    "git": "Install Git or fix PATH.",
    "curl": "Install curl (e.g., apt-get install -y curl).",
    "cargo": "Install a Rust toolchain (e.g., via rustup) or fix PATH.",
    "rustup": "Install rustup from https://rustup.rs or fix PATH.",
    "make": "Install build tools (e.g., apt-get install -y build-essential).",
}


def hint_for(command: str, exit_code: int) -> Optional[str]:
    """Best-effort hint for common failures; 127 is the shell's 'not found'."""
    if exit_code != 127:
        return None
    words = command.split()
    if not words:
        return None
    return TOOL_HINTS.get(words[0], f"Install {words[0]} or fix PATH.")
