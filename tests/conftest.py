"""Pytest configuration for provisio tests."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

import pytest

from provisio.model import ExecutionContext
from provisio.ui.console import Console, set_console


class FakeRunner:
    """
    CommandRunner double.

    Records every call with the cwd and env it saw, returns scripted exit
    codes by substring match, and creates the destination directory for
    `git clone` so later CD steps can find it.
    """

    def __init__(self, exit_codes: Dict[str, int] | None = None):
        self.exit_codes = exit_codes or {}
        self.calls: List[Tuple[str, Path, Dict[str, str]]] = []

    @property
    def commands(self) -> List[str]:
        return [c for c, _, _ in self.calls]

    def run(self, command: str, *, cwd: Path, env: Dict[str, str]) -> int:
        self.calls.append((command, cwd, dict(env)))
        for needle, code in self.exit_codes.items():
            if needle in command:
                return code
        if command.startswith("git clone "):
            dest = command.rsplit(" ", 1)[-1].strip("'")
            (cwd / dest).mkdir(parents=True, exist_ok=True)
        return 0


@pytest.fixture(autouse=True)
def quiet_console():
    set_console(Console(quiet=True))
    yield
    set_console(Console())


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def context(tmp_path):
    return ExecutionContext.create(cwd=tmp_path, env={"HOME": str(tmp_path)}, inherit_env=False)
