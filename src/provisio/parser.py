# parser.py
from __future__ import annotations

import re
import shlex
from pathlib import Path
from typing import Iterable, List, Tuple

from .errors import ParseError
from .model import (
    CloneRepository,
    InstallPackages,
    Plan,
    RunShellCommand,
    SetBuildArg,
    SetEnvironmentVariable,
    SetWorkingDirectory,
    Step,
)

NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

KEYWORDS = ("ARG", "RUN", "SET", "ENV", "CLONE", "CD", "WORKDIR", "INSTALL")


# ---------------------------------------------------------------------
# Line handling
# ---------------------------------------------------------------------

def _logical_lines(lines: Iterable[str]) -> List[Tuple[int, str]]:
    """
    Join backslash continuations and drop blank/comment lines.

    Returns (line_no, text) pairs; line_no is the 1-based number of the
    first physical line of each instruction.
    """
    out: List[Tuple[int, str]] = []
    buf: List[str] = []
    start = 0

    for no, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        stripped = line.strip()

        if not buf:
            if not stripped or stripped.startswith("#"):
                continue
            start = no
        elif not stripped or stripped.startswith("#"):
            # blank and comment lines inside a continuation are dropped
            continue

        if stripped.endswith("\\"):
            buf.append(stripped[:-1].strip())
            continue

        buf.append(stripped)
        out.append((start, " ".join(p for p in buf if p)))
        buf = []

    if buf:
        # trailing continuation at EOF still yields the instruction
        out.append((start, " ".join(p for p in buf if p)))

    return out


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _split_pair(line_no: int, line: str, args: str, *, allow_bare: bool) -> Tuple[str, str | None]:
    if "=" in args:
        name, value = args.split("=", 1)
        name = name.strip()
        value = _unquote(value.strip())
    elif allow_bare:
        name, value = args.strip(), None
    else:
        raise ParseError(line_no, line, "expected NAME=value")

    if not NAME_RE.match(name):
        raise ParseError(line_no, line, f"invalid variable name {name!r}")
    return name, value


# ---------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------

def parse_instruction(line_no: int, line: str) -> Step:
    """Parse one logical instruction line into a Step."""
    parts = line.strip().split(None, 1)
    if not parts:
        raise ParseError(line_no, line, "empty instruction")

    keyword = parts[0].upper()
    args = parts[1].strip() if len(parts) > 1 else ""

    if keyword not in KEYWORDS:
        raise ParseError(line_no, line, f"unknown instruction {parts[0]!r}")
    if not args:
        raise ParseError(line_no, line, f"{keyword} requires an argument")

    if keyword == "RUN":
        return RunShellCommand(command=args, line=line_no)

    if keyword == "ARG":
        name, default = _split_pair(line_no, line, args, allow_bare=True)
        return SetBuildArg(name=name, default=default, line=line_no)

    if keyword in ("SET", "ENV"):
        if keyword == "ENV" and "=" not in args.split(None, 1)[0]:
            # legacy Dockerfile form: ENV NAME value
            bits = args.split(None, 1)
            if len(bits) != 2:
                raise ParseError(line_no, line, "expected NAME=value or NAME value")
            args = f"{bits[0]}={bits[1]}"
        name, value = _split_pair(line_no, line, args, allow_bare=False)
        return SetEnvironmentVariable(name=name, value=value or "", line=line_no)

    if keyword in ("CD", "WORKDIR"):
        return SetWorkingDirectory(path=_unquote(args), line=line_no)

    if keyword == "CLONE":
        try:
            words = shlex.split(args)
        except ValueError as e:
            raise ParseError(line_no, line, str(e)) from e
        if not words or not all(words):
            raise ParseError(line_no, line, "CLONE requires an argument")
        if len(words) > 2:
            raise ParseError(line_no, line, "CLONE takes a URL and an optional destination")
        url = words[0]
        dest = words[1] if len(words) == 2 else None
        return CloneRepository(url=url, destination=dest, line=line_no)

    # INSTALL
    try:
        packages = tuple(shlex.split(args))
    except ValueError as e:
        raise ParseError(line_no, line, str(e)) from e
    if not packages or not all(packages):
        raise ParseError(line_no, line, "INSTALL requires an argument")
    return InstallPackages(packages=packages, line=line_no)


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------

def parse_lines(lines: Iterable[str]) -> Plan:
    """Parse an iterable of recipe lines. No side effects."""
    steps = [parse_instruction(no, text) for no, text in _logical_lines(lines)]
    return Plan.of(steps)


def parse_recipe(text: str) -> Plan:
    return parse_lines(text.splitlines())


def load_recipe(path: str | Path) -> Plan:
    """Read and parse a recipe file."""
    recipe_path = Path(path).expanduser().resolve()
    if not recipe_path.is_file():
        raise FileNotFoundError(f"Recipe file not found: {recipe_path}")
    return parse_recipe(recipe_path.read_text(encoding="utf-8"))
