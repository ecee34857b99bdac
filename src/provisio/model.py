# model.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import ClassVar, Dict, Iterator, Optional, Sequence, Tuple, Union


# ---------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class SetBuildArg:
    """ARG NAME[=default]: a build argument, overridable by the caller."""
    keyword: ClassVar[str] = "ARG"

    name: str
    default: Optional[str] = None
    line: int = 0

    def describe(self) -> str:
        if self.default is None:
            return f"ARG {self.name}"
        return f"ARG {self.name}={self.default}"


@dataclass(frozen=True)
class RunShellCommand:
    """RUN <command>: run a shell command in the current directory."""
    keyword: ClassVar[str] = "RUN"

    command: str
    line: int = 0

    def describe(self) -> str:
        return f"RUN {self.command}"


@dataclass(frozen=True)
class SetEnvironmentVariable:
    """SET NAME=value: export a variable to every later step."""
    keyword: ClassVar[str] = "SET"

    name: str
    value: str
    line: int = 0

    def describe(self) -> str:
        return f"SET {self.name}={self.value}"


@dataclass(frozen=True)
class CloneRepository:
    """CLONE <url> [destination]"""
    keyword: ClassVar[str] = "CLONE"

    url: str
    destination: Optional[str] = None
    line: int = 0

    @property
    def target(self) -> str:
        # https://host/org/repo.git -> repo
        if self.destination:
            return self.destination
        name = self.url.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]
        return name[:-4] if name.endswith(".git") else name

    def describe(self) -> str:
        if self.destination:
            return f"CLONE {self.url} {self.destination}"
        return f"CLONE {self.url}"


@dataclass(frozen=True)
class SetWorkingDirectory:
    """CD <path>: change the working directory for later steps."""
    keyword: ClassVar[str] = "CD"

    path: str
    line: int = 0

    def describe(self) -> str:
        return f"CD {self.path}"


@dataclass(frozen=True)
class InstallPackages:
    """INSTALL pkg [pkg ...]: install OS packages with the package manager."""
    keyword: ClassVar[str] = "INSTALL"

    packages: Tuple[str, ...]
    line: int = 0

    def describe(self) -> str:
        return "INSTALL " + " ".join(self.packages)


Step = Union[
    SetBuildArg,
    RunShellCommand,
    SetEnvironmentVariable,
    CloneRepository,
    SetWorkingDirectory,
    InstallPackages,
]

STEP_TYPES: Tuple[type, ...] = (
    SetBuildArg,
    RunShellCommand,
    SetEnvironmentVariable,
    CloneRepository,
    SetWorkingDirectory,
    InstallPackages,
)


# ---------------------------------------------------------------------
# Plan
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Plan:
    """An ordered, immutable sequence of steps. Order is declaration order."""
    steps: Tuple[Step, ...] = ()

    def __post_init__(self) -> None:
        # accept any sequence, store a tuple
        object.__setattr__(self, "steps", tuple(self.steps))
        for s in self.steps:
            if not isinstance(s, STEP_TYPES):
                raise TypeError(f"Not a step: {s!r}")

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def __getitem__(self, index: int) -> Step:
        return self.steps[index]

    @classmethod
    def of(cls, steps: Sequence[Step]) -> "Plan":
        return cls(steps=tuple(steps))


# ---------------------------------------------------------------------
# Execution state
# ---------------------------------------------------------------------

@dataclass
class ExecutionContext:
    """
    Mutable run-time state threaded through one plan run.

    The executor owns it for the duration of the run. Nothing here touches
    the calling process: os.environ and os.getcwd() are only read by
    create() to seed the initial values.
    """
    cwd: Path
    env: Dict[str, str] = field(default_factory=dict)
    build_args: Dict[str, str] = field(default_factory=dict)
    build_arg_overrides: Dict[str, str] = field(default_factory=dict)
    last_exit_status: Optional[int] = None

    @classmethod
    def create(
        cls,
        cwd: str | Path | None = None,
        env: Optional[Dict[str, str]] = None,
        *,
        inherit_env: bool = True,
        build_args: Optional[Dict[str, str]] = None,
    ) -> "ExecutionContext":
        base: Dict[str, str] = dict(os.environ) if inherit_env else {}
        base.update({k: str(v) for k, v in (env or {}).items()})
        return cls(
            cwd=Path(cwd or os.getcwd()).expanduser().resolve(),
            env=base,
            build_arg_overrides={k: str(v) for k, v in (build_args or {}).items()},
        )

    def snapshot(self) -> "ExecutionContext":
        return ExecutionContext(
            cwd=self.cwd,
            env=dict(self.env),
            build_args=dict(self.build_args),
            build_arg_overrides=dict(self.build_arg_overrides),
            last_exit_status=self.last_exit_status,
        )

    def lookup(self, name: str) -> Optional[str]:
        """Variables visible to expansion: env wins over build args."""
        if name in self.env:
            return self.env[name]
        return self.build_args.get(name)


class RunState(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class RunResult:
    state: RunState
    context: ExecutionContext
    steps_run: int = 0
    failed_step_index: Optional[int] = None  # 0-based
    failed_step: Optional[Step] = None
    exit_code: int = 0
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.state is RunState.SUCCEEDED
