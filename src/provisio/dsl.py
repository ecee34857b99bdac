# dsl.py
from __future__ import annotations

from typing import List, Optional

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
from .parser import NAME_RE


def _check_name(name: str) -> str:
    if not NAME_RE.match(name):
        raise ValueError(f"invalid variable name {name!r}")
    return name


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def build_arg(name: str, default: str | None = None) -> SetBuildArg:
    return SetBuildArg(name=_check_name(name), default=default)


def set_env(name: str, value: str) -> SetEnvironmentVariable:
    return SetEnvironmentVariable(name=_check_name(name), value=str(value))


def run(cmd: str) -> RunShellCommand:
    """Create a shell step."""
    if not cmd.strip():
        raise ValueError("run() needs a command")
    return RunShellCommand(command=cmd)


def clone(url: str, destination: str | None = None) -> CloneRepository:
    if not url.strip():
        raise ValueError("clone() needs a repository URL")
    return CloneRepository(url=url, destination=destination)


def cd(path: str) -> SetWorkingDirectory:
    if not path.strip():
        raise ValueError("cd() needs a path")
    return SetWorkingDirectory(path=path)


def install(*packages: str) -> InstallPackages:
    if not packages:
        raise ValueError("install() needs at least one package")
    return InstallPackages(packages=tuple(packages))


def plan(*steps: Step) -> Plan:
    """
    Plan definition helper:

        plan(
            set_env("DEBIAN_FRONTEND", "noninteractive"),
            install("git", "curl"),
            clone("https://example.com/repo.git"),
            cd("repo"),
            run("./build.sh"),
        )
    """
    return Plan.of(steps)


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class PlanBuilder:
    def __init__(self) -> None:
        self._steps: List[Step] = []

    def arg(self, name: str, default: Optional[str] = None):
        self._steps.append(build_arg(name, default))
        return self

    def env(self, **env):
        # keyword order is declaration order
        for k, v in env.items():
            self._steps.append(set_env(k, str(v)))
        return self

    def run(self, cmd: str):
        self._steps.append(run(cmd))
        return self

    def clone(self, url: str, destination: str | None = None):
        self._steps.append(clone(url, destination))
        return self

    def cd(self, path: str):
        self._steps.append(cd(path))
        return self

    def install(self, *packages: str):
        self._steps.append(install(*packages))
        return self

    def build(self) -> Plan:
        return Plan.of(self._steps)
