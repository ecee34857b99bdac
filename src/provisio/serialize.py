# serialize.py
from __future__ import annotations

import json
from typing import Any, Dict

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


def step_to_dict(step: Step) -> Dict[str, Any]:
    """Convert a step to a plain dict; `kind` is the instruction keyword."""
    d: Dict[str, Any] = {"kind": step.keyword, "line": step.line}

    if isinstance(step, SetBuildArg):
        d["name"] = step.name
        if step.default is not None:
            d["default"] = step.default
    elif isinstance(step, RunShellCommand):
        d["command"] = step.command
    elif isinstance(step, SetEnvironmentVariable):
        d["name"] = step.name
        d["value"] = step.value
    elif isinstance(step, CloneRepository):
        d["url"] = step.url
        if step.destination is not None:
            d["destination"] = step.destination
    elif isinstance(step, SetWorkingDirectory):
        d["path"] = step.path
    elif isinstance(step, InstallPackages):
        d["packages"] = list(step.packages)
    else:
        raise TypeError(f"Unsupported step: {step!r}")

    return d


def step_from_dict(d: Dict[str, Any]) -> Step:
    """The reverse of step_to_dict()."""
    kind = str(d.get("kind", "")).upper()
    line = int(d.get("line", 0))

    if kind == "ARG":
        return SetBuildArg(name=d["name"], default=d.get("default"), line=line)
    if kind == "RUN":
        return RunShellCommand(command=d["command"], line=line)
    if kind in ("SET", "ENV"):
        return SetEnvironmentVariable(name=d["name"], value=d.get("value", ""), line=line)
    if kind == "CLONE":
        return CloneRepository(url=d["url"], destination=d.get("destination"), line=line)
    if kind in ("CD", "WORKDIR"):
        return SetWorkingDirectory(path=d["path"], line=line)
    if kind == "INSTALL":
        return InstallPackages(packages=tuple(d.get("packages", [])), line=line)

    raise ValueError(f"Unknown step kind: {d.get('kind')!r}")


def plan_to_dict(plan: Plan) -> Dict[str, Any]:
    return {"steps": [step_to_dict(s) for s in plan]}


def plan_from_dict(d: Dict[str, Any]) -> Plan:
    return Plan.of([step_from_dict(s) for s in d.get("steps", [])])


def plan_to_json(plan: Plan, indent: int | None = 2) -> str:
    return json.dumps(plan_to_dict(plan), indent=indent)
