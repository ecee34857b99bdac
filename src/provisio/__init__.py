from .dsl import build_arg, set_env, run, clone, cd, install, plan, PlanBuilder
from .errors import ProvisioError, ParseError, ExecutionError, EnvError
from .executor import Executor, run_plan
from .model import (
    CloneRepository,
    ExecutionContext,
    InstallPackages,
    Plan,
    RunResult,
    RunShellCommand,
    RunState,
    SetBuildArg,
    SetEnvironmentVariable,
    SetWorkingDirectory,
    Step,
)
from .parser import parse_recipe, parse_lines, load_recipe
from .runner import CommandRunner, SubprocessRunner, DryRunRunner

__all__ = [
    "build_arg", "set_env", "run", "clone", "cd", "install", "plan", "PlanBuilder",
    "ProvisioError", "ParseError", "ExecutionError", "EnvError",
    "Executor", "run_plan",
    "CloneRepository", "ExecutionContext", "InstallPackages", "Plan", "RunResult",
    "RunShellCommand", "RunState", "SetBuildArg", "SetEnvironmentVariable",
    "SetWorkingDirectory", "Step",
    "parse_recipe", "parse_lines", "load_recipe",
    "CommandRunner", "SubprocessRunner", "DryRunRunner",
]
