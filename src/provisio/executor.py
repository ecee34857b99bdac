# executor.py
from __future__ import annotations

import os
import re
import shlex
from pathlib import Path
from typing import Optional

from .errors import EnvError, ExecutionError, hint_for
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
from .runner import CommandRunner, SubprocessRunner
from .ui.console import Console, get_console

DEFAULT_INSTALL_COMMAND = "apt-get install -y --no-install-recommends"
INSTALL_COMMAND_ENV = "PROVISIO_INSTALL_COMMAND"

# $$ | ${NAME} | $NAME
_VAR_RE = re.compile(r"\$\$|\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def expand_vars(text: str, context: ExecutionContext) -> str:
    """
    Substitute $NAME and ${NAME} from the context. A reference to an
    unknown variable raises EnvError (step fields are filled in by the caller).
    """
    def _sub(m: re.Match) -> str:
        if m.group(0) == "$$":
            return "$"
        name = m.group(1) or m.group(2)
        value = context.lookup(name)
        if value is None:
            raise EnvError(step_index=None, step=None, message=f"variable ${name} is not set")
        return value

    return _VAR_RE.sub(_sub, text)


class Executor:
    """
    Applies a plan to an execution context, one step at a time.

    State machine: NOT_STARTED -> RUNNING(i) -> SUCCEEDED | FAILED.
    The first step that fails stops the run; nothing after it executes and
    nothing already done is rolled back.
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        console: Optional[Console] = None,
        *,
        install_command: Optional[str] = None,
        check_dirs: bool = True,
    ):
        self.runner: CommandRunner = runner or SubprocessRunner()
        self.console = console
        self.install_command = (
            install_command
            or os.environ.get(INSTALL_COMMAND_ENV)
            or DEFAULT_INSTALL_COMMAND
        )
        self.check_dirs = check_dirs
        self.state = RunState.NOT_STARTED
        self.current_index: Optional[int] = None

    @property
    def _console(self) -> Console:
        return self.console or get_console()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self, plan: Plan, context: Optional[ExecutionContext] = None) -> RunResult:
        if self.state is not RunState.NOT_STARTED:
            raise RuntimeError("Executor instances run a single plan; create a new one")

        ctx = context if context is not None else ExecutionContext.create()
        console = self._console
        total = len(plan)

        self.state = RunState.RUNNING
        for index, step in enumerate(plan):
            self.current_index = index
            console.print_step(index, total, step.describe())
            try:
                self._apply(step, ctx)
            except (ExecutionError, EnvError) as e:
                e.step_index = index
                e.step = step.describe()
                self.state = RunState.FAILED
                console.print_failure(
                    step.describe(),
                    str(e),
                    exit_code=e.exit_code,
                    hint=hint_for(getattr(e, "command", ""), e.exit_code),
                )
                return RunResult(
                    state=RunState.FAILED,
                    context=ctx,
                    steps_run=index + 1,
                    failed_step_index=index,
                    failed_step=step,
                    exit_code=e.exit_code,
                    error=e,
                )
            except BaseException:
                # a runner bug or Ctrl-C still ends the run, just not as a RunResult
                self.state = RunState.FAILED
                raise

        self.current_index = None
        self.state = RunState.SUCCEEDED
        return RunResult(state=RunState.SUCCEEDED, context=ctx, steps_run=total)

    # ------------------------------------------------------------------
    # Step application
    # ------------------------------------------------------------------

    def _apply(self, step: Step, ctx: ExecutionContext) -> None:
        if isinstance(step, SetBuildArg):
            if step.name in ctx.build_arg_overrides:
                value = ctx.build_arg_overrides[step.name]
            else:
                value = expand_vars(step.default or "", ctx)
            ctx.build_args[step.name] = value
            ctx.env[step.name] = value
            return

        if isinstance(step, SetEnvironmentVariable):
            ctx.env[step.name] = expand_vars(step.value, ctx)
            return

        if isinstance(step, SetWorkingDirectory):
            target = (ctx.cwd / Path(expand_vars(step.path, ctx)).expanduser()).resolve()
            if self.check_dirs and not target.is_dir():
                raise EnvError(step_index=None, step=None, message=f"directory not found: {target}")
            ctx.cwd = target
            return

        if isinstance(step, RunShellCommand):
            self._exec(step.command, ctx)
            return

        if isinstance(step, CloneRepository):
            url = expand_vars(step.url, ctx)
            dest = expand_vars(step.target, ctx)
            self._exec(f"git clone {shlex.quote(url)} {shlex.quote(dest)}", ctx)
            return

        if isinstance(step, InstallPackages):
            packages = " ".join(shlex.quote(expand_vars(p, ctx)) for p in step.packages)
            self._exec(f"{self.install_command} {packages}", ctx)
            return

        raise TypeError(f"Unsupported step: {step!r}")

    def _exec(self, command: str, ctx: ExecutionContext) -> None:
        if self.check_dirs and not ctx.cwd.is_dir():
            raise EnvError(step_index=None, step=None, message=f"directory not found: {ctx.cwd}")

        self._console.print_debug(f"exec in {ctx.cwd}: {command}")
        code = self.runner.run(command, cwd=ctx.cwd, env=dict(ctx.env))
        ctx.last_exit_status = code
        if code != 0:
            raise ExecutionError(step_index=None, step=None, command=command, exit_code=code)


def run_plan(
    plan: Plan,
    context: Optional[ExecutionContext] = None,
    *,
    runner: Optional[CommandRunner] = None,
    console: Optional[Console] = None,
) -> RunResult:
    """Convenience: Executor(runner).run(plan, context)."""
    return Executor(runner=runner, console=console).run(plan, context)
