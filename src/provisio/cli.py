# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from provisio.errors import ParseError
from provisio.executor import Executor
from provisio.model import ExecutionContext, Plan
from provisio.parser import load_recipe
from provisio.runner import DryRunRunner, SubprocessRunner
from provisio.serialize import plan_to_json
from provisio.ui.console import Console, get_console, set_console

DEFAULT_RECIPE_NAMES = ("Provisionfile", "provision.recipe")


def find_recipe_files() -> list[Path]:
    """
    Find all recipe files in the current directory.

    Returns:
        List of Path objects for recipe files
    """
    current_dir = Path(".")
    found: list[Path] = []

    for name in DEFAULT_RECIPE_NAMES:
        p = current_dir / name
        if p.is_file():
            found.append(p)

    for path in current_dir.glob("*.recipe"):
        if path not in found:
            found.append(path)

    return sorted(found)


def discover_recipe(recipe_arg: str | None) -> Path:
    """
    Discover recipe file from argument or default.

    Raises:
        SystemExit: If no recipe can be found or several are ambiguous
    """
    console = get_console()

    if recipe_arg:
        recipe_path = Path(recipe_arg)
        if not recipe_path.exists() and recipe_path.suffix != ".recipe":
            alt = Path(str(recipe_path) + ".recipe")
            if alt.exists():
                recipe_path = alt
        if not recipe_path.exists():
            console.print_error(
                "Recipe file not found",
                f"Could not find recipe file: {recipe_arg}",
                suggestion="Create a recipe file or specify a different path:\n  provisio run my.recipe",
            )
            sys.exit(1)
        return recipe_path

    recipe_files = find_recipe_files()

    if len(recipe_files) == 0:
        console.print_error(
            "No recipe file found",
            "Could not find any recipe files.",
            details=["Looked for:", *(f"  {n}" for n in DEFAULT_RECIPE_NAMES), "  *.recipe"],
            suggestion="Create a recipe file:\n  Provisionfile\n\nOr specify one explicitly:\n  provisio run my.recipe",
        )
        sys.exit(1)

    if len(recipe_files) > 1:
        console.print_error(
            "Multiple recipe files found",
            "Found multiple recipe files. Please specify which one to use:",
            details=[f"  {f}" for f in recipe_files],
            suggestion="Specify a recipe explicitly:\n  provisio run Provisionfile",
        )
        sys.exit(1)

    return recipe_files[0]


def _parse_build_args(values: tuple[str, ...]) -> dict[str, str]:
    out: dict[str, str] = {}
    for item in values:
        if "=" not in item:
            raise click.BadParameter(f"expected NAME=VALUE, got {item!r}", param_hint="--build-arg")
        k, v = item.split("=", 1)
        out[k.strip()] = v
    return out


def _load_or_exit(path: Path) -> Plan:
    console = get_console()
    try:
        return load_recipe(path)
    except ParseError as e:
        console.print_error(
            "Invalid recipe",
            f"{path}: {e}",
            suggestion="Known instructions: ARG, RUN, SET, ENV, CLONE, CD, WORKDIR, INSTALL",
        )
        sys.exit(1)
    except OSError as e:
        console.print_error("Failed to read recipe", str(e))
        sys.exit(1)


def _exit_status(code: int) -> int:
    # killed by signal N -> 128+N, like the shell
    if code < 0:
        code = 128 - code
    # shells only keep the low byte; never report failure as 0
    code = code & 0xFF
    return code if code else 1


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """provisio — sequential, fail-fast environment provisioning."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.argument("recipe", required=False)
@click.option("--build-arg", "build_args", multiple=True, help="Override an ARG (NAME=VALUE); repeatable")
@click.option("--workdir", default=".", show_default=True, help="Initial working directory")
@click.option("--timeout", default=None, type=float, help="Per-command timeout in seconds (default: none)")
@click.option("--dry-run", is_flag=True, default=False, help="Print commands without running them")
@click.option("--clean-env/--inherit-env", default=False, show_default=True, help="Start from an empty environment")
@click.option("--quiet", is_flag=True, default=False, help="Do not print each step")
@click.pass_context
def run(ctx, recipe, build_args, workdir, timeout, dry_run, clean_env, quiet):
    """Run a provisioning recipe."""
    console = get_console()
    console.quiet = quiet

    recipe_path = discover_recipe(recipe)
    plan = _load_or_exit(recipe_path)
    overrides = _parse_build_args(build_args)

    try:
        context = ExecutionContext.create(
            cwd=workdir,
            inherit_env=not clean_env,
            build_args=overrides,
        )
        if dry_run:
            runner = DryRunRunner()
            executor = Executor(runner=runner, console=console, check_dirs=False)
        else:
            runner = SubprocessRunner(timeout=timeout)
            executor = Executor(runner=runner, console=console)

        console.print_run_started(
            recipe=str(recipe_path),
            step_count=len(plan),
            workdir=str(context.cwd),
        )

        result = executor.run(plan, context)

        if dry_run:
            console.print_header("COMMANDS")
            for command, cwd in runner.calls:
                console.print_info(f"  ({cwd}) {command}")

        console.print_result(result.ok, result.steps_run, len(plan), result.exit_code)

        if not result.ok:
            sys.exit(_exit_status(result.exit_code))

    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)


@cli.command()
@click.argument("recipe", required=False)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the plan as JSON")
def plan(recipe, as_json):
    """Parse a recipe and print its plan."""
    console = get_console()
    recipe_path = discover_recipe(recipe)
    parsed = _load_or_exit(recipe_path)

    if as_json:
        console.print_info(plan_to_json(parsed))
        return

    console.print_header(f"PLAN ({len(parsed)} steps)")
    console.print_plan([f"{s.describe()}  [line {s.line}]" for s in parsed])


@cli.command()
@click.argument("recipe", required=False)
def check(recipe):
    """Validate a recipe without running it."""
    console = get_console()
    recipe_path = discover_recipe(recipe)
    parsed = _load_or_exit(recipe_path)
    console.print_info(f"OK: {recipe_path} ({len(parsed)} instructions)")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
