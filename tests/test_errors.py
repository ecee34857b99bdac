"""Tests for error formatting and console output."""

from provisio.errors import EnvError, ExecutionError, ParseError, ProvisioError, hint_for
from provisio.ui.console import Console


def test_taxonomy():
    for exc in (
        ParseError(1, "X", "unknown"),
        ExecutionError(0, "RUN x", "x", 1),
        EnvError(0, "CD y", "missing"),
    ):
        assert isinstance(exc, ProvisioError)


def test_messages():
    assert str(ExecutionError(1, "RUN make", "make", 2)) == "step 2 failed (exit=2): make"
    assert str(EnvError(None, None, "directory not found: /x")) == "directory not found: /x"
    assert str(EnvError(0, "CD x", "gone")) == "step 1 (CD x): gone"


def test_hints():
    assert hint_for("cargo build", 127) is not None
    assert hint_for("frobnicate --all", 127) == "Install frobnicate or fix PATH."
    assert hint_for("cargo build", 101) is None


def test_console_failure_block(capsys):
    Console(debug=True).print_failure("RUN make", "boom", exit_code=2, hint="install make")
    err = capsys.readouterr().err

    assert "STEP FAILED: RUN make" in err
    assert "Exit code: 2" in err
    assert "Hint: install make" in err
    assert "Error details: boom" in err


def test_console_quiet_steps(capsys):
    Console(quiet=True).print_step(0, 3, "RUN true")
    Console().print_step(0, 3, "RUN true")
    assert capsys.readouterr().out == "STEP 1/3: RUN true\n"
