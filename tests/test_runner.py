"""Tests for the subprocess-backed command runners."""

import os
import sys

import pytest

from provisio.errors import ExecutionError
from provisio.runner import NOT_FOUND_EXIT_CODE, TIMEOUT_EXIT_CODE, DryRunRunner, SubprocessRunner

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")


@pytest.fixture
def env():
    return {"PATH": os.environ.get("PATH", "/usr/bin:/bin")}


class TestSubprocessRunner:
    def test_exit_status(self, tmp_path, env):
        runner = SubprocessRunner()
        assert runner.run("true", cwd=tmp_path, env=env) == 0
        assert runner.run("exit 3", cwd=tmp_path, env=env) == 3

    def test_uses_given_env_and_cwd(self, tmp_path, env):
        runner = SubprocessRunner(capture_output=True)
        code = runner.run('echo "$GREETING" > out.txt', cwd=tmp_path, env={**env, "GREETING": "hi"})

        assert code == 0
        assert (tmp_path / "out.txt").read_text().strip() == "hi"

    def test_captured_output(self, tmp_path, env):
        runner = SubprocessRunner(capture_output=True)
        runner.run("echo hello; echo oops >&2", cwd=tmp_path, env=env)
        assert "hello" in runner.last_output
        assert "oops" in runner.last_output

    def test_undecodable_output_is_not_an_error(self, tmp_path, env):
        runner = SubprocessRunner(capture_output=True)
        code = runner.run("printf 'ok\\377'; exit 1", cwd=tmp_path, env=env)

        assert code == 1
        assert runner.last_output.startswith("ok")
        assert "�" in runner.last_output

    def test_timeout(self, tmp_path, env):
        runner = SubprocessRunner(timeout=0.2)
        with pytest.raises(ExecutionError) as exc:
            runner.run("sleep 5", cwd=tmp_path, env=env)
        assert exc.value.exit_code == TIMEOUT_EXIT_CODE

    def test_missing_cwd(self, tmp_path, env):
        with pytest.raises(ExecutionError) as exc:
            SubprocessRunner().run("true", cwd=tmp_path / "gone", env=env)
        assert exc.value.exit_code == NOT_FOUND_EXIT_CODE


def test_dry_run_records(tmp_path):
    runner = DryRunRunner()
    assert runner.run("rm -rf /", cwd=tmp_path, env={}) == 0
    assert runner.calls == [("rm -rf /", tmp_path)]
