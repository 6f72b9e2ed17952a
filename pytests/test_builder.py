"""Tests for the two-phase external build."""

import logging
import os
import shlex
import subprocess
import sys

import pytest

from pytests.conftest import PROJECT_ROOT, RecordingRunner, make_pipeline
from sqlanywhere.builder import EXIT_COMMAND_NOT_FOUND, BuildPhase, run_phase
from sqlanywhere.errors import (
    EXIT_COMPILE_FAILED,
    EXIT_CONFIGURE_FAILED,
    BuildCompileFailed,
    BuildConfigureFailed,
)
from sqlanywhere.fingerprint import fingerprint


class TestRunPhase:
    def test_success_captures_output(self, tmp_path):
        result = run_phase(BuildPhase.CONFIGURE, [sys.executable, "-c", "print('configured')"], tmp_path)
        assert result.ok
        assert result.phase is BuildPhase.CONFIGURE
        assert "configured" in result.captured_output

    def test_stderr_merged_into_output(self, tmp_path):
        cmd = [sys.executable, "-c", "import sys; sys.stderr.write('no compiler'); sys.exit(2)"]
        result = run_phase(BuildPhase.BUILD, cmd, tmp_path)
        assert not result.ok
        assert result.exit_status == 2
        assert "no compiler" in result.captured_output

    def test_runs_in_given_directory(self, tmp_path):
        cmd = [sys.executable, "-c", "import pathlib; pathlib.Path('marker').write_text('x')"]
        run_phase(BuildPhase.BUILD, cmd, tmp_path)
        assert (tmp_path / "marker").exists()

    def test_missing_executable_reported_not_raised(self, tmp_path):
        result = run_phase(BuildPhase.CONFIGURE, ["definitely-not-a-real-toolchain-xyz"], tmp_path)
        assert result.exit_status == EXIT_COMMAND_NOT_FOUND
        assert "definitely-not-a-real-toolchain-xyz" in result.captured_output


class TestBuildPipeline:
    def test_configure_then_build(self, tmp_path):
        runner = RecordingRunner()
        results = make_pipeline(runner, tmp_path).run()
        assert runner.calls == [BuildPhase.CONFIGURE, BuildPhase.BUILD]
        assert [r.phase for r in results] == [BuildPhase.CONFIGURE, BuildPhase.BUILD]

    def test_configure_failure_skips_build(self, tmp_path):
        runner = RecordingRunner(configure_status=1)
        with pytest.raises(BuildConfigureFailed) as exc_info:
            make_pipeline(runner, tmp_path).run()
        assert runner.calls == [BuildPhase.CONFIGURE]
        assert exc_info.value.code == EXIT_CONFIGURE_FAILED
        assert exc_info.value.result.captured_output == "configure output"

    def test_build_failure(self, tmp_path):
        runner = RecordingRunner(build_status=1)
        with pytest.raises(BuildCompileFailed) as exc_info:
            make_pipeline(runner, tmp_path).run()
        assert runner.calls == [BuildPhase.CONFIGURE, BuildPhase.BUILD]
        assert exc_info.value.code == EXIT_COMPILE_FAILED

    def test_build_failures_terminate_the_process(self, tmp_path):
        """Uncaught, a build failure behaves like sys.exit() with its own status."""
        runner = RecordingRunner(build_status=2)
        with pytest.raises(SystemExit) as exc_info:
            make_pipeline(runner, tmp_path).run()
        assert exc_info.value.code == EXIT_COMPILE_FAILED
        assert "Error when executing build (exit status 2)" in str(exc_info.value)

    def test_failure_output_logged(self, tmp_path, caplog):
        """The captured phase output reaches the log before the process-ending raise."""
        runner = RecordingRunner(configure_status=1)
        with caplog.at_level(logging.ERROR), pytest.raises(BuildConfigureFailed):
            make_pipeline(runner, tmp_path).run()

        assert "Error when executing configure (exit status 1)" in caplog.text
        assert "configure output" in caplog.text


@pytest.mark.skipif(not fingerprint().supported, reason="host platform has no artifact layout")
class TestUncaughtBuildFailure:
    """A build failure escaping library code still shows the operator the build output."""

    def _run_library(self, root, configure_cmd):
        env = dict(os.environ, SQLANYWHERE_ROOT=str(root), SQLANYWHERE_CONFIGURE_CMD=configure_cmd)
        return subprocess.run(
            [sys.executable, "-c", "import sqlanywhere; sqlanywhere.create_connection()"],
            capture_output=True,
            text=True,
            timeout=60,
            cwd=PROJECT_ROOT,
            env=env,
        )

    def test_configure_output_on_stderr(self, artifact_root):
        configure = shlex.join(
            [sys.executable, "-c", "print('CMAKE ERROR: no compiler found'); raise SystemExit(1)"]
        )
        result = self._run_library(artifact_root, configure)

        assert result.returncode == EXIT_CONFIGURE_FAILED
        assert "CMAKE ERROR: no compiler found" in result.stderr
        assert "Error when executing configure" in result.stderr
