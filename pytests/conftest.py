"""Fixtures for sqlanywhere loader tests.

Provides fake artifact trees, an in-memory artifact loader and a recording
build runner so the load-or-build flow can be exercised without a compiler.
"""

import pathlib
import subprocess
import sys
import types
from collections.abc import Generator

import pytest

from sqlanywhere.builder import BuildAttemptResult, BuildPhase, BuildPipeline
from sqlanywhere.fingerprint import EnvironmentFingerprint, fingerprint
from sqlanywhere.loader import reset_driver

PROJECT_ROOT = pathlib.Path(__file__).resolve().parent.parent


def run_cli(*args, env=None, timeout=60):
    """Run `python -m sqlanywhere` as a subprocess from the project root."""
    return subprocess.run(
        [sys.executable, "-m", "sqlanywhere", *args],
        capture_output=True,
        text=True,
        timeout=timeout,
        cwd=PROJECT_ROOT,
        env=env,
    )


def make_fingerprint(os_family: str = "linux", arch: str = "x64", version: str = "16.2.0") -> EnvironmentFingerprint:
    return fingerprint(platform_name=os_family, machine=arch, version=version)


def touch(path: pathlib.Path, content: str = "binary") -> pathlib.Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def fake_driver(origin: pathlib.Path, fail_connect: bool = False) -> types.ModuleType:
    """A stand-in driver module exposing create_connection()."""
    module = types.ModuleType("sqlanywhere")
    module.origin = origin

    def create_connection():
        if fail_connect:
            raise RuntimeError("ABI mismatch")
        return object()

    module.create_connection = create_connection
    return module


class FakeArtifactLoader:
    """Loads any existing file whose content is not 'corrupt'; records every attempt."""

    def __init__(self, fail_connect: bool = False) -> None:
        self.attempts: list[pathlib.Path] = []
        self.fail_connect = fail_connect

    def __call__(self, path: pathlib.Path, name: str) -> types.ModuleType:
        self.attempts.append(path)
        if not path.exists():
            msg = f"No such file: {path}"
            raise ImportError(msg)
        if path.read_text() == "corrupt":
            msg = f"invalid ELF header: {path}"
            raise ImportError(msg)
        return fake_driver(path, fail_connect=self.fail_connect)


class RecordingRunner:
    """Build phase runner that records calls and can write the build output."""

    def __init__(
        self,
        configure_status: int = 0,
        build_status: int = 0,
        output: pathlib.Path | None = None,
        output_content: str = "binary",
    ) -> None:
        self.calls: list[BuildPhase] = []
        self.statuses = {BuildPhase.CONFIGURE: configure_status, BuildPhase.BUILD: build_status}
        self.output = output
        self.output_content = output_content

    def __call__(self, phase, command, cwd) -> BuildAttemptResult:
        self.calls.append(phase)
        status = self.statuses[phase]
        if phase is BuildPhase.BUILD and status == 0 and self.output is not None:
            touch(self.output, self.output_content)
        return BuildAttemptResult(phase, status, f"{phase.value} output")


def make_pipeline(runner: RecordingRunner, root: pathlib.Path) -> BuildPipeline:
    return BuildPipeline(configure_cmd=["configure"], build_cmd=["build"], cwd=root, runner=runner)


@pytest.fixture(autouse=True)
def fresh_driver() -> Generator[None, None, None]:
    """Reset the process-wide driver around every test."""
    reset_driver()
    yield
    reset_driver()


@pytest.fixture
def artifact_root(tmp_path: pathlib.Path) -> pathlib.Path:
    """Empty package root for artifact trees."""
    root = tmp_path / "pkg"
    root.mkdir()
    return root


@pytest.fixture
def artifact_loader() -> FakeArtifactLoader:
    return FakeArtifactLoader()
