"""External two-phase native build: configure, then build.

Each phase is an opaque subprocess. Only its exit status decides success;
its merged stdout/stderr is kept for the operator.
"""

import enum
import logging
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

from sqlanywhere import config
from sqlanywhere.errors import BuildCompileFailed, BuildConfigureFailed, BuildFailed

log = logging.getLogger(__name__)

# Conventional shell status for "command not found"
EXIT_COMMAND_NOT_FOUND = 127


class BuildPhase(enum.Enum):
    CONFIGURE = "configure"
    BUILD = "build"


@dataclass(frozen=True)
class BuildAttemptResult:
    """Outcome of one build phase invocation."""

    phase: BuildPhase
    exit_status: int
    captured_output: str

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


PhaseRunner = Callable[[BuildPhase, Sequence[str], Path], BuildAttemptResult]


def run_phase(phase: BuildPhase, command: Sequence[str], cwd: Path) -> BuildAttemptResult:
    """Run one build phase to completion and capture its output."""
    log.info("  [%s] %s", phase.value.upper(), " ".join(command))
    try:
        result = subprocess.run(
            list(command),
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as e:
        # Toolchain missing from PATH: report it like a failed phase
        return BuildAttemptResult(phase, EXIT_COMMAND_NOT_FOUND, f"{command[0]}: {e}")
    return BuildAttemptResult(phase, result.returncode, result.stdout or "")


class BuildPipeline:
    """Configure + build, strictly sequential."""

    def __init__(
        self,
        configure_cmd: Sequence[str] | None = None,
        build_cmd: Sequence[str] | None = None,
        cwd: Path | None = None,
        runner: PhaseRunner = run_phase,
    ) -> None:
        self.configure_cmd = list(configure_cmd or config.CONFIGURE_COMMAND)
        self.build_cmd = list(build_cmd or config.BUILD_COMMAND)
        self.cwd = cwd or config.PACKAGE_ROOT
        self._runner = runner

    def run(self) -> list[BuildAttemptResult]:
        """Run configure then build.

        Raises BuildConfigureFailed / BuildCompileFailed (process-terminating)
        on a non-zero exit. A failed configure never starts the build phase.
        """
        configured = self._runner(BuildPhase.CONFIGURE, self.configure_cmd, self.cwd)
        if not configured.ok:
            _fail(BuildConfigureFailed(configured))

        built = self._runner(BuildPhase.BUILD, self.build_cmd, self.cwd)
        if not built.ok:
            _fail(BuildCompileFailed(built))

        return [configured, built]


def _fail(error: BuildFailed) -> NoReturn:
    # SystemExit prints nothing when uncaught, so the build output is logged here
    log.error("%s", error)
    raise error
