"""Error types for driver acquisition.

DriverError subclasses end a single acquisition call. BuildFailed subclasses
SystemExit: a failed native build is an installation problem, so an uncaught
one terminates the process with a distinguished exit status.
"""

from typing import TYPE_CHECKING

from sqlanywhere.fingerprint import EnvironmentFingerprint

if TYPE_CHECKING:
    from sqlanywhere.builder import BuildAttemptResult

EXIT_CONFIGURE_FAILED = 3
EXIT_COMPILE_FAILED = 4


class DriverError(Exception):
    """Base class for errors surfaced by acquire_driver()."""

    def __init__(self, message: str, fingerprint: EnvironmentFingerprint) -> None:
        super().__init__(message)
        self.fingerprint = fingerprint


class UnsupportedPlatform(DriverError):
    """No resolution strategy exists for this OS / arch / version."""

    def __init__(self, fingerprint: EnvironmentFingerprint) -> None:
        super().__init__(f"Platform Not Supported: {fingerprint.describe()}", fingerprint)


class DriverUnavailable(DriverError):
    """No candidate loaded and the rebuilt artifact (if any) did not load either."""

    def __init__(self, fingerprint: EnvironmentFingerprint, reason: str = "") -> None:
        message = f"Could not load modules for {fingerprint.describe()}"
        if reason:
            message += f": {reason}"
        super().__init__(message, fingerprint)


class BuildFailed(SystemExit):
    """An external build phase exited non-zero."""

    exit_status = 1

    def __init__(self, result: "BuildAttemptResult") -> None:
        super().__init__(self.exit_status)
        self.result = result

    def __str__(self) -> str:
        return (
            f"Error when executing {self.result.phase.value} "
            f"(exit status {self.result.exit_status})\n{self.result.captured_output}"
        )


class BuildConfigureFailed(BuildFailed):
    exit_status = EXIT_CONFIGURE_FAILED


class BuildCompileFailed(BuildFailed):
    exit_status = EXIT_COMPILE_FAILED
