"""Environment fingerprint: OS family, CPU architecture and interpreter version.

The fingerprint is the lookup key for artifact resolution. It is derived once
from the live process and never raises: anything outside the supported
enumeration produces a fingerprint with ``supported=False`` instead.
"""

import platform
import re
import sys
from dataclasses import dataclass

SUPPORTED_OS_FAMILIES = ("win32", "linux", "darwin")
SUPPORTED_ARCHS = ("x64", "ia32")

# Raw platform.machine() values -> canonical architecture names
_ARCH_ALIASES: dict[str, str] = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "i386": "ia32",
    "i486": "ia32",
    "i586": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "ia32": "ia32",
    "aarch64": "arm64",
    "arm64": "arm64",
}

# Prefix match: pre-release and build suffixes ("3.13.0rc1", "3.14.0a2+") keep their major.minor
_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)")


@dataclass(frozen=True)
class EnvironmentFingerprint:
    """Identity of the running process used to pick a driver artifact."""

    os_family: str
    cpu_arch: str
    runtime_version: str
    runtime_major: int | None = None
    runtime_minor: int | None = None
    supported: bool = False

    def describe(self) -> str:
        """Human-readable form used in diagnostics."""
        return f"platform '{self.os_family}', arch '{self.cpu_arch}', version '{self.runtime_version}'"


def parse_runtime_version(text: str) -> tuple[int, int] | None:
    """Parse 'major.minor.patch' (optionally 'v'-prefixed). Returns None if it does not match."""
    match = _VERSION_RE.match(text.strip())
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def normalize_arch(machine: str) -> str:
    """Map a raw machine string (e.g. 'x86_64', 'AMD64') to a canonical arch name."""
    return _ARCH_ALIASES.get(machine.strip().lower(), machine.strip().lower() or "unknown")


def fingerprint(
    platform_name: str | None = None,
    machine: str | None = None,
    version: str | None = None,
) -> EnvironmentFingerprint:
    """Fingerprint the live process, or the given values when provided."""
    os_family = platform_name if platform_name is not None else sys.platform
    cpu_arch = normalize_arch(machine if machine is not None else platform.machine())
    runtime_version = version if version is not None else platform.python_version()

    parsed = parse_runtime_version(runtime_version)
    if parsed is None:
        return EnvironmentFingerprint(os_family=os_family, cpu_arch=cpu_arch, runtime_version=runtime_version)

    major, minor = parsed
    return EnvironmentFingerprint(
        os_family=os_family,
        cpu_arch=cpu_arch,
        runtime_version=runtime_version,
        runtime_major=major,
        runtime_minor=minor,
        supported=os_family in SUPPORTED_OS_FAMILIES and cpu_arch in SUPPORTED_ARCHS,
    )
