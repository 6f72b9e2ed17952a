"""Artifact resolution: fingerprint -> ranked list of existing driver binaries.

Three tiers, always in this order:
    versioned-prebuilt   prebuild/{os}/{arch}/{major}_{minor}/sqlanywhere{ext}
    arch-prebuilt        bin64|bin32/sqlanywhere_v{major}[_{minor}]{ext}
    local-build-output   build/Release/sqlanywhere{ext}

The arch-prebuilt filename only carries the minor version when major == 0.
Resolution checks existence only; it never imports anything.
"""

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path

from sqlanywhere import config
from sqlanywhere.fingerprint import EnvironmentFingerprint

log = logging.getLogger(__name__)


class Tier(enum.Enum):
    VERSIONED_PREBUILT = "versioned-prebuilt"
    ARCH_PREBUILT = "arch-prebuilt"
    LOCAL_BUILD_OUTPUT = "local-build-output"


@dataclass(frozen=True)
class CandidatePath:
    """A filesystem location that may hold a usable driver binary."""

    path: Path
    tier: Tier


@dataclass
class Resolution:
    """Result of one resolution attempt."""

    fingerprint: EnvironmentFingerprint
    candidates: list[CandidatePath] = field(default_factory=list)
    unsupported: bool = False


def arch_prebuilt_filename(fp: EnvironmentFingerprint) -> str:
    """Filename used by the flat bin64/bin32 layout (e.g. 'sqlanywhere_v3', 'sqlanywhere_v0_10')."""
    name = f"{config.DRIVER_NAME}_v{fp.runtime_major}"
    if fp.runtime_major == 0:
        name += f"_{fp.runtime_minor}"
    return name + config.extension_suffix(fp.os_family)


def local_build_output(fp: EnvironmentFingerprint, root: Path | None = None) -> Path:
    """Path the native build writes its artifact to."""
    root = root or config.PACKAGE_ROOT
    return root / config.BUILD_OUTPUT_DIR / (config.DRIVER_NAME + config.extension_suffix(fp.os_family))


def artifact_paths(fp: EnvironmentFingerprint, root: Path | None = None) -> list[CandidatePath]:
    """Every tier's location for this fingerprint, whether or not it exists.

    Returns an empty list for an unsupported fingerprint.
    """
    if not fp.supported:
        return []

    root = root or config.PACKAGE_ROOT
    filename = config.DRIVER_NAME + config.extension_suffix(fp.os_family)
    version_dir = f"{fp.runtime_major}_{fp.runtime_minor}"

    return [
        CandidatePath(
            root / config.PREBUILD_DIR / fp.os_family / fp.cpu_arch / version_dir / filename,
            Tier.VERSIONED_PREBUILT,
        ),
        CandidatePath(
            root / config.ARCH_DIRS[fp.cpu_arch] / arch_prebuilt_filename(fp),
            Tier.ARCH_PREBUILT,
        ),
        CandidatePath(local_build_output(fp, root), Tier.LOCAL_BUILD_OUTPUT),
    ]


def resolve(fp: EnvironmentFingerprint, root: Path | None = None) -> Resolution:
    """Rank the existing driver binaries for this fingerprint."""
    if not fp.supported:
        log.debug("Unsupported platform, nothing to resolve: %s", fp.describe())
        return Resolution(fingerprint=fp, unsupported=True)

    candidates: list[CandidatePath] = []
    seen: set[Path] = set()
    for candidate in artifact_paths(fp, root):
        if not candidate.path.is_file():
            log.debug("  %s: %s (missing)", candidate.tier.value, candidate.path)
            continue
        key = candidate.path.resolve()
        if key in seen:
            continue
        seen.add(key)
        log.debug("  %s: %s", candidate.tier.value, candidate.path)
        candidates.append(candidate)

    return Resolution(fingerprint=fp, candidates=candidates)
