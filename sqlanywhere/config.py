"""Configuration for the sqlanywhere driver loader."""

import os
import shlex
from pathlib import Path

# Module name the compiled extension registers (PyInit_sqlanywhere)
DRIVER_NAME = "sqlanywhere"

# Artifact layout, relative to PACKAGE_ROOT
PREBUILD_DIR = "prebuild"
ARCH_DIRS = {"x64": "bin64", "ia32": "bin32"}
BUILD_OUTPUT_DIR = Path("build") / "Release"
# Build outputs from older releases, removed before `install` looks for binaries
LEGACY_BUILD_OUTPUTS = ("nodesa",)

PACKAGE_DIR = Path(__file__).resolve().parent


def find_root(package_dir: Path = PACKAGE_DIR) -> Path:
    """Directory the artifact tiers are resolved against.

    Searches the package directory first (wheel install), then the repo root
    (dev / git checkout). Falls back to the package directory.
    """
    layout = [PREBUILD_DIR, *ARCH_DIRS.values(), BUILD_OUTPUT_DIR.parts[0]]

    # Wheel install: binaries ship inside the package directory
    if any((package_dir / name).is_dir() for name in layout):
        return package_dir

    # Development / git checkout: binaries sit next to pyproject.toml
    repo_root = package_dir.parent
    if (repo_root / "pyproject.toml").is_file():
        return repo_root

    return package_dir


PACKAGE_ROOT = Path(os.environ["SQLANYWHERE_ROOT"]) if "SQLANYWHERE_ROOT" in os.environ else find_root()

# Two-phase native build
DEFAULT_CONFIGURE_COMMAND = "cmake -S . -B build -DCMAKE_BUILD_TYPE=Release"
DEFAULT_BUILD_COMMAND = "cmake --build build --config Release"
CONFIGURE_COMMAND = shlex.split(os.environ.get("SQLANYWHERE_CONFIGURE_CMD", DEFAULT_CONFIGURE_COMMAND))
BUILD_COMMAND = shlex.split(os.environ.get("SQLANYWHERE_BUILD_CMD", DEFAULT_BUILD_COMMAND))

# Post-load create_connection() check
SMOKE_TEST = os.environ.get("SQLANYWHERE_SMOKE_TEST", "1").lower() not in ("0", "false", "no")

# Template directory for `report`
TEMPLATES_DIR = PACKAGE_DIR / "templates"


def extension_suffix(os_family: str) -> str:
    """File suffix of a compiled extension module on the given OS family."""
    return ".pyd" if os_family == "win32" else ".so"
