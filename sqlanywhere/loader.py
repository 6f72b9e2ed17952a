"""Load-or-build orchestration for the native sqlanywhere driver.

acquire():
1. Fingerprint the process and resolve candidates (unsupported -> UnsupportedPlatform, no build)
2. Import candidates in tier order; the first that imports wins
3. Otherwise run the native build once (configure, then build)
4. Import build/Release exactly once; if that still fails, delete it and raise DriverUnavailable
5. On success, optionally smoke-test create_connection() (advisory only)

State: UNRESOLVED -> TRYING_CANDIDATES -> {LOADED | BUILDING} -> {LOADED | FAILED}.
LOADED is sticky for the process. FAILED is not retried.

A process-wide DriverLoader backs acquire_driver(); the first successful load
is the only driver handle the process ever hands out.
"""

import enum
import importlib.util
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType

from sqlanywhere import config
from sqlanywhere.builder import BuildPipeline
from sqlanywhere.errors import BuildFailed, DriverError, DriverUnavailable, UnsupportedPlatform
from sqlanywhere.fingerprint import EnvironmentFingerprint, fingerprint
from sqlanywhere.resolver import CandidatePath, Tier, local_build_output, resolve

log = logging.getLogger(__name__)

ArtifactLoader = Callable[[Path, str], ModuleType]


class LoadState(enum.Enum):
    UNRESOLVED = "unresolved"
    TRYING_CANDIDATES = "trying-candidates"
    BUILDING = "building"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class ArtifactLoadFailed:
    """A candidate that exists but did not import. Never raised."""

    candidate: CandidatePath
    error: Exception


def load_artifact(path: Path, name: str = config.DRIVER_NAME) -> ModuleType:
    """Import a compiled extension module from an explicit file path."""
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        msg = f"Not an importable extension module: {path}"
        raise ImportError(msg)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def try_load(candidate: CandidatePath, loader: ArtifactLoader = load_artifact) -> ModuleType | ArtifactLoadFailed:
    """Import one candidate, returning the failure as a value instead of raising."""
    try:
        module = loader(candidate.path, config.DRIVER_NAME)
    except Exception as e:
        log.warning("  %s: failed to load %s: %s", candidate.tier.value, candidate.path, e)
        return ArtifactLoadFailed(candidate, e)
    log.info("  %s: loaded %s", candidate.tier.value, candidate.path)
    return module


def smoke_test(module: ModuleType) -> bool:
    """Create and discard one connection object to catch ABI-incompatible binaries.

    Advisory: a failure is logged and reported, never raised.
    """
    factory = getattr(module, "create_connection", None)
    if not callable(factory):
        log.warning("  Smoke test: driver exposes no create_connection()")
        return False
    try:
        factory()
    except Exception as e:
        log.warning("  Smoke test failed: create_connection() raised %s", e)
        return False
    log.debug("  Smoke test passed")
    return True


class DriverLoader:
    """Resolve, load, and if necessary build the native driver."""

    def __init__(
        self,
        root: Path | None = None,
        pipeline: BuildPipeline | None = None,
        loader: ArtifactLoader | None = None,
        smoke: bool | None = None,
        fingerprinter: Callable[[], EnvironmentFingerprint] | None = None,
    ) -> None:
        self.root = root or config.PACKAGE_ROOT
        self.pipeline = pipeline or BuildPipeline(cwd=self.root)
        self.smoke = config.SMOKE_TEST if smoke is None else smoke
        self._loader = loader or load_artifact
        self._fingerprinter = fingerprinter or fingerprint

        self.state = LoadState.UNRESOLVED
        self.fingerprint: EnvironmentFingerprint | None = None
        self.loaded_from: CandidatePath | None = None
        self.built = False
        self.smoke_passed: bool | None = None
        self._handle: ModuleType | None = None
        self._error: BaseException | None = None

    @property
    def handle(self) -> ModuleType | None:
        return self._handle

    def acquire(self) -> ModuleType:
        """Return the driver module, loading or building it on first call."""
        if self.state is LoadState.LOADED:
            return self._handle
        if self.state is LoadState.FAILED:
            raise self._error

        try:
            return self._acquire()
        except (DriverError, BuildFailed) as e:
            self.state = LoadState.FAILED
            self._error = e
            raise

    def _acquire(self) -> ModuleType:
        fp = self._fingerprinter()
        self.fingerprint = fp
        log.info("Looking for binaries (%s)", fp.describe())

        resolution = resolve(fp, self.root)
        if resolution.unsupported:
            log.error("  Platform not supported: %s", fp.describe())
            raise UnsupportedPlatform(fp)

        # Existing candidates, in tier order
        self.state = LoadState.TRYING_CANDIDATES
        for candidate in resolution.candidates:
            outcome = try_load(candidate, self._loader)
            if not isinstance(outcome, ArtifactLoadFailed):
                return self._loaded(outcome, candidate)

        # Build fallback: configure -> build -> single reload
        self.state = LoadState.BUILDING
        log.info("No loadable binaries found, building from source")
        self.pipeline.run()
        self.built = True

        output = CandidatePath(local_build_output(fp, self.root), Tier.LOCAL_BUILD_OUTPUT)
        outcome = try_load(output, self._loader)
        if isinstance(outcome, ArtifactLoadFailed):
            _remove_stale_artifact(output.path)
            raise DriverUnavailable(fp, f"rebuilt artifact did not load ({outcome.error})")
        return self._loaded(outcome, output)

    def _loaded(self, module: ModuleType, candidate: CandidatePath) -> ModuleType:
        self._handle = module
        self.loaded_from = candidate
        self.state = LoadState.LOADED
        if self.smoke:
            self.smoke_passed = smoke_test(module)
        return module


def _remove_stale_artifact(path: Path) -> None:
    """Delete an artifact that built but does not load, so it is not picked up next run."""
    if path.exists():
        log.warning("  Removing unloadable build output: %s", path)
        try:
            path.unlink()
        except OSError as e:
            log.error("  Could not remove %s: %s", path, e)


# ── Process-wide driver ──────────────────────────────────────────

_loader: DriverLoader | None = None


def get_loader(**overrides) -> DriverLoader:
    """Return the process-wide DriverLoader, creating it on first use.

    Overrides (root, pipeline, loader, smoke, fingerprinter) only apply to
    the call that creates it.
    """
    global _loader
    if _loader is None:
        _loader = DriverLoader(**overrides)
    return _loader


def acquire_driver(**overrides) -> ModuleType:
    """Return the process-wide driver module, loading or building it once."""
    return get_loader(**overrides).acquire()


def reset_driver() -> None:
    """Forget the process-wide driver (tests only)."""
    global _loader
    _loader = None
