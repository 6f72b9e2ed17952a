"""CLI entry point: `python -m sqlanywhere`

Three subcommands:
    install   — Find a prebuilt driver for this interpreter, or build one
    status    — Show the fingerprint and every tier's artifact path
    report    — Render a Markdown resolution report (Jinja2)
"""

import argparse
import datetime
import logging
import sys
from pathlib import Path

from sqlanywhere import config
from sqlanywhere.errors import BuildFailed, DriverError
from sqlanywhere.fingerprint import fingerprint
from sqlanywhere.loader import DriverLoader
from sqlanywhere.resolver import artifact_paths

log = logging.getLogger(__name__)


def _root(args) -> Path:
    return Path(args.root).resolve() if getattr(args, "root", None) else config.PACKAGE_ROOT


def _remove_legacy_outputs(root: Path) -> None:
    """Delete build outputs left behind under names older releases used."""
    suffix = config.extension_suffix(fingerprint().os_family)
    for name in config.LEGACY_BUILD_OUTPUTS:
        path = root / config.BUILD_OUTPUT_DIR / (name + suffix)
        if path.exists():
            log.info("  Removing legacy build output: %s", path)
            path.unlink()


def _cmd_install(args) -> int:
    """Handle the 'install' subcommand."""
    root = _root(args)
    _remove_legacy_outputs(root)

    print("Looking for binaries...")
    loader = DriverLoader(root=root, smoke=False if args.no_smoke else None)
    try:
        loader.acquire()
    except BuildFailed as e:
        print("Error Building Binaries. Make sure the native toolchain is installed and in the PATH")
        return e.code
    except DriverError as e:
        log.error("%s", e)
        return 1

    if loader.smoke_passed is False:
        log.warning("Driver loaded from %s but create_connection() failed", loader.loaded_from.path)

    if loader.built:
        print("Built Binaries!")
        print("Install Complete!")
    else:
        print("Binaries found! Install Complete!")
    return 0


def _cmd_status(args) -> int:
    """Handle the 'status' subcommand."""
    root = _root(args)
    fp = fingerprint()

    print("=== Driver Artifact Status ===\n")
    print(f"  Platform:  {fp.os_family}")
    print(f"  Arch:      {fp.cpu_arch}")
    print(f"  Version:   {fp.runtime_version}")
    print(f"  Supported: {'yes' if fp.supported else 'no'}\n")

    candidates = artifact_paths(fp, root)
    if not candidates:
        print("  Platform Not Supported: no artifact locations defined")
        print()
        return 1

    print(f"  {'TIER':<20s}  {'STATUS':<7s}  {'PATH'}")
    print(f"  {'-' * 20}  {'-' * 7}  {'-' * 40}")
    for candidate in candidates:
        status = "READY" if candidate.path.is_file() else "MISSING"
        print(f"  {candidate.tier.value:<20s}  {status:<7s}  {candidate.path}")

    print(f"\n  Root: {root}")
    print()
    return 0


def render_report(root: Path) -> str:
    """Render the resolution report for this process as Markdown."""
    import jinja2

    fp = fingerprint()
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(config.TEMPLATES_DIR)),
        autoescape=False,
        keep_trailing_newline=True,
    )
    template = env.get_template("resolution.md.j2")
    return template.render(
        fingerprint=fp,
        root=root,
        candidates=[(c, c.path.is_file()) for c in artifact_paths(fp, root)],
        configure_command=" ".join(config.CONFIGURE_COMMAND),
        build_command=" ".join(config.BUILD_COMMAND),
        generated=datetime.datetime.now(datetime.UTC).isoformat(timespec="seconds"),
    )


def _cmd_report(args) -> int:
    """Handle the 'report' subcommand."""
    content = render_report(_root(args))
    if args.output:
        output = Path(args.output)
        output.write_text(content, encoding="utf-8")
        log.info("Report written: %s", output)
    else:
        sys.stdout.write(content)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="sqlanywhere",
        description="Locate, load or build the native SQL Anywhere driver",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Subcommand")

    install_p = subparsers.add_parser("install", help="Find or build the driver for this interpreter")
    install_p.add_argument("--root", help=f"Artifact root directory (default: {config.PACKAGE_ROOT})")
    install_p.add_argument("--no-smoke", action="store_true", help="Skip the create_connection() check")

    status_p = subparsers.add_parser("status", help="Show artifact status for this interpreter")
    status_p.add_argument("--root", help="Artifact root directory")

    report_p = subparsers.add_parser("report", help="Render a Markdown resolution report")
    report_p.add_argument("--root", help="Artifact root directory")
    report_p.add_argument("--output", help="Write the report to this file instead of stdout")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")

    if args.command == "install":
        return _cmd_install(args)
    if args.command == "status":
        return _cmd_status(args)
    return _cmd_report(args)


if __name__ == "__main__":
    sys.exit(main())
