"""sqlanywhere: locate, load or build the native SQL Anywhere driver.

The driver is a compiled extension module shipped per platform, arch and
interpreter version. acquire_driver() picks the right binary for the running
process, falling back to a local native build when none loads.
"""

import importlib.metadata

from sqlanywhere.errors import (
    BuildCompileFailed,
    BuildConfigureFailed,
    BuildFailed,
    DriverError,
    DriverUnavailable,
    UnsupportedPlatform,
)
from sqlanywhere.fingerprint import EnvironmentFingerprint, fingerprint
from sqlanywhere.loader import acquire_driver

__version__ = importlib.metadata.version("sqlanywhere")

__all__ = [
    "BuildCompileFailed",
    "BuildConfigureFailed",
    "BuildFailed",
    "DriverError",
    "DriverUnavailable",
    "EnvironmentFingerprint",
    "UnsupportedPlatform",
    "acquire_driver",
    "create_connection",
    "fingerprint",
]


def create_connection():
    """Create a connection object from the process-wide driver.

    The connection must still be opened:
        conn = sqlanywhere.create_connection()
        conn.connect({"Server": "demo16", "UserID": "DBA", "Password": "sql"})
    """
    return acquire_driver().create_connection()
