"""Entry point: python -m sqlanywhere {install,status,report}."""

import sys

from sqlanywhere.cli import main

sys.exit(main())
