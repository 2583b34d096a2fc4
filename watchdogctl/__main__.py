"""Allow running as python -m watchdogctl."""

import sys

from watchdogctl.cli import main

sys.exit(main())
