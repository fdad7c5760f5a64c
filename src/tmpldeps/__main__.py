"""Entry point for ``python -m tmpldeps``."""

import sys

from tmpldeps.cli import main

sys.exit(main())
