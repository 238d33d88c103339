"""Allow running docnav as ``python -m docnav``."""

import sys

from docnav.cli import main

sys.exit(main())
