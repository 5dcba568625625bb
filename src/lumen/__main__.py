"""Allow ``python -m src.lumen``."""

import sys

from src.lumen.cli import main

sys.exit(main())
