"""Allow ``python -m studybrick_toolkit``."""

import sys

from .cli import main

sys.exit(main())
