"""Allow running as ``python -m daybook``."""

import sys

from .cli import main

sys.exit(main())
