"""Allow ``python -m mockserialport``."""

import sys

from .cli import main

sys.exit(main())
