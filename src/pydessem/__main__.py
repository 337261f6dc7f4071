"""Allow ``python -m pydessem``."""

from __future__ import annotations

import sys

from pydessem.cli import main

sys.exit(main())
