from __future__ import annotations

import sys

from safexpr.cli import main

raise SystemExit(main(sys.argv[1:]))
