from __future__ import annotations

import sys

from asset_catalog.cli import main

raise SystemExit(main(sys.argv[1:]))
