from __future__ import annotations

import sys

from roastlog.cli import main

sys.exit(main())
