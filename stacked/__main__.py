from __future__ import annotations

from stacked.main import main

raise SystemExit(main())
