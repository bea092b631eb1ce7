"""Pytest configuration and test helpers."""

from __future__ import annotations

import sys
from pathlib import Path


# Make ``app`` and ``seerrfeed`` importable without an editable install; both
# packages live at the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
