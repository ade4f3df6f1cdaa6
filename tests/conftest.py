"""Pytest configuration.

The package lives at the repository root as ``email_preprocessor``.
Depending on how pytest is invoked, the repository root may not be on
``sys.path``, which breaks imports like ``from email_preprocessor.modules...``.
"""

from __future__ import annotations

import sys
from pathlib import Path


REPO_ROOT = Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))
