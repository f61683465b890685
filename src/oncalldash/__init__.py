"""
oncalldash - an on-call terminal dashboard.

This module provides a Textual-based dashboard that polls kubectl, sentry-cli
and HTTP health endpoints, and shows the results in three live panes.

Features:
  - Recent unresolved Sentry issues per project
  - Issue totals and API health (latency, status, per-group health)
  - Live pod table for the current kubectl context
  - Modal pod log viewer with scrolling

Main Components:
  - extractor.py: Best-effort JSON field extraction (no JSON parser)
  - tables.py: Boxed CLI table parsing (sentry-cli, kubectl contexts)
  - state.py: Pure fold(state, event) state machine
  - scheduler.py: Poll cadence decisions
  - logviewer.py: Log viewer sub-state
  - backend.py: Collectors around kubectl, sentry-cli and requests
  - ui.py: Pure render(state, theme) view derivation
  - textual_app.py: Event loop and terminal front-end

Usage:
  python -m oncalldash

Dependencies:
  - textual, rich
  - requests
  - PyYAML
  - Python 3.10+
"""

import os
from pathlib import Path

__version__ = "0.1.0"
FALLBACK_LOG_PATH = "/tmp/oncalldash.log"


def get_log_path() -> str:
    """Log file under $XDG_DATA_HOME (~/.local/share if unset), or /tmp when that is not writable."""
    data_home = os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share"
    log_dir = Path(data_home) / "oncalldash" / "logs"
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        return FALLBACK_LOG_PATH
    return str(log_dir / "oncalldash.log")
