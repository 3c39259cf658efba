from __future__ import annotations

import os
from pathlib import Path

from env import LOGS_DIR


def command_logs_dir(command: str) -> Path:
    # Re-read the override so tests and subcommands can redirect logs late.
    raw = os.environ.get("UPLOADARR_LOGS_DIR")
    base = Path(raw).expanduser().resolve() if raw else LOGS_DIR
    path = base / command
    path.mkdir(parents=True, exist_ok=True)
    return path
