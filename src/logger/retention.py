from __future__ import annotations

from pathlib import Path
from typing import List


def enforce_retention(log_dir: Path, keep: int, pattern: str = "*.log") -> List[Path]:
    """
    Keep the newest `keep` run logs in `log_dir`; returns what was pruned.
    """
    if keep <= 0:
        return []

    logs = sorted(
        log_dir.glob(pattern),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )

    pruned: List[Path] = []
    for old in logs[keep:]:
        try:
            old.unlink()
        except OSError:
            # Another process may still hold it open (Windows); try next run.
            continue
        pruned.append(old)
    return pruned
