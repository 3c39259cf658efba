from __future__ import annotations

import argparse
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from rich.console import Console

from env import LOGS_DIR

# Plain stdout console for command output (log lines go through RichHandler)
CONSOLE = Console(soft_wrap=True)


# ----------------------------
# Parser helpers
# ----------------------------


def add_output_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--verbose", action="store_true", help="Verbose console output")
    p.add_argument("--quiet", action="store_true", help="Suppress console output")


def dispatch_subparser_help(
    parser: argparse.ArgumentParser, path: Optional[List[str]]
) -> int:
    """
    Implements consistent `X help [subcmd ...]` behavior for a subtree parser.
    """
    if not path:
        parser.print_help()
        return 0

    try:
        parser.parse_args(path + ["--help"])
    except SystemExit:
        pass
    return 0


# ----------------------------
# Logs filesystem helpers
# ----------------------------


def resolve_log_dir(*, command: Optional[str], explicit: Optional[str]) -> Path:
    if explicit:
        return Path(explicit).expanduser().resolve()
    return (LOGS_DIR / command).resolve() if command else LOGS_DIR.resolve()


def iter_log_files(log_dir: Path) -> Iterable[Path]:
    if not log_dir.exists():
        return []
    return sorted(log_dir.rglob("*.log"))


def find_log_file(log_dir: Path, name: str) -> Optional[Path]:
    if not log_dir.exists():
        return None

    for p in (log_dir / name, log_dir / f"{name}.log"):
        if p.exists() and p.is_file():
            return p

    for p in log_dir.rglob("*.log"):
        if p.stem == name or p.name == name:
            return p

    return None


def print_tail(path: Path, lines: int) -> None:
    data = path.read_text(encoding="utf-8", errors="replace").splitlines()
    tail = data[-lines:] if lines > 0 else data
    for line in tail:
        print(line)


@dataclass(frozen=True)
class LogFile:
    name: str
    path: Path
    mtime: float
    size: int


def list_log_files(log_dir: Path) -> List[LogFile]:
    items: List[LogFile] = []
    for p in iter_log_files(log_dir):
        try:
            st = p.stat()
        except OSError:
            continue
        items.append(LogFile(name=p.stem, path=p, mtime=st.st_mtime, size=st.st_size))

    items.sort(key=lambda r: r.mtime, reverse=True)
    return items


def format_mtime(ts: float) -> str:
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S")


# ----------------------------
# CLI output helpers
# ----------------------------


def print_table(headers: List[str], rows: List[List[str]]) -> None:
    """
    Simple fixed-width table printer for CLI output.
    """
    if not rows:
        print("(no results)")
        return

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    fmt = "  ".join(f"{{:{w}}}" for w in widths)

    print(fmt.format(*headers))
    print(fmt.format(*("-" * w for w in widths)))

    for row in rows:
        print(fmt.format(*(str(c) for c in row)))
