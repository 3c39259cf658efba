from __future__ import annotations

import argparse
from collections import Counter

from branding import SYMBOLS
from cli.common import CONSOLE, add_output_flags, print_table
from pipeline.state import JobStatus
from services import open_local_state


def build_status_parser(subparsers: argparse._SubParsersAction) -> None:
    status = subparsers.add_parser(
        "status", help="Show today's quota and job counts (local state only)"
    )
    add_output_flags(status)
    status.set_defaults(action="status")


def handle_status(args: argparse.Namespace) -> int:
    local = open_local_state()
    quota = local.ledger.status()

    counts = Counter(
        JobStatus.from_string(job.get("status")).value
        for job in local.store.jobs().values()
    )
    collections = local.store.collections()
    covers_missing = sum(1 for c in collections.values() if not c.get("thumbnail_set"))

    CONSOLE.print(f"\n[bold]{SYMBOLS.QUOTA} Quota[/bold]")
    CONSOLE.print(f"  used today   {quota.used} / {quota.daily_quota}")
    CONSOLE.print(f"  remaining    {quota.remaining} (~{quota.videos_remaining} videos)")
    CONSOLE.print(f"  reset date   {quota.reset_date}")

    CONSOLE.print(f"\n[bold]{SYMBOLS.VIDEO} Videos[/bold]")
    print_table(
        ["STATUS", "COUNT"],
        [[s.value, str(counts.get(s.value, 0))] for s in JobStatus],
    )

    CONSOLE.print(f"\n[bold]{SYMBOLS.PLAYLIST} Playlists[/bold]")
    CONSOLE.print(f"  bound        {len(collections)}")
    CONSOLE.print(f"  no cover     {covers_missing}")
    CONSOLE.print()
    return 0
