from __future__ import annotations

import argparse

from branding import SYMBOLS, UPLOADARR_BANNER, UPLOADARR_HEADER, UPLOADARR_SECTION_END
from cli.common import CONSOLE, add_output_flags, print_table
from logger import current_log_file, get_logger
from manifest import load_manifests
from pipeline.playlists import collections_from_items
from pipeline.run_state import DryRunSummary, UploadSummary
from report import generate_report
from services import build_services

# ------------------------------------------------------------
# Parser
# ------------------------------------------------------------


def build_upload_parser(subparsers: argparse._SubParsersAction) -> None:
    upload = subparsers.add_parser(
        "upload", help="Upload pending videos (resumes automatically)"
    )
    upload.add_argument("--item", help="Process a single manifest item id")
    upload.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be uploaded; no remote writes, no state changes",
    )
    add_output_flags(upload)
    upload.set_defaults(action="upload")


# ------------------------------------------------------------
# Handler
# ------------------------------------------------------------


def handle_upload(args: argparse.Namespace) -> int:
    log = get_logger("uploadarr")
    log.info(UPLOADARR_BANNER)

    services = build_services()
    items, library = load_manifests(services.assets)

    # Collections are derived from the selected items in both modes
    selected = services.pipeline.select(items, args.item)

    log.info(UPLOADARR_HEADER("Playlists"))
    playlist_summary = services.reconciler.reconcile(
        collections_from_items(selected), dry_run=args.dry_run
    )
    for action in playlist_summary.planned:
        log.info(f"  [dry-run] {action}")

    log.info(UPLOADARR_HEADER("Uploads"))
    result = services.pipeline.run(
        items, library, single_item_id=args.item, dry_run=args.dry_run
    )

    if isinstance(result, DryRunSummary):
        _render_dry_run(result)
        return 0

    generate_report(items, library, services.store, services.env.report_file)
    _render_summary(result)
    CONSOLE.print(f"Report: {services.env.report_file}", markup=False)
    log_file = current_log_file()
    if log_file is not None:
        CONSOLE.print(f"Log:    {log_file}", markup=False)
    log.info(UPLOADARR_SECTION_END())
    return 0


def _render_dry_run(summary: DryRunSummary) -> None:
    print_table(
        ["ITEM", "DATE", "STATUS", "TITLE", "SERIES", "THUMBNAIL"],
        [
            [
                e.item_id,
                e.date,
                e.status,
                e.title,
                e.series or "-",
                e.thumbnail or "-",
            ]
            for e in summary.entries
        ],
    )
    CONSOLE.print(
        f"\n{SYMBOLS.VIDEO} pending={summary.pending} completed={summary.completed} "
        f"failed={summary.failed}"
    )
    CONSOLE.print(
        f"{SYMBOLS.QUOTA} {summary.videos_per_day} videos/day → "
        f"~{summary.estimated_days} day(s) to finish"
    )


def _render_summary(summary: UploadSummary) -> None:
    CONSOLE.print(
        f"\n{SYMBOLS.OK} uploaded={summary.uploaded}  "
        f"{SYMBOLS.FAIL} failed={summary.failed}  "
        f"{SYMBOLS.WAIT} pending={summary.pending}  "
        f"{SYMBOLS.QUOTA} quota used today={summary.quota_used}"
    )
