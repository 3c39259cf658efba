from __future__ import annotations

import argparse

from branding import SYMBOLS, UPLOADARR_HEADER
from cli.common import CONSOLE, add_output_flags, dispatch_subparser_help
from logger import get_logger
from manifest import load_manifests
from pipeline.playlists import collections_from_items
from services import build_services


def build_playlists_parser(subparsers: argparse._SubParsersAction) -> None:
    playlists = subparsers.add_parser("playlists", help="Series playlist utilities")
    psub = playlists.add_subparsers(dest="playlists_cmd", required=True)

    help_p = psub.add_parser("help", help="Show help for playlists")
    help_p.add_argument("path", nargs="*", help="Subcommand path")
    help_p.set_defaults(action="help", _help_parser=playlists)

    rec = psub.add_parser(
        "reconcile", help="Create or adopt one playlist per series and set covers"
    )
    rec.add_argument("--dry-run", action="store_true", help="Report intended actions only")
    add_output_flags(rec)
    rec.set_defaults(action="reconcile")

    retry = psub.add_parser(
        "retry-adds", help="Retry adding uploaded videos to their series playlist"
    )
    add_output_flags(retry)
    retry.set_defaults(action="retry-adds")


def handle_playlists(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(
            args._help_parser, list(getattr(args, "path", []) or [])
        )

    log = get_logger("uploadarr")
    services = build_services()
    items, _library = load_manifests(services.assets)

    if args.action == "reconcile":
        log.info(UPLOADARR_HEADER("Playlists"))
        summary = services.reconciler.reconcile(
            collections_from_items(items), dry_run=args.dry_run
        )
        for action in summary.planned:
            CONSOLE.print(f"  [dry-run] {action}", markup=False)
        CONSOLE.print(
            f"{SYMBOLS.PLAYLIST} existing={summary.existing} adopted={summary.adopted} "
            f"created={summary.created} covers_set={summary.thumbnails_set} "
            f"covers_failed={summary.thumbnails_failed} skipped_quota={summary.skipped_quota}"
        )
        return 0

    if args.action == "retry-adds":
        log.info(UPLOADARR_HEADER("Retry playlist adds"))
        summary = services.pipeline.retry_playlist_adds(items)
        CONSOLE.print(
            f"{SYMBOLS.PLAYLIST} attempted={summary.attempted} added={summary.added}"
        )
        return 0

    raise RuntimeError(f"Unknown playlists action: {args.action}")
