from __future__ import annotations

import argparse

from cli.common import CONSOLE, add_output_flags
from manifest import load_manifests
from report import generate_report
from services import build_services


def build_report_parser(subparsers: argparse._SubParsersAction) -> None:
    report = subparsers.add_parser("report", help="Regenerate upload-report.json")
    add_output_flags(report)
    report.set_defaults(action="report")


def handle_report(args: argparse.Namespace) -> int:
    services = build_services()
    items, library = load_manifests(services.assets)

    report = generate_report(items, library, services.store, services.env.report_file)

    s = report["summary"]
    CONSOLE.print(
        f"Report: {services.env.report_file}\n"
        f"  total={s['total_videos']} uploaded={s['uploaded']} failed={s['failed']} "
        f"pending={s['pending']} playlists={s['playlists']}",
        markup=False,
    )
    return 0
