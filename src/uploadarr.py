#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from bootstrap import bootstrap_base_env, bootstrap_run_context


def _dispatch_help(parser: argparse.ArgumentParser, argv: List[str]) -> int:
    # Support:
    #   uploadarr help
    #   uploadarr help playlists
    #   uploadarr playlists help
    if argv and argv[0] == "help":
        argv = argv[1:]

    if not argv:
        parser.print_help()
        return 0

    try:
        build_parser().parse_args(argv + ["--help"])
    except SystemExit:
        pass
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="uploadarr",
        description="Quota-aware, resumable YouTube uploads from a Shared Drive",
    )

    sub = p.add_subparsers(dest="command", required=True)

    help_cmd = sub.add_parser("help", help="Show help")
    help_cmd.add_argument("path", nargs="*", help="Command path to show help for")
    help_cmd.set_defaults(_help=True)

    # Keep imports inside builder to avoid early side effects.
    from cli.cli_auth import build_auth_parser
    from cli.cli_env import build_env_parser
    from cli.cli_logs import build_logs_parser
    from cli.cli_playlists import build_playlists_parser
    from cli.cli_report import build_report_parser
    from cli.cli_status import build_status_parser
    from cli.cli_upload import build_upload_parser

    build_auth_parser(sub)
    build_upload_parser(sub)
    build_playlists_parser(sub)
    build_status_parser(sub)
    build_report_parser(sub)
    build_logs_parser(sub)
    build_env_parser(sub)

    return p


def _dispatch(args: argparse.Namespace) -> int:
    if args.command == "auth":
        from cli.cli_auth import handle_auth

        return handle_auth(args)

    if args.command == "upload":
        from cli.cli_upload import handle_upload

        return handle_upload(args)

    if args.command == "playlists":
        from cli.cli_playlists import handle_playlists

        return handle_playlists(args)

    if args.command == "status":
        from cli.cli_status import handle_status

        return handle_status(args)

    if args.command == "report":
        from cli.cli_report import handle_report

        return handle_report(args)

    if args.command == "logs":
        from cli.cli_logs import handle_logs

        return handle_logs(args)

    if args.command == "env":
        from cli.cli_env import handle_env

        return handle_env(args)

    raise RuntimeError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    bootstrap_base_env()

    parser = build_parser()
    if not argv:
        parser.print_help()
        return 0

    args, unknown = parser.parse_known_args(argv)

    # Unified help routing
    if getattr(args, "_help", False) or (unknown and unknown[-1] == "help"):
        return _dispatch_help(parser, [a for a in argv if a != "help"])
    if unknown:
        parser.error(f"unrecognized arguments: {' '.join(unknown)}")

    # Stamp run context before logging so the log file lands in logs/<command>/
    bootstrap_run_context(
        command=args.command,
        verbose=bool(getattr(args, "verbose", False)),
        quiet=bool(getattr(args, "quiet", False)),
    )

    from logger import get_logger, init_logging

    init_logging()
    log = get_logger("uploadarr")
    log.debug(f"Command: {args.command}")

    try:
        return _dispatch(args)
    except KeyboardInterrupt:
        log.warning("Interrupted; state is saved, rerun to resume")
        return 1
    except Exception as e:
        log.error(f"{args.command} failed: {e}", exc_info=log.isEnabledFor(logging.DEBUG))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
