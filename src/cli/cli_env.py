from __future__ import annotations

import argparse
import json

from rich.text import Text

from branding import SYMBOLS
from cli.common import CONSOLE, dispatch_subparser_help
from env import ConfigError, get_env
from env.paths import auth_client_secrets_file


def build_env_parser(subparsers: argparse._SubParsersAction) -> None:
    env = subparsers.add_parser("env", help="Environment utilities")
    sub = env.add_subparsers(dest="env_cmd", required=True)

    help_p = sub.add_parser("help", help="Show help for env")
    help_p.add_argument("path", nargs="*", help="Subcommand path")
    help_p.set_defaults(action="help", _help_parser=env)

    dump_p = sub.add_parser("dump", help="Show resolved runtime environment")
    dump_p.add_argument("--json", action="store_true", help="Emit JSON")
    dump_p.set_defaults(action="dump")

    check_p = sub.add_parser(
        "check", help="Verify settings the upload commands require"
    )
    check_p.set_defaults(action="check")


def handle_env(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(
            args._help_parser, list(getattr(args, "path", []) or [])
        )

    if args.action == "dump":
        return handle_env_dump(as_json=bool(getattr(args, "json", False)))

    if args.action == "check":
        return handle_env_check()

    raise RuntimeError(f"Unknown env action: {args.action}")


def handle_env_dump(as_json: bool = False) -> int:
    data = get_env().as_dict()

    if as_json:
        print(json.dumps(data, indent=2, default=str))
        return 0

    CONSOLE.print("\n[bold]Uploadarr Environment[/bold]")
    for section, values in data.items():
        CONSOLE.print(f"\n[bold cyan]{section}[/bold cyan]")
        for key, value in values.items():
            CONSOLE.print(f"  {key:<20} = {value}", markup=False)

    CONSOLE.print()
    return 0


def handle_env_check() -> int:
    """Report missing prerequisites without touching the network."""
    problems = []

    try:
        drive_id = get_env().shared_drive_id
    except ConfigError as e:
        problems.append(str(e))
    else:
        CONSOLE.print(Text(f"{SYMBOLS.OK} shared drive: {drive_id}", style="green"))

    secrets = auth_client_secrets_file()
    if secrets.exists():
        CONSOLE.print(Text(f"{SYMBOLS.OK} client secrets: {secrets}", style="green"))
    else:
        problems.append(f"Missing OAuth client secrets file: {secrets}")

    for p in problems:
        CONSOLE.print(Text(f"{SYMBOLS.FAIL} {p}", style="red"))
    return 1 if problems else 0
