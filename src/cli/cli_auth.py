from __future__ import annotations

import argparse

from rich.text import Text

from auth import AuthHealthStatus, check
from cli.common import CONSOLE, add_output_flags
from env import get_logging_env
from logger import get_logger

# ------------------------------------------------------------
# Parser
# ------------------------------------------------------------


def build_auth_parser(subparsers: argparse._SubParsersAction) -> None:
    auth = subparsers.add_parser(
        "auth",
        help="Authenticate with Google (YouTube + Drive) and check token health",
    )
    add_output_flags(auth)
    auth.add_argument(
        "--provider",
        default="google",
        help="Auth provider to check (default: google)",
    )
    auth.set_defaults(action="auth")


# ------------------------------------------------------------
# Handler
# ------------------------------------------------------------


def handle_auth(args: argparse.Namespace) -> int:
    logger = get_logger("auth")
    logging_env = get_logging_env()
    quiet = logging_env.quiet

    logger.info("oauth.check.start")
    result = check(args.provider)

    if result.status == AuthHealthStatus.OK:
        if not quiet:
            msg = Text("OAuth OK", style="green")
            if logging_env.verbose:
                msg.append(" (token valid and usable)", style="dim")
            CONSOLE.print(msg)
        return 0

    if result.status == AuthHealthStatus.OK_API_QUOTA:
        if not quiet:
            msg = Text("OAuth OK", style="green")
            msg.append(" (API quota exhausted)", style="yellow")
            CONSOLE.print(msg)
        return 0

    if not quiet:
        CONSOLE.print(Text(result.message, style="red"))
    return 1
