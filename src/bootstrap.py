from __future__ import annotations

"""bootstrap.py

Process bootstrap for Uploadarr.

Rules:
1) Only bootstrap is allowed to *mutate* os.environ for shared run context.
2) Call bootstrap_base_env() exactly once at the true entrypoint.
3) Call bootstrap_run_context() after argparse parsing, before init_logging().

Everything else should treat environment variables as the source of truth.
"""

import os
from datetime import datetime
from typing import Optional

from env import CONFIG_DIR, _load_dotenv, reset_env_caches

_BOOTSTRAPPED = False


def bootstrap_base_env() -> None:
    global _BOOTSTRAPPED
    if _BOOTSTRAPPED:
        return

    # config/.env is optional; real environment variables always win.
    _load_dotenv(CONFIG_DIR / ".env")

    os.environ.setdefault(
        "UPLOADARR_RUN_ID",
        datetime.now().strftime("%Y-%m-%d_%H-%M-%S"),
    )

    reset_env_caches()
    _BOOTSTRAPPED = True


def bootstrap_run_context(
    *,
    command: str,
    verbose: Optional[bool] = None,
    quiet: Optional[bool] = None,
) -> None:
    """Establish run-scoped context used by logging and the pipeline."""

    os.environ["UPLOADARR_COMMAND"] = command

    if verbose is not None:
        os.environ["UPLOADARR_VERBOSE"] = "1" if verbose else "0"
    if quiet is not None:
        os.environ["UPLOADARR_QUIET"] = "1" if quiet else "0"

    # Context changes must invalidate cached env views.
    reset_env_caches()
