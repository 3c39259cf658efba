from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from env import get_logging_env
from .console import build_console_handler
from .file import build_file_handler, repoint_file_handler
from .log_paths import command_logs_dir
from .retention import enforce_retention
from . import state as _state

# Third-party loggers that flood DEBUG during chunked uploads and downloads.
_NOISY = {
    "googleapiclient.discovery_cache": logging.ERROR,
    "googleapiclient": logging.WARNING,
    "google": logging.WARNING,
    "urllib3": logging.WARNING,
    "PIL": logging.WARNING,
}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def current_log_file() -> Optional[Path]:
    """Run log of the active command, or None before init_logging()."""
    return _state.LOG_FILE_PATH


def _level_to_int(level: str | int) -> int:
    if isinstance(level, int):
        return level
    lvl = logging.getLevelName(str(level).upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def _run_context() -> tuple[str, str]:
    command = os.environ.get("UPLOADARR_COMMAND") or "bootstrap"
    run_id = os.environ.get("UPLOADARR_RUN_ID")
    if not run_id:
        run_id = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        os.environ["UPLOADARR_RUN_ID"] = run_id
    return command, run_id


def _take_file_handler(root: logging.Logger) -> Optional[logging.FileHandler]:
    for h in root.handlers:
        if isinstance(h, logging.FileHandler):
            return h
    return None


def init_logging() -> None:
    """
    Configure the root logger for the current command run.

    The run log lives at logs/<command>/<command>-<run id>.log. Calling this
    again after bootstrap_run_context() moves the existing file handler to
    the new command's log instead of adding a second one.
    """
    env = get_logging_env()
    for name, level in _NOISY.items():
        logging.getLogger(name).setLevel(level)

    command, run_id = _run_context()
    log_dir = command_logs_dir(command)
    logfile = log_dir / f"{command}-{run_id}.log"
    enforce_retention(log_dir, int(env.log_retention))

    root = logging.getLogger()
    root_level = logging.DEBUG if env.verbose else _level_to_int(env.log_level)

    if _state.INITIALIZED and _state.LOG_FILE_PATH == logfile:
        root.setLevel(root_level)
        return

    file_handler = _take_file_handler(root)
    root.handlers.clear()
    root.setLevel(root_level)

    if file_handler is None:
        file_handler = build_file_handler(logfile)
    else:
        repoint_file_handler(file_handler, logfile)
    root.addHandler(file_handler)

    if not env.quiet:
        root.addHandler(build_console_handler(root_level))

    _state.INITIALIZED = True
    _state.RUN_ID = run_id
    _state.LOG_DIR = log_dir
    _state.LOG_FILE_PATH = logfile

    logging.getLogger("logger").debug(f"run.start command={command} run_id={run_id}")
