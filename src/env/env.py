from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import config
from env.paths import LOGS_DIR, data_file, out_file

# ------------------------------------------------------------
# Minimal dotenv loader (read-only helper, bootstrap owns usage)
# ------------------------------------------------------------


def _load_dotenv(path: Path) -> None:
    """
    Minimal dotenv loader.
    - Silent
    - Never overrides existing os.environ
    """
    if not path.exists():
        return

    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        k, v = line.split("=", 1)
        k = k.strip()
        v = v.strip()

        # strip inline comments
        if " #" in v:
            v = v.split(" #", 1)[0].rstrip()
        elif "\t#" in v:
            v = v.split("\t#", 1)[0].rstrip()

        # strip quotes
        if len(v) >= 2 and v[0] == v[-1] and v[0] in ("'", '"'):
            v = v[1:-1]

        if k and k not in os.environ:
            os.environ[k] = v


# ------------------------------------------------------------
# Errors / helpers
# ------------------------------------------------------------


class ConfigError(RuntimeError):
    pass


def _require(name: str) -> str:
    v = os.environ.get(name)
    if not v:
        raise ConfigError(f"Missing required environment variable: {name}")
    return v


def _as_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(v: str, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return default


def _as_float(v: str, default: float) -> float:
    try:
        return float(v)
    except Exception:
        return default


# ------------------------------------------------------------
# Logging environment (SAFE ANYWHERE)
# ------------------------------------------------------------


@dataclass(frozen=True)
class LoggingEnvironment:
    log_level: str
    log_retention: int
    verbose: bool
    quiet: bool


def get_logging_env() -> LoggingEnvironment:
    log_level = os.environ.get("LOG_LEVEL", config.DEFAULT_LOG_LEVEL)
    log_retention = _as_int(
        os.environ.get("LOG_RETENTION", str(config.DEFAULT_LOG_RETENTION)),
        config.DEFAULT_LOG_RETENTION,
    )

    verbose = _as_bool(os.environ.get("UPLOADARR_VERBOSE", "0"))
    quiet = _as_bool(os.environ.get("UPLOADARR_QUIET", "0"))

    return LoggingEnvironment(
        log_level=log_level,
        log_retention=log_retention,
        verbose=verbose,
        quiet=quiet,
    )


# ------------------------------------------------------------
# Full runtime environment (PIPELINE ONLY)
# ------------------------------------------------------------


class Environment:
    def __init__(self):
        # Logging snapshot (immutable)
        self._logging = get_logging_env()

        # ---- STORAGE ----
        self.state_file = Path(
            os.environ.get("UPLOADARR_STATE_FILE")
            or data_file(config.STATE_FILENAME)
        )
        self.report_file = Path(
            os.environ.get("UPLOADARR_REPORT_FILE")
            or out_file(config.REPORT_FILENAME)
        )

        # ---- PACING ----
        self.inter_item_delay = _as_float(
            os.environ.get("UPLOADARR_INTER_ITEM_DELAY", ""),
            config.INTER_ITEM_DELAY_SEC,
        )

        # ---- METADATA ----
        self.description_footer = os.environ.get(
            "UPLOADARR_DESCRIPTION_FOOTER", config.DEFAULT_DESCRIPTION_FOOTER
        )
        self.privacy_status = os.environ.get(
            "UPLOADARR_PRIVACY_STATUS", config.DEFAULT_PRIVACY_STATUS
        )

        # ---- RUN CONTEXT ----
        self.command = os.environ.get("UPLOADARR_COMMAND", "bootstrap")

    @property
    def shared_drive_id(self) -> str:
        # Only pipeline commands need the drive; auth/logs must not fail on it.
        return _require("UPLOADARR_SHARED_DRIVE_ID")

    def as_dict(self) -> dict:
        return {
            "Logging": {
                "log_level": self.log_level,
                "log_retention": self.log_retention,
                "verbose": self.verbose,
                "quiet": self.quiet,
            },
            "Storage": {
                "state_file": str(self.state_file),
                "report_file": str(self.report_file),
                "logs_dir": str(LOGS_DIR),
            },
            "Behavior": {
                "command": self.command,
                "inter_item_delay": self.inter_item_delay,
                "privacy_status": self.privacy_status,
            },
        }

    # ---- logging passthrough ----
    @property
    def log_level(self) -> str:
        return self._logging.log_level

    @property
    def log_retention(self) -> int:
        return self._logging.log_retention

    @property
    def verbose(self) -> bool:
        return self._logging.verbose

    @property
    def quiet(self) -> bool:
        return self._logging.quiet


_ENV: Optional[Environment] = None


def reset_env_caches() -> None:
    """Invalidate cached views of environment variables."""
    global _ENV
    _ENV = None


def get_env() -> Environment:
    global _ENV
    if _ENV is None:
        _ENV = Environment()
    return _ENV
