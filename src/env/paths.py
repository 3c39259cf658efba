from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------
# Project root
# ---------------------------------------------------------------------

# This file lives in src/env/, so project root is two levels up
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# ---------------------------------------------------------------------
# Base directories (override-friendly)
# ---------------------------------------------------------------------


def _resolve_dir(env_var: str, default: Path) -> Path:
    """
    Resolve a directory path from an environment variable or default.
    Ensures the directory exists.
    """
    raw = os.environ.get(env_var)
    path = Path(raw).expanduser().resolve() if raw else default
    path.mkdir(parents=True, exist_ok=True)
    return path


# ---------------------------------------------------------------------
# Public paths
# ---------------------------------------------------------------------

# Logs
LOGS_DIR = _resolve_dir(
    "UPLOADARR_LOGS_DIR",
    PROJECT_ROOT / "logs",
)

# Auth (OAuth tokens, client secrets)
AUTH_DIR = _resolve_dir(
    "UPLOADARR_AUTH_DIR",
    PROJECT_ROOT / "auth",
)

# Durable upload state
DATA_DIR = _resolve_dir(
    "UPLOADARR_DATA_DIR",
    PROJECT_ROOT / "data",
)

# Output (reports)
OUT_DIR = _resolve_dir(
    "UPLOADARR_OUT_DIR",
    PROJECT_ROOT / "out",
)

CONFIG_DIR = PROJECT_ROOT / "config"


# ---------------------------------------------------------------------
# Utility / internal paths
# ---------------------------------------------------------------------


def auth_token_file(filename: str = "oauth_token.json") -> Path:
    """
    Path to an auth token file inside AUTH_DIR.
    """
    return AUTH_DIR / filename


def auth_client_secrets_file(filename: str = "client_secret.json") -> Path:
    """
    Path to an OAuth client secrets file inside AUTH_DIR.
    """
    return AUTH_DIR / filename


def data_file(name: str) -> Path:
    return DATA_DIR / name


def out_file(name: str) -> Path:
    return OUT_DIR / name


