"""
services.py

Explicit construction of every runtime component.

Clients are built once here and passed into each component's constructor;
nothing below this module holds a process-wide client handle.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import config
from auth import AuthProvider, get_provider
from env import Environment, get_env
from logger import get_logger
from pipeline.playlists import PlaylistReconciler
from pipeline.quota import QuotaLedger
from pipeline.state import JobStateStore, JsonStateStore
from pipeline.upload import UploadPipeline
from providers.drive.client import DriveAssetSource
from providers.youtube.client import YouTubePlatform

logger = get_logger(__name__)


@dataclass
class LocalState:
    store: JobStateStore
    ledger: QuotaLedger


@dataclass
class Services:
    env: Environment
    store: JobStateStore
    ledger: QuotaLedger
    platform: YouTubePlatform
    assets: DriveAssetSource
    reconciler: PlaylistReconciler
    pipeline: UploadPipeline


def open_local_state(env: Optional[Environment] = None) -> LocalState:
    """State + ledger only; no credentials, no network."""
    env = env or get_env()
    store = JobStateStore(JsonStateStore(env.state_file))
    ledger = QuotaLedger(store, daily_quota=config.DAILY_QUOTA, tz=config.QUOTA_TIMEZONE)
    logger.debug(f"State file: {env.state_file}")
    return LocalState(store=store, ledger=ledger)


def build_services(
    env: Optional[Environment] = None,
    provider: Optional[AuthProvider] = None,
) -> Services:
    env = env or get_env()
    provider = provider or get_provider("google")

    shared_drive_id = env.shared_drive_id
    local = open_local_state(env)

    # Pipeline commands run unattended; only `auth` may open a browser.
    provider.ensure_ready(interactive=False)
    platform = YouTubePlatform(provider.build_client())
    assets = DriveAssetSource(provider.build_drive_client(), shared_drive_id)

    reconciler = PlaylistReconciler(
        platform,
        local.store,
        local.ledger,
        privacy_status=env.privacy_status,
    )
    pipeline = UploadPipeline(
        platform,
        assets,
        local.store,
        local.ledger,
        reconciler,
        inter_item_delay=env.inter_item_delay,
        footer=env.description_footer,
        privacy_status=env.privacy_status,
    )

    return Services(
        env=env,
        store=local.store,
        ledger=local.ledger,
        platform=platform,
        assets=assets,
        reconciler=reconciler,
        pipeline=pipeline,
    )
