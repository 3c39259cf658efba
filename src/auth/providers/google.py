from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

import config
from auth.base import AuthHealthResult, AuthHealthStatus, AuthProvider
from auth.errors import AuthFailed, AuthInvalid
from env.paths import AUTH_DIR, auth_client_secrets_file, auth_token_file
from logger import get_logger
from providers.errors import QuotaExceeded
from providers.youtube.client import translate_error


class GoogleOAuthProvider(AuthProvider):
    """
    One installed-app OAuth token covering YouTube (upload + manage) and
    read-only Drive access.
    """

    name = "google"

    def __init__(self) -> None:
        self._logger = get_logger("auth.google")
        self._creds: Optional[Credentials] = None
        self._interactive = True

    def ensure_ready(self, interactive: bool = True) -> None:
        """
        Load, refresh or obtain credentials. With interactive=False a missing
        or unusable token raises AuthInvalid instead of opening a browser.
        """
        self._interactive = interactive
        _ = self._load_or_authenticate()

    def build_client(self) -> Any:
        return self._build("youtube", "v3")

    def build_drive_client(self) -> Any:
        return self._build("drive", "v3")

    def _build(self, service: str, version: str) -> Any:
        creds = self._load_or_authenticate()
        try:
            return build(service, version, credentials=creds, cache_discovery=False)
        except Exception as e:
            self._logger.error(f"Failed to build {service} client: {e}")
            raise AuthFailed(str(e)) from e

    def health_check(self) -> AuthHealthResult:
        """
        Cheap authenticated channels.list call.
        Quota exhaustion still proves the token works.
        """
        self._logger.info("oauth.check.start")

        try:
            youtube = self.build_client()
            youtube.channels().list(part="id", mine=True, maxResults=1).execute()

            self._logger.info("oauth.check.ok")
            return AuthHealthResult(
                provider=self.name,
                status=AuthHealthStatus.OK,
                message="OAuth OK",
            )

        except Exception as e:
            if isinstance(translate_error(e), QuotaExceeded):
                self._logger.warning("oauth.check.ok_quota_exhausted")
                return AuthHealthResult(
                    provider=self.name,
                    status=AuthHealthStatus.OK_API_QUOTA,
                    message="OAuth OK (API quota exhausted)",
                )

            if isinstance(e, AuthInvalid):
                self._logger.error("oauth.check.auth_invalid", exc_info=e)
                return AuthHealthResult(
                    provider=self.name,
                    status=AuthHealthStatus.AUTH_INVALID,
                    message="OAuth INVALID - reauthentication required",
                )

            self._logger.error("oauth.check.failed", exc_info=e)
            return AuthHealthResult(
                provider=self.name,
                status=AuthHealthStatus.FAILED,
                message=f"OAuth check failed: {e}",
            )

    # -----------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------

    def _load_or_authenticate(self) -> Credentials:
        if self._creds is not None and self._creds.valid:
            return self._creds

        AUTH_DIR.mkdir(parents=True, exist_ok=True)

        token_path = auth_token_file()
        secrets_path = auth_client_secrets_file()

        creds: Optional[Credentials] = None

        if token_path.exists():
            try:
                creds = Credentials.from_authorized_user_file(
                    str(token_path),
                    config.GOOGLE_OAUTH_SCOPES,
                )
                self._logger.debug("Loaded existing OAuth credentials")
            except ValueError as e:
                self._logger.warning(f"Failed to load existing credentials: {e}")
                creds = None

        if creds and creds.valid:
            self._creds = creds
            return creds

        if creds and creds.expired and creds.refresh_token:
            try:
                self._logger.debug("Refreshing expired OAuth token...")
                creds.refresh(Request())
                self._persist_token(token_path, creds)
                self._creds = creds
                return creds
            except Exception as e:
                self._logger.error(f"Failed to refresh token: {e}")
                raise AuthInvalid(str(e)) from e

        if not self._interactive:
            raise AuthInvalid(
                f"No usable OAuth token at {token_path}. Run `uploadarr auth` first."
            )

        if not secrets_path.exists():
            raise AuthInvalid(f"Missing OAuth client secrets file: {secrets_path}")

        try:
            self._logger.info("Starting OAuth authentication flow (browser)...")
            flow = InstalledAppFlow.from_client_secrets_file(
                str(secrets_path),
                config.GOOGLE_OAUTH_SCOPES,
            )
            creds = flow.run_local_server(port=0)
            self._persist_token(token_path, creds)
            self._creds = creds
            return creds
        except Exception as e:
            self._logger.error(f"OAuth authentication failed: {e}")
            raise AuthInvalid(str(e)) from e

    def _persist_token(self, token_path: Path, creds: Credentials) -> None:
        try:
            token_path.write_text(creds.to_json(), encoding="utf-8")
            os.chmod(token_path, 0o600)
            self._logger.debug(f"Saved OAuth token to {token_path}")
        except OSError as e:
            # The token is still usable in-process; next run re-prompts.
            self._logger.warning(f"Could not persist OAuth token: {e}")
