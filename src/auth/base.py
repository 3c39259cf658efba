from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class AuthHealthStatus(str, Enum):
    OK = "ok"
    OK_API_QUOTA = "ok_api_quota"
    AUTH_INVALID = "auth_invalid"
    FAILED = "failed"

    @property
    def healthy(self) -> bool:
        return self in (AuthHealthStatus.OK, AuthHealthStatus.OK_API_QUOTA)


@dataclass(frozen=True)
class AuthHealthResult:
    provider: str
    status: AuthHealthStatus
    message: str


class AuthProvider(Protocol):
    """
    - ensure_ready() may refresh tokens; prompts login only when interactive
    - build_client() / build_drive_client() return authenticated API clients
    - health_check() performs a cheap authenticated call to validate auth
    """

    name: str

    def ensure_ready(self, interactive: bool = True) -> None: ...

    def build_client(self) -> Any: ...

    def build_drive_client(self) -> Any: ...

    def health_check(self) -> AuthHealthResult: ...
