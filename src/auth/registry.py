from __future__ import annotations

from typing import Callable, Dict

from auth.base import AuthProvider
from auth.providers.google import GoogleOAuthProvider

_FACTORIES: Dict[str, Callable[[], AuthProvider]] = {
    "google": GoogleOAuthProvider,
}
_INSTANCES: Dict[str, AuthProvider] = {}


def get_provider(name: str = "google") -> AuthProvider:
    key = (name or "").strip().lower()
    if key not in _FACTORIES:
        raise ValueError(f"Unknown auth provider: {name}")
    if key not in _INSTANCES:
        _INSTANCES[key] = _FACTORIES[key]()
    return _INSTANCES[key]
