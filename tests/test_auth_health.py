import pytest

from auth.base import AuthHealthResult, AuthHealthStatus


def test_health_result_shapes():
    r = AuthHealthResult(
        provider="google",
        status=AuthHealthStatus.OK,
        message="ok",
    )

    assert r.provider == "google"
    assert r.status == AuthHealthStatus.OK


def test_quota_exhaustion_still_counts_as_healthy():
    assert AuthHealthStatus.OK.healthy
    assert AuthHealthStatus.OK_API_QUOTA.healthy
    assert not AuthHealthStatus.AUTH_INVALID.healthy
    assert not AuthHealthStatus.FAILED.healthy


def test_registry_rejects_unknown_provider():
    from auth.registry import get_provider

    with pytest.raises(ValueError):
        get_provider("dropbox")


def test_registry_returns_one_instance_per_provider():
    from auth.registry import get_provider

    assert get_provider("Google") is get_provider("google")
