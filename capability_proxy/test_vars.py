import importlib

import pytest

import capability_proxy.vars as vars_module
from capability_proxy.vars import normalize_backend_url


@pytest.fixture
def reload_vars(monkeypatch):
    """Reload vars with a patched environment and restore it afterwards."""

    def _reload(**env):
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return importlib.reload(vars_module)

    yield _reload
    monkeypatch.undo()
    importlib.reload(vars_module)


class TestNormalizeBackendUrl:
    def test_strips_trailing_slash(self):
        assert normalize_backend_url("http://backend:8080/") == "http://backend:8080"

    def test_keeps_path_prefix(self):
        assert normalize_backend_url(" https://api.example.com/v1/ ") == (
            "https://api.example.com/v1"
        )

    def test_empty_means_unconfigured(self):
        assert normalize_backend_url("") == ""
        assert normalize_backend_url("   ") == ""

    @pytest.mark.parametrize("value", ["backend:8080", "/relative", "ftp://host", "http://"])
    def test_rejects_non_http_urls(self, value):
        with pytest.raises(ValueError):
            normalize_backend_url(value)


def test_defaults(reload_vars, monkeypatch):
    for name in (
        "CAPABILITY_BACKEND_URL",
        "CAPABILITY_PROXY_PREFIX",
        "CAPABILITY_PROXY_TIMEOUT",
        "CAPABILITY_PROXY_RETRIES",
    ):
        monkeypatch.delenv(name, raising=False)

    module = reload_vars()

    assert module.CAPABILITY_BACKEND_URL == ""
    assert module.CAPABILITY_PROXY_PREFIX == "/api/capability"
    assert module.CAPABILITY_PROXY_TIMEOUT == 30.0
    assert module.CAPABILITY_PROXY_RETRIES == 0


def test_environment_overrides(reload_vars):
    module = reload_vars(
        CAPABILITY_BACKEND_URL="http://orchestrator.internal/",
        CAPABILITY_PROXY_PREFIX="/proxy/",
        CAPABILITY_PROXY_TIMEOUT="2.5",
        CAPABILITY_PROXY_RETRIES="1",
    )

    assert module.CAPABILITY_BACKEND_URL == "http://orchestrator.internal"
    assert module.CAPABILITY_PROXY_PREFIX == "/proxy"
    assert module.CAPABILITY_PROXY_TIMEOUT == 2.5
    assert module.CAPABILITY_PROXY_RETRIES == 1
