from __future__ import annotations

from typing import Dict, Optional

import pytest

from common.nuget import DEFAULT_SEARCH_URL
from extension import config


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SIGN_IN_URL", "NUGET_SEARCH_URL", "NUGET_TIMEOUT", "PARAM_PREFIX"):
        monkeypatch.delenv(name, raising=False)


def test_env_only_with_defaults(monkeypatch: pytest.MonkeyPatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("SIGN_IN_URL", "https://login.example.test/login.html")

    cfg = config.load_config()

    assert cfg.sign_in_url == "https://login.example.test/login.html"
    assert cfg.search_url == DEFAULT_SEARCH_URL
    assert cfg.timeout == 15.0


def test_env_overrides(monkeypatch: pytest.MonkeyPatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("SIGN_IN_URL", "https://a.test/login")
    monkeypatch.setenv("NUGET_SEARCH_URL", "https://search.test/query")
    monkeypatch.setenv("NUGET_TIMEOUT", "3.5")

    cfg = config.load_config()

    assert cfg.search_url == "https://search.test/query"
    assert cfg.timeout == 3.5


def test_missing_sign_in_url_raises(monkeypatch: pytest.MonkeyPatch):
    _clear_env(monkeypatch)
    with pytest.raises(config.ConfigError):
        config.load_config()


@pytest.mark.parametrize("raw", ["soon", "0", "-1"])
def test_invalid_timeout_raises(monkeypatch: pytest.MonkeyPatch, raw: str):
    _clear_env(monkeypatch)
    monkeypatch.setenv("SIGN_IN_URL", "https://a.test/login")
    monkeypatch.setenv("NUGET_TIMEOUT", raw)
    with pytest.raises(config.ConfigError):
        config.load_config()


def test_ssm_fills_missing_values(monkeypatch: pytest.MonkeyPatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("PARAM_PREFIX", "/nuget-ext/dev/")
    monkeypatch.setenv("NUGET_TIMEOUT", "5")
    seen = {}

    def fake_load_ssm_params(prefix: str, names) -> Dict[str, Optional[str]]:
        seen["prefix"] = prefix
        seen["names"] = list(names)
        return {"sign_in_url": "https://ssm.test/login", "search_url": None, "timeout": "99"}

    monkeypatch.setattr(config, "_load_ssm_params", fake_load_ssm_params)

    cfg = config.load_config()

    assert seen["prefix"] == "/nuget-ext/dev/"
    assert cfg.sign_in_url == "https://ssm.test/login"
    assert cfg.search_url == DEFAULT_SEARCH_URL
    # Environment wins over SSM
    assert cfg.timeout == 5.0


def test_ssm_not_consulted_without_prefix(monkeypatch: pytest.MonkeyPatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("SIGN_IN_URL", "https://a.test/login")

    def boom(*_a, **_k):
        raise AssertionError("SSM should not be called")

    monkeypatch.setattr(config, "_load_ssm_params", boom)
    assert config.load_config().sign_in_url == "https://a.test/login"
