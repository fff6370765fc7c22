from __future__ import annotations

import pytest

from plmsync.config import (
    ConfigurationError,
    get_beproduct_config,
    get_dependency_agent_config,
    get_sync_config,
)
from plmsync.config.sync import DEFAULT_MASTERDATA_FIELDS, DEFAULT_RECALCULATION_FUNCTION


def test_beproduct_config_builds_company_urls(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BEPRODUCT_COMPANY", "greyson")
    monkeypatch.setenv("BEPRODUCT_BASE_URL", "https://plm.example/")
    monkeypatch.setenv("BEPRODUCT_ACCESS_TOKEN", "token-1")

    config = get_beproduct_config()

    assert config.access_token == "token-1"
    assert config.api_url("/Tracking/Plan/plan-1") == (
        "https://plm.example/api/greyson/Tracking/Plan/plan-1"
    )
    assert config.resilience.name == "beproduct"


def test_beproduct_config_requires_company(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BEPRODUCT_COMPANY", raising=False)

    with pytest.raises(ConfigurationError, match="BEPRODUCT_COMPANY"):
        get_beproduct_config()


def test_beproduct_token_is_optional(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BEPRODUCT_COMPANY", "greyson")
    monkeypatch.delenv("BEPRODUCT_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("BEPRODUCT_BASE_URL", raising=False)

    config = get_beproduct_config()

    assert config.access_token is None
    assert config.base_url == "https://developers.beproduct.com"


def test_agent_config_builds_tracking_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEPENDENCY_AGENT_WEBHOOK_URL", "https://agent.example/hook")
    monkeypatch.setenv("DEPENDENCY_CALLBACK_URL", "https://plmsync.example/dependencies")
    monkeypatch.setenv("BEPRODUCT_COMPANY", "greyson")
    monkeypatch.delenv("BEPRODUCT_APP_URL", raising=False)

    config = get_dependency_agent_config()

    assert config.tracking_url(folder_id="tf-1", plan_id="plan-1") == (
        "https://hk.beproduct.com/greyson/Tracking#/Tracking/tf-1/Style/plan/plan-1"
        "/setup?useFavorite=true"
    )


def test_agent_config_requires_webhook(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DEPENDENCY_AGENT_WEBHOOK_URL", raising=False)
    monkeypatch.setenv("DEPENDENCY_CALLBACK_URL", "https://plmsync.example/dependencies")
    monkeypatch.setenv("BEPRODUCT_COMPANY", "greyson")

    with pytest.raises(ConfigurationError, match="DEPENDENCY_AGENT_WEBHOOK_URL"):
        get_dependency_agent_config()


def test_sync_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PLMSYNC_RECALCULATION_FUNCTION", raising=False)

    config = get_sync_config()

    assert config.recalculation_function == DEFAULT_RECALCULATION_FUNCTION
    assert config.masterdata_fields == DEFAULT_MASTERDATA_FIELDS


def test_sync_config_overrides_recalculation_function(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLMSYNC_RECALCULATION_FUNCTION", "recalc_dates")

    assert get_sync_config().recalculation_function == "recalc_dates"
