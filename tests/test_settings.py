import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from shiftpay.core.settings import CONFIG_DIR, get_settings, load_settings, reset_settings
from shiftpay.core.validation import ConfigError


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    monkeypatch.delenv("FINANCIAL_CONFIG", raising=False)
    monkeypatch.delenv("FINANCIAL_RESOLVER_POLICY", raising=False)
    reset_settings()
    yield
    reset_settings()


def test_shipped_yaml_matches_defaults():
    assert (CONFIG_DIR / "financial.yaml").exists()
    settings = load_settings()

    assert settings.standard_shift_hours == 12
    assert settings.night_start_hour == 19
    assert settings.night_end_hour == 7
    assert settings.resolver_policy == "cascade"
    assert settings.unassigned_name == "Vago"
    assert settings.no_sector_key == "sem-setor"
    assert settings.unpaid_sector_keywords == []


def test_missing_file_falls_back_to_defaults(tmp_path):
    settings = load_settings(tmp_path / "absent.yaml")
    assert settings.resolver_policy == "cascade"


def test_env_overrides(tmp_path, monkeypatch):
    path = tmp_path / "financial.yaml"
    path.write_text("unpaid_sector_keywords: [residente]\nunassigned_name: Aberto\n", encoding="utf-8")
    monkeypatch.setenv("FINANCIAL_CONFIG", str(path))
    monkeypatch.setenv("FINANCIAL_RESOLVER_POLICY", "assigned_or_base")

    settings = get_settings()

    assert settings.resolver_policy == "assigned_or_base"
    assert settings.unassigned_name == "Aberto"
    assert settings.unpaid_sector_keywords == ["residente"]
    assert get_settings() is settings


def test_unknown_policy_is_a_config_error(monkeypatch):
    monkeypatch.setenv("FINANCIAL_RESOLVER_POLICY", "guess")
    with pytest.raises(ConfigError):
        load_settings()


def test_non_mapping_yaml_is_a_config_error(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(path)
