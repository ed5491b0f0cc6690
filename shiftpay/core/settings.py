from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from shiftpay.core.validation import ConfigError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"

ResolverPolicy = Literal["cascade", "assigned_or_base"]


class FinancialSettings(BaseModel):
    standard_shift_hours: int = Field(default=12, gt=0)
    night_start_hour: int = Field(default=19, ge=0, le=23)
    night_end_hour: int = Field(default=7, ge=0, le=23)
    resolver_policy: ResolverPolicy = "cascade"
    unassigned_id: str = "unassigned"
    unassigned_name: str = "Vago"
    unnamed_assignee: str = "Sem nome"
    no_sector_key: str = "sem-setor"
    no_sector_name: str = "Sem Setor"
    unpaid_sector_keywords: list[str] = Field(default_factory=list)


def _config_path() -> Path:
    env_path = os.getenv("FINANCIAL_CONFIG")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return CONFIG_DIR / "financial.yaml"


def load_settings(path: Path | None = None) -> FinancialSettings:
    path = path or _config_path()
    data: dict = {}
    if path.exists():
        try:
            with path.open("r", encoding="utf-8") as fp:
                data = yaml.safe_load(fp) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"cannot parse {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping")
    else:
        logger.debug("No settings file at %s, using defaults", path)

    policy = os.getenv("FINANCIAL_RESOLVER_POLICY")
    if policy:
        data["resolver_policy"] = policy.strip()

    try:
        return FinancialSettings(**data)
    except PydanticValidationError as exc:
        raise ConfigError(f"invalid financial settings: {exc}") from exc


_settings: FinancialSettings | None = None


def get_settings() -> FinancialSettings:
    """Return the process-wide settings, loading them on first use."""

    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings (used in tests)."""

    global _settings
    _settings = None
