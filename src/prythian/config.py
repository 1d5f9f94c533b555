from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from platformdirs import user_config_path
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

APP_NAME = "prythian"
BALANCE_FILENAME = "balance.yaml"


class BalanceConfig(BaseModel):
    """
    Tunable combat constants, supplied once per encounter and never mutated.

    Defaults mirror the shipped data/balance.yaml. Override any subset with a
    YAML file (see load_balance_config) or by constructing the model directly:

        BalanceConfig(critical_hit_chance=0.0, min_damage_multiplier=1.0, max_damage_multiplier=1.0)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Critical hits
    critical_hit_chance: float = Field(0.15, ge=0.0, le=1.0)
    critical_hit_multiplier: float = Field(2.0, ge=1.0)
    agility_crit_bonus: float = Field(0.001, ge=0.0)

    # Dodging
    base_dodge_chance: float = Field(0.05, ge=0.0, le=1.0)
    agility_dodge_bonus: float = Field(0.01, ge=0.0)
    max_dodge_chance: float = Field(0.75, ge=0.0, le=1.0)

    # Defend
    defend_damage_reduction: float = Field(0.5, ge=0.0, le=1.0)

    # Fleeing
    base_flee_chance: float = Field(0.30, ge=0.0, le=1.0)
    agility_flee_bonus: float = Field(0.01, ge=0.0)
    level_flee_penalty: float = Field(0.05, ge=0.0)

    # Damage variance
    min_damage_multiplier: float = Field(0.85, ge=0.0)
    max_damage_multiplier: float = Field(1.15, ge=0.0)

    # Magic schools
    elemental_magic_multiplier: float = Field(1.5, ge=0.0)
    daemati_magic_multiplier: float = Field(2.0, ge=0.0)
    healing_magic_multiplier: float = Field(1.2, ge=0.0)
    shield_magic_multiplier: float = Field(0.5, ge=0.0)
    enforce_mana_costs: bool = True

    # Combo
    combo_enabled: bool = True
    combo_damage_bonus_per_hit: float = Field(0.10, ge=0.0)
    combo_max_hits: int = Field(5, ge=0)
    combo_dodge_tolerance: int = Field(1, ge=0)

    # Rewards and difficulty inputs
    loot_drop_chance: float = Field(0.5, ge=0.0, le=1.0)
    enemy_damage_multiplier: float = Field(1.0, ge=0.0)
    experience_multiplier: float = Field(1.0, ge=0.0)

    @model_validator(mode="after")
    def _check_variance_band(self) -> "BalanceConfig":
        if self.min_damage_multiplier > self.max_damage_multiplier:
            raise ValueError("min_damage_multiplier must not exceed max_damage_multiplier")
        return self

    @staticmethod
    def default() -> "BalanceConfig":
        return BalanceConfig()


def default_user_config_path() -> Path:
    """Per-user override location, e.g. ~/.config/prythian/balance.yaml on Linux."""
    return user_config_path(APP_NAME) / BALANCE_FILENAME


def _deep_merge(base: dict, overlay: dict) -> dict:
    merged = dict(base)
    for k, v in (overlay or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            merged[k] = _deep_merge(base[k], v)
        else:
            merged[k] = v
    return merged


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Balance file {path} must contain a mapping, got {type(data).__name__}")
    return data


def _load_packaged_defaults() -> Dict[str, Any]:
    with resources.files("prythian.data").joinpath(BALANCE_FILENAME).open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_balance_config(data: Dict[str, Any]) -> BalanceConfig:
    """Validate a raw mapping into a BalanceConfig, wrapping pydantic errors."""
    try:
        return BalanceConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid balance config: {e}") from e


def load_balance_config(user_path: Optional[Path] = None) -> BalanceConfig:
    """Load balance constants from the packaged defaults and an optional override.

    If user_path is None, the per-user config directory is checked for an
    override file; a missing default override is silently skipped. An explicit
    user_path that does not exist logs a warning and is ignored.
    """
    data = _load_packaged_defaults()
    logger.debug("Loaded packaged balance defaults (%d keys)", len(data))

    explicit = user_path is not None
    path = Path(user_path) if explicit else default_user_config_path()
    if path.exists():
        data = _deep_merge(data, _load_yaml(path))
        logger.info("Loaded balance overrides from %s", path)
    elif explicit:
        logger.warning("Balance override file not found: %s", path)

    cfg = parse_balance_config(data)
    logger.debug("Balance config resolved: %s", cfg)
    return cfg
