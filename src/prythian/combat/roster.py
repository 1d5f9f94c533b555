from __future__ import annotations

import logging
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ConfigurationError
from .affinity import Court, DamageType, element_for_court
from .entities import CLASS_BASE_STATS, CharacterClass, Combatant, EnemyBehavior
from .magic import MagicType

logger = logging.getLogger(__name__)

ROSTER_FILENAME = "enemies.yaml"


class EnemyDifficulty(str, Enum):
    TRIVIAL = "trivial"
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    ELITE = "elite"
    BOSS = "boss"

    @property
    def stat_multiplier(self) -> float:
        return _STAT_MULTIPLIERS[self]

    @property
    def base_experience(self) -> int:
        return _BASE_EXPERIENCE[self]


_STAT_MULTIPLIERS: Dict[EnemyDifficulty, float] = {
    EnemyDifficulty.TRIVIAL: 0.5,
    EnemyDifficulty.EASY: 0.75,
    EnemyDifficulty.NORMAL: 1.0,
    EnemyDifficulty.HARD: 1.5,
    EnemyDifficulty.ELITE: 2.0,
    EnemyDifficulty.BOSS: 3.0,
}

_BASE_EXPERIENCE: Dict[EnemyDifficulty, int] = {
    EnemyDifficulty.TRIVIAL: 25,
    EnemyDifficulty.EASY: 50,
    EnemyDifficulty.NORMAL: 100,
    EnemyDifficulty.HARD: 200,
    EnemyDifficulty.ELITE: 400,
    EnemyDifficulty.BOSS: 1000,
}


class EnemyDefinition(BaseModel):
    """Data definition of an enemy archetype, as stored in the roster YAML."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1, description="Stable roster key")
    name: str = Field(..., min_length=1, description="Display name")
    character_class: CharacterClass = Field(..., description="Class providing base stats")
    difficulty: EnemyDifficulty = EnemyDifficulty.NORMAL
    behavior: EnemyBehavior = EnemyBehavior.BALANCED
    court: Optional[Court] = Field(default=None, description="Allegiance; sets the element if none is given")
    element: Optional[DamageType] = None
    level: int = Field(1, ge=1)
    abilities: List[MagicType] = Field(default_factory=list)
    loot: List[str] = Field(default_factory=list)
    gold: int = Field(0, ge=0)

    @field_validator("loot")
    @classmethod
    def unique_loot(cls, v: List[str]) -> List[str]:
        # Loot tables never list an item twice.
        return list(dict.fromkeys(v))

    def resolved_element(self) -> DamageType:
        if self.element is not None:
            return self.element
        if self.court is not None:
            return element_for_court(self.court)
        return DamageType.NONE


def create_enemy(definition: EnemyDefinition, difficulty: Optional[EnemyDifficulty] = None) -> Combatant:
    """Build a fresh enemy combatant, scaling class stats by difficulty.

    Experience reward is the difficulty's base experience times the enemy level.
    """
    tier = EnemyDifficulty(difficulty) if difficulty is not None else definition.difficulty
    base = CLASS_BASE_STATS[definition.character_class]
    m = tier.stat_multiplier
    enemy = Combatant(
        name=definition.name,
        max_health=max(1, round(base.health * m)),
        strength=round(base.strength * m),
        agility=round(base.agility * m),
        magic_power=round(base.magic_power * m),
        level=definition.level,
        abilities=list(definition.abilities),
        element=definition.resolved_element(),
        behavior=definition.behavior,
        experience_reward=tier.base_experience * definition.level,
        gold_reward=definition.gold,
        loot_table=list(definition.loot),
    )
    logger.debug("Created %s (%s, %s): %s", definition.id, tier.value, definition.behavior.value, enemy)
    return enemy


class EnemyRoster:
    """Registry of enemy definitions keyed by id."""

    def __init__(self, definitions: Iterable[EnemyDefinition] = ()) -> None:
        self._defs: Dict[str, EnemyDefinition] = {}
        for d in definitions:
            self.add(d)

    def add(self, definition: EnemyDefinition) -> None:
        if definition.id in self._defs:
            raise ConfigurationError(f"Duplicate enemy id: {definition.id}")
        self._defs[definition.id] = definition

    def get(self, enemy_id: str) -> EnemyDefinition:
        try:
            return self._defs[enemy_id]
        except KeyError:
            raise ConfigurationError(f"Unknown enemy id: {enemy_id}") from None

    def ids(self) -> List[str]:
        return sorted(self._defs)

    def create(self, enemy_id: str, difficulty: Optional[EnemyDifficulty] = None) -> Combatant:
        return create_enemy(self.get(enemy_id), difficulty)

    def __contains__(self, enemy_id: object) -> bool:
        return enemy_id in self._defs

    def __len__(self) -> int:
        return len(self._defs)

    @classmethod
    def from_mapping(cls, raw: dict) -> "EnemyRoster":
        entries = (raw or {}).get("enemies", [])
        if not isinstance(entries, list):
            raise ConfigurationError("Roster 'enemies' must be a list")
        try:
            definitions = [EnemyDefinition.model_validate(entry) for entry in entries]
        except ValidationError as e:
            raise ConfigurationError(f"Invalid enemy roster: {e}") from e
        return cls(definitions)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "EnemyRoster":
        """Load a roster from YAML.

        If path is None, loads the packaged default roster at data/enemies.yaml.
        """
        if path is None:
            text = resources.files("prythian.data").joinpath(ROSTER_FILENAME).read_text(encoding="utf-8")
            logger.debug("Loaded packaged enemy roster")
        else:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
            logger.debug("Loaded enemy roster from path: %s", path)
        roster = cls.from_mapping(yaml.safe_load(text) or {})
        logger.info("Enemy roster ready: %d definitions", len(roster))
        return roster
