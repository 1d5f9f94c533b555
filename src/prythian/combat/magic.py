from __future__ import annotations

from enum import Enum
from typing import Dict

from ..config import BalanceConfig
from .affinity import DamageType


class MagicSchool(Enum):
    ELEMENTAL = "elemental"
    MIND = "mind"
    HEALING = "healing"
    WARDING = "warding"
    ARCANE = "arcane"


class MagicType(str, Enum):
    """Known magic abilities. Values double as the display names used in logs."""

    SHAPESHIFTING = "Shapeshifting"
    WINNOWING = "Winnowing"
    DARKNESS_MANIPULATION = "Darkness Manipulation"
    LIGHT_MANIPULATION = "Light Manipulation"
    FIRE_MANIPULATION = "Fire Manipulation"
    WATER_MANIPULATION = "Water Manipulation"
    WIND_MANIPULATION = "Wind Manipulation"
    ICE_MANIPULATION = "Ice Manipulation"
    HEALING = "Healing"
    SHIELD_CREATION = "Shield Creation"
    DAEMATI = "Daemati"
    SEER = "Seer"
    DEATH_MANIFESTATION = "Death Manifestation"

    @property
    def damage_type(self) -> DamageType:
        return _DAMAGE_TYPES.get(self, DamageType.MAGICAL)

    @property
    def school(self) -> MagicSchool:
        return _SCHOOLS.get(self, MagicSchool.ARCANE)

    @property
    def mana_cost(self) -> int:
        return _MANA_COSTS[self]


_DAMAGE_TYPES: Dict[MagicType, DamageType] = {
    MagicType.FIRE_MANIPULATION: DamageType.FIRE,
    MagicType.ICE_MANIPULATION: DamageType.ICE,
    MagicType.WATER_MANIPULATION: DamageType.WATER,
    MagicType.WIND_MANIPULATION: DamageType.WIND,
    MagicType.DARKNESS_MANIPULATION: DamageType.DARKNESS,
    MagicType.LIGHT_MANIPULATION: DamageType.LIGHT,
    MagicType.DEATH_MANIFESTATION: DamageType.DEATH,
}

_SCHOOLS: Dict[MagicType, MagicSchool] = {
    **{m: MagicSchool.ELEMENTAL for m in _DAMAGE_TYPES},
    MagicType.DAEMATI: MagicSchool.MIND,
    MagicType.HEALING: MagicSchool.HEALING,
    MagicType.SHIELD_CREATION: MagicSchool.WARDING,
}

_MANA_COSTS: Dict[MagicType, int] = {
    MagicType.HEALING: 15,
    MagicType.SHIELD_CREATION: 20,
    MagicType.LIGHT_MANIPULATION: 10,
    MagicType.FIRE_MANIPULATION: 25,
    MagicType.WATER_MANIPULATION: 25,
    MagicType.WIND_MANIPULATION: 25,
    MagicType.ICE_MANIPULATION: 25,
    MagicType.DARKNESS_MANIPULATION: 30,
    MagicType.SHAPESHIFTING: 40,
    MagicType.WINNOWING: 35,
    MagicType.DAEMATI: 50,
    MagicType.DEATH_MANIFESTATION: 60,
    MagicType.SEER: 40,
}


def school_multiplier(ability: MagicType, config: BalanceConfig) -> float:
    """Damage scaling for the ability's school under the given balance."""
    school = ability.school
    if school is MagicSchool.ELEMENTAL:
        return config.elemental_magic_multiplier
    if school is MagicSchool.MIND:
        return config.daemati_magic_multiplier
    if school is MagicSchool.HEALING:
        return config.healing_magic_multiplier
    if school is MagicSchool.WARDING:
        return config.shield_magic_multiplier
    return 1.0
