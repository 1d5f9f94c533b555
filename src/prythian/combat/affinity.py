"""Elemental affinity lookup.

The table is hand-authored lore data and is reproduced exactly; it is never
recomputed. Rows are keyed by the *defending* element and columns by the
*attacking* element, so ``_TABLE[Ice][Fire]`` answers "how hard does Fire hit
an Ice defender?" (very hard). The public lookup takes arguments in the
natural (attack, defender) order.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


class DamageType(str, Enum):
    """Closed set of damage tags used for affinity lookups and colour coding."""

    PHYSICAL = "Physical"
    MAGICAL = "Magical"
    FIRE = "Fire"
    ICE = "Ice"
    WATER = "Water"
    WIND = "Wind"
    DARKNESS = "Darkness"
    LIGHT = "Light"
    NATURE = "Nature"
    DEATH = "Death"
    NONE = "None"

    @property
    def is_elemental(self) -> bool:
        return self in ELEMENTS


class Affinity(Enum):
    """How a defender reacts to an attacking element, with its damage multiplier."""

    VERY_WEAK = 2.0
    WEAK = 1.5
    NEUTRAL = 1.0
    RESISTANT = 0.5
    IMMUNE = 0.0

    @property
    def multiplier(self) -> float:
        return self.value


class Court(str, Enum):
    SPRING = "Spring"
    SUMMER = "Summer"
    AUTUMN = "Autumn"
    WINTER = "Winter"
    NIGHT = "Night"
    DAWN = "Dawn"
    DAY = "Day"


ELEMENTS = (
    DamageType.FIRE,
    DamageType.ICE,
    DamageType.WATER,
    DamageType.WIND,
    DamageType.LIGHT,
    DamageType.DARKNESS,
    DamageType.NATURE,
    DamageType.DEATH,
)

_F, _I, _WA, _WI = DamageType.FIRE, DamageType.ICE, DamageType.WATER, DamageType.WIND
_L, _D, _N, _DE = DamageType.LIGHT, DamageType.DARKNESS, DamageType.NATURE, DamageType.DEATH
_VW, _W, _NE, _R, _IM = Affinity.VERY_WEAK, Affinity.WEAK, Affinity.NEUTRAL, Affinity.RESISTANT, Affinity.IMMUNE

# defender -> attacker -> affinity
_TABLE: Dict[DamageType, Dict[DamageType, Affinity]] = {
    _F: {_I: _R, _N: _R, _WA: _W, _WI: _W, _F: _R, _L: _NE, _D: _NE, _DE: _NE},
    _I: {_F: _VW, _WA: _R, _WI: _NE, _N: _R, _I: _IM, _L: _NE, _D: _NE, _DE: _W},
    _WA: {_F: _R, _I: _W, _WI: _NE, _N: _W, _WA: _R, _L: _NE, _D: _NE, _DE: _NE},
    _WI: {_F: _R, _I: _NE, _WA: _NE, _N: _NE, _WI: _NE, _L: _NE, _D: _W, _DE: _NE},
    _L: {_F: _NE, _I: _NE, _WA: _NE, _WI: _NE, _N: _R, _L: _IM, _D: _VW, _DE: _W},
    _D: {_F: _W, _I: _NE, _WA: _NE, _WI: _R, _N: _NE, _L: _VW, _D: _IM, _DE: _R},
    _N: {_F: _VW, _I: _W, _WA: _R, _WI: _NE, _L: _R, _D: _NE, _N: _IM, _DE: _VW},
    _DE: {_F: _NE, _I: _R, _WA: _NE, _WI: _NE, _L: _W, _D: _R, _N: _R, _DE: _IM},
}

_COURT_ELEMENTS: Dict[Court, DamageType] = {
    Court.SPRING: DamageType.NATURE,
    Court.SUMMER: DamageType.FIRE,
    Court.AUTUMN: DamageType.FIRE,
    Court.WINTER: DamageType.ICE,
    Court.NIGHT: DamageType.DARKNESS,
    Court.DAWN: DamageType.LIGHT,
    Court.DAY: DamageType.LIGHT,
}


def _validate_table() -> None:
    for defender in ELEMENTS:
        row = _TABLE.get(defender)
        if row is None:
            raise ConfigurationError(f"Affinity table is missing the row for {defender.value}")
        missing = [a.value for a in ELEMENTS if a not in row]
        if missing:
            raise ConfigurationError(f"Affinity table row {defender.value} is missing {missing}")


_validate_table()


def affinity(attack: DamageType, defender: DamageType) -> Affinity:
    """Return how a defender of one element reacts to an attacking element.

    Non-elemental types (Physical, Magical, None) are the identity on either side.
    """
    if not attack.is_elemental or not defender.is_elemental:
        return Affinity.NEUTRAL
    return _TABLE[defender][attack]


def damage_multiplier(attack: DamageType, defender: DamageType) -> float:
    return affinity(attack, defender).multiplier


def effectiveness_message(attack: DamageType, defender: DamageType) -> str:
    """Short combat-feedback phrase for an interaction; empty for neutral."""
    aff = affinity(attack, defender)
    if aff is Affinity.VERY_WEAK:
        return "It's super effective!"
    if aff is Affinity.WEAK:
        return "It's effective!"
    if aff is Affinity.IMMUNE:
        return "It has no effect..."
    if aff is Affinity.RESISTANT:
        return "It's not very effective..."
    return ""


def weaknesses(element: DamageType) -> List[DamageType]:
    """Attacking elements this element takes extra damage from."""
    if not element.is_elemental:
        return []
    return [a for a in ELEMENTS if _TABLE[element][a] in (Affinity.WEAK, Affinity.VERY_WEAK)]


def resistances(element: DamageType) -> List[DamageType]:
    """Attacking elements this element takes reduced or no damage from."""
    if not element.is_elemental:
        return []
    return [a for a in ELEMENTS if _TABLE[element][a] in (Affinity.RESISTANT, Affinity.IMMUNE)]


def element_for_court(court: Court) -> DamageType:
    return _COURT_ELEMENTS[court]
