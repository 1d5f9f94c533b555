import pytest

import prythian.combat.affinity as affinity_mod
from prythian.combat.affinity import (
    ELEMENTS,
    Affinity,
    Court,
    DamageType,
    affinity,
    damage_multiplier,
    effectiveness_message,
    element_for_court,
    resistances,
    weaknesses,
)
from prythian.errors import ConfigurationError


def test_every_element_pair_has_a_known_multiplier():
    allowed = {0.0, 0.5, 1.0, 1.5, 2.0}
    for attack in ELEMENTS:
        for defender in ELEMENTS:
            assert damage_multiplier(attack, defender) in allowed


def test_same_element_is_resisted_or_immune_except_wind():
    for element in ELEMENTS:
        aff = affinity(element, element)
        if element is DamageType.WIND:
            assert aff is Affinity.NEUTRAL
        else:
            assert aff in (Affinity.RESISTANT, Affinity.IMMUNE)


@pytest.mark.parametrize("neutral", [DamageType.PHYSICAL, DamageType.MAGICAL, DamageType.NONE])
def test_non_elemental_types_are_identity(neutral):
    for element in ELEMENTS:
        assert damage_multiplier(neutral, element) == 1.0
        assert damage_multiplier(element, neutral) == 1.0
    assert damage_multiplier(neutral, neutral) == 1.0


def test_lookup_uses_attack_then_defender_order():
    # Fire scorches ice, but ice barely chills fire.
    assert damage_multiplier(DamageType.FIRE, DamageType.ICE) == 2.0
    assert damage_multiplier(DamageType.ICE, DamageType.FIRE) == 0.5
    # Light and darkness are mutually very weak.
    assert affinity(DamageType.LIGHT, DamageType.DARKNESS) is Affinity.VERY_WEAK
    assert affinity(DamageType.DARKNESS, DamageType.LIGHT) is Affinity.VERY_WEAK
    assert affinity(DamageType.DEATH, DamageType.NATURE) is Affinity.VERY_WEAK


def test_effectiveness_messages():
    assert effectiveness_message(DamageType.FIRE, DamageType.ICE) == "It's super effective!"
    assert effectiveness_message(DamageType.WATER, DamageType.FIRE) == "It's effective!"
    assert effectiveness_message(DamageType.ICE, DamageType.ICE) == "It has no effect..."
    assert effectiveness_message(DamageType.NATURE, DamageType.FIRE) == "It's not very effective..."
    assert effectiveness_message(DamageType.LIGHT, DamageType.FIRE) == ""
    assert effectiveness_message(DamageType.PHYSICAL, DamageType.ICE) == ""


def test_weaknesses_and_resistances():
    assert weaknesses(DamageType.FIRE) == [DamageType.WATER, DamageType.WIND]
    assert resistances(DamageType.FIRE) == [DamageType.FIRE, DamageType.ICE, DamageType.NATURE]
    assert DamageType.FIRE in weaknesses(DamageType.ICE)
    assert weaknesses(DamageType.PHYSICAL) == []
    assert resistances(DamageType.NONE) == []


def test_courts_map_to_elements():
    assert element_for_court(Court.SPRING) is DamageType.NATURE
    assert element_for_court(Court.WINTER) is DamageType.ICE
    assert element_for_court(Court.NIGHT) is DamageType.DARKNESS
    assert element_for_court(Court.DAWN) is DamageType.LIGHT
    assert all(element_for_court(c).is_elemental for c in Court)


def test_incomplete_table_is_rejected(monkeypatch):
    broken = {k: dict(v) for k, v in affinity_mod._TABLE.items()}
    del broken[DamageType.WIND][DamageType.FIRE]
    monkeypatch.setattr(affinity_mod, "_TABLE", broken)
    with pytest.raises(ConfigurationError, match="Wind"):
        affinity_mod._validate_table()
