import pytest

from prythian.combat.affinity import DamageType
from prythian.combat.damage import (
    attempt_flee,
    castable_abilities,
    combo_bonus,
    critical_chance,
    dodge_chance,
    flee_chance,
    magic_attack,
    physical_attack,
)
from prythian.combat.entities import Combatant
from prythian.combat.magic import MagicType
from prythian.config import BalanceConfig
from rng_stubs import ALWAYS, NEVER, ScriptedRNG


def make(name="Feyre", **kw):
    kw.setdefault("max_health", 100)
    return Combatant(name=name, **kw)


def test_plain_hit_equals_strength(flat_config):
    attacker = make(strength=20)
    defender = make("Bogge")
    res = physical_attack(attacker, defender, flat_config, ScriptedRNG())
    assert res.damage == 20
    assert res.damage_type is DamageType.PHYSICAL
    assert not res.dodged and not res.is_critical
    assert res.description == "Feyre attacked Bogge for 20 damage"
    # The resolver never mutates health.
    assert defender.health == 100


def test_dodge_yields_zero_and_skips_other_rolls(flat_config):
    rng = ScriptedRNG([ALWAYS])
    res = physical_attack(make(strength=20), make("Bogge"), flat_config, rng)
    assert res.damage == 0
    assert res.dodged
    assert res.description == "Bogge dodged the attack!"
    assert rng.random_calls == 1
    assert rng.uniform_calls == 0


def test_critical_hit_doubles_damage():
    cfg = BalanceConfig(min_damage_multiplier=1.0, max_damage_multiplier=1.0, combo_enabled=False)
    # First roll: dodge check fails; second roll: crit succeeds.
    rng = ScriptedRNG([NEVER, ALWAYS])
    res = physical_attack(make(strength=20), make("Bogge"), cfg, rng)
    assert res.is_critical
    assert res.damage == 40
    assert "CRITICAL HIT" in res.description


def test_variance_scales_damage(flat_config):
    cfg = flat_config.model_copy(update={"min_damage_multiplier": 0.85, "max_damage_multiplier": 1.15})
    low = physical_attack(make(strength=100), make("Bogge"), cfg, ScriptedRNG(variance=0.85))
    high = physical_attack(make(strength=100), make("Bogge"), cfg, ScriptedRNG(variance=1.15))
    assert low.damage == 85
    assert high.damage == 115


def test_damage_is_never_negative(flat_config):
    res = physical_attack(make(strength=5), make("Bogge"), flat_config, ScriptedRNG(), base_damage=lambda a: -50)
    assert res.damage == 0


def test_guarding_defender_halves_damage(flat_config):
    defender = make("Bogge", guarding=True)
    res = physical_attack(make(strength=20), defender, flat_config, ScriptedRNG())
    assert res.damage == 10
    assert res.was_blocked
    assert res.description.endswith("(Bogge was guarding)")


def test_combo_bonus_grows_and_caps():
    cfg = BalanceConfig()
    assert combo_bonus(0, cfg) == 0.0
    assert combo_bonus(1, cfg) == pytest.approx(0.10)
    assert combo_bonus(5, cfg) == pytest.approx(0.50)
    assert combo_bonus(12, cfg) == pytest.approx(0.50)
    assert combo_bonus(3, cfg.model_copy(update={"combo_enabled": False})) == 0.0


def test_combo_hits_raise_physical_damage(flat_config):
    cfg = flat_config.model_copy(update={"combo_enabled": True})
    res = physical_attack(make(strength=20), make("Bogge"), cfg, ScriptedRNG(), combo_hits=2)
    assert res.damage == 24


def test_damage_scale_applies(flat_config):
    res = physical_attack(make(strength=20), make("Bogge"), flat_config, ScriptedRNG(), damage_scale=1.5)
    assert res.damage == 30


def test_dodge_chance_is_monotonic_and_capped():
    cfg = BalanceConfig()
    chances = [dodge_chance(make("D", agility=a), cfg) for a in (0, 10, 30, 70, 100, 1000)]
    assert chances == sorted(chances)
    assert chances[0] == pytest.approx(0.05)
    assert max(chances) == pytest.approx(cfg.max_dodge_chance)


def test_critical_chance_is_monotonic_and_bounded():
    cfg = BalanceConfig()
    chances = [critical_chance(make("A", agility=a), cfg) for a in (0, 50, 100, 5000)]
    assert chances == sorted(chances)
    assert chances[0] == pytest.approx(0.15)
    assert chances[2] == pytest.approx(0.25)
    assert chances[-1] == 1.0


def test_magic_elemental_weakness(flat_config):
    caster = make(magic_power=20, abilities=[MagicType.FIRE_MANIPULATION])
    target = make("Frost Wyrm", element=DamageType.ICE)
    res = magic_attack(caster, target, MagicType.FIRE_MANIPULATION, flat_config, ScriptedRNG())
    # 20 power * 1.5 elemental school * 2.0 weakness
    assert res.damage == 60
    assert res.multiplier == 2.0
    assert res.damage_type is DamageType.FIRE
    assert res.description.endswith("It's super effective!")
    assert caster.mana == 40 - MagicType.FIRE_MANIPULATION.mana_cost


def test_immunity_is_not_a_dodge(flat_config):
    caster = make(magic_power=20, abilities=[MagicType.ICE_MANIPULATION])
    target = make("Frost Wyrm", element=DamageType.ICE)
    rng = ScriptedRNG()
    res = magic_attack(caster, target, MagicType.ICE_MANIPULATION, flat_config, rng)
    assert res.damage == 0
    assert not res.dodged
    assert res.multiplier == 0.0
    assert "no effect" in res.description
    assert "dodged" not in res.description
    assert rng.random_calls == 0

    dodge = physical_attack(make(strength=10), target, flat_config, ScriptedRNG([ALWAYS]))
    assert dodge.description != res.description


def test_unknown_ability_fizzles(flat_config):
    caster = make(magic_power=20)
    res = magic_attack(caster, make("Bogge"), MagicType.DAEMATI, flat_config, ScriptedRNG())
    assert res.fizzled
    assert res.damage == 0
    assert res.description == "Feyre doesn't know Daemati!"


def test_insufficient_mana_fizzles_without_spending(flat_config):
    caster = make(magic_power=20, mana=10, abilities=[MagicType.DAEMATI])
    res = magic_attack(caster, make("Bogge"), MagicType.DAEMATI, flat_config, ScriptedRNG())
    assert res.fizzled
    assert caster.mana == 10
    assert "lacks the mana" in res.description


def test_mana_costs_can_be_disabled(flat_config):
    cfg = flat_config.model_copy(update={"enforce_mana_costs": False})
    caster = make(magic_power=20, mana=0, abilities=[MagicType.DAEMATI])
    res = magic_attack(caster, make("Bogge"), MagicType.DAEMATI, cfg, ScriptedRNG())
    assert not res.fizzled
    assert res.damage == 40
    assert caster.mana == 0


def test_flee_chance_formula():
    cfg = BalanceConfig()
    player = make(agility=20, level=2)
    assert flee_chance(player, make("E", level=1), cfg) == pytest.approx(0.5)
    assert flee_chance(player, make("E", level=4), cfg) == pytest.approx(0.4)
    assert flee_chance(make(level=1), make("E", level=30), cfg) == 0.0
    assert flee_chance(make(agility=500), make("E"), cfg) == 1.0


def test_attempt_flee_outcomes():
    cfg = BalanceConfig()
    player, enemy = make(), make("Attor")
    ok = attempt_flee(player, enemy, cfg, ScriptedRNG([ALWAYS]))
    assert ok.success is True
    assert ok.damage == 0
    assert ok.description == "Feyre successfully fled from combat!"
    fail = attempt_flee(player, enemy, cfg, ScriptedRNG([NEVER]))
    assert fail.success is False
    assert fail.description == "Feyre failed to escape!"


def test_castable_abilities_respect_current_mana():
    caster = make(magic_power=20, mana=25, abilities=[MagicType.DAEMATI, MagicType.FIRE_MANIPULATION])
    cfg = BalanceConfig()
    assert castable_abilities(caster, cfg) == [MagicType.FIRE_MANIPULATION]
    caster.spend_mana(25)
    assert castable_abilities(caster, cfg) == []
    unlimited = cfg.model_copy(update={"enforce_mana_costs": False})
    assert castable_abilities(caster, unlimited) == [MagicType.DAEMATI, MagicType.FIRE_MANIPULATION]
