"""Probability and damage resolution.

Every function here is stateless: outcomes depend only on the two combatants,
the balance config and the injected RNG. The only side effect is the mana a
magic attack spends; health is never touched here (the Encounter applies the
returned damage).

Roll order is fixed so that scripted RNG streams replay exactly:
  physical: dodge roll (random) -> variance (uniform) -> critical roll (random)
  magic:    variance (uniform) -> critical roll (random)
  flee:     one success roll (random)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..config import BalanceConfig
from ..core.rng import RandomSource
from .affinity import DamageType, damage_multiplier, effectiveness_message
from .entities import Combatant
from .magic import MagicType, school_multiplier

logger = logging.getLogger(__name__)

BaseDamage = Callable[[Combatant], float]


def strength_base(attacker: Combatant) -> float:
    """Default physical base damage: the attacker's strength."""
    return float(attacker.strength)


@dataclass(frozen=True)
class CombatResult:
    """Outcome of a single resolver call.

    Attributes:
        damage: Final integer damage to apply (>= 0).
        damage_type: Resolved damage tag.
        description: Human-readable log line.
        is_critical: Whether the critical roll succeeded.
        dodged: The defender evaded; damage is 0.
        was_blocked: A guarding defender reduced the damage.
        fizzled: A magic attack could not be cast (unknown ability or no mana).
        multiplier: Elemental affinity multiplier applied (1.0 for physical).
        success: Only set for flee attempts.
    """

    damage: int
    damage_type: DamageType
    description: str
    is_critical: bool = False
    dodged: bool = False
    was_blocked: bool = False
    fizzled: bool = False
    multiplier: float = 1.0
    success: Optional[bool] = None

    @property
    def landed(self) -> bool:
        """True for an attack that connected, including immune (0 damage) hits."""
        return not self.dodged and not self.fizzled and self.success is None


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _roll(rng: RandomSource, probability: float) -> bool:
    return rng.random() < probability


def dodge_chance(defender: Combatant, config: BalanceConfig) -> float:
    p = config.base_dodge_chance + defender.agility * config.agility_dodge_bonus
    return _clamp(p, 0.0, config.max_dodge_chance)


def critical_chance(attacker: Combatant, config: BalanceConfig) -> float:
    p = config.critical_hit_chance + attacker.agility * config.agility_crit_bonus
    return _clamp(p, 0.0, 1.0)


def flee_chance(player: Combatant, enemy: Combatant, config: BalanceConfig) -> float:
    level_gap = max(0, enemy.level - player.level)
    p = config.base_flee_chance + player.agility * config.agility_flee_bonus - level_gap * config.level_flee_penalty
    return _clamp(p, 0.0, 1.0)


def combo_bonus(combo_hits: int, config: BalanceConfig) -> float:
    """Additive damage bonus for a streak of previous consecutive hits."""
    if not config.combo_enabled or combo_hits <= 0:
        return 0.0
    return min(combo_hits, config.combo_max_hits) * config.combo_damage_bonus_per_hit


def castable_abilities(caster: Combatant, config: BalanceConfig) -> List[MagicType]:
    """Known abilities the caster can cast now; all of them when mana is not enforced."""
    if not config.enforce_mana_costs:
        return list(caster.abilities)
    return [a for a in caster.abilities if a.mana_cost <= caster.mana]


def _variance(rng: RandomSource, config: BalanceConfig) -> float:
    return rng.uniform(config.min_damage_multiplier, config.max_damage_multiplier)


def _finalize(
    raw: float, defender: Combatant, config: BalanceConfig, combo_hits: int, damage_scale: float
) -> Tuple[int, bool]:
    raw *= 1.0 + combo_bonus(combo_hits, config)
    raw *= damage_scale
    blocked = defender.guarding and config.defend_damage_reduction > 0.0
    if blocked:
        raw *= 1.0 - config.defend_damage_reduction
    return max(0, int(round(raw))), blocked


def physical_attack(
    attacker: Combatant,
    defender: Combatant,
    config: BalanceConfig,
    rng: RandomSource,
    *,
    base_damage: BaseDamage = strength_base,
    combo_hits: int = 0,
    damage_scale: float = 1.0,
) -> CombatResult:
    """Resolve a physical attack.

    Args:
        attacker: The attacking combatant.
        defender: The defending combatant; its agility drives the dodge chance.
        config: Balance constants.
        rng: Injected randomness.
        base_damage: Pluggable base formula of attacker stats.
        combo_hits: Previous consecutive hits by this attacker in the encounter.
        damage_scale: Extra multiplier (difficulty scaling of enemy damage).

    Returns:
        A fresh CombatResult; the defender is not modified.
    """
    p_dodge = dodge_chance(defender, config)
    if _roll(rng, p_dodge):
        logger.debug("%s dodged %s (p=%.3f)", defender.name, attacker.name, p_dodge)
        return CombatResult(
            damage=0,
            damage_type=DamageType.PHYSICAL,
            description=f"{defender.name} dodged the attack!",
            dodged=True,
        )

    variance = _variance(rng, config)
    raw = base_damage(attacker) * variance
    p_crit = critical_chance(attacker, config)
    is_critical = _roll(rng, p_crit)
    if is_critical:
        raw *= config.critical_hit_multiplier
    damage, blocked = _finalize(raw, defender, config, combo_hits, damage_scale)
    logger.debug(
        "Physical %s -> %s: variance=%.3f crit=%s (p=%.3f) combo=%d blocked=%s damage=%d",
        attacker.name,
        defender.name,
        variance,
        is_critical,
        p_crit,
        combo_hits,
        blocked,
        damage,
    )

    if is_critical:
        description = f"{attacker.name} landed a CRITICAL HIT on {defender.name} for {damage} damage!"
    else:
        description = f"{attacker.name} attacked {defender.name} for {damage} damage"
    if blocked:
        description += f" ({defender.name} was guarding)"
    return CombatResult(
        damage=damage,
        damage_type=DamageType.PHYSICAL,
        description=description,
        is_critical=is_critical,
        was_blocked=blocked,
    )


def magic_attack(
    attacker: Combatant,
    defender: Combatant,
    ability: MagicType,
    config: BalanceConfig,
    rng: RandomSource,
    *,
    combo_hits: int = 0,
    damage_scale: float = 1.0,
) -> CombatResult:
    """Resolve a magic attack, spending the caster's mana.

    Damage scales from magic power and the ability's school, then by the
    affinity of the ability's element against the defender's element.
    Immunity yields a 0-damage result that is not a dodge.
    """
    ability = MagicType(ability)
    damage_type = ability.damage_type
    if not attacker.has_ability(ability):
        return CombatResult(
            damage=0,
            damage_type=damage_type,
            description=f"{attacker.name} doesn't know {ability.value}!",
            fizzled=True,
        )
    if config.enforce_mana_costs and not attacker.spend_mana(ability.mana_cost):
        logger.debug("%s cannot afford %s (%d/%d mana)", attacker.name, ability.value, attacker.mana, ability.mana_cost)
        return CombatResult(
            damage=0,
            damage_type=damage_type,
            description=f"{attacker.name} lacks the mana to cast {ability.value}!",
            fizzled=True,
        )

    multiplier = damage_multiplier(damage_type, defender.element)
    if multiplier == 0.0:
        return CombatResult(
            damage=0,
            damage_type=damage_type,
            description=f"{attacker.name} used {ability.value} on {defender.name}. It has no effect...",
            multiplier=0.0,
        )

    variance = _variance(rng, config)
    raw = attacker.magic_power * school_multiplier(ability, config) * variance
    p_crit = critical_chance(attacker, config)
    is_critical = _roll(rng, p_crit)
    if is_critical:
        raw *= config.critical_hit_multiplier
    raw *= multiplier
    damage, blocked = _finalize(raw, defender, config, combo_hits, damage_scale)
    logger.debug(
        "Magic %s (%s) -> %s: variance=%.3f crit=%s affinity=%.1f blocked=%s damage=%d",
        attacker.name,
        ability.value,
        defender.name,
        variance,
        is_critical,
        multiplier,
        blocked,
        damage,
    )

    if is_critical:
        description = f"{attacker.name} unleashed {ability.value} on {defender.name} - CRITICAL HIT for {damage} damage!"
    else:
        description = f"{attacker.name} used {ability.value} on {defender.name} for {damage} damage"
    effectiveness = effectiveness_message(damage_type, defender.element)
    if effectiveness:
        description += f" {effectiveness}"
    if blocked:
        description += f" ({defender.name} was guarding)"
    return CombatResult(
        damage=damage,
        damage_type=damage_type,
        description=description,
        is_critical=is_critical,
        was_blocked=blocked,
        multiplier=multiplier,
    )


def attempt_flee(player: Combatant, enemy: Combatant, config: BalanceConfig, rng: RandomSource) -> CombatResult:
    """Single boolean roll against flee_chance; no damage or state change."""
    probability = flee_chance(player, enemy, config)
    roll = rng.random()
    success = roll < probability
    logger.debug("Flee attempt vs %s: roll=%.5f, probability=%.5f, success=%s", enemy.name, roll, probability, success)
    if success:
        description = f"{player.name} successfully fled from combat!"
    else:
        description = f"{player.name} failed to escape!"
    return CombatResult(damage=0, damage_type=DamageType.NONE, description=description, success=success)
