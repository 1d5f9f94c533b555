from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from .affinity import Court, DamageType, element_for_court
from .magic import MagicType

logger = logging.getLogger(__name__)

XP_PER_LEVEL = 100
HEALTH_PER_LEVEL = 10
MAGIC_PER_LEVEL = 5
STRENGTH_PER_LEVEL = 3
AGILITY_PER_LEVEL = 3
MANA_PER_MAGIC_POWER = 2


class EnemyBehavior(str, Enum):
    """Closed set of enemy AI policies."""

    AGGRESSIVE = "aggressive"
    DEFENSIVE = "defensive"
    TACTICAL = "tactical"
    BERSERKER = "berserker"
    BALANCED = "balanced"


class CharacterClass(str, Enum):
    HIGH_FAE = "high_fae"
    LESSER_FAE = "lesser_fae"
    HUMAN = "human"
    ILLYRIAN = "illyrian"
    ATTOR = "attor"
    SURIEL = "suriel"


@dataclass(frozen=True)
class BaseStats:
    health: int
    magic_power: int
    strength: int
    agility: int


CLASS_BASE_STATS: Dict[CharacterClass, BaseStats] = {
    CharacterClass.HIGH_FAE: BaseStats(health=150, magic_power=100, strength=80, agility=70),
    CharacterClass.ILLYRIAN: BaseStats(health=180, magic_power=60, strength=120, agility=90),
    CharacterClass.LESSER_FAE: BaseStats(health=100, magic_power=60, strength=60, agility=80),
    CharacterClass.HUMAN: BaseStats(health=80, magic_power=0, strength=50, agility=60),
    CharacterClass.ATTOR: BaseStats(health=120, magic_power=40, strength=90, agility=100),
    CharacterClass.SURIEL: BaseStats(health=70, magic_power=150, strength=30, agility=40),
}


@dataclass
class Combatant:
    """A role-agnostic fighter shared by the player and enemies.

    Attributes:
        name: Display name used in logs.
        max_health: Maximum health (must be >= 1).
        strength: Drives physical damage.
        agility: Drives critical, dodge and flee chances.
        magic_power: Drives magic damage; also the default mana pool size.
        level: Used by the flee level penalty and experience rewards.
        health: Current health, defaults to max_health, clamped to [0, max_health].
        max_mana / mana: Secondary resource spent on abilities.
        abilities: Known magic abilities, in learn order.
        element: Elemental alignment used when this combatant is hit by magic.
        behavior: AI policy, only consulted for enemies.
        experience_reward / gold_reward / loot_table: enemy-only reward data.
        guarding: One enemy-phase damage reduction flag set by defend().
    """

    name: str
    max_health: int
    strength: int = 0
    agility: int = 0
    magic_power: int = 0
    level: int = 1
    health: Optional[int] = None
    max_mana: Optional[int] = None
    mana: Optional[int] = None
    abilities: List[MagicType] = field(default_factory=list)
    element: DamageType = DamageType.NONE
    behavior: EnemyBehavior = EnemyBehavior.BALANCED
    experience_reward: int = 0
    gold_reward: int = 0
    loot_table: List[str] = field(default_factory=list)
    experience: int = 0
    guarding: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Combatant.name must be a non-empty string")
        try:
            self.max_health = int(self.max_health)
            self.strength = int(self.strength)
            self.agility = int(self.agility)
            self.magic_power = int(self.magic_power)
            self.level = int(self.level)
        except (TypeError, ValueError) as exc:
            raise ValueError("Combatant numeric fields must be integers") from exc
        if self.max_health <= 0:
            raise ValueError("max_health must be >= 1")
        if self.level < 1:
            raise ValueError("level must be >= 1")
        self.element = DamageType(self.element)
        self.behavior = EnemyBehavior(self.behavior)
        if self.strength < 0 or self.agility < 0 or self.magic_power < 0:
            logger.warning("Negative attributes detected for %s; clamping to zero.", self.name)
            self.strength = max(0, self.strength)
            self.agility = max(0, self.agility)
            self.magic_power = max(0, self.magic_power)

        self.health = self.max_health if self.health is None else max(0, min(self.max_health, int(self.health)))
        if self.max_mana is None:
            self.max_mana = self.magic_power * MANA_PER_MAGIC_POWER
        self.max_mana = max(0, int(self.max_mana))
        self.mana = self.max_mana if self.mana is None else max(0, min(self.max_mana, int(self.mana)))

        # Deduplicate while keeping learn order.
        abilities = list(self.abilities)
        self.abilities = []
        for ability in abilities:
            self.learn_ability(ability)

    @property
    def alive(self) -> bool:
        return self.health > 0

    def health_fraction(self) -> float:
        return self.health / self.max_health

    def has_ability(self, ability: MagicType) -> bool:
        return ability in self.abilities

    def learn_ability(self, ability: MagicType) -> None:
        if ability not in self.abilities:
            self.abilities.append(MagicType(ability))

    def take_damage(self, amount: int) -> int:
        """Apply damage, clamping health to zero.

        Returns:
            The actual damage applied (may be less than amount if health was low).
        """
        if amount < 0:
            raise ValueError("damage must be non-negative")
        before = self.health
        self.health = max(0, self.health - int(amount))
        applied = before - self.health
        logger.debug("%s takes %d damage (HP: %d/%d)", self.name, applied, self.health, self.max_health)
        return applied

    def heal(self, amount: int) -> int:
        """Heal by amount, not exceeding max health. Returns actual healed amount."""
        if amount < 0:
            raise ValueError("Heal amount cannot be negative.")
        if not self.alive:
            return 0
        prev = self.health
        self.health = min(self.max_health, self.health + int(amount))
        return self.health - prev

    def spend_mana(self, cost: int) -> bool:
        """Deduct cost from the mana pool if affordable."""
        if cost < 0:
            raise ValueError("mana cost cannot be negative")
        if self.mana < cost:
            return False
        self.mana -= cost
        return True

    def gain_experience(self, xp: int) -> int:
        """Add experience and apply level ups. Returns the number of levels gained."""
        if xp < 0:
            raise ValueError("experience cannot be negative")
        self.experience += xp
        gained = 0
        required = self.level * XP_PER_LEVEL
        while self.experience >= required:
            self.experience -= required
            self._level_up()
            gained += 1
            required = self.level * XP_PER_LEVEL
        return gained

    def _level_up(self) -> None:
        self.level += 1
        self.max_health += HEALTH_PER_LEVEL
        self.health = self.max_health
        self.magic_power += MAGIC_PER_LEVEL
        self.strength += STRENGTH_PER_LEVEL
        self.agility += AGILITY_PER_LEVEL
        logger.info("%s reached level %d", self.name, self.level)


def create_character(
    name: str,
    character_class: CharacterClass = CharacterClass.HUMAN,
    court: Optional[Court] = None,
    abilities: Iterable[MagicType] = (),
    level: int = 1,
) -> Combatant:
    """Build a combatant from its class base stats.

    A court allegiance, when given, sets the combatant's elemental alignment.
    """
    base = CLASS_BASE_STATS[CharacterClass(character_class)]
    return Combatant(
        name=name,
        max_health=base.health,
        strength=base.strength,
        agility=base.agility,
        magic_power=base.magic_power,
        level=level,
        abilities=list(abilities),
        element=element_for_court(court) if court is not None else DamageType.NONE,
    )
