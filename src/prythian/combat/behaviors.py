"""Enemy behavior policies.

Each policy receives the acting enemy, a BehaviorContext through which it
issues actions, and the encounter's RNG. Actions go through the same resolver
as player actions; there is no enemy-only damage formula.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Protocol, Sequence

from ..core.rng import RandomSource
from ..errors import ConfigurationError
from .damage import CombatResult
from .entities import Combatant, EnemyBehavior
from .magic import MagicType

logger = logging.getLogger(__name__)

DEFENSIVE_RETREAT_THRESHOLD = 0.3
BERSERKER_FRENZY_THRESHOLD = 0.5
MAGIC_PREFERENCE = 0.5
ATTACK_PREFERENCE = 0.5


class BehaviorContext(Protocol):
    """Actions an enemy may take against the player during the enemy phase."""

    def attack_physical(self, enemy: Combatant) -> CombatResult:  # pragma: no cover - Protocol
        ...

    def attack_magic(self, enemy: Combatant, ability: MagicType) -> CombatResult:  # pragma: no cover - Protocol
        ...

    def announce(self, enemy: Combatant, event_type: str, message: str) -> None:  # pragma: no cover - Protocol
        ...

    def castable_abilities(self, enemy: Combatant) -> Sequence[MagicType]:  # pragma: no cover - Protocol
        """Known abilities the enemy can pay for right now."""
        ...


Policy = Callable[[Combatant, BehaviorContext, RandomSource], None]


def _random_ability(castable: Sequence[MagicType], rng: RandomSource) -> MagicType:
    return rng.choice(list(castable))


def aggressive(enemy: Combatant, ctx: BehaviorContext, rng: RandomSource) -> None:
    """Coin flip between a random affordable ability and a physical attack."""
    castable = ctx.castable_abilities(enemy)
    if castable and rng.random() < MAGIC_PREFERENCE:
        ctx.attack_magic(enemy, _random_ability(castable, rng))
    else:
        ctx.attack_physical(enemy)


def defensive(enemy: Combatant, ctx: BehaviorContext, rng: RandomSource) -> None:
    """Holds back when badly hurt, otherwise attacks half of the time.

    Enemy defending is only announced; it carries no damage reduction.
    """
    if enemy.health_fraction() < DEFENSIVE_RETREAT_THRESHOLD:
        ctx.announce(enemy, "defend", f"{enemy.name} takes a defensive stance!")
    elif rng.random() < ATTACK_PREFERENCE:
        ctx.attack_physical(enemy)
    else:
        ctx.announce(enemy, "defend", f"{enemy.name} defends!")


def tactical(enemy: Combatant, ctx: BehaviorContext, rng: RandomSource) -> None:
    """Prefers magic while the enemy has magic power and mana for an ability."""
    castable = ctx.castable_abilities(enemy)
    if castable and enemy.magic_power > 0:
        ctx.attack_magic(enemy, _random_ability(castable, rng))
    else:
        ctx.attack_physical(enemy)


def berserker(enemy: Combatant, ctx: BehaviorContext, rng: RandomSource) -> None:
    """Always attacks; below half health it strikes a second time."""
    ctx.attack_physical(enemy)
    if enemy.health_fraction() < BERSERKER_FRENZY_THRESHOLD:
        ctx.announce(enemy, "frenzy", f"{enemy.name} attacks again in a frenzy!")
        ctx.attack_physical(enemy)


def balanced(enemy: Combatant, ctx: BehaviorContext, rng: RandomSource) -> None:
    aggressive(enemy, ctx, rng)


POLICIES: Dict[EnemyBehavior, Policy] = {
    EnemyBehavior.AGGRESSIVE: aggressive,
    EnemyBehavior.DEFENSIVE: defensive,
    EnemyBehavior.TACTICAL: tactical,
    EnemyBehavior.BERSERKER: berserker,
    EnemyBehavior.BALANCED: balanced,
}

_unmapped: List[str] = [b.value for b in EnemyBehavior if b not in POLICIES]
if _unmapped:
    raise ConfigurationError(f"No policy registered for behaviors: {_unmapped}")


def act(enemy: Combatant, ctx: BehaviorContext, rng: RandomSource) -> None:
    """Dispatch the enemy's turn to the policy for its behavior tag."""
    policy = POLICIES[EnemyBehavior(enemy.behavior)]
    logger.debug("%s acts with %s policy", enemy.name, policy.__name__)
    policy(enemy, ctx, rng)
