"""
Combat package.

Contains:
- Elemental affinity lookups (affinity).
- Damage, critical, dodge and flee resolution with injected RNG (damage).
- Enemy AI policies dispatched by behavior tag (behaviors).
- The turn-based Encounter state machine and its structured log (encounter, log).
- Combatants, character classes and the enemy roster (entities, roster).
"""

from .affinity import Affinity, Court, DamageType, damage_multiplier
from .damage import CombatResult, attempt_flee, magic_attack, physical_attack
from .encounter import Encounter, EncounterState, EncounterSummary, start
from .entities import CharacterClass, Combatant, EnemyBehavior, create_character
from .log import CombatEvent, CombatLog
from .magic import MagicSchool, MagicType
from .roster import EnemyDefinition, EnemyDifficulty, EnemyRoster, create_enemy

__all__ = [
    "Affinity",
    "Court",
    "DamageType",
    "damage_multiplier",
    "CombatResult",
    "attempt_flee",
    "magic_attack",
    "physical_attack",
    "Encounter",
    "EncounterState",
    "EncounterSummary",
    "start",
    "CharacterClass",
    "Combatant",
    "EnemyBehavior",
    "create_character",
    "CombatEvent",
    "CombatLog",
    "MagicSchool",
    "MagicType",
    "EnemyDefinition",
    "EnemyDifficulty",
    "EnemyRoster",
    "create_enemy",
]
