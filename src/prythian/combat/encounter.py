from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from ..config import BalanceConfig
from ..core.events import COMBAT_ENDED, COMBAT_STARTED, EventBus
from ..core.rng import RNG, RandomSource
from ..errors import InvalidAction
from . import behaviors
from .damage import (
    BaseDamage,
    CombatResult,
    attempt_flee,
    castable_abilities,
    magic_attack,
    physical_attack,
    strength_base,
)
from .entities import Combatant
from .log import CombatEvent, CombatLog
from .magic import MagicType

logger = logging.getLogger(__name__)

LootRoller = Callable[[Combatant, RandomSource], List[str]]


class EncounterState(str, Enum):
    NOT_STARTED = "not_started"
    PLAYER_TURN = "player_turn"
    ENEMY_TURN = "enemy_turn"
    VICTORY = "victory"
    DEFEAT = "defeat"
    FLED = "fled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({EncounterState.VICTORY, EncounterState.DEFEAT, EncounterState.FLED})


@dataclass(frozen=True)
class EncounterSummary:
    """Aggregate outcome handed to statistics, quest and reward collaborators."""

    state: EncounterState
    turns: int
    experience: int
    gold: int
    loot: Tuple[str, ...]
    damage_dealt: int
    damage_taken: int
    critical_hits: int


def loot_table_roller(chance: float) -> LootRoller:
    """Build a roller that drops each loot-table entry independently with the given chance."""

    def roll(enemy: Combatant, rng: RandomSource) -> List[str]:
        return [item_id for item_id in enemy.loot_table if rng.random() < chance]

    return roll


class Encounter:
    """Turn-based fight between one player and an ordered group of enemies.

    State flow:
        NOT_STARTED -start()-> PLAYER_TURN
        PLAYER_TURN -action-> (VICTORY | ENEMY_TURN -> PLAYER_TURN | DEFEAT)
        PLAYER_TURN -flee()-> FLED on success, enemy phase on failure

    Victory is checked after every player action so a killing blow skips the
    enemy phase. Defeat is only checked once the whole enemy phase has run.

    All player actions raise InvalidAction (after logging a warning) when
    called outside the player's turn; the encounter is left unchanged.
    Callers must serialize calls; nothing here is thread-safe.
    """

    def __init__(
        self,
        player: Combatant,
        enemies: Iterable[Combatant],
        config: Optional[BalanceConfig] = None,
        rng: Optional[RandomSource] = None,
        events: Optional[EventBus] = None,
        loot_roller: Optional[LootRoller] = None,
        base_damage: BaseDamage = strength_base,
    ) -> None:
        enemy_list = list(enemies)
        if not enemy_list:
            logger.warning("Attempted to create an encounter without enemies.")
            raise InvalidAction("An encounter needs at least one enemy")
        if any(e is player for e in enemy_list):
            raise InvalidAction("The player cannot also be an enemy")

        self._player = player
        self._enemies: Tuple[Combatant, ...] = tuple(enemy_list)
        self.config = config or BalanceConfig.default()
        self.rng: RandomSource = rng if rng is not None else RNG()
        self.events_bus = events or EventBus()
        self._loot_roller = loot_roller or loot_table_roller(self.config.loot_drop_chance)
        self._base_damage = base_damage

        self._state = EncounterState.NOT_STARTED
        self._turn = 0
        self._log = CombatLog()
        self._combo = 0
        self._combo_misses = 0

        self._damage_dealt = 0
        self._damage_taken = 0
        self._critical_hits = 0
        self._experience = 0
        self._gold = 0
        self._loot: Tuple[str, ...] = ()

    # --------------- Read accessors ---------------

    @property
    def player(self) -> Combatant:
        return self._player

    @property
    def enemies(self) -> Tuple[Combatant, ...]:
        return self._enemies

    @property
    def state(self) -> EncounterState:
        return self._state

    @property
    def turn(self) -> int:
        return self._turn

    @property
    def combo(self) -> int:
        """Current streak of consecutive player hits."""
        return self._combo

    @property
    def log(self) -> List[str]:
        return self._log.messages()

    @property
    def events(self) -> List[CombatEvent]:
        return self._log.events()

    @property
    def is_victory(self) -> bool:
        return self._state is EncounterState.VICTORY

    @property
    def is_defeat(self) -> bool:
        return self._state is EncounterState.DEFEAT

    @property
    def is_over(self) -> bool:
        return self._state.is_terminal

    def living_enemies(self) -> List[Combatant]:
        return [e for e in self._enemies if e.alive]

    def strongest_enemy(self) -> Combatant:
        """Living enemy with the highest strength; ties go to the earliest in order."""
        living = self.living_enemies()
        if not living:
            raise InvalidAction("No living enemies remain")
        return max(living, key=lambda e: e.strength)

    def summary(self) -> EncounterSummary:
        return EncounterSummary(
            state=self._state,
            turns=self._turn,
            experience=self._experience,
            gold=self._gold,
            loot=self._loot,
            damage_dealt=self._damage_dealt,
            damage_taken=self._damage_taken,
            critical_hits=self._critical_hits,
        )

    # --------------- Player actions ---------------

    def start(self) -> "Encounter":
        if self._state is not EncounterState.NOT_STARTED:
            self._reject("start", f"encounter already {self._state.value}")
        self._state = EncounterState.PLAYER_TURN
        self._turn = 1
        self._log.add("info", "=== Combat Encounter Started ===")
        self._log.add("info", f"Enemies: {', '.join(e.name for e in self._enemies)}")
        self.events_bus.emit(COMBAT_STARTED, {"player": self._player, "enemies": self._enemies})
        return self

    def attack_physical(self, target: Combatant) -> CombatResult:
        self._require_player_turn("attack_physical")
        self._require_target(target)
        result = physical_attack(
            self._player,
            target,
            self.config,
            self.rng,
            base_damage=self._base_damage,
            combo_hits=self._combo,
        )
        self._apply_player_result(target, result)
        self._end_player_turn()
        return result

    def attack_magic(self, target: Combatant, ability: MagicType) -> CombatResult:
        self._require_player_turn("attack_magic")
        self._require_target(target)
        result = magic_attack(self._player, target, ability, self.config, self.rng, combo_hits=self._combo)
        self._apply_player_result(target, result, ability=MagicType(ability))
        self._end_player_turn()
        return result

    def defend(self) -> None:
        """Guard against every attack in the coming enemy phase."""
        self._require_player_turn("defend")
        self._player.guarding = True
        self._log.add("defend", f"{self._player.name} takes a defensive stance!", actor=self._player.name, turn=self._turn)
        self._end_player_turn()

    def flee(self) -> bool:
        """Try to escape the strongest living enemy. Failure hands the turn to the enemies."""
        self._require_player_turn("flee")
        result = attempt_flee(self._player, self.strongest_enemy(), self.config, self.rng)
        self._log.add("flee", result.description, actor=self._player.name, success=result.success, turn=self._turn)
        if result.success:
            self._state = EncounterState.FLED
            self._log.add("fled", f"{self._player.name} escaped the encounter.")
            self._emit_ended(victory=False)
            return True
        self._end_player_turn()
        return False

    def use_item(self, item_id: str) -> None:
        """Record an item use; the item's effect is applied by the inventory beforehand."""
        self._require_player_turn("use_item")
        if not item_id:
            self._reject("use_item", "item id must be non-empty")
        self._log.add("item", f"{self._player.name} used {item_id}", actor=self._player.name, item=item_id, turn=self._turn)
        self._end_player_turn()

    # --------------- Internal helpers ---------------

    def _reject(self, action: str, reason: str) -> None:
        logger.warning("Rejected %s: %s", action, reason)
        raise InvalidAction(f"Cannot {action}: {reason}")

    def _require_player_turn(self, action: str) -> None:
        if self._state is not EncounterState.PLAYER_TURN:
            self._reject(action, f"not the player's turn (state={self._state.value})")

    def _require_target(self, target: Combatant) -> None:
        if not any(e is target for e in self._enemies):
            self._reject("target", f"{getattr(target, 'name', target)!s} is not part of this encounter")
        if not target.alive:
            self._reject("target", f"{target.name} is already defeated")

    def _apply_player_result(
        self, target: Combatant, result: CombatResult, ability: Optional[MagicType] = None
    ) -> None:
        applied = target.take_damage(result.damage)
        self._damage_dealt += applied
        if result.is_critical:
            self._critical_hits += 1
        self._log.add(
            "attack",
            result.description,
            actor=self._player.name,
            target=target.name,
            damage=applied,
            critical=result.is_critical,
            ability=ability.value if ability else None,
            turn=self._turn,
        )
        self._register_combo(result)
        if not target.alive:
            self._log.add("defeat", f"{target.name} has been defeated!", target=target.name, turn=self._turn)

    def _register_combo(self, result: CombatResult) -> None:
        if result.dodged:
            self._combo_misses += 1
            if self._combo_misses > self.config.combo_dodge_tolerance:
                logger.debug("Combo broken after %d dodges", self._combo_misses)
                self._combo = 0
                self._combo_misses = 0
        elif result.landed:
            self._combo += 1
            self._combo_misses = 0

    def _end_player_turn(self) -> None:
        if not self.living_enemies():
            self._handle_victory()
            return
        self._state = EncounterState.ENEMY_TURN
        self._run_enemy_phase()

    def _run_enemy_phase(self) -> None:
        phase = _EnemyPhase(self)
        for enemy in self._enemies:
            if enemy.alive:
                behaviors.act(enemy, phase, self.rng)
        # The guard covers the whole enemy phase, then expires.
        self._player.guarding = False

        if not self._player.alive:
            self._handle_defeat()
            return
        self._turn += 1
        self._state = EncounterState.PLAYER_TURN
        self._log.add("info", f"--- Turn {self._turn} ---")

    def _handle_victory(self) -> None:
        self._state = EncounterState.VICTORY
        self._log.add("victory", "=== VICTORY ===")

        total_xp = 0
        gold = 0
        loot: List[str] = []
        for enemy in self._enemies:
            total_xp += enemy.experience_reward
            gold += enemy.gold_reward
            loot.extend(self._loot_roller(enemy, self.rng))
        total_xp = int(round(total_xp * self.config.experience_multiplier))

        self._experience = total_xp
        self._gold = gold
        self._loot = tuple(loot)

        levels = self._player.gain_experience(total_xp)
        self._log.add("info", f"Gained {total_xp} experience!", experience=total_xp)
        if levels:
            self._log.add("info", f"{self._player.name} reached level {self._player.level}!", level=self._player.level)
        if gold:
            self._log.add("info", f"Found {gold} gold.", gold=gold)
        if loot:
            self._log.add("info", f"Loot dropped: {', '.join(loot)}", loot=list(loot))
        self._emit_ended(victory=True)

    def _handle_defeat(self) -> None:
        self._state = EncounterState.DEFEAT
        self._log.add("fallen", "=== DEFEAT ===")
        self._log.add("fallen", f"{self._player.name} has fallen...")
        self._emit_ended(victory=False)

    def _enemy_attack(self, enemy: Combatant, ability: Optional[MagicType] = None) -> CombatResult:
        scale = self.config.enemy_damage_multiplier
        if ability is None:
            result = physical_attack(
                enemy, self._player, self.config, self.rng, base_damage=self._base_damage, damage_scale=scale
            )
        else:
            result = magic_attack(enemy, self._player, ability, self.config, self.rng, damage_scale=scale)
        self._record_enemy_hit(enemy, result, ability)
        return result

    def _record_enemy_hit(self, enemy: Combatant, result: CombatResult, ability: Optional[MagicType]) -> None:
        applied = self._player.take_damage(result.damage)
        self._damage_taken += applied
        self._log.add(
            "attack",
            result.description,
            actor=enemy.name,
            target=self._player.name,
            damage=applied,
            critical=result.is_critical,
            ability=ability.value if ability else None,
            turn=self._turn,
        )

    def _record_enemy_action(self, enemy: Combatant, event_type: str, message: str) -> None:
        self._log.add(event_type, message, actor=enemy.name, turn=self._turn)

    def _emit_ended(self, victory: bool) -> None:
        self.events_bus.emit(
            COMBAT_ENDED,
            {"player": self._player, "enemies": self._enemies, "victory": victory, "state": self._state},
        )


class _EnemyPhase:
    """BehaviorContext handed to enemy policies; every action is resolved by the Encounter."""

    def __init__(self, encounter: Encounter) -> None:
        self._enc = encounter

    def attack_physical(self, enemy: Combatant) -> CombatResult:
        return self._enc._enemy_attack(enemy)

    def attack_magic(self, enemy: Combatant, ability: MagicType) -> CombatResult:
        return self._enc._enemy_attack(enemy, MagicType(ability))

    def announce(self, enemy: Combatant, event_type: str, message: str) -> None:
        self._enc._record_enemy_action(enemy, event_type, message)

    def castable_abilities(self, enemy: Combatant) -> List[MagicType]:
        return castable_abilities(enemy, self._enc.config)


def start(player: Combatant, enemies: Iterable[Combatant], **kwargs) -> Encounter:
    """Create an encounter and start it immediately.

    Keyword arguments are forwarded to Encounter (config, rng, events, loot_roller, base_damage).
    """
    return Encounter(player, enemies, **kwargs).start()
