from prythian.combat.encounter import EncounterState, start
from prythian.combat.entities import Combatant
from prythian.core.events import COMBAT_ENDED, EventBus
from rng_stubs import ScriptedRNG


def hero(**kw):
    kw.setdefault("max_health", 100)
    return Combatant(name="Feyre", **kw)


def test_defend_halves_every_hit_in_the_enemy_phase_once(flat_config):
    attor = Combatant(name="Attor", max_health=100, strength=20)
    naga = Combatant(name="Naga", max_health=100, strength=10)
    enc = start(hero(), [attor, naga], config=flat_config, rng=ScriptedRNG())

    enc.defend()
    # 20 -> 10 and 10 -> 5 while guarding
    assert enc.player.health == 85
    assert "Feyre takes a defensive stance!" in enc.log
    assert any(line.endswith("(Feyre was guarding)") for line in enc.log)
    assert enc.player.guarding is False

    # Guard expired: full damage next phase
    enc.use_item("potion_healing")
    assert enc.player.health == 55


def test_successful_flee_ends_encounter_without_damage(flat_config):
    cfg = flat_config.model_copy(update={"base_flee_chance": 1.0})
    bus = EventBus()
    ended = []
    bus.on(COMBAT_ENDED, lambda name, payload: ended.append(payload))
    attor = Combatant(name="Attor", max_health=50, strength=30)
    enc = start(hero(), [attor], config=cfg, rng=ScriptedRNG(), events=bus)

    assert enc.flee() is True
    assert enc.state is EncounterState.FLED
    assert enc.is_over and not enc.is_victory and not enc.is_defeat
    assert enc.player.health == 100
    assert attor.health == 50
    assert "Feyre successfully fled from combat!" in enc.log
    assert enc.log[-1] == "Feyre escaped the encounter."
    assert ended[0]["victory"] is False
    assert ended[0]["state"] is EncounterState.FLED
    assert enc.summary().experience == 0


def test_failed_flee_hands_the_turn_to_enemies(flat_config):
    cfg = flat_config.model_copy(update={"base_flee_chance": 0.0})
    enc = start(hero(), [Combatant(name="Attor", max_health=50, strength=30)], config=cfg, rng=ScriptedRNG())

    assert enc.flee() is False
    assert "Feyre failed to escape!" in enc.log
    assert enc.player.health == 70
    assert enc.state is EncounterState.PLAYER_TURN
    assert enc.turn == 2


def test_flee_is_rolled_against_the_strongest_enemy(flat_config):
    weak = Combatant(name="Bogge", max_health=50, strength=1, level=1)
    strong = Combatant(name="Attor", max_health=50, strength=50, level=5)
    enc = start(hero(level=1), [weak, strong], config=flat_config, rng=ScriptedRNG([0.15]))
    # 0.30 base - 4 levels * 0.05 = 0.10 against the Attor; the Bogge alone would allow 0.30.
    assert enc.flee() is False
    assert enc.player.health == 49
