from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Outcome lines are worth surfacing at INFO; rolls and attacks stay at DEBUG.
_INFO_EVENTS = frozenset({"defeat", "victory", "fled", "fallen"})


@dataclass(frozen=True)
class CombatEvent:
    """One entry of an encounter's log.

    Types used by the encounter: "info", "attack", "defend", "frenzy", "flee",
    "item", "defeat", "victory", "fallen", "fled". Attack events carry actor,
    target, damage, critical, ability and turn in `data`.
    """

    type: str
    message: str
    data: Optional[Dict[str, Any]] = None

    @property
    def turn(self) -> Optional[int]:
        return (self.data or {}).get("turn")


class CombatLog:
    """Append-only record of an encounter, readable as strings or structured events."""

    def __init__(self) -> None:
        self._events: List[CombatEvent] = []

    def add(self, event_type: str, message: str, **data: Any) -> CombatEvent:
        ev = CombatEvent(type=event_type, message=message, data=data or None)
        self._events.append(ev)
        logger.log(logging.INFO if event_type in _INFO_EVENTS else logging.DEBUG, message)
        return ev

    def events(self, event_type: Optional[str] = None, turn: Optional[int] = None) -> List[CombatEvent]:
        """Logged events in order, optionally narrowed to one type and/or turn."""
        return [
            ev
            for ev in self._events
            if (event_type is None or ev.type == event_type) and (turn is None or ev.turn == turn)
        ]

    def messages(self) -> List[str]:
        return [ev.message for ev in self._events]

    def __len__(self) -> int:
        return len(self._events)
