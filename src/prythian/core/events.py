"""
A minimal, synchronous event bus used to notify collaborators (statistics,
quests, presentation) about encounter milestones.
Listeners are invoked in registration order.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, Dict, List

logger = logging.getLogger(__name__)

Listener = Callable[[str, Dict[str, Any]], None]

COMBAT_STARTED = "combat_started"
COMBAT_ENDED = "combat_ended"


class EventBus:
    """Simple publish/subscribe event bus."""

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, List[Listener]] = defaultdict(list)

    def on(self, event_name: str, listener: Listener) -> None:
        """Register a listener for a specific event name."""
        self._listeners[event_name].append(listener)

    def off(self, event_name: str, listener: Listener) -> None:
        """Remove a previously registered listener; unknown listeners are ignored."""
        try:
            self._listeners[event_name].remove(listener)
        except ValueError:
            logger.debug("Listener %s was not registered for '%s'", listener, event_name)

    def emit(self, event_name: str, payload: Dict[str, Any] | None = None) -> None:
        """Emit an event with optional payload, notifying all listeners."""
        if payload is None:
            payload = {}
        listeners = list(self._listeners.get(event_name, []))
        logger.debug("Emitting '%s' to %d listener(s)", event_name, len(listeners))
        for listener in listeners:
            listener(event_name, payload)
