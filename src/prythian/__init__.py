"""
Prythian combat core.

Contains:
- The Encounter state machine that sequences player and enemy phases.
- The damage/probability resolver (hits, criticals, dodges, flee attempts).
- The elemental affinity table and enemy behavior policies.
"""

__version__ = "0.1.0"
