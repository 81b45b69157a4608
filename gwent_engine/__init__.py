"""
Gwent Engine - Two-player card game rules engine

A rules engine for a Gwent-style card battler. The engine owns the match
state and provides:
- Card catalog loading and deck building
- A phase scheduler driven by explicit ticks
- Deterministic zone transitions, abilities and strength computation
- A heuristic opponent
"""

__version__ = "0.1.0"
