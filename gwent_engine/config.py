"""
Match Settings - Read-only configuration consumed by the engine.

Settings are supplied once at match setup and never change during a
match. They can be built directly, from GWENT_* environment variables,
or from a JSON file:

    settings = MatchSettings(initial_hand_size=8)
    settings = MatchSettings.from_env()
    settings = MatchSettings.from_file("settings.json")

Delays are opaque pacing values (seconds) that the scheduler waits out
between visible steps; they never affect game rules.
"""

from __future__ import annotations
import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


ENV_PREFIX = "GWENT_"


class MatchSettings(BaseModel):
    """Configuration surface of a match."""
    model_config = {"frozen": True}

    # Setup
    initial_hand_size: int = Field(10, ge=0, le=30, description="Cards drawn at match start")
    randomise_player_deck: bool = Field(False, description="Ignore the saved deck and randomise")
    randomise_deck_size: int = Field(25, ge=1, description="Size of randomised decks")
    redraw_limit: int = Field(2, ge=0, description="Cards the human may redraw before round 1")
    leader_cards_enabled: bool = True
    faction_ability_enabled: bool = Field(True, description="Nilfgaard wins drawn rounds")

    # Abilities
    spy_draw_amount: int = Field(2, ge=0, description="Cards drawn by Spy / DrawEnemyDiscard")
    scorch_row_threshold: int = Field(10, ge=0, description="Row sum needed for ScorchRow")

    # Pacing (seconds)
    turn_delay: float = Field(1.5, ge=0.0)
    round_delay: float = Field(2.5, ge=0.0)
    ai_thinking_time: float = Field(1.0, ge=0.0)
    ability_trigger_delay: float = Field(1.0, ge=0.0)
    card_summon_delay: float = Field(0.3, ge=0.0)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> MatchSettings:
        """
        Build settings from GWENT_<FIELD> environment variables.

        Unset variables keep their defaults.
        """
        env = environ if environ is not None else os.environ
        values: dict[str, Any] = {}
        for name in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None:
                values[name] = raw
        return cls.model_validate(values)

    @classmethod
    def from_file(cls, path: str | Path) -> MatchSettings:
        """Load settings from a JSON file."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.model_validate(data)

    def without_delays(self) -> MatchSettings:
        """Copy with every pacing delay set to zero (tests and simulation)."""
        return self.model_copy(update={
            "turn_delay": 0.0,
            "round_delay": 0.0,
            "ai_thinking_time": 0.0,
            "ability_trigger_delay": 0.0,
            "card_summon_delay": 0.0,
        })
