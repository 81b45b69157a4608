"""
Card Definitions - Pydantic models for the faction data files.

One JSON file per faction:

    {
        "faction": "Northern Realms",
        "leaders": [CardDefinition, ...],
        "cards": [CardDefinition, ...]
    }

Definitions are immutable once loaded; runtime state lives on
engine_core.state.Card instances cloned from them.
"""

from typing import Optional
from pydantic import BaseModel, Field


class CardTarget(BaseModel):
    """Reference to another card (muster members, avenger summons, morph forms)."""
    model_config = {"frozen": True}

    id: int
    name: str = ""


class CardDefinition(BaseModel):
    """A catalog card definition, exactly as authored in the data files."""
    model_config = {"frozen": True, "populate_by_name": True}

    id: int = Field(..., ge=0, description="Catalog id, unique across all files")
    faction: str = Field(..., description="Faction string, e.g. 'Nilfgaard'")
    name: str
    quote: str = ""
    strength: int = Field(0, ge=0)
    range: str = Field("", description="melee, agile, ranged or siege")
    type: str = Field("standard", description="standard, hero, special or leader")
    ability: Optional[str] = Field(None, description="Ability tag, e.g. 'muster'")
    target: list[CardTarget] = Field(default_factory=list)
    image_path: str = Field("", alias="imagePath")
    video_path: str = Field("", alias="videoPath")
    unlocked: bool = True
    challenge_reward_card: bool = Field(False, alias="challengeRewardCard")

    @property
    def target_ids(self) -> list[int]:
        return [t.id for t in self.target]


class FactionFile(BaseModel):
    """Schema of one faction data file."""
    faction: str
    leaders: list[CardDefinition] = Field(default_factory=list)
    cards: list[CardDefinition] = Field(default_factory=list)
