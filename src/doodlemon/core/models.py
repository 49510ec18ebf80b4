"""Creature records shared by the store, the cache and the API.

Models
------
Power
    One named ability of a creature.
Creature
    A persisted generation result. ``id`` is ``None`` until the store
    assigns one.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Power(BaseModel):
    """A single creature power.

    Attributes:
        name: Display name of the power (e.g. ``"Flame Burst"``).
        description: One-line description; mentions the creature's name.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""


class Creature(BaseModel):
    """A creature record.

    Records are frozen: a mutation produces a new record, so a list held
    in the gallery cache is never changed underneath a reader.

    Attributes:
        id: Store-assigned identifier, stable for the record's lifetime.
        name: Creature name.
        type: One or two category tags joined by ``/`` (e.g. ``"Fire/Ice"``).
        powers: At least one power.
        characteristics: Free-text personality blurb.
        image_url: URL of the primary (or placeholder) image.
        doodle_source: Truncated snippet of the source doodle, display only.
        likes: Like counter, never negative.
        action_images: Power name -> action image URL, filled lazily.
    """

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    name: str
    type: str
    powers: list[Power] = Field(..., min_length=1)
    characteristics: str = ""
    image_url: str
    doodle_source: str = ""
    likes: int = Field(default=0, ge=0)
    action_images: dict[str, str] = Field(default_factory=dict)
