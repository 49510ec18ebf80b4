"""Offline creature generator used when the model is unavailable.

Everything here is a pure function of the random source passed in, so a
seeded ``random.Random`` gives reproducible creatures in tests. No network
or disk access happens in this module.
"""

from __future__ import annotations

import base64
import io
import random

from PIL import Image

from doodlemon.core.models import Creature, Power

NAMES = ("Pika", "Squir", "Bulba", "Charm", "Eevee", "Mew", "Abra", "Draco")
SUFFIXES = ("-Doodle", "-Sketch", "-Ink", "-Scribble")
PRIMARY_TYPES = ("Fire", "Water", "Grass", "Electric", "Ghost", "Psychic", "Rock")
SECONDARY_TYPES = ("Fairy", "Steel", "Ice", "Dragon", "Ground", "Flying", "Dark")

POWER_SETS = (
    (
        Power(name="Hydro Pump", description="Blasts foes with high-pressure water."),
        Power(name="Ink Spray", description="Squirts ink to obscure vision."),
    ),
    (
        Power(name="Flame Burst", description="Explodes embers on contact."),
        Power(name="Char Mark", description="Leaves a scorching trail."),
    ),
    (
        Power(name="Leaf Blade", description="Cuts with razor-sharp leaves."),
        Power(name="Vine Swipe", description="Whips foes with vines."),
    ),
    (
        Power(name="Thunder Jolt", description="Quick electric shock."),
        Power(name="Spark Trail", description="Leaves crackling sparks behind."),
    ),
    (
        Power(name="Shadow Sneak", description="Strikes from the shadows."),
        Power(name="Spook Flick", description="Startles enemies briefly."),
    ),
)

CHARACTERISTICS = "Loves to draw; slightly grumpy."

# Every name the simulator can produce.
SIMULATED_NAMES = frozenset(f"{name}{suffix}" for name in NAMES for suffix in SUFFIXES)


def doodle_snippet(doodle_data: str | None, length: int = 60) -> str:
    """Truncated provenance snippet stored alongside a creature."""
    return (doodle_data or "")[:length] + "..."


def placeholder_image(size: int = 64) -> str:
    """Return a transparent PNG filler image as base64."""
    buffer = io.BytesIO()
    Image.new("RGBA", (size, size), (0, 0, 0, 0)).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def simulate_creature(rng: random.Random, image_url: str, doodle_source: str = "") -> Creature:
    """Build an unsaved creature from the fixed pools.

    Args:
        rng: Random source; seed it for deterministic output.
        image_url: URL of the (placeholder) image to attach.
        doodle_source: Provenance snippet to store.

    Returns:
        A ``Creature`` without an ``id``.
    """
    powers = list(rng.choice(POWER_SETS))
    name = f"{rng.choice(NAMES)}{rng.choice(SUFFIXES)}"
    creature_type = f"{rng.choice(PRIMARY_TYPES)}/{rng.choice(SECONDARY_TYPES)}"

    return Creature(
        name=name,
        type=creature_type,
        powers=powers,
        characteristics=CHARACTERISTICS,
        image_url=image_url,
        doodle_source=doodle_source,
    )
