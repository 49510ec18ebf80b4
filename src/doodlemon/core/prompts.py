"""Prompt texts for the three generation calls.

Each call combines a fixed boilerplate section, which sets the look of the
creature images, with the request-specific part. Sections are separated by
double newlines, the same way for every builder.

Usage
-----
::

    prompt = build_action_prompt(
        name="Pyrolisk",
        creature_type="Fire/Flying",
        characteristics="Proud and restless.",
        power_name="Flame Burst",
        power_description="Pyrolisk explodes embers on contact.",
    )
"""

from __future__ import annotations

ALLOWED_TYPES = (
    "Normal",
    "Fire",
    "Water",
    "Grass",
    "Electric",
    "Ice",
    "Fighting",
    "Poison",
    "Ground",
    "Flying",
    "Psychic",
    "Bug",
    "Rock",
    "Ghost",
    "Dragon",
    "Dark",
    "Steel",
    "Fairy",
)

# Fixed visual direction shared by every image call.
_STYLE_BOILERPLATE = (
    "Render a single pocket-monster style creature as clean, vibrant cel-shaded "
    "digital art with bold outlines, a simple soft background and no text or watermark."
)

_DOODLE_INSTRUCTION = (
    "Turn this rough hand-drawn doodle into a finished creature illustration. Keep the "
    "silhouette, pose and the most recognisable features of the doodle."
)

METADATA_PROMPT = (
    "Identify and design an already existing pocket monster matching the reference, for "
    "example bulbasaur, pikachu or squirtle. Use allowed types and include the name in "
    "each power description."
)

_METADATA_FORMAT = (
    "Respond with a JSON object with the keys: "
    '"name" (string), "type" (list of one or two allowed types), '
    '"powers" (list of two objects with "name" and "description"), '
    '"characteristics" (one short sentence about its personality).'
)


def build_doodle_prompt() -> str:
    """Prompt for turning a doodle into the primary creature image."""
    return "\n\n".join([_DOODLE_INSTRUCTION, _STYLE_BOILERPLATE])


def build_metadata_prompt(instruction: str = METADATA_PROMPT) -> str:
    """Prompt for structured metadata about a reference creature image.

    Args:
        instruction: The task instruction; the allowed types and the JSON
            response format are always appended.
    """
    parts = [instruction.strip()]
    parts.append("Allowed types: " + ", ".join(ALLOWED_TYPES) + ".")
    parts.append(_METADATA_FORMAT)
    return "\n\n".join(parts)


def build_action_prompt(
    name: str,
    creature_type: str,
    characteristics: str,
    power_name: str,
    power_description: str | None = None,
) -> str:
    """Prompt for an action shot of a creature using one power.

    Empty optional values are omitted (no blank sections in the output).
    """
    parts = [
        f"Show {name}, the creature in the reference image, using its power "
        f'"{power_name}" in a dynamic battle scene.'
    ]

    stripped_description = (power_description or "").strip()
    if stripped_description:
        parts.append(f"Power: {stripped_description}")

    details = []
    if creature_type.strip():
        details.append(f"Type: {creature_type.strip()}.")
    if characteristics.strip():
        details.append(f"Personality: {characteristics.strip()}")
    if details:
        parts.append(" ".join(details))

    parts.append("Keep the creature's design identical to the reference.")
    parts.append(_STYLE_BOILERPLATE)
    return "\n\n".join(parts)
