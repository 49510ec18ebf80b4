"""Doodle -> creature generation pipeline.

:class:`GenerationPipeline` turns a validated doodle into a stored creature:

1. Generate the creature image from the doodle and save it (``primary``).
2. Ask the text model for name, type, powers and characteristics, grounded
   on the image from step 1.
3. Normalize powers so every description mentions the creature's name.
4. Normalize the type to ``"A"`` or ``"A/B"``.
5. Store the creature.
6. Prepend it to the cached gallery list.

Any generation failure in steps 1-2 switches to the offline simulator
(:mod:`doodlemon.core.simulator`) with a ``placeholder`` image. The caller
always receives a stored creature once the input is valid; the fallback is
only visible as a logged warning.
"""

from __future__ import annotations

import base64
import binascii
import logging
import random
import re
from typing import Any

from doodlemon.core.creature_store import CreatureStore
from doodlemon.core.errors import GenerationError, ValidationError
from doodlemon.core.gallery_cache import GalleryCacheSync
from doodlemon.core.generator import GeminiGenerator
from doodlemon.core.image_sink import ImageSink, strip_data_url
from doodlemon.core.models import Creature, Power
from doodlemon.core.prompts import METADATA_PROMPT, build_metadata_prompt
from doodlemon.core.simulator import doodle_snippet, placeholder_image, simulate_creature

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Sketchy"
DEFAULT_TYPE = "Normal"
DEFAULT_CHARACTERISTICS = "Cheerful and imaginative."
DEFAULT_POWERS = (
    Power(name="Ink Splash", description="Splashes ink playfully."),
    Power(name="Doodle Dash", description="Dashes leaving doodle lines."),
)

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/=]+$")
_GENERIC_REFERENTS = re.compile(r"\b(the user|the creature|the character)\b", re.IGNORECASE)


def coerce_powers(raw: Any) -> list[Power]:
    """Read the model's ``powers`` field, falling back to the default pair.

    Entries that are not objects with a ``name`` are dropped. If nothing
    usable remains, :data:`DEFAULT_POWERS` is returned.
    """
    powers: list[Power] = []
    if isinstance(raw, list):
        for item in raw:
            if not isinstance(item, dict):
                continue
            name = str(item.get("name") or "").strip()
            if not name:
                continue
            powers.append(Power(name=name, description=str(item.get("description") or "")))
    return powers or list(DEFAULT_POWERS)


def name_powers(powers: list[Power], name: str) -> list[Power]:
    """Make every power description mention ``name``.

    A description that already mentions the name only has its generic
    referents ("the creature", "the user", "the character") replaced by the
    name. Otherwise the name is prepended to the replaced text, whose first
    letter is lower-cased.
    """
    mention = re.compile(rf"(?<!\w){re.escape(name)}(?!\w)", re.IGNORECASE)
    named: list[Power] = []

    for power in powers:
        has_name = mention.search(power.description) is not None
        replaced = _GENERIC_REFERENTS.sub(lambda _m: name, power.description)

        if not has_name:
            trimmed = replaced.strip()
            lowered = trimmed[:1].lower() + trimmed[1:]
            replaced = f"{name} {lowered}".rstrip()

        named.append(Power(name=power.name, description=replaced))
    return named


def normalize_type(raw: Any) -> str:
    """Join up to two type tags with ``/``; fall back to ``Normal``.

    A non-blank string is used verbatim. A blank one counts as missing.
    """
    if isinstance(raw, (list, tuple)):
        tags = [str(tag).strip() for tag in raw if str(tag).strip()]
        if tags:
            return "/".join(tags[:2])
    elif isinstance(raw, str) and raw.strip():
        return raw
    return DEFAULT_TYPE


def normalize_metadata(meta: dict[str, Any], image_url: str, doodle_source: str) -> Creature:
    """Build an unsaved creature from raw model metadata."""
    name = str(meta.get("name") or "").strip() or DEFAULT_NAME
    characteristics = str(meta.get("characteristics") or "").strip() or DEFAULT_CHARACTERISTICS

    return Creature(
        name=name,
        type=normalize_type(meta.get("type")),
        powers=name_powers(coerce_powers(meta.get("powers")), name),
        characteristics=characteristics,
        image_url=image_url,
        doodle_source=doodle_source,
    )


class GenerationPipeline:
    """Create creatures from doodles, degrading to the simulator on failure.

    Args:
        generator: Gemini wrapper for the two generation calls.
        store: Creature repository.
        sink: Image sink for primary and placeholder images.
        gallery: Gallery cache sync, notified after every insert.
        rng: Random source for the simulator (seed it in tests).
        min_doodle_length: Minimum accepted base64 length.
        doodle_source_length: Length of the stored provenance snippet.
    """

    def __init__(
        self,
        generator: GeminiGenerator,
        store: CreatureStore,
        sink: ImageSink,
        gallery: GalleryCacheSync,
        *,
        rng: random.Random | None = None,
        min_doodle_length: int = 100,
        doodle_source_length: int = 60,
    ) -> None:
        self.generator = generator
        self.store = store
        self.sink = sink
        self.gallery = gallery
        self.rng = rng or random.Random()
        self.min_doodle_length = min_doodle_length
        self.doodle_source_length = doodle_source_length

    def validate_doodle(self, doodle_data: Any) -> str:
        """Check a doodle payload and return its bare base64 text.

        Raises:
            ValidationError: If the payload is not base64 or too short.
        """
        if not isinstance(doodle_data, str):
            raise ValidationError("Invalid base64 image data")

        doodle = strip_data_url(doodle_data.strip())
        if len(doodle) < self.min_doodle_length or not _BASE64_RE.match(doodle):
            raise ValidationError("Invalid base64 image data")

        try:
            base64.b64decode(doodle, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError("Invalid base64 image data") from e
        return doodle

    def generate(self, doodle_data: str, api_key: str | None = None) -> Creature:
        """Generate, store and cache a creature for a doodle.

        Args:
            doodle_data: Base64 doodle image (a data URL is accepted).
            api_key: Optional per-request Gemini API key.

        Returns:
            The stored creature.

        Raises:
            ValidationError: If the doodle is rejected. No external call
                is made in that case.
        """
        doodle = self.validate_doodle(doodle_data)
        snippet = doodle_snippet(doodle, self.doodle_source_length)

        try:
            creature = self._generate_with_model(doodle, snippet, api_key)
        except GenerationError as e:
            logger.warning(f"Falling back to simulated generation: {e}")
            creature = self._simulate(snippet)

        saved = self.store.insert(creature)
        self.gallery.on_insert(saved)
        return saved

    def _generate_with_model(self, doodle: str, snippet: str, api_key: str | None) -> Creature:
        image_b64 = self.generator.image_from_doodle(doodle, api_key)
        try:
            image_url = self.sink.save(image_b64, "primary")
        except ValidationError as e:
            raise GenerationError(f"Model returned an unusable image: {e}") from e

        try:
            meta = self.generator.metadata_from_image(
                build_metadata_prompt(METADATA_PROMPT),
                f"data:image/png;base64,{image_b64}",
                api_key,
            )
        except GenerationError:
            logger.warning(f"Primary image {image_url} is left without a creature")
            raise
        return normalize_metadata(meta, image_url, snippet)

    def _simulate(self, snippet: str) -> Creature:
        image_url = self.sink.save(placeholder_image(), "placeholder")
        creature = simulate_creature(self.rng, image_url, snippet)
        return creature.model_copy(update={"powers": name_powers(creature.powers, creature.name)})
