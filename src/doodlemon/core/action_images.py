"""Lazy, durable action images per creature power."""

from __future__ import annotations

import logging
from typing import NamedTuple

from doodlemon.core.creature_store import CreatureStore
from doodlemon.core.errors import GenerationError, NotFoundError, ValidationError
from doodlemon.core.gallery_cache import GalleryCacheSync
from doodlemon.core.generator import GeminiGenerator
from doodlemon.core.image_sink import ImageSink

logger = logging.getLogger(__name__)


class ActionImage(NamedTuple):
    url: str
    cached: bool


class ActionImageCache:
    """Memoize one action image per (creature, power) on the creature itself.

    A stored image is returned as-is unless ``force`` is set. There is no
    simulator fallback here: a generation failure reaches the caller.

    Args:
        generator: Gemini wrapper used to draw the action shot.
        store: Creature repository holding the ``action_images`` map.
        sink: Image sink for ``action`` images and for reading the
            creature's primary image.
        gallery: Optional gallery sync, told about the updated creature.
    """

    def __init__(
        self,
        generator: GeminiGenerator,
        store: CreatureStore,
        sink: ImageSink,
        gallery: GalleryCacheSync | None = None,
    ) -> None:
        self.generator = generator
        self.store = store
        self.sink = sink
        self.gallery = gallery

    def get_or_create(
        self,
        creature_id: int,
        power_name: str,
        power_description: str | None = None,
        api_key: str | None = None,
        force: bool = False,
    ) -> ActionImage:
        """Return the action image URL for one power, generating it if needed.

        Raises:
            NotFoundError: If the creature does not exist.
            GenerationError: If the model call fails.
        """
        creature = self.store.get_by_id(creature_id)
        if creature is None:
            raise NotFoundError(creature_id)

        existing = creature.action_images.get(power_name)
        if existing and not force:
            return ActionImage(url=existing, cached=True)

        try:
            reference = self.sink.load(creature.image_url)
        except (OSError, ValidationError) as e:
            raise GenerationError(f"Reference image unavailable for creature #{creature_id}") from e

        image_b64 = self.generator.action_image(
            reference,
            name=creature.name,
            creature_type=creature.type,
            characteristics=creature.characteristics,
            power_name=power_name,
            power_description=power_description,
            api_key=api_key,
        )
        try:
            url = self.sink.save(image_b64, "action")
        except ValidationError as e:
            raise GenerationError(f"Model returned an unusable image: {e}") from e

        updated = self.store.set_action_image(creature_id, power_name, url)
        if updated is None:
            raise NotFoundError(creature_id)

        logger.info(f"Generated action image for #{creature_id} '{power_name}': {url}")
        if self.gallery is not None:
            self.gallery.on_update(updated)
        return ActionImage(url=url, cached=False)
