"""The creature operations consumed by the HTTP layer.

:class:`CreatureService` wires the store, cache, image sink and generator
together and exposes one method per user-facing operation. Every mutating
method patches the cached gallery after the store write succeeds.
"""

from __future__ import annotations

from doodlemon.core.action_images import ActionImage, ActionImageCache
from doodlemon.core.config import DoodlemonConfig
from doodlemon.core.creature_store import CreatureStore
from doodlemon.core.errors import NotFoundError
from doodlemon.core.gallery_cache import GalleryCacheSync, TTLStore
from doodlemon.core.generator import GeminiGenerator
from doodlemon.core.image_sink import ImageSink
from doodlemon.core.models import Creature
from doodlemon.core.pipeline import GenerationPipeline


class CreatureService:
    """Entry point for generate, like, delete, gallery and action images.

    Args:
        pipeline: Doodle -> creature pipeline.
        store: Creature repository.
        gallery: Gallery cache sync.
        action_images: Per-power action image cache.
    """

    def __init__(
        self,
        pipeline: GenerationPipeline,
        store: CreatureStore,
        gallery: GalleryCacheSync,
        action_images: ActionImageCache,
    ) -> None:
        self.pipeline = pipeline
        self.store = store
        self.gallery = gallery
        self.action_images = action_images

    @classmethod
    def from_config(
        cls,
        config: DoodlemonConfig,
        generator: GeminiGenerator | None = None,
        cache: TTLStore | None = None,
    ) -> CreatureService:
        """Build a service with the default collaborators for ``config``."""
        generator = generator or GeminiGenerator(config)
        cache = cache or TTLStore(maxsize=config.cache_maxsize)
        store = CreatureStore(config.database_path)
        sink = ImageSink(config.images_dir, config.images_url_prefix)
        gallery = GalleryCacheSync(cache, store, ttl=config.gallery_cache_ttl)

        pipeline = GenerationPipeline(
            generator,
            store,
            sink,
            gallery,
            min_doodle_length=config.min_doodle_length,
            doodle_source_length=config.doodle_source_length,
        )
        action_images = ActionImageCache(generator, store, sink, gallery)
        return cls(pipeline, store, gallery, action_images)

    def generate(self, doodle_data: str, api_key: str | None = None) -> Creature:
        return self.pipeline.generate(doodle_data, api_key)

    def get_gallery(self) -> list[Creature]:
        return self.gallery.get_gallery()

    def record_like(self, creature_id: int) -> Creature:
        """Add one like.

        Raises:
            NotFoundError: If the creature does not exist.
        """
        updated = self.store.like(creature_id)
        if updated is None:
            raise NotFoundError(creature_id)
        self.gallery.on_like(creature_id, updated)
        return updated

    def delete_record(self, creature_id: int) -> bool:
        """Delete a creature.

        Raises:
            NotFoundError: If the creature does not exist.
        """
        if not self.store.delete(creature_id):
            raise NotFoundError(creature_id)
        self.gallery.on_delete(creature_id)
        return True

    def get_or_create_action_image(
        self,
        creature_id: int,
        power_name: str,
        power_description: str | None = None,
        api_key: str | None = None,
        force: bool = False,
    ) -> ActionImage:
        return self.action_images.get_or_create(
            creature_id,
            power_name,
            power_description=power_description,
            api_key=api_key,
            force=force,
        )

    def stats(self) -> dict:
        """Return gallery statistics straight from the store."""
        return {
            "total_creatures": self.store.count(),
            "total_likes": self.store.total_likes(),
        }
