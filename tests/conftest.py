"""Shared pytest fixtures for Doodlemon tests."""

import base64
import io
import random
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from doodlemon.api.main import create_app
from doodlemon.core.action_images import ActionImageCache
from doodlemon.core.config import DoodlemonConfig
from doodlemon.core.creature_store import CreatureStore
from doodlemon.core.errors import GenerationError
from doodlemon.core.gallery_cache import GalleryCacheSync, TTLStore
from doodlemon.core.image_sink import ImageSink
from doodlemon.core.pipeline import GenerationPipeline
from doodlemon.core.service import CreatureService


def make_png_b64(seed: int = 0, size: int = 32) -> str:
    """Return a small noisy PNG as base64 (well over 100 characters)."""
    rng = random.Random(seed)
    img = Image.new("RGB", (size, size))
    img.putdata(
        [(rng.randrange(256), rng.randrange(256), rng.randrange(256)) for _ in range(size * size)]
    )
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


class FakeGenerator:
    """In-memory stand-in for GeminiGenerator that records its calls."""

    def __init__(
        self,
        meta: dict | None = None,
        fail_image: bool = False,
        fail_metadata: bool = False,
        fail_action: bool = False,
    ):
        self.meta = meta if meta is not None else {
            "name": "Pyrolisk",
            "type": ["Fire", "Flying"],
            "powers": [
                {"name": "Flame Burst", "description": "The creature explodes embers on contact."},
                {"name": "Ash Cloud", "description": "Pyrolisk hides in a cloud of ash."},
            ],
            "characteristics": "Proud and restless.",
        }
        self.fail_image = fail_image
        self.fail_metadata = fail_metadata
        self.fail_action = fail_action
        self.calls: list[tuple] = []

    def image_from_doodle(self, doodle_data, api_key=None):
        self.calls.append(("image_from_doodle", api_key))
        if self.fail_image:
            raise GenerationError("quota exceeded")
        return make_png_b64(seed=1)

    def metadata_from_image(self, prompt, reference_image, api_key=None):
        self.calls.append(("metadata_from_image", api_key))
        if self.fail_metadata:
            raise GenerationError("timeout")
        return self.meta

    def action_image(
        self,
        reference_image,
        name,
        creature_type,
        characteristics,
        power_name,
        power_description=None,
        api_key=None,
    ):
        self.calls.append(("action_image", power_name))
        if self.fail_action:
            raise GenerationError("invalid key")
        return make_png_b64(seed=len(self.calls) + 100)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> DoodlemonConfig:
    """Create a test configuration with temporary directories."""
    return DoodlemonConfig(
        _env_file=None,
        gemini_api_key=None,
        data_dir=temp_dir / "data",
        images_dir=temp_dir / "images",
        gallery_cache_ttl=300,
    )


@pytest.fixture
def doodle_b64() -> str:
    """A valid doodle payload."""
    return make_png_b64(seed=0)


@pytest.fixture
def store(test_config: DoodlemonConfig) -> CreatureStore:
    return CreatureStore(test_config.database_path)


@pytest.fixture
def sink(test_config: DoodlemonConfig) -> ImageSink:
    return ImageSink(test_config.images_dir, test_config.images_url_prefix)


@pytest.fixture
def cache() -> TTLStore:
    return TTLStore(maxsize=16)


@pytest.fixture
def gallery(cache: TTLStore, store: CreatureStore) -> GalleryCacheSync:
    return GalleryCacheSync(cache, store, ttl=300)


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def pipeline(fake_generator, store, sink, gallery) -> GenerationPipeline:
    return GenerationPipeline(fake_generator, store, sink, gallery, rng=random.Random(7))


@pytest.fixture
def action_cache(fake_generator, store, sink, gallery) -> ActionImageCache:
    return ActionImageCache(fake_generator, store, sink, gallery)


@pytest.fixture
def service(pipeline, store, gallery, action_cache) -> CreatureService:
    return CreatureService(pipeline, store, gallery, action_cache)


@pytest.fixture
def test_client(test_config, service) -> Generator[TestClient, None, None]:
    """FastAPI TestClient backed by the fake generator."""
    app = create_app(test_config, service=service)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def generator_factory() -> type[FakeGenerator]:
    """The FakeGenerator class, for tests that need a configured instance."""
    return FakeGenerator
