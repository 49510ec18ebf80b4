"""Gemini client wrapper for the Doodlemon generation calls.

This module provides :class:`GeminiGenerator`, the single point of contact
with the generative model. It exposes three independent calls:

- **image_from_doodle** - doodle PNG in, creature image out.
- **metadata_from_image** - creature image in, name/type/powers/characteristics
  out (JSON mode).
- **action_image** - creature image plus one power in, action shot out.

Images travel as base64 strings at this boundary, which is what the
:class:`~doodlemon.core.image_sink.ImageSink` consumes.

API keys
--------
Each call takes an optional ``api_key``. A request key wins over the
configured ``gemini_api_key``; with neither, the call fails. Clients are
created lazily and reused per key.

Errors
------
Every failure (missing key, transport error, quota, timeout, a response
without an image, unparsable JSON) is raised as
:class:`~doodlemon.core.errors.GenerationError`, chained to the cause.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import threading
from typing import Any

from google import genai
from google.genai import types

from doodlemon.core.config import DoodlemonConfig
from doodlemon.core.errors import GenerationError
from doodlemon.core.image_sink import strip_data_url
from doodlemon.core.prompts import build_action_prompt, build_doodle_prompt

logger = logging.getLogger(__name__)


def _decode(data: str) -> bytes:
    try:
        return base64.b64decode(strip_data_url(data), validate=True)
    except (binascii.Error, ValueError) as e:
        raise GenerationError("Reference image is not valid base64") from e


def _mime_type(data: bytes) -> str:
    if data.startswith(b"\xff\xd8"):
        return "image/jpeg"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/png"


def _first_image(response: Any) -> str:
    """Return the first inline image of a response as base64."""
    for candidate in response.candidates or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                return base64.b64encode(inline.data).decode("ascii")
    raise GenerationError("Model response contained no image")


class GeminiGenerator:
    """Issue creature generation calls against the Gemini API.

    Attributes:
        _config (DoodlemonConfig):
            Model names, default API key and request timeout.
        _clients (dict[str, genai.Client]):
            Lazily created clients keyed by API key.
    """

    def __init__(self, config: DoodlemonConfig) -> None:
        self._config = config
        self._clients: dict[str, genai.Client] = {}
        self._lock = threading.Lock()

    # -- Client handling ----------------------------------------------------

    def _client(self, api_key: str | None) -> genai.Client:
        key = (api_key or "").strip() or self._config.gemini_api_key
        if not key:
            raise GenerationError("No Gemini API key configured")

        with self._lock:
            client = self._clients.get(key)
            if client is None:
                client = genai.Client(
                    api_key=key,
                    http_options=types.HttpOptions(timeout=self._config.request_timeout_ms),
                )
                self._clients[key] = client
        return client

    def _generate(self, api_key: str | None, model: str, contents: list, config) -> Any:
        client = self._client(api_key)
        try:
            return client.models.generate_content(model=model, contents=contents, config=config)
        except Exception as e:
            logger.debug(f"Gemini call to {model} failed: {e}")
            raise GenerationError(f"Generation with {model} failed: {e}") from e

    # -- Public interface ---------------------------------------------------

    def image_from_doodle(self, doodle_data: str, api_key: str | None = None) -> str:
        """Turn a doodle into a creature image.

        Args:
            doodle_data: Base64 doodle (PNG from the drawing canvas).
            api_key: Optional per-request API key.

        Returns:
            Base64 of the generated image.

        Raises:
            GenerationError: On any model or transport failure.
        """
        raw = _decode(doodle_data)
        response = self._generate(
            api_key,
            self._config.image_model,
            [
                types.Part.from_bytes(data=raw, mime_type=_mime_type(raw)),
                build_doodle_prompt(),
            ],
            types.GenerateContentConfig(response_modalities=["IMAGE"]),
        )
        return _first_image(response)

    def metadata_from_image(
        self,
        prompt: str,
        reference_image: str,
        api_key: str | None = None,
    ) -> dict[str, Any]:
        """Ask the text model to describe the creature in an image.

        Args:
            prompt: Full metadata prompt (see :mod:`doodlemon.core.prompts`).
            reference_image: Base64 or data URL of the creature image.
            api_key: Optional per-request API key.

        Returns:
            The parsed JSON object. Fields may be missing or malformed; the
            caller normalizes them.

        Raises:
            GenerationError: On failure, or when the reply is not a JSON object.
        """
        raw = _decode(reference_image)
        response = self._generate(
            api_key,
            self._config.text_model,
            [types.Part.from_bytes(data=raw, mime_type=_mime_type(raw)), prompt],
            types.GenerateContentConfig(response_mime_type="application/json"),
        )

        try:
            meta = json.loads(response.text or "")
        except (TypeError, ValueError) as e:
            raise GenerationError("Metadata response was not valid JSON") from e
        if not isinstance(meta, dict):
            raise GenerationError("Metadata response was not a JSON object")
        return meta

    def action_image(
        self,
        reference_image: bytes,
        name: str,
        creature_type: str,
        characteristics: str,
        power_name: str,
        power_description: str | None = None,
        api_key: str | None = None,
    ) -> str:
        """Draw a creature using one of its powers.

        Args:
            reference_image: Bytes of the creature's primary image.
            name: Creature name.
            creature_type: Creature type string (e.g. ``"Fire/Flying"``).
            characteristics: Creature personality blurb.
            power_name: Name of the power to illustrate.
            power_description: Optional description of the power.
            api_key: Optional per-request API key.

        Returns:
            Base64 of the generated action image.

        Raises:
            GenerationError: On any model or transport failure.
        """
        prompt = build_action_prompt(
            name=name,
            creature_type=creature_type,
            characteristics=characteristics,
            power_name=power_name,
            power_description=power_description,
        )
        response = self._generate(
            api_key,
            self._config.image_model,
            [
                types.Part.from_bytes(data=reference_image, mime_type=_mime_type(reference_image)),
                prompt,
            ],
            types.GenerateContentConfig(response_modalities=["IMAGE"]),
        )
        return _first_image(response)
