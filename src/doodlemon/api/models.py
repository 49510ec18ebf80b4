"""Pydantic request and response models for the Doodlemon API.

Models
------
GenerateRequest
    Payload for ``POST /api/generate``.
PowerRef
    A power given by name, optionally with its description.
ActionImageRequest
    Payload for ``POST /api/creatures/{id}/action-image``.
ActionImageResponse
    Result of an action image request.
DeleteResponse
    Result of ``DELETE /api/creatures/{id}``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class GenerateRequest(BaseModel):
    """Request body for the ``POST /api/generate`` endpoint.

    Attributes:
        doodle_data: Base64 PNG of the doodle (a data URL is accepted).
            Shape and length are checked by the pipeline, not here, so a
            bad payload yields a 400 with a readable message.
        gemini_api_key: Optional per-request API key.
    """

    doodle_data: str | None = Field(
        default=None,
        description="Base64-encoded doodle image.",
    )
    gemini_api_key: str | None = Field(
        default=None,
        description="Optional Gemini API key overriding the server key.",
    )


class PowerRef(BaseModel):
    name: str | None = None
    description: str | None = None


class ActionImageRequest(BaseModel):
    """Request body for ``POST /api/creatures/{id}/action-image``.

    Attributes:
        power: Either the power name, or an object with ``name`` and an
            optional ``description``.
        force: Regenerate even if an image is already stored.
        gemini_api_key: Optional per-request API key.
    """

    power: str | PowerRef | None = Field(
        default=None,
        description="Power name, or {name, description}.",
    )
    force: bool = Field(
        default=False,
        description="Bypass the stored image and generate a new one.",
    )
    gemini_api_key: str | None = Field(default=None)

    def power_name(self) -> str | None:
        if isinstance(self.power, PowerRef):
            return (self.power.name or "").strip() or None
        return (self.power or "").strip() or None

    def power_description(self) -> str | None:
        if isinstance(self.power, PowerRef):
            return self.power.description
        return None


class ActionImageResponse(BaseModel):
    image_url: str
    cached: bool


class DeleteResponse(BaseModel):
    success: bool = True
    message: str = "Deleted successfully"
