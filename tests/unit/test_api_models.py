"""Tests for doodlemon.api.models — request and response models."""

from __future__ import annotations

from doodlemon.api.models import (
    ActionImageRequest,
    ActionImageResponse,
    DeleteResponse,
    GenerateRequest,
    PowerRef,
)


class TestGenerateRequest:
    def test_fields_optional(self):
        req = GenerateRequest()
        assert req.doodle_data is None
        assert req.gemini_api_key is None

    def test_accepts_payload(self):
        req = GenerateRequest(doodle_data="iVBORw0KGgo=", gemini_api_key="k")
        assert req.doodle_data == "iVBORw0KGgo="
        assert req.gemini_api_key == "k"


class TestActionImageRequest:
    """Power may be given as a string or as {name, description}."""

    def test_power_as_string(self):
        req = ActionImageRequest(power="Flame Burst")
        assert req.power_name() == "Flame Burst"
        assert req.power_description() is None

    def test_power_as_object(self):
        req = ActionImageRequest.model_validate(
            {"power": {"name": "Flame Burst", "description": "Explodes embers."}}
        )
        assert isinstance(req.power, PowerRef)
        assert req.power_name() == "Flame Burst"
        assert req.power_description() == "Explodes embers."

    def test_blank_names_are_missing(self):
        assert ActionImageRequest(power="   ").power_name() is None
        assert ActionImageRequest(power={"description": "x"}).power_name() is None
        assert ActionImageRequest().power_name() is None

    def test_force_defaults_false(self):
        assert ActionImageRequest(power="Zap").force is False


def test_response_models():
    assert ActionImageResponse(image_url="/images/action/a.png", cached=True).cached is True
    assert DeleteResponse().model_dump() == {"success": True, "message": "Deleted successfully"}
