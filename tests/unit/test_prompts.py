"""Tests for doodlemon.core.prompts — prompt assembly."""

from __future__ import annotations

from doodlemon.core.prompts import (
    ALLOWED_TYPES,
    METADATA_PROMPT,
    build_action_prompt,
    build_doodle_prompt,
    build_metadata_prompt,
)


class TestMetadataPrompt:
    def test_lists_allowed_types_and_format(self):
        prompt = build_metadata_prompt()

        assert prompt.startswith(METADATA_PROMPT)
        for creature_type in ALLOWED_TYPES:
            assert creature_type in prompt
        assert '"powers"' in prompt

    def test_custom_instruction(self):
        prompt = build_metadata_prompt("  Describe this creature.  ")
        assert prompt.startswith("Describe this creature.\n\n")


class TestActionPrompt:
    def test_includes_everything_given(self):
        prompt = build_action_prompt(
            name="Pyrolisk",
            creature_type="Fire/Flying",
            characteristics="Proud and restless.",
            power_name="Flame Burst",
            power_description="Pyrolisk explodes embers.",
        )

        assert '"Flame Burst"' in prompt
        assert "Power: Pyrolisk explodes embers." in prompt
        assert "Type: Fire/Flying." in prompt
        assert "Personality: Proud and restless." in prompt

    def test_empty_values_leave_no_blank_sections(self):
        prompt = build_action_prompt("Pyrolisk", "", "  ", "Flame Burst", None)

        assert "\n\n\n" not in prompt
        assert "Power:" not in prompt
        assert "Type:" not in prompt
        assert all(section.strip() for section in prompt.split("\n\n"))


def test_doodle_prompt_has_two_sections():
    assert len(build_doodle_prompt().split("\n\n")) == 2
