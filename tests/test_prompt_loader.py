"""Tests for prompt_loader — section extraction and placeholder rendering."""

from habitpal.prompt_loader import _extract_section, get_section, list_prompts, render


class TestExtractSection:
    def test_extract_first(self):
        text = "## Persona\nYou are warm.\n\n## Context\nToday."
        assert _extract_section(text, "Persona") == "You are warm."

    def test_extract_last(self):
        text = "## Persona\nYou are warm.\n\n## Context\nLine one.\nLine two."
        result = _extract_section(text, "Context")
        assert "Line one." in result
        assert "Line two." in result

    def test_missing_section(self):
        assert _extract_section("## Persona\nHello", "Greeting") == ""

    def test_empty_text(self):
        assert _extract_section("", "Persona") == ""


class TestCoachPrompt:
    def test_sections_present(self):
        for heading in ("Persona", "Context", "Profile", "Greeting"):
            assert get_section("coach", heading), heading

    def test_render_context(self):
        text = render("coach", "Context", today="2024-03-10", summary="No habits configured.")
        assert "2024-03-10" in text
        assert "No habits configured." in text
        assert "$" not in text

    def test_render_leaves_unknown_placeholders(self):
        text = render("coach", "Profile", name="Ana")
        assert "Ana" in text
        assert "$age" in text

    def test_missing_prompt_is_empty(self):
        assert get_section("does_not_exist", "Persona") == ""

    def test_list_prompts(self):
        assert "coach" in list_prompts()


class TestRenderReservedNames:
    def test_name_and_heading_are_placeholders_too(self):
        text = render("coach", "Profile", name="Ana", age=30, heading="ignored")
        assert text == "Personal details: Ana, 30 years old."
