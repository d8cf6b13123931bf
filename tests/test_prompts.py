"""Tests for my_first_mcp.prompts module."""

import pytest

from my_first_mcp.prompts import (
    PromptArgumentError,
    create_default_prompts,
    generate_code_review_prompt,
    generate_explain_code_prompt,
)


class TestCodeReviewPrompt:
    def test_includes_code_and_language(self):
        messages = generate_code_review_prompt("def f(): pass", language="python")

        assert len(messages) == 1
        assert messages[0].role == "user"
        assert "python code" in messages[0].text
        assert "```python\ndef f(): pass\n```" in messages[0].text

    def test_defaults(self):
        text = generate_code_review_prompt("x = 1")[0].text
        assert "unknown language" in text
        assert "overall code quality" in text

    def test_focus_areas(self):
        text = generate_code_review_prompt("x = 1", focus_areas="performance")[0].text
        assert "performance" in text


class TestExplainCodePrompt:
    def test_default_level(self):
        text = generate_explain_code_prompt("x = 1")[0].text
        assert "basic programming knowledge" in text

    def test_beginner(self):
        text = generate_explain_code_prompt("x = 1", level="beginner")[0].text
        assert "beginner" in text

    def test_invalid_level(self):
        with pytest.raises(PromptArgumentError):
            generate_explain_code_prompt("x = 1", level="expert")


class TestPromptRegistry:
    def test_defaults(self):
        registry = create_default_prompts()
        assert registry.names() == ["code-review", "explain-code"]
        assert registry.get("code-review").arguments[0].required is True

    def test_render_maps_argument_names(self):
        registry = create_default_prompts()
        messages = registry.render(
            "code-review",
            {"code": "x = 1", "language": "python", "focusAreas": "naming"},
        )
        assert "naming" in messages[0].text

    def test_render_missing_required(self):
        with pytest.raises(PromptArgumentError):
            create_default_prompts().render("explain-code", {})

    def test_render_unknown_argument(self):
        with pytest.raises(PromptArgumentError):
            create_default_prompts().render("explain-code", {"code": "x", "style": "terse"})

    def test_render_unknown_prompt(self):
        with pytest.raises(KeyError):
            create_default_prompts().render("nope")

    def test_get_unknown(self):
        assert create_default_prompts().get("nope") is None
