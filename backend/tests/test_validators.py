"""Tests for model-output shape validation."""

import pytest

from factories import EXPANDED, LEARN_ITEM, LESSON_PLAN, TOPIC_OPTIONS, without

from educel.services.errors import UnknownGenerationTypeError
from educel.services.validators import validate_generation


class TestOptionShapes:
    def test_accepts_three_options(self):
        result = validate_generation("topic_options", TOPIC_OPTIONS)
        assert result.ok
        assert len(result.value["options"]) == 3

    def test_rejects_wrong_count(self):
        two = {"options": TOPIC_OPTIONS["options"][:2]}
        assert not validate_generation("adjacent_options", two).ok

    def test_rejects_blank_hook(self):
        bad = {"options": [{"topic": "t", "hook": "  "}] * 3}
        assert not validate_generation("topic_options", bad).ok

    def test_rejects_non_object(self):
        result = validate_generation("topic_options", ["not", "an", "object"])
        assert not result.ok
        assert result.reason == "expected a JSON object"

    def test_clarify(self):
        assert validate_generation("clarify_topic", {"question": "Which?", "options": ["a", "b", "c"]}).ok
        assert not validate_generation("clarify_topic", {"question": "Which?", "options": ["a", 2, "c"]}).ok


class TestLearnItemShape:
    def test_accepts_full_item(self):
        result = validate_generation("learn_item", LEARN_ITEM)
        assert result.ok
        assert result.value["sources"] == LEARN_ITEM["sources"]

    def test_rejects_wrong_bullet_count(self):
        bad = {**LEARN_ITEM, "bullets": ["only", "two"]}
        assert not validate_generation("learn_more", bad).ok

    def test_rejects_missing_field(self):
        assert not validate_generation("learn_item", without(LEARN_ITEM, "quiz_answer")).ok

    def test_no_type_coercion(self):
        assert not validate_generation("learn_item", {**LEARN_ITEM, "title": 42}).ok

    def test_missing_sources_is_fine(self):
        result = validate_generation("learn_item", without(LEARN_ITEM, "sources"))
        assert result.ok
        assert "sources" not in result.value

    @pytest.mark.parametrize(
        "sources",
        [
            [{"title": "ok", "url": "https://hbr.org/"}, {"title": "no url"}],
            [{"title": 1, "url": "https://hbr.org/"}],
            "https://hbr.org/",
            [],
        ],
    )
    def test_malformed_sources_are_discarded_not_rejected(self, sources):
        result = validate_generation("learn_item", {**LEARN_ITEM, "sources": sources})
        assert result.ok
        assert "sources" not in result.value
        assert result.value["title"] == LEARN_ITEM["title"]


class TestExpandedShape:
    def test_accepts(self):
        assert validate_generation("expand_content", EXPANDED).ok

    def test_takeaway_is_strict(self):
        assert not validate_generation("expand_content", without(EXPANDED, "one_line_takeaway")).ok
        assert not validate_generation("expand_content", {**EXPANDED, "one_line_takeaway": ""}).ok
        assert not validate_generation("expand_content", {**EXPANDED, "one_line_takeaway": "x" * 100}).ok
        assert validate_generation("expand_content", {**EXPANDED, "one_line_takeaway": "x" * 99}).ok

    def test_paragraph_bounds(self):
        assert not validate_generation("expand_content", {**EXPANDED, "paragraphs": ["a", "b"]}).ok
        assert not validate_generation("expand_content", {**EXPANDED, "paragraphs": ["p"] * 7}).ok
        assert validate_generation("expand_content", {**EXPANDED, "paragraphs": ["p"] * 6}).ok


class TestLessonPlanShape:
    def test_accepts(self):
        assert validate_generation("lesson_plan", LESSON_PLAN).ok

    def test_minimum_counts(self):
        assert not validate_generation("lesson_plan", {**LESSON_PLAN, "goals": ["one"]}).ok
        assert not validate_generation("lesson_plan", {**LESSON_PLAN, "resources": LESSON_PLAN["resources"][:2]}).ok
        assert not validate_generation("lesson_plan", {**LESSON_PLAN, "exercises": ["one"]}).ok
        assert not validate_generation("lesson_plan", {**LESSON_PLAN, "daily_plan": LESSON_PLAN["daily_plan"][:6]}).ok

    def test_resource_type_must_be_known(self):
        resources = [{**r, "type": "podcast"} for r in LESSON_PLAN["resources"]]
        assert not validate_generation("lesson_plan", {**LESSON_PLAN, "resources": resources}).ok


def test_unknown_type_raises():
    with pytest.raises(UnknownGenerationTypeError):
        validate_generation("poem", {})
