"""Tests for topic normalisation (pure, no DB dependency)."""

import uuid

from educel.services.topics import SLOT_ORDER, EventType, new_session_id, normalize_topic


class TestNormalizeTopic:
    """Normalisation is the shared join key for dedup, scoring and recency."""

    def test_case_and_spacing_collapse_to_one_key(self):
        """Differently cased and spaced inputs normalise identically."""
        variants = ["Negotiation Tactics", "  negotiation   tactics ", "NEGOTIATION\tTACTICS", "negotiation\n tactics"]
        assert {normalize_topic(v) for v in variants} == {"negotiation tactics"}

    def test_idempotent(self):
        once = normalize_topic("  Deep   Work ")
        assert normalize_topic(once) == once

    def test_empty_and_whitespace(self):
        assert normalize_topic("") == ""
        assert normalize_topic("   \t ") == ""

    def test_punctuation_is_kept(self):
        assert normalize_topic("C++  Basics!") == "c++ basics!"


class TestDiscoveryConstants:
    def test_session_ids_are_unique_uuids(self):
        first, second = new_session_id(), new_session_id()
        assert first != second
        assert str(uuid.UUID(first)) == first

    def test_slot_order(self):
        assert [slot.value for slot in SLOT_ORDER] == ["A", "B", "C"]

    def test_event_type_values(self):
        assert EventType.CONTENT_VIEWED == "content_viewed"
        assert EventType("plan_generated") is EventType.PLAN_GENERATED
