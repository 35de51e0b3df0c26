"""
Tests for confidence ordering and fix-action thresholds.
"""

import pytest

from linkmender.core.confidence import (
    confidence_rank,
    get_auto_fix_threshold,
    get_fix_action,
    meets_threshold,
    parse_confidence,
)
from linkmender.core.models import Confidence, FixSuggestion


def suggestion(confidence: Confidence) -> FixSuggestion:
    return FixSuggestion(confidence, "docs/page.md", "test")


class TestParseConfidence:
    """Test conversion of config values to tiers."""

    @pytest.mark.parametrize("value,expected", [
        ("high", Confidence.HIGH),
        ("MEDIUM", Confidence.MEDIUM),
        (" low ", Confidence.LOW),
        (Confidence.HIGH, Confidence.HIGH),
    ])
    def test_known_tiers(self, value, expected):
        assert parse_confidence(value) is expected

    def test_unknown_tier(self):
        with pytest.raises(ValueError, match="Unknown confidence tier"):
            parse_confidence("certain")


class TestOrdering:
    """Test the high > medium > low order."""

    def test_ranks(self):
        assert confidence_rank("high") > confidence_rank("medium") > confidence_rank("low")

    @pytest.mark.parametrize("confidence,threshold,expected", [
        (Confidence.HIGH, Confidence.HIGH, True),
        (Confidence.HIGH, Confidence.LOW, True),
        (Confidence.MEDIUM, Confidence.HIGH, False),
        (Confidence.MEDIUM, Confidence.MEDIUM, True),
        (Confidence.LOW, Confidence.MEDIUM, False),
    ])
    def test_meets_threshold(self, confidence, threshold, expected):
        assert meets_threshold(confidence, threshold) is expected


class TestFixAction:
    """Test mapping suggestions to actions."""

    def test_default_threshold_is_high(self):
        assert get_auto_fix_threshold({}) is Confidence.HIGH
        assert get_fix_action(suggestion(Confidence.HIGH), {}) == "auto_fix"
        assert get_fix_action(suggestion(Confidence.MEDIUM), {}) == "review"

    def test_lowered_threshold(self):
        config = {'fixes': {'auto_fix_confidence': 'medium'}}

        assert get_fix_action(suggestion(Confidence.MEDIUM), config) == "auto_fix"
        assert get_fix_action(suggestion(Confidence.LOW), config) == "review"

    def test_no_suggestion_is_report_only(self):
        assert get_fix_action(None, {'fixes': {'auto_fix_confidence': 'low'}}) == "report_only"
