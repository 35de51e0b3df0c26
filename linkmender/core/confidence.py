"""
Confidence ordering and action thresholds for fix suggestions.

Suggestions carry one of three tiers, which map to what happens to them:
- auto_fix: tier meets fixes.auto_fix_confidence - applied automatically
- review: a weaker suggestion - applied only after explicit approval
- report_only: no suggestion - the broken link is only reported
"""

from typing import Dict, Optional, Union

from .models import Confidence, FixSuggestion


# Higher rank = more trustworthy
CONFIDENCE_RANK = {
    Confidence.HIGH: 3,
    Confidence.MEDIUM: 2,
    Confidence.LOW: 1,
}

DEFAULT_AUTO_FIX_CONFIDENCE = Confidence.HIGH


def parse_confidence(value: Union[str, Confidence]) -> Confidence:
    """
    Convert a config value to a Confidence tier.

    Args:
        value: Confidence instance or one of "high", "medium", "low"
               (case-insensitive)

    Returns:
        Confidence tier

    Raises:
        ValueError: If value is not a known tier
    """
    if isinstance(value, Confidence):
        return value
    try:
        return Confidence(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(c.value for c in Confidence)
        raise ValueError(f"Unknown confidence tier {value!r}. Expected one of: {valid}") from None


def confidence_rank(confidence: Union[str, Confidence]) -> int:
    """Return the numeric rank of a tier (high=3, medium=2, low=1)."""
    return CONFIDENCE_RANK[parse_confidence(confidence)]


def meets_threshold(
    confidence: Union[str, Confidence],
    threshold: Union[str, Confidence]
) -> bool:
    """
    Check whether a tier is at least as strong as a threshold tier.

    Example:
        >>> meets_threshold("high", "medium")
        True
        >>> meets_threshold(Confidence.LOW, Confidence.MEDIUM)
        False
    """
    return confidence_rank(confidence) >= confidence_rank(threshold)


def get_auto_fix_threshold(config: Dict) -> Confidence:
    """Read fixes.auto_fix_confidence from config (default: high)."""
    value = config.get('fixes', {}).get('auto_fix_confidence', DEFAULT_AUTO_FIX_CONFIDENCE)
    return parse_confidence(value)


def get_fix_action(suggestion: Optional[FixSuggestion], config: Dict) -> str:
    """
    Determine what to do with a suggestion.

    Args:
        suggestion: FixSuggestion, or None when no fix was found
        config: Configuration dict. Optional keys:
                - fixes.auto_fix_confidence (default: "high")

    Returns:
        "auto_fix" - suggestion meets the auto-fix threshold
        "review" - suggestion exists but is weaker than the threshold
        "report_only" - no suggestion

    Example:
        >>> config = {'fixes': {'auto_fix_confidence': 'medium'}}
        >>> get_fix_action(FixSuggestion(Confidence.MEDIUM, "a.md", "r"), config)
        'auto_fix'
        >>> get_fix_action(FixSuggestion(Confidence.LOW, "a.md", "r"), config)
        'review'
        >>> get_fix_action(None, config)
        'report_only'
    """
    if suggestion is None:
        return "report_only"
    if meets_threshold(suggestion.confidence, get_auto_fix_threshold(config)):
        return "auto_fix"
    return "review"
