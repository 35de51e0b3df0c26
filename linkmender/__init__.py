"""
Link Mender - Cross-reference checking and repair for Markdown documentation.

Finds links and anchors that no longer resolve, suggests the most likely
replacement target, and rewrites sources in place while recording redirects
for the old paths.
"""

from linkmender.checker import BrokenLinkDetail, CheckReport, LinkChecker, create_checker
from linkmender.core import (
    CheckContext,
    Confidence,
    FixSuggestion,
    ValidationStatus,
    load_config_strict,
)

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = [
    # Orchestration
    "LinkChecker",
    "CheckReport",
    "BrokenLinkDetail",
    "create_checker",
    # Core
    "CheckContext",
    "Confidence",
    "FixSuggestion",
    "ValidationStatus",
    "load_config_strict",
    # Version info
    "__version__",
    "__license__",
]
