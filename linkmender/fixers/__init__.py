"""
Link Mender Fixers

Fix suggestion for broken links and in-place rewriting of sources.
"""

from .suggestions import SUGGESTION_STRATEGIES, find_all_fix_suggestions, find_fix_suggestion, group_by_confidence
from .rewriter import apply_fix, apply_fixes, apply_fixes_with_redirects, generate_redirect_entries, preview_fix

__all__ = [
    'SUGGESTION_STRATEGIES',
    'find_all_fix_suggestions',
    'find_fix_suggestion',
    'group_by_confidence',
    'apply_fix',
    'apply_fixes',
    'apply_fixes_with_redirects',
    'generate_redirect_entries',
    'preview_fix',
]
