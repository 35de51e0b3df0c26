"""
Link Mender Validators

Link, anchor and redirect-table checks against the project tree.
"""

from .links import get_broken_links, get_validation_stats, validate_all_links, validate_link
from .anchors import validate_all_anchors, validate_anchor
from .redirects import RedirectCheckResult, check_redirects

__all__ = [
    'get_broken_links',
    'get_validation_stats',
    'validate_all_links',
    'validate_link',
    'validate_all_anchors',
    'validate_anchor',
    'RedirectCheckResult',
    'check_redirects',
]
