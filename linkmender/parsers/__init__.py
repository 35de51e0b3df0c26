"""
Link Mender Parsers

Markdown links and headings, the navigation tree, and the redirect table.
"""

from .markdown import parse_markdown_headings, parse_markdown_links, slugify
from .navigation import NavigationFileError, parse_navigation, parse_navigation_text
from .redirects import RedirectConfigError, RedirectTable, add_redirects, load_redirect_table

__all__ = [
    'parse_markdown_headings',
    'parse_markdown_links',
    'slugify',
    'NavigationFileError',
    'parse_navigation',
    'parse_navigation_text',
    'RedirectConfigError',
    'RedirectTable',
    'add_redirects',
    'load_redirect_table',
]
