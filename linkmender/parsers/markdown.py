"""
Markdown structural parsing: links, headings and anchor slugs.

Only the constructs needed for navigation are recognized:
- Inline links, with or without angle-bracket targets
- Inline HTML anchors (<a href="...">) and data-ref="..." attributes
- ATX headings, with optional {#explicit-id} suffix

Lines inside fenced code blocks (``` or ~~~) are ignored. An unterminated
fence hides the rest of the document: a missed check is preferable to
rewriting a code sample.
"""

import logging
import re
from typing import List, Optional

from linkmender.core.fileio import read_file
from linkmender.core.models import (
    FileHeadings,
    FileLinks,
    HeadingInfo,
    LinkKind,
    ParsedLink,
)
from linkmender.core.paths import (
    clean_link_path,
    is_anchor_only,
    is_asset_link,
    is_external_link,
    split_anchor,
)

logger = logging.getLogger(__name__)


FENCE_PATTERN = re.compile(r'^(```|~~~)')

# Tried in this order on every line
ANGLE_BRACKET_LINK_PATTERN = re.compile(r'\[([^\]]*)\]\(<([^>]+)>\)')
STANDARD_LINK_PATTERN = re.compile(r'\[([^\]]*)\]\(([^()<>\s]+(?:\([^()]*\))?[^()<>\s]*)\)')
HTML_LINK_PATTERN = re.compile(r'<a\s+[^>]*href=["\']([^"\']+)["\'][^>]*>', re.IGNORECASE)
DATA_REF_PATTERN = re.compile(r'data-ref=["\']([^"\']+)["\']', re.IGNORECASE)

ATX_HEADING_PATTERN = re.compile(r'^(#{1,6})\s+(.+)$')
CUSTOM_ANCHOR_PATTERN = re.compile(r'\{#([^}]+)\}\s*$')

_SLUG_STRIP = re.compile(r'[^\w\s-]')
_SLUG_SPACES = re.compile(r'\s+')
_SLUG_HYPHENS = re.compile(r'-+')


def slugify(text: str) -> str:
    """
    Generate the anchor id for a heading text.

    Lowercases, drops everything but word characters, whitespace and
    hyphens, turns whitespace runs into a hyphen, collapses hyphen runs and
    trims hyphens from both ends. Idempotent: slugify(slugify(x)) == slugify(x).

    Example:
        >>> slugify("Hello, World!")
        'hello-world'
        >>> slugify("  Step 2 -- Configure  ")
        'step-2-configure'
    """
    slug = _SLUG_STRIP.sub('', text.lower())
    slug = _SLUG_SPACES.sub('-', slug)
    slug = _SLUG_HYPHENS.sub('-', slug)
    return slug.strip('-')


def compute_code_block_state(lines: List[str]) -> List[bool]:
    """
    Mark which lines belong to fenced code blocks.

    Fence lines themselves are marked, as is every line after an opening
    fence up to and including its closing fence.

    Returns:
        One boolean per line, True if the line must be skipped
    """
    state = []
    in_block = False

    for line in lines:
        if FENCE_PATTERN.match(line.strip()):
            state.append(True)
            in_block = not in_block
            continue
        state.append(in_block)

    return state


def _load(file_path: str, content: Optional[str]) -> str:
    return content if content is not None else read_file(file_path)


def create_parsed_link(
    raw: str,
    text: str,
    target: str,
    line: int,
    column: int
) -> Optional[ParsedLink]:
    """
    Classify a cleaned link target and build its ParsedLink.

    Returns:
        ParsedLink, or None for external links (out of validation scope)
    """
    if is_external_link(target):
        return None

    if is_anchor_only(target):
        kind = LinkKind.ANCHOR_ONLY
    elif is_asset_link(target):
        kind = LinkKind.ASSET
    else:
        kind = LinkKind.INTERNAL

    target_path, anchor = split_anchor(target)

    return ParsedLink(
        raw=raw,
        display_text=text,
        target_path=target_path,
        anchor=anchor,
        line=line,
        column=column,
        kind=kind,
    )


def parse_markdown_links(file_path: str, content: Optional[str] = None) -> FileLinks:
    """
    Extract navigable links from a Markdown document.

    Args:
        file_path: Project-relative path (read from disk if content is None)
        content: Document text

    Returns:
        FileLinks with links in line order, then pattern order
    """
    lines = _load(file_path, content).split('\n')
    skipped = compute_code_block_state(lines)
    links: List[ParsedLink] = []

    for index, line in enumerate(lines):
        if skipped[index]:
            continue
        line_number = index + 1

        for match in ANGLE_BRACKET_LINK_PATTERN.finditer(line):
            _append(links, match, match.group(1), match.group(2), line_number)

        for match in STANDARD_LINK_PATTERN.finditer(line):
            _append(links, match, match.group(1), match.group(2), line_number)

        for pattern in (HTML_LINK_PATTERN, DATA_REF_PATTERN):
            for match in pattern.finditer(line):
                _append(links, match, '', match.group(1), line_number)

    logger.debug("Parsed %d link(s) from %s", len(links), file_path)
    return FileLinks(file_path=file_path, links=links)


def _append(links: List[ParsedLink], match, text: str, target: str, line_number: int):
    link = create_parsed_link(
        match.group(0),
        text,
        clean_link_path(target.strip()),
        line_number,
        match.start() + 1,
    )
    if link is not None:
        links.append(link)


def parse_markdown_headings(file_path: str, content: Optional[str] = None) -> FileHeadings:
    """
    Extract ATX headings from a Markdown document.

    A trailing {#custom-id} replaces the generated slug and is removed from
    the heading text.

    Args:
        file_path: Project-relative path (read from disk if content is None)
        content: Document text

    Returns:
        FileHeadings in document order
    """
    lines = _load(file_path, content).split('\n')
    skipped = compute_code_block_state(lines)
    headings: List[HeadingInfo] = []

    for index, line in enumerate(lines):
        if skipped[index]:
            continue

        match = ATX_HEADING_PATTERN.match(line)
        if not match:
            continue

        hashes, raw_text = match.groups()
        text = raw_text.strip()

        custom = CUSTOM_ANCHOR_PATTERN.search(text)
        if custom:
            heading_id = custom.group(1)
            text = CUSTOM_ANCHOR_PATTERN.sub('', text).strip()
        else:
            heading_id = slugify(text)

        headings.append(HeadingInfo(text=text, id=heading_id, level=len(hashes), line=index + 1))

    return FileHeadings(file_path=file_path, headings=headings)
