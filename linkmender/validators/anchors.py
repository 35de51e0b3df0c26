"""
Anchor validation against the headings of the target document.

Headings are loaded through the context's heading cache, so each target is
parsed once per session.
"""

import logging
from typing import Iterable, List, Optional

from linkmender.core.context import CheckContext
from linkmender.core.models import AnchorCheck, HeadingInfo, ParsedLink, ValidationResult, ValidationStatus
from linkmender.core.similarity import normalized_similarity
from linkmender.parsers.markdown import slugify

logger = logging.getLogger(__name__)


ANCHOR_SIMILARITY_THRESHOLD = 0.5
MAX_ANCHOR_SUGGESTIONS = 3


def find_similar_anchors(anchor: str, headings: Iterable[HeadingInfo]) -> List[str]:
    """
    Heading ids resembling anchor, best first.

    Scores are 1 - distance / longer length (case-insensitive); ids scoring
    above 0.5 are kept, at most three. Ties keep document order.
    """
    scored = []
    for heading in headings:
        score = normalized_similarity(anchor, heading.id)
        if score > ANCHOR_SIMILARITY_THRESHOLD:
            scored.append((score, heading.id))

    scored.sort(key=lambda item: item[0], reverse=True)
    return [heading_id for _, heading_id in scored[:MAX_ANCHOR_SUGGESTIONS]]


def validate_anchor(
    target_file: str,
    anchor: str,
    context: CheckContext,
    source_file: str = '',
    link: Optional[ParsedLink] = None
) -> AnchorCheck:
    """
    Check that target_file has a heading whose id matches anchor.

    Matching is exact first, then case-insensitive.

    Args:
        target_file: Project-relative path of the linked document
        anchor: Anchor fragment without '#'
        context: Check context holding the heading cache
        source_file: Linking document, recorded on the result
        link: ParsedLink, recorded on the result

    Returns:
        AnchorCheck with error and suggestions when invalid

    Example:
        >>> check = validate_anchor("guide.md", "instalation", context)
        >>> check.suggestions
        ['installation']
    """
    headings = context.get_file_headings(target_file)

    if headings is None:
        return AnchorCheck(source_file, link, valid=False, error=f"Target file not found: {target_file}")

    normalized = anchor.lower()
    for heading in headings.headings:
        if heading.id == anchor or heading.id.lower() == normalized:
            return AnchorCheck(source_file, link, valid=True)

    return AnchorCheck(
        source_file,
        link,
        valid=False,
        error=f"Anchor not found: #{anchor} in {target_file}",
        suggestions=find_similar_anchors(normalized, headings.headings),
    )


def validate_all_anchors(results: Iterable[ValidationResult], context: CheckContext) -> List[AnchorCheck]:
    """
    Check the anchors of every valid link that carries one.

    Links whose target is missing are skipped; they are reported by link
    validation already.
    """
    checks = []
    for result in results:
        if result.status is not ValidationStatus.VALID or not result.link.anchor:
            continue
        if not result.resolved_path:
            continue

        check = validate_anchor(result.resolved_path, result.link.anchor, context, result.source_file, result.link)
        if not check.valid:
            logger.debug(
                "%s:%d %s", result.source_file, result.link.line, check.error,
                extra={'error_code': 'ANC-01', 'file_path': result.source_file,
                       'line_number': result.link.line},
            )
        checks.append(check)

    return checks


def get_available_anchors(file_path: str, context: CheckContext) -> List[str]:
    headings = context.get_file_headings(file_path)
    if headings is None:
        return []
    return [h.id for h in headings.headings]


def suggest_anchor_for_text(heading_text: str) -> str:
    """Anchor id a heading with this text would get."""
    return slugify(heading_text)
