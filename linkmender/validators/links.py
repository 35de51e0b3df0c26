"""
Link validation against the project tree and redirect table.

A link is valid when its resolved target exists. A missing target whose
redirect destination exists is reported as redirect-available, a warning
distinct from broken.
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List

from linkmender.core.context import CheckContext
from linkmender.core.models import (
    BrokenLink,
    FileLinks,
    LinkKind,
    ParsedLink,
    ValidationResult,
    ValidationStatus,
)
from linkmender.core.paths import resolve_relative_link

logger = logging.getLogger(__name__)


def validate_link(
    source_file: str,
    link: ParsedLink,
    context: CheckContext,
    redirect_table=None
) -> ValidationResult:
    """
    Validate one link.

    Args:
        source_file: Project-relative path of the linking document
        link: Parsed link
        context: Check context (project root, default redirect table)
        redirect_table: Overrides context.redirect_table when given

    Returns:
        ValidationResult; broken results are BrokenLink instances
    """
    if link.kind is LinkKind.EXTERNAL:
        return ValidationResult(source_file, link, ValidationStatus.VALID, resolved_path=link.target_path)

    if link.kind is LinkKind.ANCHOR_ONLY:
        return ValidationResult(source_file, link, ValidationStatus.VALID, resolved_path=source_file)

    resolved = resolve_relative_link(source_file, link.target_path, context.project_root)

    if resolved.exists:
        return ValidationResult(source_file, link, ValidationStatus.VALID, resolved_path=resolved.resolved)

    table = redirect_table if redirect_table is not None else context.redirect_table
    if table is not None:
        redirect_target = table.find_redirect_target(resolved.resolved)
        if redirect_target and context.exists(redirect_target):
            logger.debug(
                "%s:%d redirect available for %s",
                source_file, link.line, resolved.resolved,
                extra={'error_code': 'LNK-02', 'file_path': source_file, 'line_number': link.line},
            )
            return ValidationResult(
                source_file,
                link,
                ValidationStatus.REDIRECT_AVAILABLE,
                resolved_path=resolved.resolved,
                error=f"Target not found: {resolved.resolved}. Redirect available to: {redirect_target}",
            )

    return BrokenLink(
        source_file,
        link,
        ValidationStatus.BROKEN,
        resolved_path=resolved.resolved,
        error=f"Target not found: {resolved.resolved}",
    )


def validate_file_links(
    file_links: FileLinks,
    context: CheckContext,
    redirect_table=None
) -> List[ValidationResult]:
    return [
        validate_link(file_links.file_path, link, context, redirect_table)
        for link in file_links.links
    ]


def validate_all_links(
    all_file_links: Iterable[FileLinks],
    context: CheckContext,
    redirect_table=None
) -> List[ValidationResult]:
    """Validate every link of every document, in document order."""
    results: List[ValidationResult] = []
    for file_links in all_file_links:
        results.extend(validate_file_links(file_links, context, redirect_table))

    broken = sum(1 for r in results if r.status is ValidationStatus.BROKEN)
    logger.info("Validated %d link(s), %d broken", len(results), broken)
    return results


def get_broken_links(results: Iterable[ValidationResult]) -> List[BrokenLink]:
    return [r for r in results if isinstance(r, BrokenLink)]


def get_validation_stats(results: List[ValidationResult]) -> Dict[str, int]:
    """
    Summarize validation results.

    Returns:
        Dict with keys: total, valid, broken, redirect_available,
        files_affected (documents with at least one non-valid link)
    """
    counts = Counter(r.status for r in results)
    files_affected = {r.source_file for r in results if r.status is not ValidationStatus.VALID}

    return {
        'total': len(results),
        'valid': counts[ValidationStatus.VALID],
        'broken': counts[ValidationStatus.BROKEN],
        'redirect_available': counts[ValidationStatus.REDIRECT_AVAILABLE],
        'files_affected': len(files_affected),
    }


def path_exists(target_path: str, context: CheckContext) -> bool:
    return context.exists(target_path)
