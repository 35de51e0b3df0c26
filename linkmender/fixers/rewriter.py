"""
Apply fix suggestions to Markdown sources and record matching redirects.

Rewrites are line-addressed: each fix replaces `](target[#anchor])` (angle
brackets optional) on the link's recorded line and nothing else. Fixes are
grouped per file and applied bottom-up, and each file is written once after
all of its fixes.

Failures never abort a batch. A link that is no longer on its line, a line
that is out of range, or an unreadable/unwritable file each turn into a
FixResult with success=False.
"""

import logging
import re
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Set

from linkmender.core.context import CheckContext
from linkmender.core.fileio import AtomicWriteError, atomic_write, read_file
from linkmender.core.models import (
    BrokenLink,
    FixBatchResult,
    FixResult,
    FixSuggestion,
    ParsedLink,
    RedirectPair,
    SuggestedFix,
)
from linkmender.core.paths import to_relative_link
from linkmender.parsers.redirects import RedirectConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FixPreview:
    """What a fix would change, rendered as link text."""
    original_line: str
    new_line: str
    new_relative_path: str


def build_link_replacement_pattern(link: ParsedLink) -> 're.Pattern':
    """Regex matching `](target#anchor)` for link, with optional <...>."""
    target = re.escape(link.target_path)
    anchor = f"#{re.escape(link.anchor)}" if link.anchor else ''
    return re.compile(rf'\]\(<?{target}{anchor}>?\)')


def _new_target(broken: BrokenLink, suggestion: FixSuggestion) -> str:
    relative = to_relative_link(broken.source_file, suggestion.suggested_path)
    return f"{relative}#{broken.link.anchor}" if broken.link.anchor else relative


def replace_link(line: str, link: ParsedLink, new_target: str):
    """
    Replace every occurrence of link's target syntax on line.

    Returns:
        The updated line, or None if the link was not found
    """
    replacement = f"]({new_target})"
    updated, count = build_link_replacement_pattern(link).subn(lambda _: replacement, line)
    return updated if count else None


def _failed(fix: SuggestedFix, error: str) -> FixResult:
    return FixResult(
        source_file=fix.broken.source_file,
        original_link=fix.broken.link,
        new_path=fix.suggestion.suggested_path,
        success=False,
        error=error,
    )


def _rewrite_lines(lines: List[str], fix: SuggestedFix) -> FixResult:
    broken, suggestion = fix.broken, fix.suggestion
    line_index = broken.link.line - 1

    if line_index < 0 or line_index >= len(lines):
        logger.warning(
            "%s: line %d out of range", broken.source_file, broken.link.line,
            extra={'error_code': 'FIX-02', 'file_path': broken.source_file,
                   'line_number': broken.link.line},
        )
        return _failed(fix, f"Line {broken.link.line} not found in file")

    updated = replace_link(lines[line_index], broken.link, _new_target(broken, suggestion))
    if updated is None:
        logger.warning(
            "%s:%d link to %s not found", broken.source_file, broken.link.line, broken.link.target_path,
            extra={'error_code': 'FIX-01', 'file_path': broken.source_file,
                   'line_number': broken.link.line},
        )
        return _failed(fix, f"Could not find link to replace on line {broken.link.line}")

    lines[line_index] = updated
    return FixResult(
        source_file=broken.source_file,
        original_link=broken.link,
        new_path=suggestion.suggested_path,
        success=True,
    )


def _apply_file_fixes(source_file: str, fixes: List[SuggestedFix], context: CheckContext) -> List[FixResult]:
    file_path = context.path(source_file)

    try:
        lines = read_file(file_path).split('\n')
    except (OSError, ValueError) as e:
        logger.error(
            "Cannot read %s: %s", source_file, e,
            extra={'error_code': 'FS-01', 'file_path': source_file},
        )
        return [_failed(fix, str(e)) for fix in fixes]

    ordered = sorted(fixes, key=lambda fix: fix.broken.link.line, reverse=True)
    results = [_rewrite_lines(lines, fix) for fix in ordered]

    if not any(result.success for result in results):
        return results

    try:
        atomic_write(file_path, '\n'.join(lines))
    except AtomicWriteError as e:
        logger.error(
            "Cannot write %s: %s", source_file, e,
            extra={'error_code': 'FIX-03', 'file_path': source_file},
        )
        for result in results:
            if result.success:
                result.success = False
                result.error = str(e)

    return results


def apply_fixes(fixes: List[SuggestedFix], context: CheckContext) -> List[FixResult]:
    """
    Apply fixes, writing each affected file once.

    Args:
        fixes: Broken links paired with the suggestion to apply
        context: Check context (project root)

    Returns:
        One FixResult per fix, grouped by file in first-seen order and by
        descending line number within a file
    """
    by_file: Dict[str, List[SuggestedFix]] = OrderedDict()
    for fix in fixes:
        by_file.setdefault(fix.broken.source_file, []).append(fix)

    results: List[FixResult] = []
    for source_file, file_fixes in by_file.items():
        results.extend(_apply_file_fixes(source_file, file_fixes, context))

    fixed = sum(1 for r in results if r.success)
    logger.info("Applied %d of %d fix(es) across %d file(s)", fixed, len(results), len(by_file))
    return results


def apply_fix(broken: BrokenLink, suggestion: FixSuggestion, context: CheckContext) -> FixResult:
    """Apply a single fix."""
    return apply_fixes([SuggestedFix(broken, suggestion)], context)[0]


def redirect_source(link: ParsedLink) -> str:
    """Redirect key for a link's original target: no './' prefix, no '.md'."""
    source = link.target_path
    if source.startswith('./'):
        source = source[2:]
    return re.sub(r'\.md$', '', source)


def generate_redirect_entries(results: List[FixResult]) -> List[RedirectPair]:
    """
    Redirects matching successful fixes, old target to new path.

    Targets containing '..' are skipped; exact duplicate pairs are dropped.
    """
    pairs: List[RedirectPair] = []
    for result in results:
        if not result.success:
            continue

        source = redirect_source(result.original_link)
        if '..' in source:
            continue

        pair = RedirectPair(source, result.new_path)
        if pair not in pairs:
            pairs.append(pair)

    return pairs


def apply_fixes_with_redirects(
    fixes: List[SuggestedFix],
    context: CheckContext,
    add_redirects: bool = True
) -> FixBatchResult:
    """
    Apply fixes, then append redirects for the paths they replaced.

    Redirects whose source is already a key in the table are not appended
    again. Nothing is appended when the table has no backing file. A failed
    append is logged and leaves every redirect_added flag unset; the file
    rewrites already made are kept.

    Returns:
        FixBatchResult with per-fix results and the number of redirects added
    """
    batch = FixBatchResult(results=apply_fixes(fixes, context))
    if not add_redirects:
        return batch

    table = context.redirect_table
    pairs = generate_redirect_entries(batch.results)
    if table is not None:
        pairs = [p for p in pairs if not table.has_source(p.source)]
    if not pairs:
        return batch

    if table is None or table.source_path is None:
        logger.warning("No redirect configuration to append %d redirect(s) to", len(pairs))
        return batch

    try:
        batch.redirects_added = table.append(pairs)
    except RedirectConfigError as e:
        logger.error(
            "Failed to add redirects: %s", e,
            extra={'error_code': 'RDR-03', 'file_path': str(table.source_path)},
        )
        return batch

    appended: Set[RedirectPair] = set(pairs)
    for result in batch.results:
        if result.success and RedirectPair(redirect_source(result.original_link), result.new_path) in appended:
            result.redirect_added = True

    return batch


def preview_fix(broken: BrokenLink, suggestion: FixSuggestion) -> FixPreview:
    """Render a fix as before/after link text without touching files."""
    link = broken.link
    new_relative_path = to_relative_link(broken.source_file, suggestion.suggested_path)
    old_target = f"{link.target_path}#{link.anchor}" if link.anchor else link.target_path

    return FixPreview(
        original_line=f"[{link.display_text}]({old_target})",
        new_line=f"[{link.display_text}]({_new_target(broken, suggestion)})",
        new_relative_path=new_relative_path,
    )
