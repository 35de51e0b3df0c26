"""
Fix suggestions for broken links.

Strategies are tried in priority order; the first one that produces a
candidate wins and the rest are not consulted:

1. Redirect match (high) - the redirect table points somewhere that exists
2. Basename match (medium) - a file with the same name lives elsewhere
3. Similarity match (medium/low) - a path within a small edit distance
4. Case variation (low) - the path exists with different letter case
5. Neighbor README (low) - a directory link can land on a nearby README.md

No suggestion is a normal outcome: ambiguous matches are reported, not
guessed.
"""

import logging
import posixpath
import re
from typing import Callable, Dict, List, Optional

from linkmender.core.context import CheckContext
from linkmender.core.models import BrokenLink, Confidence, FixSuggestion, SuggestedFix, SuggestionGroups
from linkmender.core.paths import get_basename, get_directory
from linkmender.core.similarity import levenshtein_distance, path_segment_similarity

logger = logging.getLogger(__name__)


BASENAME_SCORE_THRESHOLD = 0.5
MAX_EDIT_DISTANCE = 10
EDIT_DISTANCE_RATIO = 0.3
MAX_ACCEPTED_DISTANCE = 5
MEDIUM_DISTANCE = 2

NEIGHBOR_DIRECTORIES = (
    ('./', 'current directory'),
    ('../', 'parent directory'),
    ('../../', 'grandparent directory'),
)

Strategy = Callable[[BrokenLink, CheckContext], Optional[FixSuggestion]]


def _lookup_path(broken: BrokenLink) -> str:
    return broken.resolved_path or broken.link.target_path


def _path_variants(path: str) -> List[str]:
    without_slash = path[1:] if path.startswith('/') else path
    return [
        path,
        without_slash,
        re.sub(r'\.md$', '', path),
        re.sub(r'\.md$', '', without_slash),
    ]


def find_redirect_suggestion(broken: BrokenLink, context: CheckContext) -> Optional[FixSuggestion]:
    """Tier 1: first path variant whose redirect destination exists."""
    table = context.redirect_table
    if table is None or not len(table):
        return None

    for variant in _path_variants(_lookup_path(broken)):
        target = table.from_to.get(variant)
        if target and context.exists(target):
            return FixSuggestion(
                confidence=Confidence.HIGH,
                suggested_path=target,
                reason="Redirect exists in .gitbook.yaml",
                redirect_entry=table.find_entry(variant),
            )
    return None


def find_by_basename(broken: BrokenLink, context: CheckContext) -> Optional[FixSuggestion]:
    """
    Tier 2: Markdown files sharing the broken target's name.

    A single match is accepted outright. Several matches are ranked by shared
    path segments and the best is accepted only if it scores above 0.5.
    """
    path = _lookup_path(broken)
    matches = context.file_index.find_by_stem(get_basename(path))

    if len(matches) == 1:
        return FixSuggestion(
            confidence=Confidence.MEDIUM,
            suggested_path=matches[0],
            reason="File with same name found in different location",
        )

    if len(matches) > 1:
        scored = sorted(
            ((path_segment_similarity(path, match), match) for match in matches),
            key=lambda item: item[0],
            reverse=True,
        )
        best_score, best_match = scored[0]
        if best_score > BASENAME_SCORE_THRESHOLD:
            return FixSuggestion(
                confidence=Confidence.MEDIUM,
                suggested_path=best_match,
                reason=f"Similar file found ({len(matches)} candidates, best match selected)",
            )
        logger.debug("Ambiguous basename match for %s (%d candidates)", path, len(matches))

    return None


def find_by_similarity(broken: BrokenLink, context: CheckContext) -> Optional[FixSuggestion]:
    """
    Tier 3: the candidate path closest by edit distance.

    Candidates must be within min(10, 30% of the path length); the closest
    is accepted at distance 5 or less, as medium confidence up to 2.
    """
    path = _lookup_path(broken)
    lowered = path.lower()
    max_distance = min(MAX_EDIT_DISTANCE, int(len(path) * EDIT_DISTANCE_RATIO))

    best_path = None
    best_distance = None
    for candidate in context.file_index.all_files:
        distance = levenshtein_distance(lowered, candidate.lower())
        if distance > max_distance:
            continue
        if best_distance is None or distance < best_distance:
            best_path, best_distance = candidate, distance

    if best_path is None or best_distance > MAX_ACCEPTED_DISTANCE:
        return None

    return FixSuggestion(
        confidence=Confidence.MEDIUM if best_distance <= MEDIUM_DISTANCE else Confidence.LOW,
        suggested_path=best_path,
        reason=f"Similar path found (edit distance: {best_distance})",
    )


def find_by_case_variation(broken: BrokenLink, context: CheckContext) -> Optional[FixSuggestion]:
    """Tier 4: the same path with different letter case."""
    path = _lookup_path(broken)
    for match in context.file_index.find_case_insensitive(path):
        if match != path:
            return FixSuggestion(
                confidence=Confidence.LOW,
                suggested_path=match,
                reason="Case variation of path exists",
            )
    return None


def _looks_like_directory(target: str) -> bool:
    return target.endswith('/') or (target.startswith('.') and '.md' not in target)


def find_neighbor_readme(broken: BrokenLink, context: CheckContext) -> Optional[FixSuggestion]:
    """
    Tier 5: README.md next to or above the linking document.

    Only for links that look like directory references. Candidates that would
    produce the link text already in place are skipped.
    """
    target = broken.link.target_path
    if not _looks_like_directory(target):
        return None

    source_dir = get_directory(broken.source_file)
    for relative, description in NEIGHBOR_DIRECTORIES:
        candidate = posixpath.normpath(posixpath.join(source_dir, relative, 'README.md'))
        if candidate.startswith('..') or not context.exists(candidate):
            continue

        suggested_link = relative + 'README.md'
        if suggested_link in (target, target + 'README.md'):
            continue

        return FixSuggestion(
            confidence=Confidence.LOW,
            suggested_path=candidate,
            reason=f"README.md found in {description}",
        )

    return None


# Priority order; the first strategy returning a suggestion wins
SUGGESTION_STRATEGIES: List[Strategy] = [
    find_redirect_suggestion,
    find_by_basename,
    find_by_similarity,
    find_by_case_variation,
    find_neighbor_readme,
]


def find_fix_suggestion(broken: BrokenLink, context: CheckContext) -> Optional[FixSuggestion]:
    """
    Best fix for a broken link, or None.

    Args:
        broken: Broken link to fix
        context: Check context (redirect table, file index)

    Returns:
        Suggestion from the highest-priority strategy that produced one
    """
    for strategy in SUGGESTION_STRATEGIES:
        suggestion = strategy(broken, context)
        if suggestion is not None:
            return suggestion
    return None


def find_all_fix_suggestions(
    broken_links: List[BrokenLink],
    context: CheckContext
) -> Dict[BrokenLink, Optional[FixSuggestion]]:
    """
    Suggest fixes for a batch of broken links.

    The candidate file index is rebuilt at the start of each batch.

    Returns:
        Mapping of every broken link to its suggestion (None if nothing found),
        in input order
    """
    context.clear_file_index()

    suggestions: Dict[BrokenLink, Optional[FixSuggestion]] = {}
    for broken in broken_links:
        suggestion = find_fix_suggestion(broken, context)
        if suggestion is None:
            logger.debug(
                "No fix found for %s", broken.link.target_path,
                extra={'error_code': 'LNK-03', 'file_path': broken.source_file,
                       'line_number': broken.link.line},
            )
        suggestions[broken] = suggestion

    found = sum(1 for s in suggestions.values() if s is not None)
    logger.info("Found fixes for %d of %d broken link(s)", found, len(broken_links))
    return suggestions


def group_by_confidence(suggestions: Dict[BrokenLink, Optional[FixSuggestion]]) -> SuggestionGroups:
    """Bucket suggestions by confidence; links without one go to `none`."""
    groups = SuggestionGroups()
    for broken, suggestion in suggestions.items():
        if suggestion is None:
            groups.none.append(broken)
        else:
            getattr(groups, suggestion.confidence.value).append(SuggestedFix(broken, suggestion))
    return groups
