"""
Redirect table validation.

Each redirect is checked two ways:
- conflict: the source still exists as its own Markdown page, so the
  redirect would shadow real content (reported as skipped)
- broken: the destination is neither in the built book nor a Markdown source
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from linkmender.core.models import RedirectEntry
from linkmender.core.paths import has_redirect_conflict, target_path_exists

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedirectIssue:
    """A redirect entry that failed a check, with the reason."""
    entry: RedirectEntry
    reason: str


@dataclass
class RedirectCheckResult:
    """Counts and issues from checking a redirect table."""
    total: int = 0
    skipped: List[RedirectIssue] = field(default_factory=list)
    broken: List[RedirectIssue] = field(default_factory=list)

    @property
    def valid(self) -> int:
        """Entries with no issue; an entry both skipped and broken counts once."""
        flagged = {issue.entry for issue in self.skipped + self.broken}
        return self.total - len(flagged)

    @property
    def has_issues(self) -> bool:
        return bool(self.skipped or self.broken)


def check_redirects(
    table,
    project_root: Union[str, Path],
    book_dir: Optional[Union[str, Path]] = None
) -> RedirectCheckResult:
    """
    Check every entry of a redirect table.

    An entry can be both skipped and broken; it is listed in both.

    Args:
        table: RedirectTable (or any iterable of RedirectEntry)
        project_root: Project root directory
        book_dir: Built book directory (default '<root>/_book')

    Returns:
        RedirectCheckResult
    """
    result = RedirectCheckResult()

    for entry in table:
        result.total += 1

        if has_redirect_conflict(entry.from_path, entry.to_path, project_root):
            result.skipped.append(RedirectIssue(entry, 'source path exists as different content'))

        if not target_path_exists(entry.to_path, project_root, book_dir):
            result.broken.append(RedirectIssue(entry, 'target does not exist'))
            logger.warning(
                "Redirect %s -> %s points to a missing target", entry.raw_from, entry.raw_to,
                extra={'error_code': 'RDR-04', 'line_number': entry.line},
            )

    return result
