"""
Scoped caches for one checking session.

A CheckContext is passed through the validation, suggestion and fixing
stages in place of process-wide state. It owns:
- the project root
- the redirect table for the run
- the heading cache (keyed by project-relative path; cleared only on request,
  never by file modification time)
- the candidate file index used by the suggestion strategies

Call reset() (or the narrower clear_* methods) between independent batches.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Union

from .file_index import DEFAULT_EXCLUDE_DIRS, FileIndex
from .fileio import file_exists, read_file
from .models import FileHeadings
from .paths import project_path, validate_project_root

logger = logging.getLogger(__name__)

# (project-relative path, document text) -> FileHeadings
HeadingLoader = Callable[[str, str], FileHeadings]


class CheckContext:
    """Project root, redirect table and memoized lookups for one run."""

    def __init__(
        self,
        project_root: Union[str, Path],
        heading_loader: HeadingLoader,
        redirect_table=None,
        exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS
    ):
        """
        Args:
            project_root: Project root directory (must exist)
            heading_loader: Parses a document's headings, e.g.
                            parsers.markdown.parse_markdown_headings
            redirect_table: RedirectTable for the run (None: no redirects)
            exclude_dirs: Directory names skipped when indexing files

        Raises:
            PathSecurityError: If project_root is not an existing directory
        """
        self.project_root = validate_project_root(project_root)
        self.heading_loader = heading_loader
        self.redirect_table = redirect_table
        self.exclude_dirs = tuple(exclude_dirs)

        self._headings: Dict[str, FileHeadings] = {}
        self._file_index: Optional[FileIndex] = None

    def path(self, relative: str) -> Path:
        """Filesystem path of a project-relative document path."""
        return project_path(self.project_root, relative)

    def exists(self, relative: str) -> bool:
        """True if the project-relative path is an existing file."""
        return file_exists(self.path(relative))

    def get_file_headings(self, relative: str) -> Optional[FileHeadings]:
        """
        Headings of a document, parsed once and memoized.

        Returns:
            FileHeadings, or None if the file does not exist
        """
        if relative in self._headings:
            return self._headings[relative]

        full_path = self.path(relative)
        if not file_exists(full_path):
            return None

        headings = self.heading_loader(relative, read_file(full_path))
        self._headings[relative] = headings
        return headings

    @property
    def file_index(self) -> FileIndex:
        """Candidate file index, built on first use."""
        if self._file_index is None:
            self._file_index = FileIndex(self.project_root, self.exclude_dirs)
            logger.debug("Indexed %d candidate file(s)", self._file_index.size)
        return self._file_index

    def clear_headings(self):
        self._headings.clear()

    def clear_file_index(self):
        self._file_index = None

    def reset(self):
        """Drop every cached lookup."""
        self.clear_headings()
        self.clear_file_index()
