"""
Redirect table parsed from the `redirects:` block of .gitbook.yaml.

The block is a constrained subset of YAML, read line by line so that entries
keep their line numbers and raw text:

    redirects:
      old/page: new/page.md
      legacy/guide: guide/README.md

The block ends at the first later line that is neither blank nor indented.

Lookups use the raw text. Each entry also carries a normalized form
('/old/page' -> '/new/page.html', '/legacy/guide' -> '/guide/') for
collaborators that serve the built site.
"""

import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Union

from linkmender.core.fileio import AtomicWriteError, atomic_write, file_exists, read_file
from linkmender.core.models import RedirectEntry, RedirectPair
from linkmender.core.paths import md_to_html

logger = logging.getLogger(__name__)


REDIRECTS_MARKER = 'redirects:'
ENTRY_PATTERN = re.compile(r'^\s{2}([^:]+):\s*(.+)$')
ENTRY_LINE_PATTERN = re.compile(r'^\s{2}\S')
UNINDENTED_PATTERN = re.compile(r'^\S')


class RedirectConfigError(Exception):
    """Raised when the redirect configuration cannot be read or written."""
    pass


def parse_redirect_entries(content: str) -> List[RedirectEntry]:
    """
    Parse the entries of the `redirects:` block.

    Args:
        content: Full configuration file text

    Returns:
        RedirectEntry list in file order
    """
    entries = []
    in_block = False

    for index, line in enumerate(content.split('\n')):
        if not in_block:
            in_block = line.strip() == REDIRECTS_MARKER
            continue

        if UNINDENTED_PATTERN.match(line) and line.strip():
            break

        match = ENTRY_PATTERN.match(line)
        if not match:
            continue

        raw_from = match.group(1).strip()
        raw_to = match.group(2).strip()
        entries.append(RedirectEntry(
            from_path='/' + raw_from,
            to_path=md_to_html('/' + raw_to),
            raw_from=raw_from,
            raw_to=raw_to,
            line=index + 1,
        ))

    return entries


class RedirectTable:
    """
    Bidirectional redirect mapping.

    from_to maps each raw source to its destination (last entry wins for
    duplicate keys); to_from maps each destination to every source pointing
    at it, duplicates included. Both are derived from the entry list and
    exposed read-only.
    """

    def __init__(self, entries: Iterable[RedirectEntry] = (), source_path: Optional[Path] = None):
        """
        Args:
            entries: Parsed redirect entries
            source_path: Configuration file the entries came from (needed
                         for append)
        """
        self.source_path = Path(source_path) if source_path else None
        self._entries: List[RedirectEntry] = list(entries)
        self._rebuild_indices()

    def _rebuild_indices(self):
        from_to: Dict[str, str] = {}
        to_from: Dict[str, List[str]] = {}
        for entry in self._entries:
            from_to[entry.raw_from] = entry.raw_to
            to_from.setdefault(entry.raw_to, []).append(entry.raw_from)
        self._from_to = from_to
        self._to_from = to_from

    @classmethod
    def from_text(cls, content: str, source_path: Optional[Path] = None) -> 'RedirectTable':
        return cls(parse_redirect_entries(content), source_path)

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> 'RedirectTable':
        """
        Load the table from a configuration file.

        Raises:
            RedirectConfigError: If the file cannot be read
        """
        config_path = Path(config_path)
        try:
            content = read_file(config_path)
        except (OSError, ValueError) as e:
            raise RedirectConfigError(f"Cannot read redirect configuration {config_path}: {e}") from e
        return cls.from_text(content, config_path)

    @property
    def entries(self) -> List[RedirectEntry]:
        return list(self._entries)

    @property
    def from_to(self) -> Mapping[str, str]:
        return MappingProxyType(self._from_to)

    @property
    def to_from(self) -> Mapping[str, List[str]]:
        return MappingProxyType(self._to_from)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RedirectEntry]:
        return iter(self._entries)

    def find_redirect_target(self, from_path: str) -> Optional[str]:
        """
        Find the redirect destination for a path.

        Tries, in order: the path as given, without a leading slash, without
        a '.md' suffix, and without both.

        Returns:
            Raw destination of the first hit, or None
        """
        without_slash = from_path[1:] if from_path.startswith('/') else from_path
        candidates = (
            from_path,
            without_slash,
            re.sub(r'\.md$', '', from_path),
            re.sub(r'\.md$', '', without_slash),
        )
        for candidate in candidates:
            if candidate in self._from_to:
                return self._from_to[candidate]
        return None

    def find_entry(self, raw_from: str) -> Optional[RedirectEntry]:
        """Entry whose raw source is raw_from (the last one, like from_to)."""
        for entry in reversed(self._entries):
            if entry.raw_from == raw_from:
                return entry
        return None

    def has_source(self, raw_from: str) -> bool:
        return raw_from in self._from_to

    def redirects_for_server(self) -> Dict[str, str]:
        """Normalized `{'/from': '/to.html'}` mapping for serving built pages."""
        return {entry.from_path: entry.to_path for entry in self._entries}

    def append(self, redirects: Iterable[RedirectPair]) -> int:
        """
        Append redirects to the backing file and reload the table.

        Returns:
            Number of redirects written

        Raises:
            RedirectConfigError: If there is no backing file or the write fails
        """
        redirects = list(redirects)
        if not redirects:
            return 0
        if self.source_path is None:
            raise RedirectConfigError("Redirect table has no configuration file to append to")

        add_redirects(self.source_path, redirects)
        reloaded = RedirectTable.from_file(self.source_path)
        self._entries = reloaded._entries
        self._rebuild_indices()
        return len(redirects)


def add_redirects(config_path: Union[str, Path], redirects: Iterable[RedirectPair]):
    """
    Insert `  source: destination` lines into the redirect block.

    New lines go right after the last existing entry (or the marker line if
    the block is empty). Without a block, a blank line, the marker and the
    entries are added at the end of the file. Existing entries are not
    checked for duplicates; callers filter beforehand.

    Raises:
        RedirectConfigError: If the file cannot be read or written
    """
    redirects = list(redirects)
    if not redirects:
        return

    config_path = Path(config_path)
    try:
        lines = read_file(config_path).split('\n')
    except (OSError, ValueError) as e:
        raise RedirectConfigError(f"Cannot read redirect configuration {config_path}: {e}") from e

    marker_index = -1
    last_entry_index = -1
    for index, line in enumerate(lines):
        if marker_index == -1:
            if line.strip() == REDIRECTS_MARKER:
                marker_index = index
            continue
        if ENTRY_LINE_PATTERN.match(line):
            last_entry_index = index
        elif UNINDENTED_PATTERN.match(line) and line.strip():
            break

    new_lines = [f"  {source}: {destination}" for source, destination in redirects]

    if marker_index == -1:
        # Keep the file's trailing newline after the new block
        insert_at = len(lines) - 1 if lines and lines[-1] == '' else len(lines)
        lines[insert_at:insert_at] = ['', REDIRECTS_MARKER] + new_lines
    elif last_entry_index != -1:
        lines[last_entry_index + 1:last_entry_index + 1] = new_lines
    else:
        lines[marker_index + 1:marker_index + 1] = new_lines

    try:
        atomic_write(config_path, '\n'.join(lines))
    except AtomicWriteError as e:
        raise RedirectConfigError(str(e)) from e

    logger.info("Added %d redirect(s) to %s", len(new_lines), config_path)


def load_redirect_table(config_path: Union[str, Path]) -> RedirectTable:
    """
    Load the redirect table, tolerating a missing configuration file.

    A missing file gives an empty table without a backing file (so nothing
    will be appended); an unreadable one is fatal.

    Raises:
        RedirectConfigError: If the file exists but cannot be read
    """
    config_path = Path(config_path)
    if not file_exists(config_path):
        logger.warning(
            "%s not found - redirect suggestions will be limited", config_path.name,
            extra={'error_code': 'RDR-02', 'file_path': str(config_path)},
        )
        return RedirectTable()
    return RedirectTable.from_file(config_path)
