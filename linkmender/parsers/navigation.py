"""
Navigation-tree parser for indentation-based link lists (SUMMARY.md).

Each list item `[-*] [title](path)` becomes a NavigationEntry whose depth is
its indentation width divided by two. An entry attaches to the nearest
preceding entry with a strictly smaller depth; under-indented entries with no
such ancestor become roots, so malformed indentation still yields a forest.
"""

import logging
import re
from pathlib import Path
from typing import Callable, List, Set, Union

from linkmender.core.fileio import read_file
from linkmender.core.models import NavigationEntry, NavigationStructure
from linkmender.core.paths import clean_link_path

logger = logging.getLogger(__name__)


ENTRY_PATTERN = re.compile(r'^(\s*)[*\-]\s+\[([^\]]+)\]\(([^)]+)\)')
INDENT_UNIT = 2


class NavigationFileError(Exception):
    """Raised when the navigation file cannot be read. Fatal for a run."""
    pass


def parse_navigation_text(content: str) -> NavigationStructure:
    """
    Build the navigation forest from list text.

    Args:
        content: Navigation document text

    Returns:
        NavigationStructure with root entries and all paths in order
    """
    structure = NavigationStructure()
    stack: List[NavigationEntry] = []

    for index, line in enumerate(content.split('\n')):
        match = ENTRY_PATTERN.match(line)
        if not match:
            continue

        indent, title, raw_path = match.groups()
        entry = NavigationEntry(
            title=title.strip(),
            path=clean_link_path(raw_path.strip()),
            line=index + 1,
            depth=len(indent) // INDENT_UNIT,
        )
        structure.all_paths.append(entry.path)

        while stack and stack[-1].depth >= entry.depth:
            stack.pop()

        if stack:
            stack[-1].children.append(entry)
        else:
            structure.entries.append(entry)

        stack.append(entry)

    return structure


def parse_navigation(navigation_path: Union[str, Path]) -> NavigationStructure:
    """
    Read and parse a navigation file.

    Raises:
        NavigationFileError: If the file is missing or unreadable
    """
    try:
        content = read_file(navigation_path)
    except (OSError, ValueError) as e:
        raise NavigationFileError(f"Cannot read navigation file {navigation_path}: {e}") from e

    structure = parse_navigation_text(content)
    logger.debug("Parsed %d navigation entries from %s", len(structure.all_paths), navigation_path)
    return structure


def flatten_navigation(structure: NavigationStructure) -> List[NavigationEntry]:
    """All entries in depth-first document order."""
    result: List[NavigationEntry] = []

    def flatten(entries: List[NavigationEntry]):
        for entry in entries:
            result.append(entry)
            flatten(entry.children)

    flatten(structure.entries)
    return result


def get_navigation_paths(navigation_path: Union[str, Path]) -> Set[str]:
    return set(parse_navigation(navigation_path).all_paths)


def find_entries_for_path(structure: NavigationStructure, target_path: str) -> List[NavigationEntry]:
    """Entries pointing at target_path (case-insensitive)."""
    normalized = target_path.lower()
    return [e for e in flatten_navigation(structure) if e.path.lower() == normalized]


def validate_navigation_paths(
    structure: NavigationStructure,
    exists: Callable[[str], bool]
) -> List[NavigationEntry]:
    """
    Find navigation entries whose target is missing.

    Args:
        structure: Parsed navigation
        exists: Existence check for a project-relative path

    Returns:
        Entries for which exists(entry.path) is False
    """
    return [e for e in flatten_navigation(structure) if not exists(e.path)]
