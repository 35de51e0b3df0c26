"""
Document enumeration and a pre-built index of candidate fix targets.

Instead of scanning the tree for every broken link, the index is built once
per suggestion batch and looked up many times.

Index structure:
- all_files: every candidate path, sorted (project-relative, POSIX style)
- by_stem: lowercased file stem -> paths
- by_lower_path: lowercased full path -> paths

Performance:
- Build time: O(n) where n = number of files
- Lookup time: O(1) for stem/case lookups, O(n) for edit-distance scans
"""

from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .paths import get_basename


DEFAULT_EXCLUDE_DIRS = ('node_modules', '_book', 'dist', '.git')


def _walk(root: Path, extensions: Iterable[str], exclude_dirs: Iterable[str]) -> List[str]:
    extensions = set(extensions)
    exclude_dirs = set(exclude_dirs)
    found = []

    for file_path in root.rglob("*"):
        if file_path.suffix not in extensions:
            continue

        relative = file_path.relative_to(root)
        if any(part in exclude_dirs for part in relative.parts[:-1]):
            continue

        if not file_path.is_file():
            continue

        found.append(relative.as_posix())

    return sorted(found)


def get_markdown_files(
    project_root: Union[str, Path],
    sub_path: Optional[str] = None,
    exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS
) -> List[str]:
    """
    List Markdown documents to check.

    Args:
        project_root: Project root directory
        sub_path: Optional project-relative directory to restrict the scan to
        exclude_dirs: Directory names to skip anywhere in the tree

    Returns:
        Sorted project-relative paths
    """
    root = Path(project_root)
    search_root = root / sub_path if sub_path else root
    if not search_root.is_dir():
        return []

    files = _walk(search_root, ['.md'], exclude_dirs)
    if sub_path:
        prefix = Path(sub_path).as_posix().strip('/')
        files = [f"{prefix}/{f}" for f in files]
    return files


class FileIndex:
    """
    Index of Markdown files that may stand in for a broken link's target.

    Built once, then queried by the suggestion strategies.
    """

    def __init__(
        self,
        root: Union[str, Path],
        exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
        file_extensions: Iterable[str] = ('.md',)
    ):
        """
        Build file index from root directory.

        Args:
            root: Project root to index
            exclude_dirs: Directory names to skip
            file_extensions: File extensions to include
        """
        self.root = Path(root)

        self.by_stem: Dict[str, List[str]] = defaultdict(list)
        self.by_lower_path: Dict[str, List[str]] = defaultdict(list)
        self.all_files: List[str] = []

        for relative in _walk(self.root, file_extensions, exclude_dirs):
            self.all_files.append(relative)
            self.by_stem[get_basename(relative).lower()].append(relative)
            self.by_lower_path[relative.lower()].append(relative)

    def find_by_stem(self, stem: str) -> List[str]:
        """Files whose name without extension equals stem (case-insensitive)."""
        return list(self.by_stem.get(stem.lower(), []))

    def find_case_insensitive(self, path: str) -> List[str]:
        """Files whose full project-relative path equals path ignoring case."""
        return list(self.by_lower_path.get(path.lower(), []))

    @property
    def size(self) -> int:
        """Number of indexed files."""
        return len(self.all_files)
