"""
Shared fixtures for the Link Mender test suite.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from linkmender.core.context import CheckContext
from linkmender.core.models import BrokenLink, LinkKind, ParsedLink, ValidationStatus
from linkmender.parsers.markdown import parse_markdown_headings, parse_markdown_links
from linkmender.parsers.redirects import load_redirect_table


def write_files(root: Path, files: dict) -> Path:
    """Write {relative_path: content} under root (bytes written as-is)."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding='utf-8')
    return root


@pytest.fixture
def make_project(tmp_path):
    """Create a project tree in tmp_path and return its root."""
    def _make(files: dict) -> Path:
        return write_files(tmp_path, files)
    return _make


@pytest.fixture
def make_context(tmp_path):
    """Create a project tree and a CheckContext for it.

    The redirect table is loaded from .gitbook.yaml when the tree has one.
    """
    def _make(files: dict) -> CheckContext:
        write_files(tmp_path, files)
        return CheckContext(tmp_path, parse_markdown_headings, load_redirect_table(tmp_path / '.gitbook.yaml'))
    return _make


@pytest.fixture
def make_broken():
    """Build a BrokenLink by hand."""
    def _make(source_file: str, target: str, resolved: str = None, line: int = 1,
              anchor: str = None, text: str = 'link') -> BrokenLink:
        raw_target = f"{target}#{anchor}" if anchor else target
        link = ParsedLink(
            raw=f"[{text}]({raw_target})",
            display_text=text,
            target_path=target,
            anchor=anchor,
            line=line,
            column=1,
            kind=LinkKind.INTERNAL,
        )
        return BrokenLink(
            source_file,
            link,
            ValidationStatus.BROKEN,
            resolved_path=resolved,
            error=f"Target not found: {resolved or target}",
        )
    return _make


@pytest.fixture
def broken_from_file():
    """Build BrokenLinks for every link parsed from a project file."""
    def _make(root: Path, source_file: str, resolved_paths=None):
        content = (root / source_file).read_bytes().decode('utf-8')
        links = parse_markdown_links(source_file, content).links
        resolved_paths = resolved_paths or [None] * len(links)
        return [
            BrokenLink(source_file, link, ValidationStatus.BROKEN,
                       resolved_path=resolved, error=f"Target not found: {link.target_path}")
            for link, resolved in zip(links, resolved_paths)
        ]
    return _make
