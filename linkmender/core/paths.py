"""
Path handling for project-relative document paths.

Document paths are POSIX-style strings relative to the project root
("docs/guide/setup.md"), independent of the host OS. Conversion to real
filesystem paths happens only at the edges via project_path().

Security:
- Project root is validated to exist and be a directory
- Config-supplied paths are checked to stay inside the project root
"""

import posixpath
import re
from pathlib import Path
from typing import Optional, Tuple, Union
from urllib.parse import unquote

from .fileio import file_exists, dir_exists
from .models import ResolvedPath


EXTERNAL_LINK_PATTERN = re.compile(r'^(https?:|mailto:|tel:|ftp:)', re.IGNORECASE)

ASSET_EXTENSIONS = frozenset({
    '.png', '.jpg', '.jpeg', '.gif', '.svg', '.webp',
    '.pdf', '.zip', '.tar', '.gz',
    '.mp4', '.webm', '.mov',
    '.mp3', '.wav', '.ogg',
})

# Markdown escapes that may appear inside link targets
MARKDOWN_ESCAPES = (('\\_', '_'), ('\\#', '#'), ('\\ ', ' '))


class PathSecurityError(Exception):
    """Raised when a path is invalid or escapes the project root."""
    pass


def validate_project_root(root: Union[str, Path]) -> Path:
    """
    Validate that a project root exists and is a directory.

    Returns:
        Resolved absolute path

    Raises:
        PathSecurityError: If root is invalid
    """
    root = Path(root)
    try:
        resolved = root.resolve()
    except (OSError, RuntimeError) as e:
        raise PathSecurityError(f"Invalid project root {root}: {e}")

    if not resolved.exists():
        raise PathSecurityError(f"Project root does not exist: {resolved}")
    if not resolved.is_dir():
        raise PathSecurityError(f"Project root is not a directory: {resolved}")

    return resolved


def validate_path_contained(path: Union[str, Path], container: Path) -> Path:
    """
    Validate that a (possibly non-existent) path stays inside a container.

    Relative paths are interpreted from the container.

    Raises:
        PathSecurityError: If the path is outside the container
    """
    path = Path(path)
    resolved_container = Path(container).resolve()
    logical = path if path.is_absolute() else resolved_container / path
    logical = logical.resolve()

    try:
        logical.relative_to(resolved_container)
    except ValueError:
        raise PathSecurityError(f"Path {logical} is outside container {resolved_container}")
    return logical


def project_path(project_root: Union[str, Path], relative: str) -> Path:
    """Convert a project-relative document path to a filesystem path."""
    return Path(project_root) / relative.lstrip('/')


def normalize_path(input_path: str) -> str:
    """Use forward slashes, drop trailing slashes and a leading './'."""
    result = input_path.replace('\\', '/').rstrip('/')
    if result.startswith('./'):
        result = result[2:]
    return result


def get_directory(file_path: str) -> str:
    """Directory part of a project-relative path ('' for root files)."""
    return posixpath.dirname(file_path)


def get_basename(file_path: str, include_ext: bool = False) -> str:
    """File name of a path, optionally without its extension."""
    name = posixpath.basename(file_path)
    return name if include_ext else posixpath.splitext(name)[0]


def _collapse(path: str) -> str:
    collapsed = posixpath.normpath(path) if path else ''
    return '' if collapsed == '.' else collapsed


def split_anchor(target: str) -> Tuple[str, Optional[str]]:
    """Split 'path#anchor' at the first '#'."""
    path, sep, anchor = target.partition('#')
    return path, (anchor if sep else None)


def resolve_relative_link(
    source_file: str,
    link_target: str,
    project_root: Union[str, Path]
) -> ResolvedPath:
    """
    Resolve a link target to a project-relative path.

    Targets starting with '/' are resolved from the project root, others from
    the source file's directory. An extensionless target that does not exist
    falls back to '<target>.md', then '<target>/README.md'; the first that
    exists wins, otherwise the plain resolution is kept.

    Args:
        source_file: Project-relative path of the linking document
        link_target: Link target, optionally with '#anchor'
        project_root: Project root directory

    Returns:
        ResolvedPath (resolved may not exist)
    """
    target, anchor = split_anchor(link_target)

    if not target:
        return ResolvedPath(
            resolved=source_file,
            exists=file_exists(project_path(project_root, source_file)),
            original=link_target,
            anchor=anchor,
        )

    target = target.replace('\\', '/')
    if target.startswith('/'):
        resolved = _collapse(normalize_path(target).lstrip('/'))
    else:
        resolved = _collapse(posixpath.join(get_directory(source_file), normalize_path(target)))

    if not posixpath.splitext(resolved)[1] and not file_exists(project_path(project_root, resolved)):
        with_md = resolved + '.md'
        readme = posixpath.join(resolved, 'README.md')
        if resolved and file_exists(project_path(project_root, with_md)):
            resolved = with_md
        elif file_exists(project_path(project_root, readme)):
            resolved = readme

    return ResolvedPath(
        resolved=resolved,
        exists=file_exists(project_path(project_root, resolved)),
        original=link_target,
        anchor=anchor,
    )


def to_relative_link(source_file: str, target_path: str) -> str:
    """
    Express a project-relative target as a link from source_file.

    The result always starts with '.' or '/' ('./guide.md', '../a/b.md').
    """
    relative = posixpath.relpath(target_path, get_directory(source_file) or '.')
    if not relative.startswith('.') and not relative.startswith('/'):
        relative = './' + relative
    return relative


def is_external_link(link: str) -> bool:
    return bool(EXTERNAL_LINK_PATTERN.match(link))


def is_anchor_only(link: str) -> bool:
    return link.startswith('#')


def is_asset_link(link: str) -> bool:
    """True if the link's path part has a media/archive extension."""
    path, _ = split_anchor(link)
    return posixpath.splitext(path)[1].lower() in ASSET_EXTENSIONS


def clean_link_path(link: str) -> str:
    """Percent-decode a link target and undo Markdown escapes."""
    cleaned = unquote(link)
    for escaped, plain in MARKDOWN_ESCAPES:
        cleaned = cleaned.replace(escaped, plain)
    return cleaned


def md_to_html(md_path: str) -> str:
    """'a/b.md' -> 'a/b.html', 'a/README.md' -> 'a/'."""
    result = re.sub(r'\.md$', '.html', md_path)
    return re.sub(r'/README\.html$', '/', result)


def html_to_md(html_path: str) -> str:
    """'a/b.html' -> 'a/b.md', 'a/index.html' and 'a/' -> 'a/README.md'."""
    result = re.sub(r'\.html$', '.md', html_path)
    result = re.sub(r'/index\.md$', '/README.md', result)
    if result.endswith('/'):
        result += 'README.md'
    return result


def target_path_exists(
    url_path: str,
    project_root: Union[str, Path],
    book_dir: Optional[Union[str, Path]] = None
) -> bool:
    """
    Check whether a published URL path is served by the project.

    Looks in the built book directory first (default '<root>/_book'), then
    falls back to Markdown sources ('x.html' -> 'x.md', directory -> README.md).
    """
    clean = url_path.lstrip('/')
    without_slash = clean.rstrip('/')
    looks_like_dir = clean.endswith('/') or '.' not in clean

    book = Path(book_dir) if book_dir else Path(project_root) / '_book'
    if dir_exists(book):
        if file_exists(book / clean):
            return True
        if looks_like_dir:
            if file_exists(book / clean / 'index.html'):
                return True
            if file_exists(book / (without_slash + '.html')):
                return True

    source = re.sub(r'/index\.md$', '/README.md', re.sub(r'\.html$', '.md', clean))
    if file_exists(project_path(project_root, source)):
        return True

    if looks_like_dir:
        if file_exists(project_path(project_root, posixpath.join(clean, 'README.md'))):
            return True
        if file_exists(project_path(project_root, without_slash + '.md')):
            return True

    return False


def has_redirect_conflict(from_path: str, to_path: str, project_root: Union[str, Path]) -> bool:
    """
    True if a redirect's source still exists as its own Markdown page.

    Redirecting 'a' to 'a/README' or 'a/index' is not a conflict.
    """
    from_clean = re.sub(r'\.html$', '', from_path.lstrip('/'))
    to_clean = re.sub(r'\.html$', '', to_path.lstrip('/'))

    if to_clean in (from_clean, f"{from_clean}/README", f"{from_clean}/index"):
        return False

    return file_exists(project_path(project_root, from_clean + '.md'))
