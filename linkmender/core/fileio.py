"""
File I/O helpers: existence checks, size-limited reads, atomic writes.

Writes use the write-to-temp-then-rename pattern, which is atomic on POSIX
systems, so an interrupted rewrite never leaves a half-written document.

Usage:
    from linkmender.core.fileio import read_file, atomic_write

    content = read_file(Path("docs/guide.md"))
    atomic_write(Path("docs/guide.md"), content.replace("old.md", "new.md"))
"""

import errno
import os
import tempfile
from pathlib import Path
from typing import Optional, Tuple, Union


# 10 MB is far beyond any reasonable documentation page
MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024

PathLike = Union[str, Path]


class AtomicWriteError(Exception):
    """Error during atomic write operation."""
    pass


def file_exists(path: PathLike) -> bool:
    """Return True if path exists and is a regular file."""
    try:
        return Path(path).is_file()
    except OSError:
        return False


def dir_exists(path: PathLike) -> bool:
    """Return True if path exists and is a directory."""
    try:
        return Path(path).is_dir()
    except OSError:
        return False


def validate_file_size(
    file_path: Path,
    max_size: int = MAX_FILE_SIZE_BYTES
) -> Tuple[bool, Optional[str]]:
    """
    Check that a file is within the read size limit.

    Returns:
        (True, None) if the file is within limits (or does not exist),
        (False, reason) otherwise
    """
    try:
        if not file_path.exists():
            return True, None

        size = file_path.stat().st_size
        if size > max_size:
            return False, (
                f"File too large: {file_path} is {size:,} bytes "
                f"(max: {max_size:,} bytes)"
            )
        return True, None

    except OSError as e:
        return False, f"Cannot check file size for {file_path}: {e}"


def read_file(
    file_path: PathLike,
    max_size: int = MAX_FILE_SIZE_BYTES,
    encoding: str = 'utf-8'
) -> str:
    """
    Read a text file with a size limit.

    Newlines are returned untranslated so that "\\r\\n" files keep their
    line endings when split on "\\n" and joined back.

    Raises:
        ValueError: If the file is too large
        OSError: If the file cannot be read
    """
    file_path = Path(file_path)
    is_valid, error = validate_file_size(file_path, max_size)
    if not is_valid:
        raise ValueError(error)

    with open(file_path, 'r', encoding=encoding, newline='') as f:
        return f.read()


def atomic_write(file_path: PathLike, content: str, encoding: str = 'utf-8') -> bool:
    """
    Write file atomically via temp file + rename.

    The temp file lives in the target directory so the rename stays on one
    filesystem. Existing permissions are carried over.

    Returns:
        True if write succeeded

    Raises:
        AtomicWriteError: If the write fails (with descriptive message)
    """
    file_path = Path(file_path)
    temp_path = None

    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)

        temp_fd, temp_path_str = tempfile.mkstemp(
            prefix=f".tmp_{file_path.name}_",
            dir=file_path.parent,
            suffix=".tmp"
        )
        temp_path = Path(temp_path_str)

        with os.fdopen(temp_fd, 'w', encoding=encoding, newline='') as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        if file_path.exists():
            os.chmod(temp_path, file_path.stat().st_mode)

        os.replace(temp_path, file_path)
        return True

    except OSError as e:
        _discard(temp_path)
        if e.errno == errno.ENOSPC:
            raise AtomicWriteError(
                f"Disk full: Cannot write to {file_path}. Free up space and try again."
            ) from e
        if e.errno == errno.EACCES:
            raise AtomicWriteError(
                f"Permission denied: Cannot write to {file_path}. "
                f"Check file/directory permissions."
            ) from e
        raise AtomicWriteError(f"Write error for {file_path}: {e}") from e


def _discard(temp_path: Optional[Path]):
    if temp_path is not None and temp_path.exists():
        try:
            temp_path.unlink()
        except OSError:
            pass


def sanitize_error_message(message: str, project_root: Optional[Path] = None) -> str:
    """
    Replace absolute project and home paths in an error message.

    Args:
        message: Error message to sanitize
        project_root: If provided, its absolute path becomes "<project>"
    """
    if project_root:
        message = message.replace(str(Path(project_root).resolve()), '<project>')

    home = os.path.expanduser('~')
    if home and home != '~':
        message = message.replace(home, '<home>')

    return message
