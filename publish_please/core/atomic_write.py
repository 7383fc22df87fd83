"""
Atomic file writing.

.publishrc and package.json are rewritten by `publish-please config` and
`publish-please init`. A Ctrl+C or a full disk must never leave either file
half written, so both go through the write-to-temp-then-rename pattern,
which is atomic on POSIX systems.

Usage:
    from publish_please.core.atomic_write import atomic_write

    atomic_write(Path(".publishrc"), json.dumps(options, indent=2))
"""

import errno
import os
import tempfile
from pathlib import Path

from .base import PublishPleaseError


class AtomicWriteError(PublishPleaseError):
    """Error during atomic write operation."""
    pass


def atomic_write(file_path: Path, content: str, encoding: str = 'utf-8') -> bool:
    """
    Write file atomically.

    The temp file is created in the target's directory so the final
    rename stays on one filesystem. Permissions of an existing target
    are carried over.

    Args:
        file_path: Path to file to write
        content: Content to write
        encoding: Text encoding (default: utf-8)

    Returns:
        True if write succeeded

    Raises:
        AtomicWriteError: If write fails (with descriptive message)
    """
    file_path = Path(file_path)
    temp_path = None

    try:
        temp_fd, temp_path_str = tempfile.mkstemp(
            prefix=f".tmp_{file_path.name}_",
            dir=file_path.parent,
            suffix=".tmp"
        )
        temp_path = Path(temp_path_str)

        try:
            with os.fdopen(temp_fd, 'w', encoding=encoding) as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            if e.errno == errno.ENOSPC:
                raise AtomicWriteError(
                    f"Disk full: Cannot write to {file_path}. "
                    f"Free up space and try again."
                ) from e
            if e.errno == errno.EACCES:
                raise AtomicWriteError(
                    f"Permission denied: Cannot write to {file_path}. "
                    f"Check file/directory permissions."
                ) from e
            raise AtomicWriteError(f"Write error for {file_path}: {e}") from e

        if file_path.exists():
            os.chmod(temp_path, file_path.stat().st_mode)

        os.replace(temp_path, file_path)
        return True

    except AtomicWriteError:
        _remove_quietly(temp_path)
        raise

    except OSError as e:
        _remove_quietly(temp_path)
        raise AtomicWriteError(f"Failed to write {file_path}: {e}") from e


def _remove_quietly(path) -> None:
    if path is not None and path.exists():
        try:
            path.unlink()
        except OSError:
            pass
