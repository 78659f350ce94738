"""Filesystem removal helpers."""

from __future__ import annotations

import shutil
from pathlib import Path


def remove_path(path: Path) -> str | None:
    """Remove a file, symlink or directory tree.

    Symlinks are unlinked, never followed. A path that is already gone is
    not an error.

    Args:
        path: Path to remove.

    Returns:
        Error description if removal failed, None otherwise.

    """
    try:
        if path.is_symlink() or not path.is_dir():
            path.unlink(missing_ok=True)
        else:
            shutil.rmtree(path)
    except FileNotFoundError:
        return None
    except PermissionError as e:
        return f"Permission denied: {e}"
    except OSError as e:
        return str(e)
    return None
