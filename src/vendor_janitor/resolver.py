"""Locate the installed directory of a package."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# Name segments that would step outside a package's own directory
_UNSAFE_SEGMENTS = frozenset({"", ".", ".."})


@dataclass(frozen=True)
class PackageRef:
    """An installed package as reported by the package manager.

    ``installed_path`` is the manifest's ``install-path``, kept for
    reporting only; the directory to clean is always located through
    ``resolve_directory``.
    """

    name: str
    installed_path: Path | None = None
    target_dir: str | None = None
    package_type: str | None = None

    @property
    def vendor(self) -> str:
        """Namespace part of the name (before the first ``/``)."""
        return self.name.partition("/")[0]

    @property
    def project(self) -> str:
        """Final segment of the name, used for relocated installs."""
        return self.name.rpartition("/")[2]

    @property
    def relative_dir(self) -> str:
        """Directory below the vendor root, including any target dir."""
        return f"{self.name}/{self.target_dir}" if self.target_dir else self.name

    def __str__(self) -> str:
        return self.name


def _canonical(path: Path) -> Path:
    try:
        return path.resolve()
    except (OSError, RuntimeError):
        # Symlink loops and unreadable components cannot be a package dir.
        return path.absolute()


def _safe_segments(value: str) -> bool:
    return all(part not in _UNSAFE_SEGMENTS for part in value.replace("\\", "/").split("/"))


def primary_candidate(package: PackageRef, primary_root: Path) -> Path:
    """Conventional location: ``<primary_root>/<vendor>/<project>[/<target_dir>]``."""
    return _canonical(Path(primary_root) / package.relative_dir)


def fallback_candidate(package: PackageRef, fallback_root: Path) -> Path:
    """Relocated location: ``<fallback_root>/<project>``."""
    return _canonical(Path(fallback_root) / package.project)


def _primary_directory(package: PackageRef, primary_root: Path) -> Path | None:
    """Conventional location, if it exists and stays inside the package dir."""
    if not _safe_segments(package.name):
        return None

    package_root = _canonical(Path(primary_root) / package.name)
    candidate = primary_candidate(package, primary_root)
    if candidate.is_relative_to(package_root) and candidate.is_dir():
        return candidate
    return None


def _fallback_directory(package: PackageRef, fallback_root: Path) -> Path | None:
    """Relocated location, if it exists and is one level below the root."""
    if package.project in _UNSAFE_SEGMENTS or "\\" in package.project:
        return None

    candidate = fallback_candidate(package, fallback_root)
    if candidate.is_dir():
        return candidate
    return None


def resolve_directory(
    package: PackageRef,
    primary_root: Path,
    fallback_root: Path | None = None,
) -> Path | None:
    """Find the on-disk directory of a package.

    The conventional vendor location is preferred. Packages moved by a
    custom installer (plugin or theme directories) are looked up by their
    project name under the fallback root.

    A name segment of ``.`` or ``..``, or a target dir resolving outside
    ``<primary_root>/<vendor>/<project>``, never yields a directory.
    Symlinked package directories are followed.

    Args:
        package: Package to locate.
        primary_root: Vendor directory.
        fallback_root: Custom install root, if any.

    Returns:
        Canonical directory path, or None if neither location exists.

    """
    if (directory := _primary_directory(package, primary_root)) is not None:
        return directory

    if fallback_root is None:
        return None

    return _fallback_directory(package, fallback_root)
