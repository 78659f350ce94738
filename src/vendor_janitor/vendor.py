"""Removal of package-manager artifacts from the vendor root."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from .fs import remove_path

# Installer helper, its bundled license and the shared binary stubs
SWEEP_TARGETS: tuple[str, ...] = (
    "composer/installers",
    "composer/LICENSE",
    "bin",
)

logger = logging.getLogger(__name__)


def sweep_vendor_root(
    vendor_root: Path,
    remove: Callable[[Path], str | None] = remove_path,
    log: logging.Logger = logger,
) -> list[Path]:
    """Remove the fixed set of package-manager artifacts under a vendor root.

    Missing targets are skipped. Failures are logged and do not stop the
    sweep.

    Args:
        vendor_root: Vendor directory.
        remove: Removal function, returning an error description or None.
        log: Logger for removal failures.

    Returns:
        Paths that were removed.

    """
    removed: list[Path] = []

    for target in SWEEP_TARGETS:
        path = Path(vendor_root) / target
        if not (path.exists() or path.is_symlink()):
            continue

        if error := remove(path):
            log.error("Could not remove %s: %s", path, error)
            continue

        removed.append(path)

    return removed
