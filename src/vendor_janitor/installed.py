"""Read the installed-package manifest written by Composer."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .resolver import PackageRef

MANIFEST_PATH = Path("composer") / "installed.json"

logger = logging.getLogger(__name__)


class ManifestError(Exception):
    """The installed-package manifest exists but cannot be used."""


def list_installed_packages(vendor_dir: Path) -> list[PackageRef]:
    """List the packages recorded in ``<vendor_dir>/composer/installed.json``.

    Both the 2.x layout (``{"packages": [...]}``) and the 1.x layout (a
    bare list) are accepted. Entries without a name are ignored.

    Args:
        vendor_dir: Vendor directory.

    Returns:
        Installed packages in manifest order, empty if there is no manifest.

    Raises:
        ManifestError: If the manifest cannot be read or parsed.

    """
    manifest = Path(vendor_dir) / MANIFEST_PATH

    if not manifest.is_file():
        logger.warning("No installed packages manifest: %s", manifest)
        return []

    try:
        with manifest.open(encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ManifestError(f"Cannot read {manifest}: {e}") from e

    if isinstance(data, dict):
        entries = data.get("packages", [])
    elif isinstance(data, list):
        entries = data
    else:
        raise ManifestError(f"Unexpected manifest layout in {manifest}")

    if not isinstance(entries, list):
        raise ManifestError(f"Unexpected packages list in {manifest}")

    return [
        package
        for entry in entries
        if (package := _package_from_entry(entry, manifest.parent)) is not None
    ]


def _package_from_entry(entry: Any, base_dir: Path) -> PackageRef | None:
    if not isinstance(entry, dict) or not entry.get("name"):
        return None

    install_path = entry.get("install-path")
    return PackageRef(
        name=str(entry["name"]),
        installed_path=(base_dir / install_path) if install_path else None,
        target_dir=entry.get("target-dir") or None,
        package_type=entry.get("type") or None,
    )
