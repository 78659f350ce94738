"""Tests for reading the installed-package manifest."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from vendor_janitor.installed import ManifestError, list_installed_packages
from vendor_janitor.resolver import PackageRef


def _write_manifest(vendor: Path, data: object) -> Path:
    manifest = vendor / "composer" / "installed.json"
    manifest.parent.mkdir(parents=True, exist_ok=True)
    manifest.write_text(json.dumps(data))
    return manifest


class TestListInstalledPackages:
    """Tests for both manifest layouts and their failure modes."""

    def test_v2_layout(self, tmp_path: Path) -> None:
        """Test the ``{"packages": [...]}`` layout with install paths."""
        _write_manifest(
            tmp_path,
            {
                "packages": [
                    {"name": "acme/widget", "type": "library", "install-path": "../acme/widget"},
                    {
                        "name": "wpackagist-plugin/akismet",
                        "type": "wordpress-plugin",
                        "install-path": "../../wp-content/plugins/akismet/",
                    },
                ],
                "dev": True,
            },
        )

        packages = list_installed_packages(tmp_path)

        assert [p.name for p in packages] == ["acme/widget", "wpackagist-plugin/akismet"]
        assert packages[0].installed_path == tmp_path / "composer" / "../acme/widget"
        assert packages[1].package_type == "wordpress-plugin"

    def test_v1_layout(self, tmp_path: Path) -> None:
        """Test the bare list layout with target dirs."""
        _write_manifest(
            tmp_path,
            [
                {"name": "acme/legacy", "target-dir": "Acme/Legacy"},
                {"version": "1.0.0"},
            ],
        )

        packages = list_installed_packages(tmp_path)

        assert packages == [PackageRef(name="acme/legacy", target_dir="Acme/Legacy")]

    def test_missing_manifest(self, tmp_path: Path) -> None:
        """Test that no manifest means no packages."""
        assert list_installed_packages(tmp_path) == []

    def test_malformed_json(self, tmp_path: Path) -> None:
        """Test that unparsable JSON raises ManifestError."""
        manifest = tmp_path / "composer" / "installed.json"
        manifest.parent.mkdir()
        manifest.write_text("{broken")

        with pytest.raises(ManifestError, match="Cannot read"):
            list_installed_packages(tmp_path)

    @pytest.mark.parametrize("data", ["text", 42, {"packages": "nope"}])
    def test_unexpected_layout(self, tmp_path: Path, data: object) -> None:
        """Test that valid JSON of the wrong shape raises ManifestError."""
        _write_manifest(tmp_path, data)

        with pytest.raises(ManifestError):
            list_installed_packages(tmp_path)
