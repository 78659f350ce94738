"""Tests for the command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from vendor_janitor.main import main, parse_args


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a project with a config file and one installed package."""
    vendor = tmp_path / "vendor"
    widget = vendor / "acme" / "widget"
    (widget / "src").mkdir(parents=True)
    (widget / "src" / "Widget.php").write_text("<?php")
    (widget / "README.md").write_text("readme")
    (widget / "tests").mkdir()
    (vendor / "bin").mkdir()
    manifest = vendor / "composer" / "installed.json"
    manifest.parent.mkdir()
    manifest.write_text(json.dumps({"packages": [{"name": "acme/widget"}]}))
    (tmp_path / "vendor-janitor.yaml").write_text(yaml.dump({"vendor_dir": "vendor"}))
    return tmp_path


class TestParseArgs:
    """Tests for argument parsing."""

    def test_clean_arguments(self) -> None:
        """Test the clean subcommand options."""
        args = parse_args(["clean", "acme/widget", "--target-dir", "lib", "--dry-run"])

        assert args.command == "clean"
        assert args.package == "acme/widget"
        assert args.target_dir == "lib"
        assert args.dry_run is True

    def test_config_and_composer_exclusive(self) -> None:
        """Test that only one configuration source is accepted."""
        with pytest.raises(SystemExit):
            parse_args(["--config", "a.yaml", "--composer", "composer.json", "run"])


class TestCommands:
    """Tests for running subcommands end to end."""

    def test_run(self, project: Path) -> None:
        """Test a full run against the manifest."""
        code = main(["--config", str(project / "vendor-janitor.yaml"), "run"])

        widget = project / "vendor" / "acme" / "widget"
        assert code == 0
        assert sorted(p.name for p in widget.iterdir()) == ["src"]
        assert not (project / "vendor" / "bin").exists()

    def test_default_command_is_run(self, project: Path) -> None:
        """Test that no subcommand runs the full cleanup."""
        assert main(["--config", str(project / "vendor-janitor.yaml")]) == 0
        assert not (project / "vendor" / "acme" / "widget" / "README.md").exists()

    def test_run_dry_run(self, project: Path) -> None:
        """Test that --dry-run leaves everything in place."""
        code = main(["--config", str(project / "vendor-janitor.yaml"), "run", "--dry-run"])

        assert code == 0
        assert (project / "vendor" / "acme" / "widget" / "README.md").exists()
        assert (project / "vendor" / "bin").exists()

    def test_run_with_broken_manifest(self, project: Path) -> None:
        """Test that an unreadable manifest is reported with a failure code."""
        (project / "vendor" / "composer" / "installed.json").write_text("{broken")

        assert main(["--config", str(project / "vendor-janitor.yaml"), "run"]) == 1

    def test_clean(self, project: Path) -> None:
        """Test cleaning a single package."""
        code = main(["--config", str(project / "vendor-janitor.yaml"), "clean", "acme/widget"])

        assert code == 0
        assert not (project / "vendor" / "acme" / "widget" / "tests").exists()
        assert (project / "vendor" / "bin").exists()

    def test_clean_missing_package(self, project: Path) -> None:
        """Test that an uncleanable package gives a failure code."""
        assert main(["--config", str(project / "vendor-janitor.yaml"), "clean", "acme/missing"]) == 1

    def test_rules(self, project: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test showing the resolved rules for a package."""
        code = main(["--config", str(project / "vendor-janitor.yaml"), "rules", "wpackagist-plugin/akismet"])

        out = capsys.readouterr().out
        assert code == 0
        assert "docs" in out
        assert "wp" in out

    def test_rules_disabled_package(self, project: Path) -> None:
        """Test that a disabled package has no rules to show."""
        config_path = project / "vendor-janitor.yaml"
        config_path.write_text(yaml.dump({"cleanup": {"disable": {"packages": "acme/widget"}}}))

        assert main(["--config", str(config_path), "rules", "acme/widget"]) == 1

    def test_config_init(self, tmp_path: Path) -> None:
        """Test creating a config file, and refusing to overwrite it."""
        config_path = tmp_path / "new.yaml"

        assert main(["--config", str(config_path), "config", "--init"]) == 0
        assert config_path.exists()
        assert main(["--config", str(config_path), "config", "--init"]) == 1

    def test_config_show(self, project: Path) -> None:
        """Test showing the effective configuration."""
        assert main(["--config", str(project / "vendor-janitor.yaml"), "config", "--show"]) == 0

    def test_config_without_action(self, project: Path) -> None:
        """Test that config needs --init or --show."""
        assert main(["--config", str(project / "vendor-janitor.yaml"), "config"]) == 1

    def test_composer_source(self, project: Path) -> None:
        """Test reading settings from composer.json."""
        composer = project / "composer.json"
        composer.write_text(json.dumps({"config": {"cleanup": {"disable": {"rules": ["docs"]}}}}))

        code = main(["--composer", str(composer), "clean", "acme/widget"])

        widget = project / "vendor" / "acme" / "widget"
        assert code == 0
        assert (widget / "README.md").exists()
        assert not (widget / "tests").exists()

    def test_bad_config_file(self, tmp_path: Path) -> None:
        """Test that an unparsable config gives exit code 2."""
        config_path = tmp_path / "bad.yaml"
        config_path.write_text("cleanup: [unclosed")

        assert main(["--config", str(config_path), "run"]) == 2

    def test_invalid_log_level(self, tmp_path: Path) -> None:
        """Test that an invalid log level gives exit code 2."""
        config_path = tmp_path / "janitor.yaml"
        config_path.write_text(yaml.dump({"logging": {"level": "loud"}}))

        assert main(["--config", str(config_path), "run"]) == 2

    @pytest.mark.parametrize(
        "content",
        [
            "- vendor\n",
            "cleanup:\n  disable: acme/widget\n",
            "cleanup:\n  packages: x\n",
        ],
    )
    def test_wrong_shaped_config(self, tmp_path: Path, content: str) -> None:
        """Test that a config of the wrong shape gives exit code 2."""
        config_path = tmp_path / "janitor.yaml"
        config_path.write_text(content)

        assert main(["--config", str(config_path), "run"]) == 2

    def test_composer_json_array(self, tmp_path: Path) -> None:
        """Test that a composer.json holding an array gives exit code 2."""
        composer = tmp_path / "composer.json"
        composer.write_text("[]")

        assert main(["--composer", str(composer), "run"]) == 2
