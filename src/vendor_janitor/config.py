"""Configuration management for vendor-janitor."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from .rules import RuleGroup

if TYPE_CHECKING:
    from .resolver import PackageRef

NAME_PLACEHOLDER = "{$name}"

_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})


def parse_bool(value: Any, default: bool) -> bool:
    """Parse a boolean from YAML/JSON values, accepting common string forms."""
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def as_list(value: Any) -> list[str]:
    """Normalize a "string or list of strings" option to a list."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(item) for item in value if item is not None and item != ""]
    return [str(value)]


def parse_extra_rules(value: Any) -> list[RuleGroup]:
    """Turn a ``cleanup.rules`` value into rule groups.

    A mapping gives named groups. A string is a single one-pattern group and
    every item of a list is its own group, named by position (``rules.0``,
    ``rules.1``, ...).
    """
    if value is None:
        return []
    if isinstance(value, dict):
        items = [(str(name), as_list(patterns)) for name, patterns in value.items()]
    elif isinstance(value, str):
        items = [("rules.0", as_list(value))]
    elif isinstance(value, list):
        items = [(f"rules.{i}", as_list(item)) for i, item in enumerate(value)]
    else:
        raise ValueError(f"cleanup.rules must be a string, list or mapping, got {type(value).__name__}")
    return [RuleGroup(name=name, patterns=tuple(patterns)) for name, patterns in items if patterns]


@dataclass
class CleanupRules:
    """User overrides applied on top of the built-in rule table."""

    disabled_rules: frozenset[str] = frozenset()
    disabled_packages: frozenset[str] = frozenset()
    extra_rules: tuple[RuleGroup, ...] = ()
    package_rules: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> CleanupRules:
        """Build overrides from a raw ``cleanup`` section.

        Raises:
            ValueError: If a section that must be a mapping is not one.

        """
        data = _mapping(data, "cleanup")
        disable = _mapping(data.get("disable"), "cleanup.disable")
        packages = _mapping(data.get("packages"), "cleanup.packages")

        return cls(
            disabled_rules=frozenset(as_list(disable.get("rules"))),
            disabled_packages=frozenset(as_list(disable.get("packages"))),
            extra_rules=tuple(parse_extra_rules(data.get("rules"))),
            package_rules={
                str(name): tuple(as_list(patterns))
                for name, patterns in packages.items()
                if as_list(patterns)
            },
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the ``cleanup`` section layout."""
        data: dict[str, Any] = {}
        disable: dict[str, list[str]] = {}
        if self.disabled_rules:
            disable["rules"] = sorted(self.disabled_rules)
        if self.disabled_packages:
            disable["packages"] = sorted(self.disabled_packages)
        if disable:
            data["disable"] = disable
        if self.extra_rules:
            data["rules"] = {group.name: list(group.patterns) for group in self.extra_rules}
        if self.package_rules:
            data["packages"] = {name: list(patterns) for name, patterns in self.package_rules.items()}
        return data

    def is_package_disabled(self, package_name: str) -> bool:
        """Check whether a package is exempt from cleanup."""
        return package_name in self.disabled_packages


@dataclass
class JanitorConfig:
    """Configuration for vendor-janitor."""

    # Primary install root, one directory per vendor/project
    vendor_dir: Path = field(default_factory=lambda: Path("vendor"))

    # Fallback root for packages relocated by a custom installer
    install_dir: Path | None = None

    # Installer path templates ("wp-content/plugins/{$name}/") -> selectors
    # ("vendor/name", "type:wordpress-plugin", "vendor:wpackagist-plugin")
    installer_paths: dict[str, list[str]] = field(default_factory=dict)

    cleanup: CleanupRules = field(default_factory=CleanupRules)

    # Report matches without removing anything
    dry_run: bool = False

    # Logging
    log_file: Path | None = None
    log_level: str = "INFO"

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the default configuration file path."""
        return Path.cwd() / "vendor-janitor.yaml"

    @classmethod
    def load(cls, config_path: Path | None = None) -> JanitorConfig:
        """Load configuration from YAML file.

        Args:
            config_path: Path to config file. Uses default if None.

        Returns:
            Loaded configuration.

        Raises:
            ValueError: If the file or one of its sections has the wrong shape.

        """
        if config_path is None:
            config_path = cls.get_config_path()

        if not config_path.exists():
            return cls()

        with config_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)

        return cls._from_dict(_mapping(data, str(config_path)), config_path.parent)

    @classmethod
    def from_composer(cls, composer_path: Path) -> JanitorConfig:
        """Load configuration from a project's ``composer.json``.

        Settings are read from the ``config`` section, with ``extra`` as a
        fallback for ``installer-paths`` and ``cleanup``, where the
        installers plugin and most projects keep them.

        Args:
            composer_path: Path to ``composer.json``.

        Returns:
            Loaded configuration.

        Raises:
            ValueError: If the JSON is invalid or a section has the wrong shape.

        """
        with composer_path.open(encoding="utf-8") as f:
            data = _mapping(json.load(f), str(composer_path))

        section = dict(_mapping(data.get("extra"), "extra"))
        section.update(_mapping(data.get("config"), "config"))
        return cls._from_dict(section, composer_path.parent)

    @classmethod
    def _from_dict(cls, data: dict[str, Any], base_dir: Path | None = None) -> JanitorConfig:
        """Create config from dictionary.

        Relative directories are resolved against ``base_dir``.
        """
        config = cls()
        base_dir = base_dir or Path.cwd()

        vendor_dir = _first(data, "vendor-dir", "vendor_dir")
        config.vendor_dir = _join(base_dir, vendor_dir or "vendor")

        if (install_dir := _first(data, "install-dir", "install_dir")) is not None:
            config.install_dir = _join(base_dir, install_dir)

        installer_paths = _first(data, "installer-paths", "installer_paths")
        if isinstance(installer_paths, dict):
            config.installer_paths = {
                str(_join(base_dir, template)): as_list(selectors)
                for template, selectors in installer_paths.items()
            }
        elif isinstance(installer_paths, str) and installer_paths:
            config.install_dir = _join(base_dir, installer_paths)
        elif installer_paths:
            raise ValueError("installer-paths must be a string or mapping")

        config.cleanup = CleanupRules.from_dict(data.get("cleanup"))
        config.dry_run = parse_bool(_first(data, "dry-run", "dry_run"), False)

        if "logging" in data:
            logging_cfg = _mapping(data["logging"], "logging")
            if logging_cfg.get("file"):
                config.log_file = _join(base_dir, logging_cfg["file"])
            if "level" in logging_cfg:
                config.log_level = str(logging_cfg["level"]).upper()

        return config

    def fallback_root(self, package: PackageRef) -> Path | None:
        """Pick the relocated install root for a package.

        The first installer path template with a selector for the package
        wins; otherwise the plain ``install_dir`` is used.
        """
        for template, selectors in self.installer_paths.items():
            if any(_selects(selector, package) for selector in selectors):
                return _template_root(template)
        return self.install_dir

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to YAML file.

        Args:
            config_path: Path to save config. Uses default if None.

        """
        if config_path is None:
            config_path = self.get_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data: dict[str, Any] = {"vendor_dir": str(self.vendor_dir)}
        if self.install_dir is not None:
            data["install_dir"] = str(self.install_dir)
        if self.installer_paths:
            data["installer_paths"] = dict(self.installer_paths)
        data["cleanup"] = self.cleanup.to_dict()
        data["dry_run"] = self.dry_run
        data["logging"] = {
            "file": str(self.log_file) if self.log_file else None,
            "level": self.log_level,
        }

        with config_path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def _mapping(value: Any, key: str) -> dict[str, Any]:
    """Return a config section, treating a missing one as empty."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{key} must be a mapping, got {type(value).__name__}")
    return value


def _first(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _join(base_dir: Path, value: Any) -> Path:
    return base_dir / Path(str(value)).expanduser()


def _selects(selector: str, package: PackageRef) -> bool:
    if selector.startswith("type:"):
        return package.package_type is not None and selector[5:] == package.package_type
    if selector.startswith("vendor:"):
        return selector[7:] == package.vendor
    return selector == package.name


def _template_root(template: str) -> Path:
    if NAME_PLACEHOLDER in template:
        return Path(template.split(NAME_PLACEHOLDER, 1)[0])
    return Path(template).parent
