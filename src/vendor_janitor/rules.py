"""Built-in cleanup rules and per-package rule resolution."""

from __future__ import annotations

import functools
from collections.abc import Mapping
from dataclasses import dataclass, field
from importlib import resources
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from .config import CleanupRules

# Name of the ad-hoc group built from ``cleanup.packages.<name>``
PACKAGE_GROUP = "package"


@dataclass(frozen=True)
class RuleGroup:
    """A named, ordered list of glob patterns."""

    name: str
    patterns: tuple[str, ...]


@dataclass(frozen=True)
class RuleTable:
    """Read-only rule data: the shared group pool and per-package lists."""

    groups: Mapping[str, RuleGroup] = field(default_factory=lambda: MappingProxyType({}))
    default: tuple[str, ...] | None = None
    packages: Mapping[str, tuple[RuleGroup, ...]] = field(default_factory=lambda: MappingProxyType({}))
    platform_group: str | None = None
    platform_prefixes: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RuleTable:
        """Build a table from its YAML layout.

        Raises:
            ValueError: If a default or package entry names an unknown group.

        """
        groups = {
            str(name): RuleGroup(name=str(name), patterns=tuple(str(p) for p in patterns or ()))
            for name, patterns in (data.get("groups") or {}).items()
        }

        default = data.get("default")
        if default is not None:
            default = tuple(str(name) for name in default)
            for name in default:
                if name not in groups:
                    raise ValueError(f"Unknown rule group in default: {name}")

        packages: dict[str, tuple[RuleGroup, ...]] = {}
        for package, entries in (data.get("packages") or {}).items():
            packages[str(package)] = tuple(_package_entry(groups, str(package), entry) for entry in entries or ())

        platform = data.get("platform") or {}
        return cls(
            groups=MappingProxyType(groups),
            default=default,
            packages=MappingProxyType(packages),
            platform_group=platform.get("group"),
            platform_prefixes=tuple(str(p) for p in platform.get("prefixes") or ()),
        )

    def base_groups(self, package_name: str) -> tuple[RuleGroup, ...] | None:
        """Get the table's own groups for a package.

        Returns:
            The package entry, else the default groups, else None when the
            table has nothing for this package.

        """
        if package_name in self.packages:
            return self.packages[package_name]
        if self.default is not None:
            return tuple(self.groups[name] for name in self.default)
        return None


def _package_entry(groups: dict[str, RuleGroup], package: str, entry: Any) -> RuleGroup:
    if isinstance(entry, str):
        if entry not in groups:
            raise ValueError(f"Unknown rule group for {package}: {entry}")
        return groups[entry]
    if isinstance(entry, dict) and len(entry) == 1:
        name, patterns = next(iter(entry.items()))
        if isinstance(patterns, str):
            patterns = [patterns]
        return RuleGroup(name=str(name), patterns=tuple(str(p) for p in patterns or ()))
    raise ValueError(f"Invalid rule entry for {package}: {entry!r}")


@functools.cache
def load_rule_table() -> RuleTable:
    """Load the built-in rule table shipped with the package."""
    source = resources.files("vendor_janitor").joinpath("data", "rules.yaml")
    data = yaml.safe_load(source.read_text(encoding="utf-8")) or {}
    return RuleTable.from_dict(data)


def is_platform_package(package_name: str, table: RuleTable) -> bool:
    """Check whether a package name carries a platform-plugin namespace."""
    namespace = package_name.partition("/")[0].lower()
    return any(namespace.startswith(prefix.lower()) for prefix in table.platform_prefixes)


def resolve_rules(
    package_name: str,
    cleanup: CleanupRules,
    table: RuleTable | None = None,
) -> tuple[RuleGroup, ...] | None:
    """Resolve the rule groups to apply to one package.

    Overrides are applied in a fixed order:

    1. a disabled package gets no rules at all;
    2. disabled group names are dropped from the table's groups;
    3. extra groups are appended unless a group of that name is present;
    4. per-package extra patterns are appended as one more group;
    5. the platform group is dropped unless the package is a platform plugin.

    An extra group sharing its name with a disabled group is still appended,
    since disabling happens first.

    Args:
        package_name: Full ``vendor/project`` name.
        cleanup: User overrides.
        table: Rule table. Uses the built-in table if None.

    Returns:
        The ordered groups, or None when the package is disabled or nothing
        (neither table entry nor extra rule) applies to it.

    """
    if table is None:
        table = load_rule_table()

    if cleanup.is_package_disabled(package_name):
        return None

    base = table.base_groups(package_name)
    groups = [group for group in base or () if group.name not in cleanup.disabled_rules]
    present = {group.name for group in groups}
    added = False

    for group in cleanup.extra_rules:
        if group.name in present:
            continue
        groups.append(group)
        present.add(group.name)
        added = True

    if patterns := cleanup.package_rules.get(package_name):
        groups.append(RuleGroup(name=PACKAGE_GROUP, patterns=tuple(patterns)))
        added = True

    if table.platform_group and not is_platform_package(package_name, table):
        groups = [group for group in groups if group.name != table.platform_group]

    if base is None and not added:
        return None
    return tuple(groups)
