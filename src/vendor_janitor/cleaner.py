"""Rule-driven cleanup of installed package directories."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from .fs import remove_path
from .matcher import match
from .resolver import fallback_candidate, primary_candidate, resolve_directory
from .rules import resolve_rules
from .vendor import sweep_vendor_root

if TYPE_CHECKING:
    from .config import JanitorConfig
    from .resolver import PackageRef
    from .rules import RuleTable

REASON_RULES_NOT_FOUND = "rules not found"
REASON_DIR_NOT_FOUND = "vendor dir not found"


@dataclass
class CleanResult:
    """Result of cleaning one package."""

    package: str
    cleaned: bool
    reason: str | None = None
    directory: Path | None = None
    removed: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class CleanSummary:
    """Aggregated results of a full-tree cleanup."""

    results: list[CleanResult] = field(default_factory=list)
    swept: list[Path] = field(default_factory=list)

    @property
    def cleaned(self) -> int:
        return sum(1 for r in self.results if r.cleaned)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if not r.cleaned)

    @property
    def removed(self) -> int:
        return sum(len(r.removed) for r in self.results)

    @property
    def errors(self) -> int:
        return sum(len(r.errors) for r in self.results)


class Cleaner:
    """Removes files matched by a package's rule groups."""

    def __init__(
        self,
        config: JanitorConfig,
        logger: logging.Logger,
        table: RuleTable | None = None,
        *,
        dry_run: bool | None = None,
    ) -> None:
        """Initialize the cleaner.

        Args:
            config: Janitor configuration.
            logger: Logger instance.
            table: Rule table. Uses the built-in table if None.
            dry_run: Report without removing. Defaults to ``config.dry_run``.

        """
        self.config = config
        self.logger = logger
        self.table = table
        self.dry_run = config.dry_run if dry_run is None else dry_run

    def clean_package(self, package: PackageRef) -> CleanResult:
        """Clean one installed package.

        A package counts as cleaned once its rules and directory are
        resolved, whether or not anything matched. Bad patterns and failed
        removals are logged and recorded in ``errors``.

        Args:
            package: Package to clean.

        Returns:
            CleanResult with the removed paths and any errors.

        """
        rules = resolve_rules(package.name, self.config.cleanup, self.table)
        if rules is None:
            self.logger.error("Rules not found: %s", package.name)
            return CleanResult(package=package.name, cleaned=False, reason=REASON_RULES_NOT_FOUND)

        fallback_root = self.config.fallback_root(package)
        directory = resolve_directory(package, self.config.vendor_dir, fallback_root)
        if directory is None:
            if fallback_root is not None:
                missing = fallback_candidate(package, fallback_root)
            else:
                missing = primary_candidate(package, self.config.vendor_dir)
            self.logger.error("Vendor dir not found: %s", missing)
            return CleanResult(package=package.name, cleaned=False, reason=REASON_DIR_NOT_FOUND)

        result = CleanResult(package=package.name, cleaned=True, directory=directory)

        for group in rules:
            for pattern in group.patterns:
                outcome = match(directory, pattern)
                if not outcome.ok:
                    self.logger.warning(
                        "Could not parse %s (%s): %s", package.relative_dir, pattern, outcome.error
                    )
                    result.errors.append(f"{group.name}: {pattern}: {outcome.error}")
                    continue

                for path in outcome.matches:
                    self._remove_match(path, result)

        if result.removed:
            verb = "Would remove" if self.dry_run else "Removed"
            self.logger.info("%s %d paths from %s", verb, len(result.removed), package.name)

        return result

    def _remove_match(self, path: Path, result: CleanResult) -> None:
        """Remove a single match, recording the outcome."""
        if path in result.removed:
            return

        if error := self.remove(path):
            self.logger.error("Could not remove %s: %s", path, error)
            result.errors.append(f"{path}: {error}")
            return

        result.removed.append(path)

    def remove(self, path: Path) -> str | None:
        """Remove a path, or only log it in dry-run mode.

        Returns:
            Error description if removal failed, None otherwise.

        """
        if self.dry_run:
            self.logger.info("Would remove: %s", path)
            return None

        self.logger.debug("Removing: %s", path)
        return remove_path(path)

    def clean_all(self, packages: Iterable[PackageRef]) -> CleanSummary:
        """Clean every package, continuing past failures.

        Args:
            packages: Installed packages.

        Returns:
            CleanSummary with one result per package.

        """
        summary = CleanSummary()

        for package in packages:
            summary.results.append(self.clean_package(package))

        return summary

    def sweep_vendor(self) -> list[Path]:
        """Remove package-manager artifacts from the vendor root.

        Returns:
            Paths removed (or that would be removed in dry-run mode).

        """
        swept = sweep_vendor_root(self.config.vendor_dir, self.remove, self.logger)
        if swept:
            self.logger.info("Swept %d artifacts from %s", len(swept), self.config.vendor_dir)
        return swept
