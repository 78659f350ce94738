"""Install/update lifecycle hooks driving the cleaner."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler

from .cleaner import Cleaner, CleanResult, CleanSummary
from .installed import list_installed_packages

if TYPE_CHECKING:
    from .config import JanitorConfig
    from .resolver import PackageRef
    from .rules import RuleTable

LOGGER_NAME = "vendor-janitor"

_VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class Janitor:
    """Entry point for the package manager's install and update events."""

    def __init__(self, config: JanitorConfig, table: RuleTable | None = None) -> None:
        """Initialize the janitor.

        Args:
            config: Janitor configuration.
            table: Rule table. Uses the built-in table if None.

        Raises:
            ValueError: If the configured log level is not recognized.

        """
        if config.log_level not in _VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {config.log_level!r}")

        self.config = config
        self.logger = self._setup_logging()
        self.cleaner = Cleaner(config, self.logger, table)

    def _setup_logging(self) -> logging.Logger:
        """Set up logging for the janitor.

        Returns:
            Configured logger instance.

        """
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(getattr(logging, self.config.log_level))

        # Clear existing handlers to avoid duplicates if the janitor is recreated
        if logger.handlers:
            logger.handlers.clear()

        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
        )
        console_handler.setLevel(getattr(logging, self.config.log_level))
        logger.addHandler(console_handler)

        if self.config.log_file is not None:
            self.config.log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.config.log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
            )
            logger.addHandler(file_handler)

        return logger

    def on_package_installed(self, package: PackageRef) -> CleanResult:
        """Clean a package right after it was installed."""
        return self.cleaner.clean_package(package)

    def on_package_updated(self, package: PackageRef) -> CleanResult:
        """Clean the target package of an update."""
        return self.cleaner.clean_package(package)

    def on_install_complete(self, packages: Iterable[PackageRef] | None = None) -> CleanSummary:
        """Clean the whole tree at the end of an install or update run.

        Args:
            packages: Installed packages. Read from the vendor manifest if None.

        Returns:
            CleanSummary including the vendor sweep.

        """
        if packages is None:
            packages = list_installed_packages(self.config.vendor_dir)

        self.logger.info("Cleaning installed packages in %s", self.config.vendor_dir)
        summary = self.cleaner.clean_all(packages)
        summary.swept = self.cleaner.sweep_vendor()

        self.logger.info(
            "Cleanup finished: cleaned=%d, skipped=%d, removed=%d, errors=%d",
            summary.cleaned,
            summary.skipped,
            summary.removed,
            summary.errors,
        )
        return summary
