"""Main entry point for vendor-janitor."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import yaml
from rich.console import Console
from rich.table import Table

from .config import JanitorConfig
from .installed import ManifestError
from .janitor import Janitor
from .resolver import PackageRef
from .rules import is_platform_package, load_rule_table, resolve_rules

if TYPE_CHECKING:
    from .cleaner import CleanResult


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments to parse. Uses ``sys.argv`` if None.

    Returns:
        Parsed arguments.

    """
    parser = argparse.ArgumentParser(
        prog="vendor-janitor",
        description="Remove docs, tests and other cruft from installed Composer packages",
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML configuration file",
    )
    source.add_argument(
        "--composer",
        type=Path,
        default=None,
        help="Read settings from a composer.json",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Clean all installed packages and sweep the vendor root")
    run_parser.add_argument("--dry-run", action="store_true", help="Report without removing anything")

    clean_parser = subparsers.add_parser("clean", help="Clean a single package")
    clean_parser.add_argument("package", help="Package name (vendor/project)")
    clean_parser.add_argument("--target-dir", default=None, help="Target subdirectory of the package")
    clean_parser.add_argument("--type", dest="package_type", default=None, help="Package type")
    clean_parser.add_argument("--dry-run", action="store_true", help="Report without removing anything")

    rules_parser = subparsers.add_parser("rules", help="Show the rules that apply to a package")
    rules_parser.add_argument("package", help="Package name (vendor/project)")

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument(
        "--init",
        action="store_true",
        help="Create default configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        help="Show current configuration",
    )

    return parser.parse_args(argv)


def _print_summary_table(console: Console, results: list[CleanResult], *, dry_run: bool) -> None:
    table = Table(title="Would remove" if dry_run else "Cleanup results")
    table.add_column("Package", style="cyan")
    table.add_column("Status")
    table.add_column("Removed", justify="right")
    table.add_column("Errors", justify="right", style="red")

    for result in results:
        status = "[green]cleaned[/green]" if result.cleaned else f"[yellow]{result.reason}[/yellow]"
        table.add_row(result.package, status, str(len(result.removed)), str(len(result.errors)))

    console.print(table)


def cmd_run(config: JanitorConfig, args: argparse.Namespace) -> int:
    """Execute run command.

    Args:
        config: Janitor configuration.
        args: Parsed arguments.

    Returns:
        Exit code.

    """
    console = Console()
    if args.dry_run:
        config.dry_run = True

    try:
        summary = Janitor(config).on_install_complete()
    except ManifestError as e:
        console.print(f"[red]{e}[/red]")
        return 1

    if summary.results:
        _print_summary_table(console, summary.results, dry_run=config.dry_run)
    console.print(
        f"Cleaned {summary.cleaned} packages, skipped {summary.skipped}, "
        f"removed {summary.removed} paths, swept {len(summary.swept)} vendor artifacts"
    )
    return 0


def cmd_clean(config: JanitorConfig, args: argparse.Namespace) -> int:
    """Execute clean command.

    Args:
        config: Janitor configuration.
        args: Parsed arguments.

    Returns:
        Exit code.

    """
    console = Console()
    if args.dry_run:
        config.dry_run = True

    package = PackageRef(name=args.package, target_dir=args.target_dir, package_type=args.package_type)
    result = Janitor(config).on_package_installed(package)

    if not result.cleaned:
        console.print(f"[yellow]{package.name} not cleaned: {result.reason}[/yellow]")
        return 1

    verb = "Would remove" if config.dry_run else "Removed"
    for path in result.removed:
        console.print(f"{verb}: [dim]{path}[/dim]")
    console.print(f"[green]{package.name}: {len(result.removed)} paths, {len(result.errors)} errors[/green]")
    return 0


def cmd_rules(config: JanitorConfig, args: argparse.Namespace) -> int:
    """Execute rules command.

    Args:
        config: Janitor configuration.
        args: Parsed arguments.

    Returns:
        Exit code.

    """
    console = Console()
    table_data = load_rule_table()
    groups = resolve_rules(args.package, config.cleanup, table_data)

    if groups is None:
        console.print(f"[yellow]Rules not found: {args.package}[/yellow]")
        return 1

    table = Table(title=f"Rules for {args.package}")
    table.add_column("Group", style="cyan")
    table.add_column("Patterns", style="green")

    for group in groups:
        table.add_row(group.name, " ".join(group.patterns))

    console.print(table)
    if is_platform_package(args.package, table_data):
        console.print("[dim]Platform plugin: platform rules apply[/dim]")
    return 0


def cmd_config(config: JanitorConfig, args: argparse.Namespace) -> int:
    """Execute config command.

    Args:
        config: Janitor configuration.
        args: Parsed arguments.

    Returns:
        Exit code.

    """
    console = Console()

    if args.init:
        config_path = args.config or JanitorConfig.get_config_path()
        if config_path.exists():
            console.print(f"[yellow]Config already exists: {config_path}[/yellow]")
            return 1
        config.save(config_path)
        console.print(f"[green]Created config: {config_path}[/green]")
        return 0

    if args.show:
        cleanup = config.cleanup
        table = Table(title="Current Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Vendor directory", str(config.vendor_dir))
        table.add_row("Install directory", str(config.install_dir) if config.install_dir else "-")
        table.add_row(
            "Installer paths",
            "\n".join(f"{t}: {', '.join(s)}" for t, s in config.installer_paths.items()) or "-",
        )
        table.add_row("Disabled rules", ", ".join(sorted(cleanup.disabled_rules)) or "-")
        table.add_row("Disabled packages", ", ".join(sorted(cleanup.disabled_packages)) or "-")
        table.add_row("Extra rules", "\n".join(g.name for g in cleanup.extra_rules) or "-")
        table.add_row("Package rules", "\n".join(cleanup.package_rules) or "-")
        table.add_row("Dry run", str(config.dry_run))
        table.add_row("Log file", str(config.log_file) if config.log_file else "-")
        table.add_row("Log level", config.log_level)

        console.print(table)
        return 0

    console.print("[yellow]Use --init or --show[/yellow]")
    return 1


def load_config(args: argparse.Namespace) -> JanitorConfig:
    """Load configuration from ``--composer`` or ``--config``."""
    if args.composer is not None:
        return JanitorConfig.from_composer(args.composer)
    return JanitorConfig.load(args.config)


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code.

    """
    args = parse_args(argv)

    try:
        config = load_config(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        Console(stderr=True).print(f"[red]Cannot load configuration: {e}[/red]")
        return 2

    # Default to run command
    command = args.command or "run"
    if args.command is None:
        args.dry_run = False

    try:
        if command == "run":
            return cmd_run(config, args)
        elif command == "clean":
            return cmd_clean(config, args)
        elif command == "rules":
            return cmd_rules(config, args)
        elif command == "config":
            return cmd_config(config, args)
    except ValueError as e:
        Console(stderr=True).print(f"[red]{e}[/red]")
        return 2

    print(f"Unknown command: {command}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
