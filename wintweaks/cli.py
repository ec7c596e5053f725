"""
CLI - Command-line interface for wintweaks.

list:    show the tweak catalogue
apply:   one-shot apply of named tweaks (or all of them)
session: interactive apply/restore with slash commands (default)
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import Config, create_example_config
from .discovery.loader import TweakDocumentLoader, tweaks_by_category
from .discovery.system import is_running_as_admin
from .logging import get_logger, setup_logging
from .protocol.errors import ConfigurationError, PlatformUnavailableError
from .runner.engine import EngineConfig, TweakEngine
from .ui.commands import CommandResult, SlashCommandHandler, format_command_prompt
from .ui.console import ConsoleUI

log = get_logger("cli")


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="wintweaks",
        description="Apply and restore Windows tweaks (services, scheduled tasks, registry)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    wintweaks list
    wintweaks list --category "Essential Tweaks"

    # One-shot apply
    wintweaks apply WPFTweaksTele WPFTweaksServices
    wintweaks apply --all

    # Interactive session (apply, then restore from this session's backups)
    wintweaks session

Environment Variables:
    WINTWEAKS_CONFIG    Path to the TOML config file
    WINTWEAKS_LOG_DIR   Directory for operations.log
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # ==================== Configuration ====================
    config_group = parser.add_argument_group('Configuration')

    config_group.add_argument(
        "--config",
        help="TOML config file (default: search wintweaks.toml, ~/.wintweaks/config.toml)"
    )
    config_group.add_argument(
        "--tweaks",
        help="Tweak document (default: config/tweaks.json)"
    )
    config_group.add_argument(
        "--init-config",
        nargs="?",
        const="wintweaks.toml",
        metavar="PATH",
        help="Write an example config file and exit"
    )

    # ==================== Engine ====================
    engine_group = parser.add_argument_group('Engine')

    engine_group.add_argument(
        "--no-keep-customization",
        action="store_true",
        help="Overwrite resources the user already changed from their original state"
    )
    engine_group.add_argument(
        "--workers",
        type=int,
        help="Apply entries on this many threads (default: 1)"
    )
    engine_group.add_argument(
        "--skip-admin-check",
        action="store_true",
        help="Run even without administrator rights"
    )

    # ==================== Output ====================
    output_group = parser.add_argument_group('Output')

    output_group.add_argument(
        "--debug",
        action="store_true",
        help="Log diagnostics to stderr"
    )
    output_group.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only print failures"
    )
    output_group.add_argument(
        "--log-dir",
        help="Directory for operations.log"
    )
    output_group.add_argument(
        "--no-log-file",
        action="store_true",
        help="Disable the operations.log file"
    )

    subparsers = parser.add_subparsers(dest="command")

    list_parser = subparsers.add_parser("list", help="List tweaks by category")
    list_parser.add_argument("--category", help="Only this category")

    apply_parser = subparsers.add_parser("apply", help="Apply tweaks and exit")
    apply_parser.add_argument("keys", nargs="*", metavar="KEY", help="Tweak keys to apply")
    apply_parser.add_argument("--all", action="store_true", help="Apply every tweak")

    subparsers.add_parser("session", help="Interactive apply/restore session")

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "session"
    if args.command == "apply" and not args.keys and not args.all:
        parser.error("apply needs at least one KEY or --all")
    return args


def load_config(args) -> Config:
    """Config file + command-line overrides."""
    config = Config.load(args.config)
    config.override_from_args(args)
    errors = config.validate()
    if errors:
        raise ConfigurationError("; ".join(errors))
    return config


def run_list(args, engine: TweakEngine, ui: ConsoleUI) -> int:
    categories = tweaks_by_category(engine.document)
    if args.category:
        wanted = args.category.casefold()
        categories = {k: v for k, v in categories.items() if k.casefold() == wanted}
        if not categories:
            ui.print_error(f"No tweaks in category '{args.category}'")
            return 1
    ui.print_tweaks(engine.document, categories)
    return 0


def run_apply(args, engine: TweakEngine, ui: ConsoleUI) -> int:
    engine.set_outcome_callback(ui.print_outcome)
    report = engine.apply_all() if args.all else engine.apply(args.keys)
    ui.print_report(report)
    return 1 if report.has_failures else 0


def run_session(engine: TweakEngine, ui: ConsoleUI) -> int:
    """Read slash commands until /quit or end of input."""
    engine.set_outcome_callback(ui.print_outcome)
    handler = SlashCommandHandler(engine, ui)

    ui.print("[dim]Type /help for available commands[/]")
    ui.print()

    while True:
        try:
            text = ui.prompt(format_command_prompt(engine))
        except (EOFError, KeyboardInterrupt):
            ui.print()
            return 0

        if not text.strip():
            continue
        if not handler.is_command(text):
            ui.print("[dim]Commands start with '/'. Try /apply KEY or /help[/]")
            continue

        result, message = handler.execute(text)
        if result == CommandResult.ERROR:
            ui.print_error(message)
        elif message:
            ui.print(message)

        if result == CommandResult.EXIT:
            return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    ui = ConsoleUI(quiet=args.quiet)

    if args.init_config:
        try:
            path = create_example_config(args.init_config)
        except FileExistsError as e:
            ui.print_error(str(e))
            return 1
        ui.print(f"Wrote example config to {path}")
        return 0

    try:
        config = load_config(args)
    except (FileNotFoundError, ConfigurationError) as e:
        ui.print_error(str(e))
        return 1

    ui.quiet = config.output.quiet
    debug = config.logging.level in ("TRACE", "DEBUG")
    setup_logging(
        config.logging.level,
        log_dir=Path(config.logging.dir),
        file_logging=config.logging.file_logging,
        console=debug,
    )
    log.debug("Effective configuration:\n" + config.summary())

    try:
        document = TweakDocumentLoader().load(config.tweaks.path or None)
    except ConfigurationError as e:
        ui.print_error(str(e))
        return 1

    engine = TweakEngine(document, config=EngineConfig.from_config(config))

    if args.command == "list":
        return run_list(args, engine, ui)

    ui.print_banner()
    if not args.skip_admin_check and not is_running_as_admin():
        ui.print_admin_required()
        return 1

    try:
        if args.command == "apply":
            return run_apply(args, engine, ui)
        return run_session(engine, ui)
    except PlatformUnavailableError as e:
        log.error(str(e))
        ui.print_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
