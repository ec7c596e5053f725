"""
Slash Command Handler - Commands for the interactive session.

Commands:
    /apply      - Apply tweaks by key (or --all)
    /restore    - Restore tweaks by key (or --all)
    /list       - List tweaks, optionally one category
    /status     - Show backup counts and session settings
    /reset      - Drop all backups (next apply captures fresh states)
    /keep       - Toggle keeping user customizations
    /help       - Show available commands
    /quit       - Exit the tool
"""

from typing import Optional, Tuple, List, Dict, Callable
from enum import Enum

from ..discovery.loader import tweaks_by_category
from ..protocol.result import ResourceKind


class CommandResult(Enum):
    """Result of command execution."""
    SUCCESS = "success"
    ERROR = "error"
    EXIT = "exit"


class SlashCommandHandler:
    """
    Handles slash commands in the interactive session.

    Runs are rendered through the console as they happen; the returned
    message is the text left to print afterwards.
    """

    def __init__(self, engine, console=None):
        self.engine = engine
        self.console = console

        # Last run, for /status
        self.last_report = None

        # Command registry
        self._commands: Dict[str, Callable] = {
            'apply': self._cmd_apply,
            'a': self._cmd_apply,
            'restore': self._cmd_restore,
            'r': self._cmd_restore,
            'list': self._cmd_list,
            'ls': self._cmd_list,
            'status': self._cmd_status,
            's': self._cmd_status,
            'reset': self._cmd_reset,
            'keep': self._cmd_keep,
            'help': self._cmd_help,
            'h': self._cmd_help,
            '?': self._cmd_help,
            'quit': self._cmd_quit,
            'q': self._cmd_quit,
            'exit': self._cmd_quit,
        }

    def is_command(self, input_text: str) -> bool:
        """Check if input is a slash command."""
        return input_text.strip().startswith('/')

    def parse(self, input_text: str) -> Tuple[str, List[str]]:
        """Parse command and arguments from input."""
        parts = input_text.strip().split()
        if not parts:
            return '', []

        command = parts[0].lstrip('/').lower()
        args = parts[1:] if len(parts) > 1 else []

        return command, args

    def execute(self, input_text: str) -> Tuple[CommandResult, str]:
        """
        Execute a slash command.

        Returns:
            Tuple of (result, message)
        """
        command, args = self.parse(input_text)

        if not command:
            return CommandResult.ERROR, "Empty command"

        if command not in self._commands:
            return CommandResult.ERROR, f"Unknown command: /{command}. Type /help for available commands."

        try:
            return self._commands[command](args)
        except Exception as e:
            return CommandResult.ERROR, f"Command error: {str(e)}"

    def _cmd_help(self, args: List[str]) -> Tuple[CommandResult, str]:
        """Show available commands."""
        lines = [
            "Available Commands:",
            "",
            "  /apply, /a KEY...     - Apply tweaks (/apply --all for every tweak)",
            "  /restore, /r KEY...   - Restore tweaks (/restore --all for every tweak)",
            "  /list, /ls [CATEGORY] - List tweaks by category",
            "  /status, /s           - Show backup counts and settings",
            "  /reset                - Drop all backups from this session",
            "  /keep on|off          - Keep or overwrite user customizations",
            "  /quit, /q             - Exit the tool",
            "  /help, /h, /?         - Show this help",
            "",
            "Tips:",
            "  - Restore only works for tweaks applied in this session",
            "  - /apply --all drops earlier backups before applying",
        ]
        return CommandResult.SUCCESS, "\n".join(lines)

    def _run(self, args: List[str], operation: str) -> Tuple[CommandResult, str]:
        if not args:
            return CommandResult.ERROR, f"Usage: /{operation} KEY... or /{operation} --all"

        if "--all" in args:
            report = self.engine.apply_all() if operation == "apply" else self.engine.restore_all()
        elif operation == "apply":
            report = self.engine.apply(args)
        else:
            report = self.engine.restore(args)

        self.last_report = report
        if self.console:
            self.console.print_report(report)

        if report.has_failures:
            return CommandResult.ERROR, f"{operation.capitalize()} finished with failures"
        return CommandResult.SUCCESS, ""

    def _cmd_apply(self, args: List[str]) -> Tuple[CommandResult, str]:
        """Apply tweaks."""
        return self._run(args, "apply")

    def _cmd_restore(self, args: List[str]) -> Tuple[CommandResult, str]:
        """Restore tweaks."""
        return self._run(args, "restore")

    def _cmd_list(self, args: List[str]) -> Tuple[CommandResult, str]:
        """List tweaks by category."""
        categories = tweaks_by_category(self.engine.document)

        if args:
            wanted = " ".join(args).casefold()
            categories = {
                name: keys for name, keys in categories.items()
                if name.casefold() == wanted
            }
            if not categories:
                return CommandResult.ERROR, f"No tweaks in category '{' '.join(args)}'"

        if self.console:
            self.console.print_tweaks(self.engine.document, categories)
            return CommandResult.SUCCESS, ""

        lines = []
        for name, keys in categories.items():
            lines.append(f"{name or '(uncategorized)'}:")
            for key in keys:
                lines.append(f"  {key} - {self.engine.document.get(key).title}")
        return CommandResult.SUCCESS, "\n".join(lines)

    def _cmd_status(self, args: List[str]) -> Tuple[CommandResult, str]:
        """Show backup counts and session settings."""
        lines = [f"Tweaks loaded: {len(self.engine.document)}"]
        if self.engine.document.source:
            lines.append(f"Source: {self.engine.document.source}")

        keep = "on" if self.engine.keep_existing_customization else "off"
        lines.append(f"Keep user customizations: {keep}")

        lines.append("")
        lines.append("Backups:")
        for kind in (ResourceKind.SERVICE, ResourceKind.SCHEDULED_TASK, ResourceKind.REGISTRY):
            lines.append(f"  {kind.value}: {self.engine.backup_count(kind)}")

        if self.last_report:
            report = self.last_report
            lines.append("")
            lines.append(
                f"Last run: {report.operation}, {len(report.outcomes)} entries, "
                f"{'with failures' if report.has_failures else 'no failures'}"
            )

        return CommandResult.SUCCESS, "\n".join(lines)

    def _cmd_reset(self, args: List[str]) -> Tuple[CommandResult, str]:
        """Drop all backups."""
        self.engine.reset()
        return CommandResult.SUCCESS, "Backups cleared; the next apply captures fresh states"

    def _cmd_keep(self, args: List[str]) -> Tuple[CommandResult, str]:
        """Toggle keeping user customizations."""
        if not args:
            keep = "on" if self.engine.keep_existing_customization else "off"
            return CommandResult.SUCCESS, f"Keep user customizations: {keep}"

        value = args[0].lower()
        if value not in ("on", "off"):
            return CommandResult.ERROR, "Usage: /keep on|off"

        self.engine.keep_existing_customization = value == "on"
        return CommandResult.SUCCESS, f"Keep user customizations: {value}"

    def _cmd_quit(self, args: List[str]) -> Tuple[CommandResult, str]:
        """Exit the tool."""
        return CommandResult.EXIT, "Goodbye!"


def handle_slash_command(input_text: str, engine, console=None) -> Tuple[CommandResult, str]:
    """
    Convenience function to handle a slash command.

    Usage:
        if input_text.startswith('/'):
            result, message = handle_slash_command(input_text, engine)
            print(message)
            if result == CommandResult.EXIT:
                break
    """
    handler = SlashCommandHandler(engine, console)
    return handler.execute(input_text)


def format_command_prompt(engine: Optional[object] = None) -> str:
    """Prompt shown in the interactive session."""
    if engine is None:
        return "wintweaks> "
    total = sum(engine.backup_counts().values())
    return f"wintweaks [{total} backed up]> "
