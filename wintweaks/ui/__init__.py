"""
UI module - Console rendering and interactive commands.
"""

from .console import ConsoleUI
from .commands import (
    SlashCommandHandler,
    CommandResult,
    handle_slash_command,
    format_command_prompt,
)

__all__ = [
    "ConsoleUI",
    "SlashCommandHandler",
    "CommandResult",
    "handle_slash_command",
    "format_command_prompt",
]
