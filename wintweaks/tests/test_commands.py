"""Tests for interactive slash commands."""

import pytest

from wintweaks.protocol.result import Outcome
from wintweaks.tuning.service import SERVICE_AUTO_START, SERVICE_DISABLED
from wintweaks.ui.commands import (
    CommandResult,
    SlashCommandHandler,
    format_command_prompt,
    handle_slash_command,
)


@pytest.fixture
def handler(engine):
    return SlashCommandHandler(engine)


class TestParsing:

    def test_is_command(self, handler):
        assert handler.is_command("  /help")
        assert not handler.is_command("help")

    def test_parse(self, handler):
        assert handler.parse("/APPLY a b") == ("apply", ["a", "b"])
        assert handler.parse("   ") == ("", [])

    def test_unknown_command(self, handler):
        result, message = handler.execute("/frobnicate")
        assert result == CommandResult.ERROR
        assert "/help" in message

    def test_quit(self, handler):
        assert handler.execute("/q")[0] == CommandResult.EXIT


class TestRunCommands:

    def test_apply_and_restore(self, handler, services):
        result, _ = handler.execute("/apply WPFTweaksUpdates")
        assert result == CommandResult.SUCCESS
        assert services.start_type("wuauserv") == SERVICE_DISABLED

        result, _ = handler.execute("/restore WPFTweaksUpdates")
        assert result == CommandResult.SUCCESS
        assert services.start_type("wuauserv") == SERVICE_AUTO_START
        assert handler.last_report.operation == "restore"

    def test_apply_without_keys(self, handler):
        result, message = handler.execute("/apply")
        assert result == CommandResult.ERROR
        assert "Usage" in message

    def test_failures_reported(self, handler):
        result, message = handler.execute("/restore WPFTweaksUpdates")
        assert result == CommandResult.ERROR
        assert "failures" in message
        assert handler.last_report.outcomes[0].outcome == Outcome.FAILED

    def test_apply_all(self, handler, engine):
        handler.execute("/apply --all")
        assert handler.last_report.count(Outcome.APPLIED) > 0
        assert sum(engine.backup_counts().values()) > 0

    def test_report_rendered_through_console(self, engine, mocker):
        console = mocker.Mock()
        handler = SlashCommandHandler(engine, console)
        handler.execute("/apply WPFTweaksUpdates")
        console.print_report.assert_called_once_with(handler.last_report)


class TestSessionCommands:

    def test_status(self, handler):
        handler.execute("/apply WPFTweaksUpdates")
        result, message = handler.execute("/status")
        assert result == CommandResult.SUCCESS
        assert "Tweaks loaded: 3" in message
        assert "service: 1" in message
        assert "Last run: apply" in message

    def test_reset(self, handler, engine):
        handler.execute("/apply WPFTweaksUpdates")
        result, _ = handler.execute("/reset")
        assert result == CommandResult.SUCCESS
        assert sum(engine.backup_counts().values()) == 0

    def test_keep_toggle(self, handler, engine):
        assert handler.execute("/keep off")[0] == CommandResult.SUCCESS
        assert engine.keep_existing_customization is False
        assert handler.execute("/keep maybe")[0] == CommandResult.ERROR
        assert "off" in handler.execute("/keep")[1]

    def test_list_plain(self, handler):
        result, message = handler.execute("/list")
        assert result == CommandResult.SUCCESS
        assert "Essential Tweaks:" in message
        assert "WPFTweaksTele - Disable Telemetry" in message

    def test_list_category(self, handler):
        result, message = handler.execute("/ls essential tweaks")
        assert result == CommandResult.SUCCESS
        assert "WPFTweaksUpdates" not in message
        assert handler.execute("/ls Nothing")[0] == CommandResult.ERROR

    def test_help(self, handler):
        result, message = handler.execute("/?")
        assert result == CommandResult.SUCCESS
        assert "/restore" in message

    def test_command_exception_contained(self, handler, mocker):
        mocker.patch.object(handler.engine, "reset", side_effect=RuntimeError("boom"))
        result, message = handler.execute("/reset")
        assert result == CommandResult.ERROR
        assert "boom" in message


def test_handle_slash_command(engine):
    result, message = handle_slash_command("/status", engine)
    assert result == CommandResult.SUCCESS


def test_prompt_shows_backup_total(engine):
    assert format_command_prompt() == "wintweaks> "
    engine.apply(["WPFTweaksUpdates"])
    assert format_command_prompt(engine) == "wintweaks [1 backed up]> "
