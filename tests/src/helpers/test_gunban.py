import asyncio
from datetime import timedelta
from unittest import mock
from unittest.mock import AsyncMock, MagicMock

import pytest
from discord import Forbidden

from src.database.models import GlobalBan, ModlogAction, ModlogEntry
from src.helpers import gunban
from src.helpers.errors import PreconditionFailure
from tests import helpers

BOT_ID = 1016777453457356800


def ban_entry(server_id: int, date, reason: str, target: int = 42) -> ModlogEntry:
    return ModlogEntry(
        server_id=server_id, executor_id=BOT_ID, target_id=target, action=ModlogAction.BAN, reason=reason, date=date
    )


@pytest.fixture
def ledger_row(issued_at):
    return GlobalBan(target=42, reason="Banned from forums", date=issued_at, unbanned=False)


class TestEligibleUnbanGuildIds:
    def test_only_matching_reason_is_eligible(self, ledger_row, issued_at):
        entries = [
            ban_entry(1, issued_at + timedelta(seconds=3), "Banned from forums"),
            ban_entry(2, issued_at + timedelta(seconds=2), "Local raid ban"),
        ]

        assert gunban.eligible_unban_guild_ids(ledger_row, entries) == [1]

    def test_window_end_is_included(self, ledger_row, issued_at):
        entries = [ban_entry(1, issued_at + timedelta(minutes=5), "Banned from forums")]

        assert gunban.eligible_unban_guild_ids(ledger_row, entries) == [1]

    def test_past_the_window_end_is_excluded(self, ledger_row, issued_at):
        entries = [ban_entry(1, issued_at + timedelta(minutes=5, milliseconds=1), "Banned from forums")]

        assert gunban.eligible_unban_guild_ids(ledger_row, entries) == []

    def test_window_start_is_included(self, ledger_row, issued_at):
        entries = [
            ban_entry(1, issued_at - timedelta(minutes=5), "Banned from forums"),
            ban_entry(2, issued_at - timedelta(minutes=5, milliseconds=1), "Banned from forums"),
        ]

        assert gunban.eligible_unban_guild_ids(ledger_row, entries) == [1]

    def test_only_the_newest_entry_per_guild_counts(self, ledger_row, issued_at):
        # A newer local re-ban replaces the global ban in that guild.
        entries = [
            ban_entry(1, issued_at + timedelta(days=3), "Local raid ban"),
            ban_entry(1, issued_at, "Banned from forums"),
        ]

        assert gunban.eligible_unban_guild_ids(ledger_row, entries) == []


class TestResolveGlobalUnban:
    @pytest.mark.asyncio
    async def test_not_globally_banned(self, bot, guild):
        with (
            mock.patch("src.helpers.gunban.get_ban", AsyncMock(return_value=None)),
            mock.patch("src.helpers.gunban.bans_by_executor", AsyncMock()) as bans_by_executor,
        ):
            with pytest.raises(PreconditionFailure, match="not globally banned"):
                await gunban.resolve_global_unban(bot, 42)

        bans_by_executor.assert_not_awaited()
        guild.unban.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unbans_only_the_guilds_it_banned_in(self, bot, ledger_row, issued_at):
        matching = helpers.MockGuild(id=1012768827624452101, name="Matching")
        local = helpers.MockGuild(id=1012768827624452102, name="Local")
        for guild in (matching, local):
            guild.unban = AsyncMock()
        bot.get_guild = MagicMock(side_effect={matching.id: matching, local.id: local}.get)
        entries = [
            ban_entry(matching.id, issued_at + timedelta(seconds=1), "Banned from forums"),
            ban_entry(local.id, issued_at + timedelta(seconds=2), "Local raid ban"),
        ]

        with (
            mock.patch("src.helpers.gunban.get_ban", AsyncMock(return_value=ledger_row)),
            mock.patch("src.helpers.gunban.bans_by_executor", AsyncMock(return_value=entries)) as bans_by_executor,
        ):
            report = await gunban.resolve_global_unban(bot, 42, "Appeal accepted")

        bans_by_executor.assert_awaited_once_with(bot.user.id, [42])
        matching.unban.assert_awaited_once()
        assert matching.unban.call_args.args[0].id == 42
        assert matching.unban.call_args.kwargs == {"reason": "Appeal accepted"}
        local.unban.assert_not_awaited()
        assert report.unbanned == ["Matching"]
        assert report.skipped == 1
        assert report.failed == []

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_the_others(self, bot, ledger_row, issued_at):
        first = helpers.MockGuild(id=1012768827624452101, name="First")
        second = helpers.MockGuild(id=1012768827624452102, name="Second")
        first.unban = AsyncMock(side_effect=Forbidden(MagicMock(status=403, reason="Forbidden"), "Missing Access"))
        second.unban = AsyncMock()
        bot.get_guild = MagicMock(side_effect={first.id: first, second.id: second}.get)
        entries = [
            ban_entry(first.id, issued_at, "Banned from forums"),
            ban_entry(second.id, issued_at, "Banned from forums"),
        ]

        with (
            mock.patch("src.helpers.gunban.get_ban", AsyncMock(return_value=ledger_row)),
            mock.patch("src.helpers.gunban.bans_by_executor", AsyncMock(return_value=entries)),
            mock.patch("src.helpers.gunban.report_error") as report_error,
        ):
            report = await gunban.resolve_global_unban(bot, 42)

        report_error.assert_called_once()
        second.unban.assert_awaited_once()
        assert report.failed == ["First"]
        assert report.unbanned == ["Second"]

    @pytest.mark.asyncio
    async def test_transport_error_does_not_stop_the_others(self, bot, ledger_row, issued_at):
        first = helpers.MockGuild(id=1012768827624452101, name="First")
        second = helpers.MockGuild(id=1012768827624452102, name="Second")
        first.unban = AsyncMock(side_effect=asyncio.TimeoutError())
        second.unban = AsyncMock()
        bot.get_guild = MagicMock(side_effect={first.id: first, second.id: second}.get)
        entries = [
            ban_entry(first.id, issued_at, "Banned from forums"),
            ban_entry(second.id, issued_at, "Banned from forums"),
        ]

        with (
            mock.patch("src.helpers.gunban.get_ban", AsyncMock(return_value=ledger_row)),
            mock.patch("src.helpers.gunban.bans_by_executor", AsyncMock(return_value=entries)),
            mock.patch("src.helpers.gunban.report_error"),
        ):
            report = await gunban.resolve_global_unban(bot, 42)

        second.unban.assert_awaited_once()
        assert report.failed == ["First"]
        assert report.unbanned == ["Second"]
