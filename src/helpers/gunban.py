"""Selective global unban: undo only the bans the bot itself placed for a global ban."""

import logging
from dataclasses import dataclass, field
from typing import Iterable

import discord
from discord.ext.commands import Bot

from src.core import settings
from src.database.models import GlobalBan, ModlogEntry
from src.helpers.errors import PreconditionFailure, report_error
from src.helpers.ledger import get_ban
from src.helpers.modlog import bans_by_executor, newest_per, within_window
from src.metrics import guild_action_failures

logger = logging.getLogger(__name__)


@dataclass
class UnbanReport:
    target: int
    unbanned: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: int = 0


def eligible_unban_guild_ids(
    ledger_row: GlobalBan, entries: Iterable[ModlogEntry], window_minutes: int | None = None
) -> list[int]:
    """
    Guilds whose newest bot-issued ban matches the global ban.

    `entries` are the target's ban entries executed by the bot, newest first. A guild matches when its newest entry
    lies within the window around the ledger date and carries exactly the ledger reason.
    """
    minutes = window_minutes if window_minutes is not None else settings.gban.WINDOW_MINUTES
    newest = newest_per(entries, lambda entry: entry.server_id)
    return [
        server_id
        for server_id, entry in newest.items()
        if within_window(entry.date, ledger_row.date, minutes) and entry.reason == ledger_row.reason
    ]


async def resolve_global_unban(bot: Bot, target: int, reason: str | None = None) -> UnbanReport:
    """
    Unban a user from every guild the bot banned them from as part of their global ban.

    Bans placed by guild moderators, or by the bot for another reason, are left alone. The ledger row is kept.

    Raises:
        PreconditionFailure: If the user was never globally banned.
    """
    reason = reason or settings.gban.DEFAULT_UNBAN_REASON
    ledger_row = await get_ban(target)
    if ledger_row is None:
        raise PreconditionFailure("User was not globally banned, and thus cannot be globally unbanned.")

    entries = await bans_by_executor(bot.user.id, [target])
    server_ids = eligible_unban_guild_ids(ledger_row, entries)
    report = UnbanReport(target=target, skipped=len({entry.server_id for entry in entries}) - len(server_ids))

    for server_id in server_ids:
        guild = bot.get_guild(server_id)
        if guild is None:
            logger.debug(f"Skipping unban in {server_id}, the bot is not a member.")
            report.skipped += 1
            continue

        try:
            await guild.unban(discord.Object(id=target), reason=reason)
        except Exception as exc:
            logger.warning(f"Failed to unban {target} in {guild.name} ({guild.id}).", exc_info=exc)
            guild_action_failures.labels("unban").inc()
            report_error(exc, guild_id=guild.id, target=target)
            report.failed.append(guild.name)
            continue
        report.unbanned.append(guild.name)

    logger.info(
        f"Global unban of {target}: {len(report.unbanned)} unbanned, {len(report.failed)} failed, "
        f"{report.skipped} skipped."
    )
    return report
