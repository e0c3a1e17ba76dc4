"""Drift repair between the ledger and the live ban lists of guilds."""

import logging
from dataclasses import dataclass, field

import discord
from discord import Guild
from discord.ext.commands import Bot

from src.core import settings
from src.database.models import ServerClass
from src.helpers.errors import PreconditionFailure, report_error
from src.helpers.ledger import active_targets, import_bans, mark_unbanned
from src.helpers.modlog import bans_by_executor, newest_per
from src.helpers.servers import get_server_class
from src.helpers.single_flight import lockout
from src.metrics import guild_action_failures, ledger_writes

logger = logging.getLogger(__name__)


@dataclass
class EnforceReport:
    guild_id: int
    missing: int = 0
    applied: int = 0
    failed: list[int] = field(default_factory=list)

    @property
    def message(self) -> str:
        message = f"gbans synced. {self.applied} new bans were found."
        if self.failed:
            message += f"\nI was unable to ban the following ids: {', '.join(str(uid) for uid in self.failed)}"
        return message


async def fetch_ban_ids(guild: Guild) -> set[int]:
    """Ids of every user currently banned in the guild."""
    return {entry.user.id async for entry in guild.bans(limit=None)}


def reference_guild(bot: Bot) -> Guild:
    """The guild whose ban list is taken as the live global ban state."""
    guild = bot.get_guild(settings.gban.REFERENCE_GUILD_ID)
    if guild is None:
        raise PreconditionFailure("I am not in the reference server, cannot read the global ban list.")
    return guild


async def enforce_guild(guild: Guild) -> EnforceReport:
    """
    Ban every active global ban target that is missing from the guild's ban list.

    Raises:
        PreconditionFailure: If the guild has not opted in, or the bot cannot ban there. Nothing is sent to Discord.
    """
    if await get_server_class(guild.id) == ServerClass.OPT_OUT:
        raise PreconditionFailure(
            "gbans are not currently enforced in this server. If you wish to subscribe to global bans, "
            "please first opt in with the `/opt in` command."
        )
    if not guild.me.guild_permissions.ban_members:
        raise PreconditionFailure("I do not have the Ban Members permission. Cannot continue.")

    banned = await fetch_ban_ids(guild)
    missing = sorted((await active_targets()) - banned)
    report = EnforceReport(guild_id=guild.id, missing=len(missing))

    for target in missing:
        try:
            await guild.ban(discord.Object(id=target), reason=settings.gban.SYNC_REASON, delete_message_seconds=0)
        except Exception as exc:
            logger.warning(f"Cannot ban id {target} in {guild.name} ({guild.id}).", exc_info=exc)
            guild_action_failures.labels("sync").inc()
            report_error(exc, guild_id=guild.id, target=target)
            report.failed.append(target)
            continue
        report.applied += 1

    logger.info(
        f"Enforced global bans in {guild.name} ({guild.id}): {report.applied}/{report.missing} applied.",
        extra={"failed": report.failed},
    )
    return report


async def detect_unbanned(guild: Guild) -> list[int]:
    """
    Mark active ledger targets that are no longer banned in the reference guild as unbanned.

    Only one job of this kind runs at a time.
    """
    async with lockout.hold("gban-drift"):
        banned = await fetch_ban_ids(guild)
        drift = sorted((await active_targets()) - banned)
        if drift:
            await mark_unbanned(drift)
            ledger_writes.labels("unbanned").inc(len(drift))

    logger.info(f"Detected {len(drift)} lifted global ban(s) from {guild.name} ({guild.id}).")
    return drift


async def import_from_modlog(bot: Bot, guild: Guild) -> int:
    """
    Seed the ledger from the reference guild's ban list and the bot's own ban history.

    Each banned user gets the reason and date of the newest ban the bot issued against them. Safe to re-run.
    """
    async with lockout.hold("gban-drift"):
        banned = await fetch_ban_ids(guild)
        if not banned:
            logger.info(f"No bans found in {guild.name} ({guild.id}), nothing to import.")
            return 0

        entries = await bans_by_executor(bot.user.id, banned)
        newest = newest_per(entries, lambda entry: entry.target_id)
        rows = [{"target": target, "date": entry.date, "reason": entry.reason} for target, entry in newest.items()]
        await import_bans(rows)
        ledger_writes.labels("import").inc(len(rows))

    return len(rows)
