"""Global ban propagation. Bot or message responses are NOT allowed."""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable

import arrow
import discord
from discord import Guild, Member, NotFound
from discord.ext.commands import Bot

from src.core import constants, settings
from src.helpers.errors import PreconditionFailure, report_error
from src.helpers.ledger import upsert_bans
from src.helpers.log_channel import build_embed, post_log_event
from src.helpers.raters import remove_rater_assignments
from src.helpers.servers import gban_server_ids
from src.metrics import guild_action_failures, ledger_writes

logger = logging.getLogger(__name__)

ID_PATTERN = re.compile(r"[0-9]+")


@dataclass
class PropagationReport:
    """Outcome of one global ban across every participating guild."""

    targets: list[int]
    reason: str
    attempted: int = 0
    failed: list[str] = field(default_factory=list)
    removed_metas: set[str] = field(default_factory=set)
    aborted: str | None = None

    @property
    def success(self) -> bool:
        return self.aborted is None and not self.failed

    def add_failure(self, guild_name: str) -> None:
        if guild_name not in self.failed:
            self.failed.append(guild_name)


def parse_ids(raw: str | Iterable[str]) -> list[int]:
    """
    Parse user ids separated by new lines, spaces or commas.

    Raises:
        PreconditionFailure: If no id is given or any id is not numeric.
    """
    parts = re.split(r"[\s,]+", raw.strip()) if isinstance(raw, str) else [part.strip() for part in raw]
    parts = [part for part in parts if part]
    if not parts:
        raise PreconditionFailure("No user ids were provided.")
    if not all(ID_PATTERN.fullmatch(part) for part in parts):
        raise PreconditionFailure(
            "There was an error parsing your IDs. Make sure each ID is numeric and on its own line."
        )
    return list(dict.fromkeys(int(part) for part in parts))


async def eligible_guilds(bot: Bot) -> list[Guild]:
    """Participating guilds the bot is currently in, official guilds first."""
    guilds = []
    for server_id in await gban_server_ids():
        guild = bot.get_guild(server_id)
        if guild is None:
            logger.debug(f"Skipping server {server_id}, the bot is not a member.")
            continue
        guilds.append(guild)
    return guilds


async def alert_failed_ban(guild: Guild, target: int) -> None:
    """Tell the guild's moderators a global ban could not be applied. Never raises."""
    embed = build_embed(
        "Failed Ban Attempt",
        f"I attempted to ban <@{target}> ({target}), but was unsuccessful. "
        f"Please ensure I have the Ban Members permission and that my role is above that of other users "
        f"in the Roles menu. <{constants.role_management_url}>",
        colour=constants.colours.failed_ban,
    )
    try:
        await post_log_event(guild, embed)
    except Exception as exc:
        report_error(exc, guild_id=guild.id, target=target)


def can_ban_member(guild: Guild, member: Member) -> bool:
    """Whether the bot outranks the member and holds the Ban Members permission."""
    me = guild.me
    if not me.guild_permissions.ban_members or member.id == guild.owner_id:
        return False
    return me.top_role > member.top_role


async def check_bannable(bot: Bot, target: int) -> list[str]:
    """
    Names of the guilds where the bot could not ban a user.

    Members are checked against the role hierarchy. For users outside a guild only the bot's own permissions count.
    """
    unbannable = []
    for guild in bot.guilds:
        try:
            member = await guild.fetch_member(target)
        except NotFound as exc:
            if exc.code != constants.discord_errors.unknown_member:
                raise
            permissions = guild.me.guild_permissions
            if not (permissions.ban_members or permissions.administrator):
                unbannable.append(guild.name)
            continue

        if not can_ban_member(guild, member):
            unbannable.append(guild.name)
    return unbannable


def _is_unknown_user(error: Exception) -> bool:
    return isinstance(error, NotFound) and error.code == constants.discord_errors.unknown_user


async def _propagate(bot: Bot, targets: list[int], reason: str) -> PropagationReport:
    report = PropagationReport(targets=targets, reason=reason)
    guilds = await eligible_guilds(bot)
    if not guilds:
        raise PreconditionFailure("No global ban servers found, nothing to do!")

    issued_at = arrow.utcnow().naive
    for guild in guilds:
        report.attempted += 1
        for target in targets:
            try:
                await guild.ban(discord.Object(id=target), reason=reason, delete_message_seconds=0)
            except Exception as exc:
                if _is_unknown_user(exc):
                    logger.warning(f"Unknown user {target}, cancelling the global ban.", exc_info=exc)
                    report.aborted = f"Unable to fetch user with id {target}. Cancelling."
                    return report

                logger.warning(
                    f"Failed to ban {target} in {guild.name} ({guild.id}).",
                    exc_info=exc,
                    extra={"guild_id": guild.id, "target": target},
                )
                guild_action_failures.labels("ban").inc()
                report.add_failure(guild.name)
                await alert_failed_ban(guild, target)

    await upsert_bans(targets, reason, issued_at)
    ledger_writes.labels("propagate").inc(len(targets))
    report.removed_metas = await remove_rater_assignments(targets)

    logger.info(
        f"Global ban of {len(targets)} target(s) attempted in {report.attempted} server(s), "
        f"{len(report.failed)} failure(s).",
        extra={"targets": targets, "failed": report.failed},
    )
    return report


async def propagate_ban(bot: Bot, target: int, reason: str | None = None) -> PropagationReport:
    """Ban a user in every participating guild, then record the global ban."""
    return await _propagate(bot, [target], reason or settings.gban.DEFAULT_REASON)


async def propagate_group_ban(bot: Bot, raw_ids: str | Iterable[str], reason: str | None = None) -> PropagationReport:
    """
    Ban several users in every participating guild, then record the global bans.

    Every id is validated before Discord is contacted. An unknown user aborts the whole batch without a ledger write.
    """
    targets = parse_ids(raw_ids)
    return await _propagate(bot, targets, reason or settings.gban.DEFAULT_REASON)
