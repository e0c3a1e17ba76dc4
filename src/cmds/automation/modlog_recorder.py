import logging

from discord import AuditLogAction, AuditLogEntry
from discord.ext import commands

from src.bot import Bot
from src.core import constants
from src.database.models import ModlogAction
from src.helpers.errors import report_error
from src.helpers.log_channel import build_embed, post_log_event
from src.helpers.modlog import record_action

logger = logging.getLogger(__name__)

RECORDED_ACTIONS = {
    AuditLogAction.ban: ModlogAction.BAN,
    AuditLogAction.unban: ModlogAction.UNBAN,
    AuditLogAction.kick: ModlogAction.KICK,
}

EMBED_TITLES = {
    ModlogAction.BAN: ("User Banned", "banned from", constants.colours.ban),
    ModlogAction.UNBAN: ("User Unbanned", "unbanned from", constants.colours.unban),
    ModlogAction.KICK: ("User Kicked", "kicked from", constants.colours.orange),
    ModlogAction.TIMEOUT: ("User Timed Out", "timed out in", constants.colours.soft_red),
    ModlogAction.UNTIMEOUT: ("Timeout Removed", "released from a timeout in", constants.colours.unban),
}


def modlog_action(entry: AuditLogEntry) -> ModlogAction | None:
    """The modlog action an audit log entry stands for, if any."""
    if entry.action in RECORDED_ACTIONS:
        return RECORDED_ACTIONS[entry.action]

    if entry.action == AuditLogAction.member_update:
        before = getattr(entry.before, "communication_disabled_until", None)
        after = getattr(entry.after, "communication_disabled_until", None)
        if after and after != before:
            return ModlogAction.TIMEOUT
        if before and not after:
            return ModlogAction.UNTIMEOUT

    return None


class ModlogRecorder(commands.Cog):
    """Record the moderation actions of every server in the modlog."""

    def __init__(self, bot: Bot):
        self.bot = bot

    @commands.Cog.listener()
    async def on_audit_log_entry(self, entry: AuditLogEntry) -> None:
        """Append ban, unban, kick and timeout entries to the modlog."""
        action = modlog_action(entry)
        if action is None or entry.user is None or entry.target is None:
            return
        if entry.target.id == self.bot.user.id:
            return

        await record_action(entry.guild.id, entry.user.id, entry.target.id, action, entry.reason)

        title, verb, colour = EMBED_TITLES[action]
        embed = build_embed(
            title,
            f"<@{entry.target.id}> was {verb} the server by <@{entry.user.id}>.",
            colour=colour,
            fields=[("User", f"<@{entry.target.id}>"), ("Reason", entry.reason or "None")],
        )
        try:
            await post_log_event(entry.guild, embed)
        except Exception as exc:
            report_error(exc, guild_id=entry.guild.id, action=action.value)


def setup(bot: Bot) -> None:
    """Load the `ModlogRecorder` cog."""
    bot.add_cog(ModlogRecorder(bot))
