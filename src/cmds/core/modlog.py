import logging
from typing import Sequence

import arrow
import discord
from discord import ApplicationContext, Embed, Interaction, WebhookMessage, slash_command
from discord.commands import default_permissions, guild_only
from discord.ext import commands

from src.bot import Bot
from src.core import constants
from src.database.models import ModlogEntry
from src.helpers.modlog import entries_for

logger = logging.getLogger(__name__)


def format_entries(
    entries: Sequence[ModlogEntry], limit: int, max_length: int = constants.embed_description_limit
) -> str:
    """List up to `limit` entries, one per line, without going past `max_length` characters."""
    lines = []
    length = 0
    for entry in entries[:limit]:
        when = arrow.get(entry.date).format("YYYY-MM-DD HH:mm")
        line = f"`{when}` **{entry.action.value}** by <@{entry.executor_id}>: {entry.reason}"

        # Room is kept for the summary of the entries left out after this one.
        hidden = len(entries) - len(lines) - 1
        summary = len(f"\n... and {hidden} older entries.") if hidden else 0
        separator = 1 if lines else 0
        if length + separator + len(line) + summary > max_length:
            if lines:
                break
            line = line[:max_length - summary - 3] + "..."

        lines.append(line)
        length += separator + len(line)
    if len(entries) > len(lines):
        lines.append(f"... and {len(entries) - len(lines)} older entries.")
    return "\n".join(lines)


class ModlogCog(commands.Cog):
    """Show the moderation history of a user in this server."""

    def __init__(self, bot: Bot):
        self.bot = bot

    @slash_command(description="Show the moderation actions taken against a user in this server.")
    @guild_only()
    @default_permissions(ban_members=True)
    async def modlog(self, ctx: ApplicationContext, user: discord.User) -> Interaction | WebhookMessage:
        """Show the moderation actions taken against a user in this server."""
        entries = await entries_for(ctx.guild.id, user.id)
        if not entries:
            return await ctx.respond(f"No moderation actions found for {user.name}.", ephemeral=True)

        embed = Embed(
            title=f"Modlog for {user.name} ({user.id})",
            description=format_entries(entries, constants.modlog_page_size),
            colour=constants.colours.orange,
        )
        return await ctx.respond(embed=embed, ephemeral=True)


def setup(bot: Bot) -> None:
    """Load the `ModlogCog` cog."""
    bot.add_cog(ModlogCog(bot))
