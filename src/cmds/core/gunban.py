import logging

import discord
from discord import ApplicationContext, Interaction, Option, WebhookMessage, slash_command
from discord.ext import commands
from discord.ext.commands import has_any_role

from src.bot import Bot
from src.core import settings
from src.helpers.commands import GbanCommand, dispatch

logger = logging.getLogger(__name__)


class GunbanCog(commands.Cog):
    """Lift global bans."""

    def __init__(self, bot: Bot):
        self.bot = bot

    @slash_command(
        guild_ids=settings.guild_ids,
        description="Unban a user from every server the bot globally banned them from.",
    )
    @has_any_role(*settings.role_groups.get("ALL_GBAN_STAFF"))
    async def gunban(
        self,
        ctx: ApplicationContext,
        user: discord.User,
        reason: Option(str, "Why the global ban is lifted.", required=False, default=None),
    ) -> Interaction | WebhookMessage:
        """Unban a user from every server the bot globally banned them from."""
        await ctx.defer()
        logger.info(f"{ctx.user} requested a global unban of {user} ({user.id}).")
        response = await dispatch(GbanCommand.GUNBAN, self.bot, target=user.id, name=user.name, reason=reason)
        return await ctx.respond(response.message, ephemeral=response.ephemeral)


def setup(bot: Bot) -> None:
    """Load the `GunbanCog` cog."""
    bot.add_cog(GunbanCog(bot))
