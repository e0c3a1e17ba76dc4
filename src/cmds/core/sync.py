import logging

from discord import ApplicationContext, Interaction, Option, WebhookMessage, slash_command
from discord.commands import default_permissions, guild_only
from discord.ext import commands
from discord.ext.commands import has_any_role

from src.bot import Bot
from src.core import settings
from src.helpers.commands import GbanCommand, dispatch

logger = logging.getLogger(__name__)


class SyncCog(commands.Cog):
    """Repair drift between the global ban list and the servers."""

    def __init__(self, bot: Bot):
        self.bot = bot

    @slash_command(description="Ensures all gbans are enforced in this server.")
    @guild_only()
    @default_permissions(ban_members=True)
    async def syncgban(self, ctx: ApplicationContext) -> Interaction | WebhookMessage:
        """Ban every globally banned user missing from this server's ban list."""
        await ctx.defer()
        response = await dispatch(GbanCommand.SYNCGBAN, self.bot, guild=ctx.guild)
        return await ctx.respond(response.message, ephemeral=response.ephemeral)

    @slash_command(guild_ids=settings.dev_guild_ids, description="Resynchronise a table with the live state.")
    @has_any_role(*settings.role_groups.get("ALL_ADMINS"))
    async def syncdb(
        self, ctx: ApplicationContext, scope: Option(str, "What to resynchronise.", choices=["gban"])
    ) -> Interaction | WebhookMessage:
        """Mark global bans lifted in the reference server as unbanned."""
        await ctx.defer()
        if scope != "gban":
            return await ctx.respond(f"Unknown scope '{scope}'.", ephemeral=True)
        response = await dispatch(GbanCommand.SYNCDB_GBAN, self.bot)
        return await ctx.respond(response.message, ephemeral=response.ephemeral)

    @slash_command(guild_ids=settings.dev_guild_ids, description="Populates the database of gban information.")
    @has_any_role(*settings.role_groups.get("ALL_ADMINS"))
    async def popgban(self, ctx: ApplicationContext) -> Interaction | WebhookMessage:
        """Seed the global ban list from the reference server and the modlog."""
        await ctx.defer(ephemeral=True)
        response = await dispatch(GbanCommand.POPGBAN, self.bot)
        return await ctx.respond(response.message, ephemeral=response.ephemeral)


def setup(bot: Bot) -> None:
    """Load the `SyncCog` cog."""
    bot.add_cog(SyncCog(bot))
