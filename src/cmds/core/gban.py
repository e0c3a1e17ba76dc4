import logging

import discord
from discord import ApplicationContext, Interaction, Option, SlashCommandGroup, WebhookMessage, slash_command
from discord.ext import commands
from discord.ext.commands import has_any_role

from src.bot import Bot
from src.core import settings
from src.helpers.commands import GbanCommand, dispatch

logger = logging.getLogger(__name__)


class GbanCog(commands.Cog):
    """Ban users from every participating server at once."""

    def __init__(self, bot: Bot):
        self.bot = bot

    gban = SlashCommandGroup("gban", "Manage global bans.", guild_ids=settings.guild_ids)

    @gban.command(description="Ban a user from every server that enforces global bans.")
    @has_any_role(*settings.role_groups.get("ALL_GBAN_STAFF"))
    async def user(
        self,
        ctx: ApplicationContext,
        user: discord.User,
        reason: Option(str, "Why the user is globally banned.", required=False, default=None),
    ) -> Interaction | WebhookMessage:
        """Ban a user from every server that enforces global bans."""
        await ctx.defer()
        logger.info(f"{ctx.user} requested a global ban of {user} ({user.id}).")
        response = await dispatch(GbanCommand.GBAN_USER, self.bot, target=user.id, reason=reason)
        return await ctx.respond(response.message, ephemeral=response.ephemeral)

    @gban.command(description="Ban several users, one id per line or separated by commas.")
    @has_any_role(*settings.role_groups.get("ALL_GBAN_STAFF"))
    async def group(
        self,
        ctx: ApplicationContext,
        ids: Option(str, "The user ids to ban."),
        reason: Option(str, "Why the users are globally banned.", required=False, default=None),
    ) -> Interaction | WebhookMessage:
        """Ban several users from every server that enforces global bans."""
        await ctx.defer()
        response = await dispatch(GbanCommand.GBAN_GROUP, self.bot, ids=ids, reason=reason)
        return await ctx.respond(response.message, ephemeral=response.ephemeral)

    @gban.command(description="Always enforce global bans in a server, given its name or id.")
    @has_any_role(*settings.role_groups.get("ALL_GBAN_STAFF"))
    async def enforce(
        self, ctx: ApplicationContext, server: Option(str, "The name or id of the server.")
    ) -> Interaction | WebhookMessage:
        """Always enforce global bans in a server."""
        response = await dispatch(GbanCommand.GBAN_ENFORCE, self.bot, query=server)
        return await ctx.respond(response.message, ephemeral=response.ephemeral)

    @gban.command(description="Stop treating a server as official, given its name or id.")
    @has_any_role(*settings.role_groups.get("ALL_GBAN_STAFF"))
    async def unenforce(
        self, ctx: ApplicationContext, server: Option(str, "The name or id of the server.")
    ) -> Interaction | WebhookMessage:
        """Stop treating a server as official."""
        response = await dispatch(GbanCommand.GBAN_UNENFORCE, self.bot, query=server)
        return await ctx.respond(response.message, ephemeral=response.ephemeral)

    @slash_command(guild_ids=settings.guild_ids, description="Checks each server for the ability to ban a user.")
    @has_any_role(*settings.role_groups.get("ALL_GBAN_STAFF"))
    async def checkgban(self, ctx: ApplicationContext, user: discord.User) -> Interaction | WebhookMessage:
        """List the servers where a user could not be banned."""
        await ctx.defer()
        response = await dispatch(GbanCommand.CHECKGBAN, self.bot, target=user.id, name=user.name)
        return await ctx.respond(response.message, ephemeral=response.ephemeral)


def setup(bot: Bot) -> None:
    """Load the `GbanCog` cog."""
    bot.add_cog(GbanCog(bot))
