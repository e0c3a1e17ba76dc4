import discord
from discord import ApplicationContext, Interaction, SlashCommandGroup, WebhookMessage
from discord.ext import commands

from src.bot import Bot
from src.helpers.commands import GbanCommand, dispatch


class OptCog(commands.Cog):
    """Let servers choose whether global bans apply to them."""

    def __init__(self, bot: Bot):
        self.bot = bot

    opt = SlashCommandGroup(
        "opt",
        "Opt into or out of global bans.",
        guild_only=True,
        default_member_permissions=discord.Permissions(ban_members=True),
    )

    @opt.command(name="in", description="Enforce global bans in this server.")
    async def opt_in(self, ctx: ApplicationContext) -> Interaction | WebhookMessage:
        """Enforce global bans in this server."""
        response = await dispatch(GbanCommand.OPT_IN, self.bot, guild=ctx.guild)
        return await ctx.respond(response.message, ephemeral=response.ephemeral)

    @opt.command(name="out", description="Stop enforcing global bans in this server.")
    async def opt_out(self, ctx: ApplicationContext) -> Interaction | WebhookMessage:
        """Stop enforcing global bans in this server."""
        response = await dispatch(GbanCommand.OPT_OUT, self.bot, guild=ctx.guild)
        return await ctx.respond(response.message, ephemeral=response.ephemeral)


def setup(bot: Bot) -> None:
    """Load the `OptCog` cog."""
    bot.add_cog(OptCog(bot))
