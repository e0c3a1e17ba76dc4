import logging

import discord
from discord import ApplicationContext, Interaction, Option, SlashCommandGroup, TextChannel, WebhookMessage
from discord.ext import commands

from src.bot import Bot
from src.helpers.log_channel import remove_log_channel, set_log_channel

logger = logging.getLogger(__name__)


class LogChannelCog(commands.Cog):
    """Configure where moderation alerts are posted."""

    def __init__(self, bot: Bot):
        self.bot = bot

    log_channel = SlashCommandGroup(
        "logging",
        "Configure the moderation log channel.",
        guild_only=True,
        default_member_permissions=discord.Permissions(manage_guild=True),
    )

    @log_channel.command(name="set", description="Post moderation alerts to a channel.")
    async def set_channel(
        self, ctx: ApplicationContext, channel: Option(TextChannel, "Where alerts are posted.")
    ) -> Interaction | WebhookMessage:
        """Post moderation alerts to a channel."""
        await set_log_channel(ctx.guild.id, channel.id)
        return await ctx.respond(f"Moderation alerts will be posted in {channel.mention}.", ephemeral=True)

    @log_channel.command(name="remove", description="Stop posting moderation alerts.")
    async def remove_channel(self, ctx: ApplicationContext) -> Interaction | WebhookMessage:
        """Stop posting moderation alerts."""
        if not await remove_log_channel(ctx.guild.id):
            return await ctx.respond("This server has no log channel configured.", ephemeral=True)
        return await ctx.respond("Moderation alerts will no longer be posted.", ephemeral=True)


def setup(bot: Bot) -> None:
    """Load the `LogChannelCog` cog."""
    bot.add_cog(LogChannelCog(bot))
