import logging

import discord
from discord import Embed, Guild, TextChannel
from sqlalchemy import delete, select
from sqlalchemy.dialects.mysql import insert

from src.database.models import LogChannel
from src.database.session import AsyncSessionLocal

logger = logging.getLogger(__name__)


def build_embed(title: str, description: str, colour: int | None = None, fields: list[tuple[str, str]] = None) -> Embed:
    """Build a log embed."""
    embed = discord.Embed(title=title, description=description)
    if colour:
        embed.colour = colour
    for name, value in fields or []:
        embed.add_field(name=name, value=value, inline=False)
    return embed


async def get_log_channel_id(guild_id: int) -> int | None:
    async with AsyncSessionLocal() as session:
        result = await session.scalars(select(LogChannel.channel_id).filter(LogChannel.server_id == guild_id))
        return result.first()


async def set_log_channel(guild_id: int, channel_id: int) -> None:
    stmt = insert(LogChannel).values(server_id=guild_id, channel_id=channel_id)
    stmt = stmt.on_duplicate_key_update(channel_id=stmt.inserted.channel_id)
    async with AsyncSessionLocal() as session:
        await session.execute(stmt)
        await session.commit()
    logger.info(f"Log channel of server {guild_id} set to {channel_id}.")


async def remove_log_channel(guild_id: int) -> bool:
    async with AsyncSessionLocal() as session:
        result = await session.execute(delete(LogChannel).filter(LogChannel.server_id == guild_id))
        await session.commit()
    return bool(result.rowcount)


async def post_log_event(guild: Guild, embed: Embed) -> bool:
    """
    Post an embed to the log channel of a guild.

    Returns False when the guild has no usable log channel. Discord errors are raised to the caller.
    """
    channel_id = await get_log_channel_id(guild.id)
    if channel_id is None:
        logger.debug(f"Server {guild.id} has no log channel, not posting '{embed.title}'.")
        return False

    channel = guild.get_channel(channel_id)
    if not isinstance(channel, TextChannel):
        logger.debug(f"Log channel {channel_id} of server {guild.id} is not a text channel.")
        return False

    await channel.send(embed=embed)
    return True
