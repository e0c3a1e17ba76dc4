"""Server registry: which guilds take part in global bans."""

import logging
from typing import Iterable

from discord import Guild
from sqlalchemy import case, delete, func, select
from sqlalchemy.dialects.mysql import Insert, insert

from src.database.models import LogChannel, Server, ServerClass
from src.database.session import AsyncSessionLocal
from src.helpers.errors import PreconditionFailure

logger = logging.getLogger(__name__)

# The participation tier is stored in a column named `class`, which is not its attribute name.
CLASS_COLUMN = "class"


def class_upsert(guild_id: int, server_class: ServerClass) -> Insert:
    """An insert of a guild with the given class, ready for an `ON DUPLICATE KEY UPDATE` clause."""
    return insert(Server.__table__).values({"server_id": guild_id, CLASS_COLUMN: server_class})


async def get_server_class(guild_id: int) -> ServerClass:
    """Return the class of a guild. Unknown guilds are treated as opted out."""
    async with AsyncSessionLocal() as session:
        result = await session.scalars(select(Server.server_class).filter(Server.server_id == guild_id))
        value = result.first()
    return ServerClass(value) if value is not None else ServerClass.OPT_OUT


async def gban_server_ids() -> list[int]:
    """Ids of every participating guild, official guilds first."""
    async with AsyncSessionLocal() as session:
        stmt = (
            select(Server.server_id)
            .filter(Server.server_class > ServerClass.OPT_OUT)
            .order_by(Server.server_class.desc(), Server.server_id)
        )
        result = await session.scalars(stmt)
        return list(result.all())


async def register_server(guild_id: int) -> None:
    """Record a newly joined guild. Existing records keep their class."""
    stmt = class_upsert(guild_id, ServerClass.OPT_OUT).prefix_with("IGNORE")
    async with AsyncSessionLocal() as session:
        await session.execute(stmt)
        await session.commit()
    logger.info(f"Registered server {guild_id}.")


async def remove_server(guild_id: int) -> None:
    """Forget a guild the bot left."""
    async with AsyncSessionLocal() as session:
        await session.execute(delete(Server).filter(Server.server_id == guild_id))
        await session.execute(delete(LogChannel).filter(LogChannel.server_id == guild_id))
        await session.commit()
    logger.info(f"Removed server {guild_id}.")


async def opt_in(guild_id: int) -> None:
    """Opt a guild into global bans. Never lowers the class of an official guild."""
    stmt = class_upsert(guild_id, ServerClass.OPT_IN)
    current = Server.__table__.c[CLASS_COLUMN]
    stmt = stmt.on_duplicate_key_update({CLASS_COLUMN: func.greatest(current, stmt.inserted[CLASS_COLUMN])})
    async with AsyncSessionLocal() as session:
        await session.execute(stmt)
        await session.commit()
    logger.info(f"Server {guild_id} opted into global bans.")


async def opt_out(guild_id: int) -> None:
    """Opt a guild out of global bans. Official guilds cannot opt out."""
    if await get_server_class(guild_id) == ServerClass.OFFICIAL:
        raise PreconditionFailure(
            "This server is an official server and cannot opt out of global bans. "
            "Please contact the global ban staff if this is a mistake."
        )

    stmt = class_upsert(guild_id, ServerClass.OPT_OUT)
    stmt = stmt.on_duplicate_key_update({CLASS_COLUMN: stmt.inserted[CLASS_COLUMN]})
    async with AsyncSessionLocal() as session:
        await session.execute(stmt)
        await session.commit()
    logger.info(f"Server {guild_id} opted out of global bans.")


async def mark_official(guild_id: int) -> None:
    """Always enforce global bans in a guild."""
    stmt = class_upsert(guild_id, ServerClass.OFFICIAL)
    stmt = stmt.on_duplicate_key_update({CLASS_COLUMN: stmt.inserted[CLASS_COLUMN]})
    async with AsyncSessionLocal() as session:
        await session.execute(stmt)
        await session.commit()
    logger.info(f"Server {guild_id} marked official.")


async def unmark_official(guild_id: int) -> None:
    """Demote an official guild to opted in. Other classes are left as they are."""
    stmt = class_upsert(guild_id, ServerClass.OPT_IN)
    current = Server.__table__.c[CLASS_COLUMN]
    stmt = stmt.on_duplicate_key_update(
        {CLASS_COLUMN: case((current == ServerClass.OFFICIAL, stmt.inserted[CLASS_COLUMN]), else_=current)}
    )
    async with AsyncSessionLocal() as session:
        await session.execute(stmt)
        await session.commit()
    logger.info(f"Server {guild_id} is no longer official.")


def find_guilds(guilds: Iterable[Guild], query: str) -> list[Guild]:
    """Guilds whose id equals the query or whose name matches it, ignoring case."""
    query = query.strip()
    return [g for g in guilds if str(g.id) == query or g.name.lower() == query.lower()]
