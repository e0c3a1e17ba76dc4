# flake8: noqa: D101
from enum import IntEnum

from sqlalchemy import SmallInteger
from sqlalchemy.dialects.mysql import BIGINT
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base_class import Base


class ServerClass(IntEnum):
    """Participation tier of a guild in global bans. Higher values participate more."""

    OPT_OUT = 0
    OPT_IN = 1
    OFFICIAL = 2


class Server(Base):
    """
    Represents a guild the bot belongs to.

    Attributes:
        server_id (int): The guild id (primary key).
        server_class (ServerClass): Participation tier, stored in the ``class`` column.
    """
    server_id: Mapped[int] = mapped_column(BIGINT(20, unsigned=True), primary_key=True, autoincrement=False)
    server_class: Mapped[int] = mapped_column(
        "class", SmallInteger, nullable=False, default=ServerClass.OPT_OUT
    )
