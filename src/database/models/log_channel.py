# flake8: noqa: D101
from sqlalchemy.dialects.mysql import BIGINT
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base_class import Base


class LogChannel(Base):
    """The moderation log channel of a guild, where failed global ban alerts are posted."""
    server_id: Mapped[int] = mapped_column(BIGINT(20, unsigned=True), primary_key=True, autoincrement=False)
    channel_id: Mapped[int] = mapped_column(BIGINT(20, unsigned=True), nullable=False)
