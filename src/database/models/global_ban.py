# flake8: noqa: D101
from datetime import datetime

from sqlalchemy import Boolean
from sqlalchemy.dialects.mysql import BIGINT, DATETIME, TEXT
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base_class import Base


class GlobalBan(Base):
    """
    A ledger row: one per user that has ever been globally banned.

    Rows are upserted on every (re-)issued global ban and never deleted.

    Attributes:
        target (int): The banned user id (primary key).
        reason (str): Reason of the most recent global ban.
        date (datetime): When the most recent global ban was issued (naive UTC).
        unbanned (bool): Set once the ban is found lifted by drift detection.
    """
    target: Mapped[int] = mapped_column(BIGINT(20, unsigned=True), primary_key=True, autoincrement=False)
    reason: Mapped[str] = mapped_column(TEXT, nullable=False)
    date: Mapped[datetime] = mapped_column(DATETIME(fsp=6), nullable=False)
    unbanned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
