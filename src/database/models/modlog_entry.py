# flake8: noqa: D101
from datetime import datetime
from enum import Enum

import arrow
from sqlalchemy import Enum as SqlEnum, Index, Integer
from sqlalchemy.dialects.mysql import BIGINT, DATETIME, TEXT
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base_class import Base


class ModlogAction(str, Enum):
    BAN = "Ban"
    UNBAN = "Unban"
    KICK = "Kick"
    TIMEOUT = "Timeout"
    UNTIMEOUT = "Untimeout"


class ModlogEntry(Base):
    """
    One moderation action performed in a guild, as reported by its audit log.

    Entries are immutable. For a given target and guild only the newest one describes the current state.

    Attributes:
        id (int): Surrogate key.
        server_id (int): The guild the action happened in.
        executor_id (int): The user (or bot) that performed the action.
        target_id (int): The user the action was performed on.
        action (ModlogAction): What was done.
        reason (str): Audit log reason, ``"None"`` when absent.
        date (datetime): When the entry was recorded (naive UTC).
    """
    __table_args__ = (
        Index("ix_modlog_entry_target_action", "target_id", "action"),
        Index("ix_modlog_entry_server_target", "server_id", "target_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    server_id: Mapped[int] = mapped_column(BIGINT(20, unsigned=True), nullable=False)
    executor_id: Mapped[int] = mapped_column(BIGINT(20, unsigned=True), nullable=False)
    target_id: Mapped[int] = mapped_column(BIGINT(20, unsigned=True), nullable=False)
    action: Mapped[ModlogAction] = mapped_column(
        SqlEnum(ModlogAction, values_callable=lambda e: [m.value for m in e], name="modlog_action"), nullable=False
    )
    reason: Mapped[str] = mapped_column(TEXT, nullable=False)
    date: Mapped[datetime] = mapped_column(DATETIME(fsp=6), nullable=False, default=lambda: arrow.utcnow().naive)
