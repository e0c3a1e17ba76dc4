# flake8: noqa: D101
from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.dialects.mysql import BIGINT
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base_class import Base


class RaterAssignment(Base):
    """A trusted team rater for one meta. Globally banned users lose every assignment."""
    __table_args__ = (UniqueConstraint("user_id", "meta"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(BIGINT(20, unsigned=True), nullable=False, index=True)
    meta: Mapped[str] = mapped_column(String(64), nullable=False)
