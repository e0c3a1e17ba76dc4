import re
from typing import Any

from sqlalchemy import MetaData, inspect
from sqlalchemy.orm import DeclarativeBase, declared_attr

# Deterministic constraint names keep `create_all` and manual migrations in agreement.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """
    Base class for the declarative models.

    Table names are derived from the class name (``GlobalBan`` -> ``global_ban``).
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    __name__: str

    # noinspection PyMethodParameters
    @declared_attr.directive
    def __tablename__(cls) -> str:  # noqa: N805
        return re.sub(r"(?<!^)(?=[A-Z])", "_", cls.__name__).lower()

    def __repr__(self) -> str:
        mapper = inspect(type(self))
        fields = ", ".join(f"{col.key}={getattr(self, col.key)!r}" for col in mapper.column_attrs)
        return f"{type(self).__name__}({fields})"

    def as_dict(self) -> dict[str, Any]:
        return {col.key: getattr(self, col.key) for col in inspect(type(self)).column_attrs}
