"""Per-guild moderation audit trail."""

import logging
from datetime import datetime, timedelta
from typing import Callable, Hashable, Iterable, Sequence, TypeVar

import arrow
from sqlalchemy import select

from src.database.models import ModlogAction, ModlogEntry
from src.database.session import AsyncSessionLocal

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def record_action(
    server_id: int, executor_id: int, target_id: int, action: ModlogAction, reason: str | None
) -> ModlogEntry:
    """Append an entry to the modlog."""
    entry = ModlogEntry(
        server_id=server_id,
        executor_id=executor_id,
        target_id=target_id,
        action=action,
        reason=reason if reason else "None",
        date=arrow.utcnow().naive,
    )
    async with AsyncSessionLocal() as session:
        session.add(entry)
        await session.commit()
    logger.debug(f"Recorded {action.value} of {target_id} by {executor_id} in {server_id}.")
    return entry


async def bans_by_executor(executor_id: int, targets: Iterable[int]) -> Sequence[ModlogEntry]:
    """Ban entries the executor issued against any of the targets, newest first."""
    targets = list(targets)
    if not targets:
        return []

    stmt = (
        select(ModlogEntry)
        .filter(
            ModlogEntry.executor_id == executor_id,
            ModlogEntry.action == ModlogAction.BAN,
            ModlogEntry.target_id.in_(targets),
        )
        .order_by(ModlogEntry.date.desc())
    )
    async with AsyncSessionLocal() as session:
        result = await session.scalars(stmt)
        return result.all()


async def entries_for(server_id: int, target_id: int) -> Sequence[ModlogEntry]:
    """Every entry about a user in one guild, newest first."""
    stmt = (
        select(ModlogEntry)
        .filter(ModlogEntry.server_id == server_id, ModlogEntry.target_id == target_id)
        .order_by(ModlogEntry.date.desc())
    )
    async with AsyncSessionLocal() as session:
        result = await session.scalars(stmt)
        return result.all()


def newest_per(entries: Iterable[T], key: Callable[[T], Hashable]) -> dict[Hashable, T]:
    """
    Keep the first entry seen for each key.

    `entries` must be ordered newest first, so the kept entry is the newest one.
    """
    newest: dict[Hashable, T] = {}
    for entry in entries:
        newest.setdefault(key(entry), entry)
    return newest


def within_window(moment: datetime, center: datetime, minutes: int) -> bool:
    """Whether `moment` lies in `[center - minutes, center + minutes]`, both ends included."""
    delta = timedelta(minutes=minutes)
    return center - delta <= moment <= center + delta
