"""The global ban ledger: one row per globally banned user, never deleted."""

import logging
from datetime import datetime
from typing import Iterable, Sequence

from sqlalchemy import select, update
from sqlalchemy.dialects.mysql import insert

from src.database.models import GlobalBan
from src.database.session import AsyncSessionLocal

logger = logging.getLogger(__name__)


def upsert_statement(rows: Sequence[dict]):
    """
    A single `INSERT ... ON DUPLICATE KEY UPDATE` for the given ledger rows.

    A repeated ban overwrites reason and date with the latest values and clears the unbanned flag.
    """
    stmt = insert(GlobalBan).values(list(rows))
    return stmt.on_duplicate_key_update(
        reason=stmt.inserted.reason,
        date=stmt.inserted.date,
        unbanned=False,
    )


async def upsert_bans(targets: Iterable[int], reason: str, date: datetime) -> None:
    """Record a global ban of every target, sharing one reason and date."""
    rows = [{"target": target, "reason": reason, "date": date, "unbanned": False} for target in targets]
    if not rows:
        return

    async with AsyncSessionLocal() as session:
        await session.execute(upsert_statement(rows))
        await session.commit()
    logger.info(f"Ledger updated for {len(rows)} target(s).", extra={"reason": reason})


async def import_bans(rows: Sequence[dict]) -> None:
    """Bulk upsert `{target, date, reason}` rows, each with its own reason and date."""
    if not rows:
        return

    values = [{"target": r["target"], "reason": r["reason"], "date": r["date"], "unbanned": False} for r in rows]
    async with AsyncSessionLocal() as session:
        await session.execute(upsert_statement(values))
        await session.commit()
    logger.info(f"Imported {len(values)} ledger row(s).")


async def get_ban(target: int) -> GlobalBan | None:
    async with AsyncSessionLocal() as session:
        return await session.get(GlobalBan, target)


async def active_targets() -> set[int]:
    """Targets the ledger still considers banned."""
    async with AsyncSessionLocal() as session:
        result = await session.scalars(select(GlobalBan.target).filter(GlobalBan.unbanned.is_(False)))
        return set(result.all())


async def mark_unbanned(targets: Iterable[int]) -> int:
    """Flag the given targets as no longer banned, in one statement."""
    targets = list(targets)
    if not targets:
        return 0

    async with AsyncSessionLocal() as session:
        result = await session.execute(
            update(GlobalBan).where(GlobalBan.target.in_(targets)).values(unbanned=True)
        )
        await session.commit()
    logger.info(f"Marked {len(targets)} ledger row(s) as unbanned.")
    return result.rowcount
