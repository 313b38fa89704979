"""Term lock service."""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolfees.models.term import TermLock
from schoolfees.services import audit as audit_service


async def get_term_lock(db: AsyncSession, term_number: int, year: int) -> TermLock | None:
    """Get the lock record of a term."""
    result = await db.execute(
        select(TermLock).where(
            TermLock.term_number == term_number,
            TermLock.year == year,
        )
    )
    return result.scalar_one_or_none()


async def is_term_locked(db: AsyncSession, term_number: int, year: int) -> bool:
    """Check whether a term is locked. Terms without a record are open."""
    term_lock = await get_term_lock(db, term_number, year)
    return bool(term_lock and term_lock.is_locked)


async def get_term_locks(db: AsyncSession, year: int | None = None) -> list[TermLock]:
    """List term lock records."""
    query = select(TermLock)
    if year:
        query = query.where(TermLock.year == year)
    query = query.order_by(TermLock.year.desc(), TermLock.term_number.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def _set_lock(
    db: AsyncSession,
    term_number: int,
    year: int,
    is_locked: bool,
    performed_by: UUID | None,
    action_type: str,
    reason: str | None = None,
) -> TermLock:
    term_lock = await get_term_lock(db, term_number, year)
    if term_lock is None:
        term_lock = TermLock(term_number=term_number, year=year)
        db.add(term_lock)

    term_lock.is_locked = is_locked
    term_lock.locked_at = datetime.now(timezone.utc) if is_locked else None
    term_lock.locked_by = performed_by if is_locked else None
    term_lock.override_reason = reason
    await db.flush()

    audit_service.record_change(
        db,
        table_name="term_locks",
        action_type=action_type,
        record_id=term_lock.id,
        performed_by=performed_by,
        new_data={
            "term_number": term_number,
            "year": year,
            "is_locked": is_locked,
            "reason": reason,
        },
    )
    await db.commit()
    await db.refresh(term_lock)
    return term_lock


async def lock_term(db: AsyncSession, term_number: int, year: int, locked_by: UUID | None = None) -> TermLock:
    """Lock a term; its payments can no longer be recorded or edited."""
    return await _set_lock(db, term_number, year, True, locked_by, "TERM_LOCK")


async def unlock_term(db: AsyncSession, term_number: int, year: int, unlocked_by: UUID | None = None) -> TermLock:
    """Unlock a term."""
    return await _set_lock(db, term_number, year, False, unlocked_by, "TERM_UNLOCK")


async def override_term_lock(
    db: AsyncSession,
    term_number: int,
    year: int,
    reason: str,
    overridden_by: UUID | None = None,
) -> TermLock:
    """Emergency unlock of a locked term, recording why."""
    return await _set_lock(db, term_number, year, False, overridden_by, "TERM_OVERRIDE", reason)
