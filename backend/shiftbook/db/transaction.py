"""
Compare-and-swap transaction over a single integer column.

This is the only serialization primitive in the ledger. The ticket allocator
and the capacity ledger both go through it; nothing else writes the ticket
counter or a shift's booked count.

Algorithm (optimistic locking, same idea as a versioned UPDATE):

  1. SELECT field, version FROM table WHERE id = :id
  2. new = update_fn(current)          -- None aborts, nothing is written
  3. UPDATE table SET field = :new, version = version + 1
       WHERE id = :id AND version = :read_version
     (or INSERT when the row does not exist yet)
  4. rowcount == 0 / duplicate key -> a concurrent writer won -> retry

Retries are immediate and bounded only by TRANSACTION_MAX_ATTEMPTS. There is
no backoff: under contention every round commits at least one writer.

Each call runs on its own session bound to the caller's engine, so a conflict
rollback never expires objects the caller is holding. The caller must not
hold an uncommitted write on the same database when calling in.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.core.config import get_settings
from shiftbook.core.logging import get_logger
from shiftbook.core.metrics import record_conflict

logger = get_logger(__name__)

UpdateFn = Callable[[Optional[int]], Optional[int]]


@dataclass(frozen=True)
class TransactionResult:
    committed: bool
    value: Optional[int]
    attempts: int


class TransactionAborted(Exception):
    """The transaction could not commit (retries exhausted or store error)."""


async def run_transaction(
    db: AsyncSession,
    model,
    row_id: int,
    field: str,
    update_fn: UpdateFn,
    *,
    max_attempts: Optional[int] = None,
) -> TransactionResult:
    """
    Atomically replace `model.field` of row `row_id` with update_fn(current).

    `current` is None when the row does not exist. Returning None from
    update_fn aborts the transaction without writing.
    """
    if max_attempts is None:
        max_attempts = get_settings().TRANSACTION_MAX_ATTEMPTS
    table = model.__tablename__
    column = getattr(model, field)

    async with AsyncSession(db.bind, expire_on_commit=False) as tx:
        for attempt in range(1, max_attempts + 1):
            inserting = False
            try:
                row = (
                    await tx.execute(select(column, model.version).where(model.id == row_id))
                ).one_or_none()
                current = row[0] if row is not None else None

                new_value = update_fn(current)
                if new_value is None:
                    await tx.rollback()
                    return TransactionResult(committed=False, value=current, attempts=attempt)

                if row is None:
                    inserting = True
                    await tx.execute(
                        insert(model).values({"id": row_id, field: new_value, "version": 1})
                    )
                else:
                    result = await tx.execute(
                        update(model)
                        .where(model.id == row_id, model.version == row.version)
                        .values({field: new_value, "version": model.version + 1})
                        .execution_options(synchronize_session=False)
                    )
                    if result.rowcount == 0:
                        await tx.rollback()
                        record_conflict(table)
                        logger.debug("transaction_retry", table=table, row_id=row_id, attempt=attempt)
                        await asyncio.sleep(0)
                        continue

                await tx.commit()
                return TransactionResult(committed=True, value=new_value, attempts=attempt)

            except IntegrityError as e:
                await tx.rollback()
                if not inserting:
                    # Constraint violation on an existing row.
                    logger.error("transaction_rejected", table=table, row_id=row_id, error=str(e))
                    raise TransactionAborted(f"{table}:{row_id} rejected by a constraint") from e
                # Another writer inserted the row first.
                record_conflict(table)
                logger.debug("transaction_retry", table=table, row_id=row_id, attempt=attempt)
                continue
            except SQLAlchemyError as e:
                await tx.rollback()
                logger.error("transaction_failed", table=table, row_id=row_id, error=str(e))
                raise TransactionAborted(f"{table}:{row_id} store error") from e

    logger.warning("transaction_exhausted", table=table, row_id=row_id, attempts=max_attempts)
    raise TransactionAborted(f"{table}:{row_id} did not commit after {max_attempts} attempts")
