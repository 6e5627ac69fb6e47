# app/workers/recurring_generator.py
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.clock import SystemClock, system_clock
from app.core.database import AsyncSessionLocal
from app.core.db_utils import with_db_retry
from app.crud.recurring_transaction import get_generatable_definitions, advance_watermark
from app.models.recurring_transaction import RecurringTransaction
from app.models.transaction import Transaction
from app.utils.recurrence import pending_occurrences

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    generated: int = 0
    skipped: int = 0
    failed: int = 0


class RecurringTransactionGenerator:
    """
    Materializes due occurrences of recurring transaction definitions.

    Each occurrence is one database transaction: the watermark is claimed
    with a conditional update, then the transaction row is inserted. If the
    claim matches no row another worker got there first and the definition
    is left alone for this tick.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker = AsyncSessionLocal,
        clock: SystemClock = system_clock,
    ):
        self.session_factory = session_factory
        self.clock = clock

    @with_db_retry()
    async def _load_definitions(self, today: date) -> List[RecurringTransaction]:
        async with self.session_factory() as db:
            return await get_generatable_definitions(today, db)

    async def run_once(self, should_stop: Callable[[], bool] = lambda: False) -> GenerationResult:
        today = self.clock.today()
        result = GenerationResult()

        definitions = await self._load_definitions(today)
        logger.info(f"🔁 Checking {len(definitions)} recurring definitions for {today}")

        for definition in definitions:
            if should_stop():
                logger.info("Stop requested, leaving remaining definitions for the next tick")
                break
            try:
                await self._generate(definition, today, result, should_stop)
            except Exception:
                result.failed += 1
                logger.exception(f"❌ Failed to generate transactions for recurring definition {definition.id}")

        logger.info(
            f"Recurring generation done: {result.generated} generated, "
            f"{result.skipped} skipped, {result.failed} failed"
        )
        return result

    async def _generate(
        self,
        definition: RecurringTransaction,
        today: date,
        result: GenerationResult,
        should_stop: Callable[[], bool],
    ) -> None:
        async with self.session_factory() as db:
            for occurrence in pending_occurrences(definition, today):
                if should_stop():
                    return
                try:
                    if not await advance_watermark(definition.id, occurrence, db):
                        await db.rollback()
                        result.skipped += 1
                        logger.info(f"Occurrence {occurrence} of {definition.id} already generated elsewhere")
                        return

                    db.add(Transaction(
                        user_id=definition.user_id,
                        type=definition.type,
                        amount=definition.amount,
                        description=definition.description,
                        category_id=definition.category_id,
                        transaction_date=occurrence,
                        recurring_transaction_id=definition.id,
                    ))
                    await db.commit()
                except IntegrityError as e:
                    await db.rollback()
                    result.skipped += 1
                    logger.warning(f"Transaction for {definition.id} on {occurrence} rejected by the database: {e.orig}")
                    return
                except Exception:
                    await db.rollback()
                    raise

                result.generated += 1
                logger.debug(f"Generated {definition.type} {definition.amount} for {occurrence} ({definition.id})")
