"""
SMS-to-expense pipeline.

Each inbound message goes through: sender filter, taxonomy fetch, LLM
extraction, validation against the fetched subcategories, then persistence.
Every failure is terminal for that message only: it is logged, reported as
an SmsOutcome and the next message is processed. Nothing is retried.
"""

import asyncio
import logging
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

from sqlalchemy.orm import Session

from gestor_financeiro.ai.extractor import BaseExpenseExtractor, ExtractionResult
from gestor_financeiro.config import settings
from gestor_financeiro.exceptions import ExtractionError, GestorError, StoreError, ValidationFailure
from gestor_financeiro.schemas.category import CategoryResponse, SubcategoryResponse
from gestor_financeiro.schemas.expense import APPROVED_STATUS, ExpenseRead, ExpenseWrite
from gestor_financeiro.schemas.sms import SmsMessage, SmsOutcome, SmsStatus
from gestor_financeiro.services.gateway import ExpenseGateway, to_cents
from gestor_financeiro.services.settings_service import DatabaseSettingsStore, SmsFilterConfig
from gestor_financeiro.services.taxonomy_service import TaxonomyIndex, build_taxonomy_index

logger = logging.getLogger(__name__)

T = TypeVar("T")


def validate_extraction(
    result: ExtractionResult,
    subcategories: List[SubcategoryResponse]
) -> SubcategoryResponse:
    """Return the subcategory the model picked; never substitute another one."""
    for subcategory in subcategories:
        if subcategory.id == result.subcategory_id:
            return subcategory
    raise ValidationFailure(f"Subcategory id '{result.subcategory_id}' is not in the taxonomy")


def build_expense(result: ExtractionResult, sms_text: str) -> ExpenseWrite:
    return ExpenseWrite(
        amount=to_cents(result.amount),
        date=result.date,
        subcategory_id=result.subcategory_id,
        location=result.establishment,
        detail=sms_text,
        time=result.time,
        card=result.card,
        card_last_digits=result.card_last_digits,
        status=APPROVED_STATUS,
    )




def load_filter_config(session_factory: Callable[[], Session]) -> SmsFilterConfig:
    """Build the sender filter from persisted settings in a session of its own."""
    db = session_factory()
    try:
        return SmsFilterConfig.from_store(DatabaseSettingsStore(db))
    finally:
        db.close()


class SmsPipeline:
    """
    Turns bank SMS notifications into persisted expenses.

    Store access runs in worker threads, each opening and closing its own
    session from ``session_factory``. A step that times out keeps its session
    to itself, so the next message never shares it.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        extractor: BaseExpenseExtractor,
        filter_config: SmsFilterConfig,
        gateway_factory: Callable[[Session], ExpenseGateway] = ExpenseGateway,
        store_timeout: Optional[float] = None,
        llm_timeout: Optional[float] = None
    ):
        self.session_factory = session_factory
        self.extractor = extractor
        self.filter_config = filter_config
        self.gateway_factory = gateway_factory
        self.store_timeout = store_timeout or settings.store_timeout_seconds
        self.llm_timeout = llm_timeout or settings.llm_timeout_seconds

    def _with_gateway(self, work: Callable[[ExpenseGateway], T]) -> T:
        db = self.session_factory()
        try:
            return work(self.gateway_factory(db))
        finally:
            db.close()

    def _fetch_taxonomy(self) -> Tuple[List[CategoryResponse], List[SubcategoryResponse]]:
        def fetch(gateway: ExpenseGateway):
            categories = gateway.list_categories()
            if categories.failed:
                raise StoreError(f"Could not fetch categories: {categories.error}")
            subcategories = gateway.list_subcategories()
            if subcategories.failed:
                raise StoreError(f"Could not fetch subcategories: {subcategories.error}")
            return categories.items, subcategories.items

        return self._with_gateway(fetch)

    def _save_expense(self, data: ExpenseWrite, index: TaxonomyIndex) -> ExpenseRead:
        return self._with_gateway(lambda gateway: gateway.create_expense(data, index))

    async def _in_thread(self, func: Callable[..., T], *args) -> T:
        return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=self.store_timeout)

    async def process_message(self, sender: Optional[str], body: str) -> SmsOutcome:
        """Run one SMS through the pipeline. Never raises."""
        logger.debug(f"SMS received from {sender}: {body}")

        if not self.filter_config.accepts(sender):
            logger.info(
                f"SMS ignored: sender {sender} does not match configured number "
                f"{self.filter_config.sender_number}"
            )
            return SmsOutcome(status=SmsStatus.ignored_sender, sender=sender)

        try:
            categories, subcategories = await self._in_thread(self._fetch_taxonomy)
        except asyncio.TimeoutError:
            logger.warning(f"Taxonomy fetch timed out after {self.store_timeout}s; SMS dropped")
            return SmsOutcome(status=SmsStatus.no_taxonomy, sender=sender, detail="Taxonomy fetch timed out")
        except StoreError as e:
            logger.warning(f"{e}; SMS dropped")
            return SmsOutcome(status=SmsStatus.no_taxonomy, sender=sender, detail=str(e))

        if not subcategories:
            logger.warning("No subcategories in the store; SMS cannot be classified")
            return SmsOutcome(status=SmsStatus.no_taxonomy, sender=sender, detail="No subcategories")

        logger.debug(f"Found {len(subcategories)} subcategories and {len(categories)} categories")

        try:
            result = await asyncio.wait_for(
                self.extractor.extract_expense(body, subcategories, categories),
                timeout=self.llm_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"LLM extraction timed out after {self.llm_timeout}s; SMS dropped")
            return SmsOutcome(status=SmsStatus.extraction_failed, sender=sender, detail="LLM call timed out")
        except ExtractionError as e:
            logger.warning(f"Failed to extract expense from SMS: {e}")
            return SmsOutcome(status=SmsStatus.extraction_failed, sender=sender, detail=str(e))

        try:
            subcategory = validate_extraction(result, subcategories)
        except ValidationFailure as e:
            logger.warning(f"{e}; SMS dropped")
            return SmsOutcome(status=SmsStatus.unknown_subcategory, sender=sender, detail=str(e))

        index = build_taxonomy_index(categories, subcategories)
        try:
            saved = await self._in_thread(self._save_expense, build_expense(result, body), index)
        except asyncio.TimeoutError:
            # The insert may still commit in its worker thread
            logger.error(f"Saving expense from SMS timed out after {self.store_timeout}s")
            return SmsOutcome(status=SmsStatus.store_failed, sender=sender, detail="Store write timed out")
        except GestorError as e:
            logger.error(f"Failed to save expense from SMS: {e}")
            return SmsOutcome(status=SmsStatus.store_failed, sender=sender, detail=str(e))

        logger.info(
            f"Expense saved: {saved.location} - {saved.amount} - "
            f"{subcategory.name} ({saved.category_name}), month {saved.month}"
        )
        return SmsOutcome(status=SmsStatus.persisted, sender=sender, expense_id=saved.id)

    async def process_batch(self, messages: Iterable[SmsMessage]) -> List[SmsOutcome]:
        """Process a batch one message at a time; one failure never stops the rest."""
        outcomes = []
        for message in messages:
            try:
                outcome = await self.process_message(message.sender, message.body)
            except Exception as e:
                logger.exception(f"Unexpected error processing SMS from {message.sender}")
                outcome = SmsOutcome(status=SmsStatus.failed, sender=message.sender, detail=str(e))
            outcomes.append(outcome)
        return outcomes


async def run_sms_batch(
    messages: List[SmsMessage],
    session_factory: Callable[[], Session],
    extractor: BaseExpenseExtractor
) -> List[SmsOutcome]:
    """Background entry point for one SMS-received notification."""
    try:
        filter_config = await asyncio.wait_for(
            asyncio.to_thread(load_filter_config, session_factory),
            timeout=settings.store_timeout_seconds
        )
    except asyncio.TimeoutError:
        logger.error(f"Reading SMS settings timed out; dropping SMS batch of {len(messages)} message(s)")
        return []
    except StoreError as e:
        logger.error(f"{e}; dropping SMS batch of {len(messages)} message(s)")
        return []

    pipeline = SmsPipeline(session_factory, extractor, filter_config)
    outcomes = await pipeline.process_batch(messages)

    persisted = sum(1 for o in outcomes if o.status == SmsStatus.persisted)
    logger.info(f"SMS batch done: {persisted}/{len(outcomes)} message(s) saved as expenses")
    return outcomes
