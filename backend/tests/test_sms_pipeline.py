"""Tests for the SMS-to-expense pipeline."""

import asyncio
import threading
import time
from collections import Counter
from datetime import date
from decimal import Decimal

import pytest

from gestor_financeiro.ai.extractor import ExtractionResult, parse_json_payload
from gestor_financeiro.exceptions import ExtractionError
from gestor_financeiro.models import Expense
from gestor_financeiro.schemas.category import CategoryResponse, SubcategoryResponse
from gestor_financeiro.schemas.expense import ExpenseRead
from gestor_financeiro.schemas.sms import SmsMessage, SmsStatus
from gestor_financeiro.services.gateway import ExpenseGateway, ReadResult
from gestor_financeiro.services.settings_service import SmsFilterConfig
from gestor_financeiro.services.sms_service import SmsPipeline, run_sms_batch

from conftest import StubExtractor

SMS_TEXT = "Compra aprovada no cartao final 1234 de R$ 157,32 em SUPERMERCADO BOM PRECO 10/05 14:32"


def make_pipeline(session_factory, extractor, sender_number="12345", **kwargs):
    return SmsPipeline(session_factory, extractor, SmsFilterConfig(sender_number), **kwargs)


class FakeSession:
    """Session stand-in for gateways that never touch the database."""

    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class InMemoryGateway:
    """Gateway over a fixed taxonomy that tracks who is using each session."""

    categories = [CategoryResponse(id="1", name="Alimentação")]
    subcategories = [SubcategoryResponse(id="10", name="Supermercado", category_id="1")]

    lock = threading.Lock()
    active = Counter()
    max_active = 0
    sessions = []

    def __init__(self, db):
        self.db = db
        with self.lock:
            InMemoryGateway.sessions.append(db)

    @staticmethod
    def reset():
        InMemoryGateway.active = Counter()
        InMemoryGateway.max_active = 0
        InMemoryGateway.sessions = []

    def _enter(self):
        with self.lock:
            InMemoryGateway.active[id(self.db)] += 1
            InMemoryGateway.max_active = max(InMemoryGateway.max_active, InMemoryGateway.active[id(self.db)])

    def _leave(self):
        with self.lock:
            InMemoryGateway.active[id(self.db)] -= 1

    def list_categories(self):
        return ReadResult(self.categories)

    def list_subcategories(self):
        return ReadResult(self.subcategories)

    def create_expense(self, data, index=None):
        return ExpenseRead(id="saved", amount=data.amount, location=data.location, month=data.date.month)


class SlowReadGateway(InMemoryGateway):
    delay = 0.5

    def list_subcategories(self):
        self._enter()
        try:
            time.sleep(self.delay)
            return super().list_subcategories()
        finally:
            self._leave()


class SlowWriteGateway(InMemoryGateway):
    delay = 0.3

    def create_expense(self, data, index=None):
        time.sleep(self.delay)
        return super().create_expense(data, index)


class SlowExtractor(StubExtractor):

    async def extract_expense(self, sms_text, subcategories, categories):
        await asyncio.sleep(0.5)
        return await super().extract_expense(sms_text, subcategories, categories)


@pytest.fixture
def in_memory_payload():
    return {"estabelecimento": "Padaria", "valor": "12,00", "id_subcategoria": "10"}


class TestSmsPipeline:
    """Test processing of single messages."""

    def test_persists_expense(self, db_session, session_factory, stub_extractor):
        """A matching sender and a valid extraction produce one approved expense."""
        pipeline = make_pipeline(session_factory, stub_extractor)

        outcome = asyncio.run(pipeline.process_message("12345", SMS_TEXT))

        assert outcome.status == SmsStatus.persisted
        saved = ExpenseGateway(db_session).get_expense(outcome.expense_id)
        assert saved.amount == Decimal("157.32")
        assert saved.category_name == "Alimentação"
        assert saved.subcategory_name == "Supermercado"
        assert saved.establishment == "Supermercado Bom Preço"
        assert saved.status == "approved"
        assert saved.month == 5
        assert saved.date == date(2024, 5, 10)
        assert saved.time == "14:32"
        assert saved.card_last_digits == 1234
        assert saved.detail == SMS_TEXT

    def test_sender_formatting_ignored(self, session_factory, stub_extractor):
        """Only digits are compared when filtering senders."""
        pipeline = make_pipeline(session_factory, stub_extractor, sender_number="+55 (11) 2345")
        outcome = asyncio.run(pipeline.process_message("551 12345", SMS_TEXT))
        assert outcome.status == SmsStatus.persisted

    def test_other_sender_ignored(self, db_session, session_factory, stub_extractor):
        """Messages from other senders never reach the LLM."""
        pipeline = make_pipeline(session_factory, stub_extractor)

        outcome = asyncio.run(pipeline.process_message("99999", SMS_TEXT))

        assert outcome.status == SmsStatus.ignored_sender
        assert stub_extractor.calls == []
        assert db_session.query(Expense).count() == 0

    def test_no_sender_configured_accepts_all(self, session_factory, stub_extractor):
        pipeline = make_pipeline(session_factory, stub_extractor, sender_number=None)
        outcome = asyncio.run(pipeline.process_message("99999", SMS_TEXT))
        assert outcome.status == SmsStatus.persisted

    def test_unknown_subcategory_dropped(self, db_session, session_factory, extraction_payload):
        """An id the model made up is rejected, never replaced."""
        extractor = StubExtractor({**extraction_payload, "id_subcategoria": "does-not-exist"})
        pipeline = make_pipeline(session_factory, extractor)

        outcome = asyncio.run(pipeline.process_message("12345", SMS_TEXT))

        assert outcome.status == SmsStatus.unknown_subcategory
        assert db_session.query(Expense).count() == 0

    def test_extraction_failure(self, db_session, session_factory, sample_subcategory):
        extractor = StubExtractor(error=ExtractionError("No JSON object in model response"))
        pipeline = make_pipeline(session_factory, extractor)

        outcome = asyncio.run(pipeline.process_message("12345", SMS_TEXT))

        assert outcome.status == SmsStatus.extraction_failed
        assert db_session.query(Expense).count() == 0

    def test_empty_taxonomy(self, session_factory):
        """Without subcategories there is nothing to classify against."""
        extractor = StubExtractor({"valor": "10", "id_subcategoria": "1"})
        pipeline = make_pipeline(session_factory, extractor)

        outcome = asyncio.run(pipeline.process_message("12345", SMS_TEXT))

        assert outcome.status == SmsStatus.no_taxonomy
        assert extractor.calls == []


class TestSmsTimeouts:
    """Test the bounds on store and LLM calls."""

    def test_llm_timeout(self, db_session, session_factory, extraction_payload):
        """A model that answers too late drops the message."""
        pipeline = make_pipeline(session_factory, SlowExtractor(extraction_payload), llm_timeout=0.05)

        outcome = asyncio.run(pipeline.process_message("12345", SMS_TEXT))

        assert outcome.status == SmsStatus.extraction_failed
        assert db_session.query(Expense).count() == 0

    def test_taxonomy_fetch_timeout(self, in_memory_payload):
        """A store that answers too late drops the message before the LLM is called."""
        SlowReadGateway.reset()
        extractor = StubExtractor(in_memory_payload)
        pipeline = make_pipeline(FakeSession, extractor, gateway_factory=SlowReadGateway, store_timeout=0.05)

        outcome = asyncio.run(pipeline.process_message("12345", SMS_TEXT))

        assert outcome.status == SmsStatus.no_taxonomy
        assert extractor.calls == []

    def test_timed_out_session_not_reused(self, in_memory_payload):
        """Each message gets its own session, even while an earlier fetch still runs."""
        SlowReadGateway.reset()
        pipeline = make_pipeline(
            FakeSession, StubExtractor(in_memory_payload),
            gateway_factory=SlowReadGateway, store_timeout=0.05
        )
        messages = [SmsMessage(sender="12345", body=SMS_TEXT) for _ in range(3)]

        outcomes = asyncio.run(pipeline.process_batch(messages))

        assert [o.status for o in outcomes] == [SmsStatus.no_taxonomy] * 3
        assert SlowReadGateway.max_active == 1
        assert len({id(s) for s in SlowReadGateway.sessions}) == 3
        assert all(s.closed for s in SlowReadGateway.sessions)

    def test_write_does_not_block_event_loop(self, in_memory_payload):
        """Other tasks keep running while an expense is being saved."""
        pipeline = make_pipeline(FakeSession, StubExtractor(in_memory_payload), gateway_factory=SlowWriteGateway)
        ticks = []

        async def ticker(stop):
            while not stop.is_set():
                ticks.append(1)
                await asyncio.sleep(0.02)

        async def run():
            stop = asyncio.Event()
            task = asyncio.create_task(ticker(stop))
            outcome = await pipeline.process_message("12345", SMS_TEXT)
            stop.set()
            await task
            return outcome

        outcome = asyncio.run(run())

        assert outcome.status == SmsStatus.persisted
        assert len(ticks) >= 5

    def test_write_timeout(self, in_memory_payload):
        pipeline = make_pipeline(
            FakeSession, StubExtractor(in_memory_payload),
            gateway_factory=SlowWriteGateway, store_timeout=0.1
        )
        outcome = asyncio.run(pipeline.process_message("12345", SMS_TEXT))
        assert outcome.status == SmsStatus.store_failed


class TestSmsBatch:
    """Test batch processing."""

    def test_failure_does_not_stop_batch(self, session_factory, stub_extractor):
        pipeline = make_pipeline(session_factory, stub_extractor)
        messages = [
            SmsMessage(sender="99999", body="spam"),
            SmsMessage(sender="12345", body=SMS_TEXT),
        ]

        outcomes = asyncio.run(pipeline.process_batch(messages))

        assert [o.status for o in outcomes] == [SmsStatus.ignored_sender, SmsStatus.persisted]

    def test_run_batch_reads_sender_from_store(self, db_session, session_factory, sender_number, stub_extractor):
        """The background entry point uses the persisted sender number."""
        messages = [
            SmsMessage(sender="12345", body=SMS_TEXT),
            SmsMessage(sender="54321", body=SMS_TEXT),
        ]

        outcomes = asyncio.run(run_sms_batch(messages, session_factory, stub_extractor))

        assert [o.status for o in outcomes] == [SmsStatus.persisted, SmsStatus.ignored_sender]
        assert db_session.query(Expense).count() == 1


class TestExtractionParsing:
    """Test parsing of model responses."""

    def test_json_surrounded_by_prose(self):
        text = 'Claro! Aqui está:\n```json\n{"valor": "10,50", "id_subcategoria": 7}\n```\nAlgo mais?'
        assert parse_json_payload(text) == {"valor": "10,50", "id_subcategoria": 7}

    def test_no_json(self):
        with pytest.raises(ExtractionError):
            parse_json_payload("Não consegui identificar a compra.")

    def test_invalid_json(self):
        with pytest.raises(ExtractionError):
            parse_json_payload("{valor: 10}")

    def test_result_defaults(self):
        """Bad time and date fall back to midnight and today."""
        result = ExtractionResult.model_validate({
            "valor": "1.234,56",
            "id_subcategoria": 7,
            "hora": "25:99",
            "data_competencia": "ontem",
        })
        assert result.amount == Decimal("1234.56")
        assert result.subcategory_id == "7"
        assert result.time == "00:00"
        assert result.date == date.today()
