#!/usr/bin/env python3
"""
Unit tests for quotes: creation, lookup, response and engagement amount.
"""

import unittest
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError

from core.config_loader import LifecycleConfig
from core.exceptions import DuplicateQuoteException, InvalidStatusTransitionException
from core.lifecycle import LifecycleOrchestrator, Quote
from database.models import MessageType, QuoteStatus
from notification.events import EventType
from tests import create_test_repo


class TestQuoteModel(unittest.TestCase):

    def test_01_build_sets_validity_and_pending(self):
        created = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

        quote = Quote.build("Diseño de logotipo", 3500.0, created_at=created)

        self.assertEqual(quote.valid_until, created + timedelta(days=7))
        self.assertEqual(quote.status, QuoteStatus.PENDING.value)
        self.assertTrue(quote.is_pending)
        self.assertTrue(quote.id.startswith("quote_"))

    def test_02_ids_are_unique(self):
        self.assertNotEqual(Quote.build("a", 1.0).id, Quote.build("a", 1.0).id)

    def test_03_negative_price_rejected(self):
        with self.assertRaises(ValidationError):
            Quote.build("a", -1.0)

    def test_04_record_is_json_friendly(self):
        record = Quote.build("a", 10.0).to_record()
        self.assertIsInstance(record['valid_until'], str)
        self.assertEqual(record['status'], "pending")


class QuoteTestCase(unittest.IsolatedAsyncioTestCase):

    config = LifecycleConfig(latency_seconds=0)

    def setUp(self):
        self.repo = create_test_repo()
        self.orchestrator = LifecycleOrchestrator(self.repo, self.config)

    def tearDown(self):
        self.repo.db.close()

    async def open_with_quote(self, match_id="match_1", price=3500.0):
        conversation = await self.orchestrator.create_conversation("user_r", "user_p", match_id)
        message = await self.orchestrator.send_quote(
            conversation.id, "user_p", "Diseño de logotipo", price, description="Tres propuestas"
        )
        return conversation, message


class TestSendQuote(QuoteTestCase):

    async def test_01_quote_message(self):
        conversation, message = await self.open_with_quote()

        self.assertEqual(message.message_type, MessageType.QUOTE.value)
        self.assertEqual(message.quote['service_name'], "Diseño de logotipo")
        self.assertEqual(message.quote['price'], 3500.0)
        self.assertEqual(message.quote['currency'], "MXN")
        self.assertEqual(message.quote['status'], QuoteStatus.PENDING.value)
        self.assertEqual(message.content, "Quote for Diseño de logotipo: 3500.00 MXN")
        self.assertEqual(conversation.last_message_id, message.id)

    async def test_02_quote_dict_is_accepted(self):
        conversation = await self.orchestrator.create_conversation("user_r", "user_p", "match_1")

        message = await self.orchestrator.send_message(
            conversation.id, "user_p", "Propuesta",
            quote={"service_name": "SEO", "price": 1200.0},
        )

        self.assertEqual(message.message_type, MessageType.QUOTE.value)
        self.assertTrue(message.quote_id.startswith("quote_"))

    async def test_03_duplicate_quote_id_rejected_across_conversations(self):
        _, message = await self.open_with_quote("match_1")
        other = await self.orchestrator.create_conversation("user_r", "user_p", "match_2")
        reused = Quote(id=message.quote_id, service_name="SEO", price=10.0)

        with self.assertRaises(DuplicateQuoteException):
            await self.orchestrator.send_message(other.id, "user_p", "Copia", quote=reused)

        self.assertEqual(len(self.repo.messages.get_by_conversation_id(other.id)), 1)

    async def test_04_duplicate_quote_into_unknown_id_leaves_nothing_behind(self):
        conversation, message = await self.open_with_quote("match_1")
        reused = Quote(id=message.quote_id, service_name="SEO", price=10.0)

        with self.assertRaises(DuplicateQuoteException):
            await self.orchestrator.send_message("conversation_new", "user_p", "Copia", quote=reused)

        self.assertEqual([c.id for c in self.repo.conversations.get_all()], [conversation.id])
        self.assertEqual(len(self.repo.engagements.get_all()), 1)


class TestRespondToQuote(QuoteTestCase):

    async def test_01_accept_by_global_lookup(self):
        print("\n📊 UNIT Test 1: Accept quote")
        conversation, message = await self.open_with_quote()

        updated = await self.orchestrator.respond_to_quote(message.quote_id, QuoteStatus.ACCEPTED.value)

        self.assertEqual(updated.id, message.id)
        stored = self.repo.messages.get_by_conversation_id(conversation.id)[-1]
        self.assertEqual(stored.quote['status'], QuoteStatus.ACCEPTED.value)
        self.assertEqual(stored.quote['price'], 3500.0)
        print(f"  ✓ Quote {message.quote_id} accepted")

    async def test_02_scoped_lookup(self):
        conversation, message = await self.open_with_quote("match_1")
        other = await self.orchestrator.create_conversation("user_r", "user_p", "match_2")

        missed = await self.orchestrator.respond_to_quote(
            message.quote_id, QuoteStatus.REJECTED.value, conversation_id=other.id
        )
        self.assertIsNone(missed)
        self.assertEqual(message.quote['status'], QuoteStatus.PENDING.value)

        hit = await self.orchestrator.respond_to_quote(
            message.quote_id, QuoteStatus.REJECTED.value, conversation_id=conversation.id
        )
        self.assertEqual(hit.quote['status'], QuoteStatus.REJECTED.value)

    async def test_03_unknown_quote_is_noop(self):
        _, message = await self.open_with_quote()

        result = await self.orchestrator.respond_to_quote("quote_missing", QuoteStatus.ACCEPTED.value)

        self.assertIsNone(result)
        for stored in self.repo.messages.get_all():
            if stored.quote is not None:
                self.assertEqual(stored.quote['status'], QuoteStatus.PENDING.value)

    async def test_04_response_is_one_way(self):
        _, message = await self.open_with_quote()
        await self.orchestrator.respond_to_quote(message.quote_id, QuoteStatus.ACCEPTED.value)

        again = await self.orchestrator.respond_to_quote(message.quote_id, QuoteStatus.REJECTED.value)

        self.assertEqual(again.quote['status'], QuoteStatus.ACCEPTED.value)

    async def test_05_invalid_status_rejected(self):
        _, message = await self.open_with_quote()

        with self.assertRaises(InvalidStatusTransitionException):
            await self.orchestrator.respond_to_quote(message.quote_id, "maybe")
        with self.assertRaises(InvalidStatusTransitionException):
            await self.orchestrator.respond_to_quote(message.quote_id, QuoteStatus.PENDING.value)

    async def test_06_accept_leaves_engagement_amount_at_zero(self):
        conversation, message = await self.open_with_quote()

        await self.orchestrator.respond_to_quote(message.quote_id, QuoteStatus.ACCEPTED.value)

        engagement = self.repo.engagements.get_by_conversation_id(conversation.id)
        self.assertEqual(engagement.total_amount, 0.0)
        self.assertIsNone(engagement.quote_id)
        self.assertEqual(engagement.status, "pending")

    async def test_07_event_published(self):
        received = []
        self.orchestrator.events.subscribe(received.append)
        _, message = await self.open_with_quote()

        await self.orchestrator.respond_to_quote(message.quote_id, QuoteStatus.REJECTED.value)

        event = received[-1]
        self.assertEqual(event.event_type, EventType.QUOTE_RESPONDED)
        self.assertEqual(event.payload['status'], QuoteStatus.REJECTED.value)


class TestQuoteAmountSync(QuoteTestCase):
    """Opt-in: accepting a quote prices the engagement."""

    config = LifecycleConfig(latency_seconds=0, sync_engagement_amount_on_accept=True)

    async def test_01_accept_copies_price(self):
        conversation, message = await self.open_with_quote(price=4200.0)

        await self.orchestrator.respond_to_quote(message.quote_id, QuoteStatus.ACCEPTED.value)

        engagement = self.repo.engagements.get_by_conversation_id(conversation.id)
        self.assertEqual(engagement.total_amount, 4200.0)
        self.assertEqual(engagement.currency, "MXN")
        self.assertEqual(engagement.quote_id, message.quote_id)

    async def test_02_reject_does_not_touch_engagement(self):
        conversation, message = await self.open_with_quote(price=4200.0)

        await self.orchestrator.respond_to_quote(message.quote_id, QuoteStatus.REJECTED.value)

        engagement = self.repo.engagements.get_by_conversation_id(conversation.id)
        self.assertEqual(engagement.total_amount, 0.0)


if __name__ == '__main__':
    unittest.main()
