#!/usr/bin/env python3
"""
Unit tests for engagement transitions and rating eligibility.
"""

import unittest
from datetime import datetime, timezone

from core.config_loader import LifecycleConfig
from core.exceptions import (
    EngagementNotFoundException,
    InvalidRatingException,
    InvalidStatusTransitionException,
    RatingNotAllowedException,
)
from core.lifecycle import LifecycleOrchestrator, can_transition
from database.models import EngagementStatus, UserRole
from notification.events import EventBus, EventType
from tests import create_test_repo, make_user, make_provider

PENDING = EngagementStatus.PENDING.value
IN_PROGRESS = EngagementStatus.IN_PROGRESS.value
COMPLETED = EngagementStatus.COMPLETED.value
CANCELLED = EngagementStatus.CANCELLED.value


class TestTransitionTable(unittest.TestCase):

    def test_01_allowed(self):
        for current, requested in [
            (PENDING, IN_PROGRESS),
            (IN_PROGRESS, COMPLETED),
            (PENDING, CANCELLED),
            (IN_PROGRESS, CANCELLED),
        ]:
            self.assertTrue(can_transition(current, requested), (current, requested))

    def test_02_rejected(self):
        for current, requested in [
            (PENDING, COMPLETED),
            (IN_PROGRESS, PENDING),
            (COMPLETED, CANCELLED),
            (COMPLETED, IN_PROGRESS),
            (CANCELLED, PENDING),
            (PENDING, PENDING),
            ("unknown", IN_PROGRESS),
        ]:
            self.assertFalse(can_transition(current, requested), (current, requested))


class EngagementTestCase(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.repo = create_test_repo()
        self.events = EventBus()
        self.orchestrator = LifecycleOrchestrator(self.repo, LifecycleConfig(latency_seconds=0), self.events)

    def tearDown(self):
        self.repo.db.close()

    async def completed_engagement(self, requester_id="user_r", provider_id="user_p"):
        conversation = await self.orchestrator.create_conversation(requester_id, provider_id, "match_1")
        await self.orchestrator.close_conversation(conversation.id, "completed", "")
        return self.repo.engagements.get_by_conversation_id(conversation.id)


class TestEngagements(EngagementTestCase):

    async def test_01_create_engagement(self):
        engagement = await self.orchestrator.create_engagement(
            "conversation_x", "user_r", "user_p", quote_id="quote_1", total_amount=2500
        )

        self.assertTrue(engagement.id.startswith("engagement_"))
        self.assertEqual(engagement.status, PENDING)
        self.assertEqual(engagement.total_amount, 2500.0)
        self.assertEqual(engagement.currency, "MXN")
        self.assertEqual(engagement.quote_id, "quote_1")
        self.assertIsNotNone(engagement.start_date)
        self.assertIsNone(engagement.end_date)

    async def test_02_full_progression_with_caller_end_date(self):
        print("\n📊 UNIT Test 2: Engagement progression")
        engagement = await self.orchestrator.create_engagement("conversation_x", "user_r", "user_p")
        finished = datetime(2024, 5, 20, 18, 30, tzinfo=timezone.utc)

        await self.orchestrator.update_engagement_status(engagement.id, IN_PROGRESS)
        updated = await self.orchestrator.update_engagement_status(engagement.id, COMPLETED, end_date=finished)

        self.assertEqual(updated.status, COMPLETED)
        self.assertEqual(updated.end_date.replace(tzinfo=None), finished.replace(tzinfo=None))
        print(f"  ✓ {engagement.id}: pending -> in_progress -> completed")

    async def test_03_end_date_not_computed(self):
        engagement = await self.orchestrator.create_engagement("conversation_x", "user_r", "user_p")
        await self.orchestrator.update_engagement_status(engagement.id, IN_PROGRESS)

        updated = await self.orchestrator.update_engagement_status(engagement.id, COMPLETED)

        self.assertIsNone(updated.end_date)

    async def test_04_illegal_transition_is_typed_rejection(self):
        engagement = await self.orchestrator.create_engagement("conversation_x", "user_r", "user_p")

        with self.assertRaises(InvalidStatusTransitionException) as ctx:
            await self.orchestrator.update_engagement_status(engagement.id, COMPLETED)

        self.assertEqual(ctx.exception.current, PENDING)
        self.assertEqual(ctx.exception.requested, COMPLETED)
        self.assertEqual((await self.orchestrator.get_engagement(engagement.id)).status, PENDING)

    async def test_05_terminal_states(self):
        engagement = await self.orchestrator.create_engagement("conversation_x", "user_r", "user_p")
        await self.orchestrator.update_engagement_status(engagement.id, CANCELLED)

        with self.assertRaises(InvalidStatusTransitionException):
            await self.orchestrator.update_engagement_status(engagement.id, IN_PROGRESS)

    async def test_06_unknown_engagement(self):
        with self.assertRaises(EngagementNotFoundException):
            await self.orchestrator.update_engagement_status("engagement_missing", IN_PROGRESS)

    async def test_07_status_change_event(self):
        received = []
        self.events.subscribe(received.append)
        engagement = await self.orchestrator.create_engagement("conversation_x", "user_r", "user_p")

        await self.orchestrator.update_engagement_status(engagement.id, IN_PROGRESS)

        self.assertEqual(received[-1].event_type, EventType.ENGAGEMENT_STATUS_CHANGED)
        self.assertEqual(received[-1].payload['previous'], PENDING)
        self.assertEqual(received[-1].payload['status'], IN_PROGRESS)

    async def test_08_list_engagements_either_side(self):
        await self.orchestrator.create_engagement("conversation_a", "user_r", "user_p")
        await self.orchestrator.create_engagement("conversation_b", "user_other", "user_p")

        self.assertEqual(len(await self.orchestrator.list_engagements("user_p")), 2)
        self.assertEqual(len(await self.orchestrator.list_engagements("user_r")), 1)


class TestRatings(EngagementTestCase):

    async def test_01_rate_completed_engagement(self):
        engagement = await self.completed_engagement()

        rating = await self.orchestrator.create_rating("user_r", "user_p", engagement.id, 5, "Excelente")

        self.assertTrue(rating.id.startswith("rating_"))
        self.assertEqual(rating.score, 5)
        self.assertEqual(rating.comment, "Excelente")
        self.assertEqual(rating.engagement_id, engagement.id)

    async def test_02_engagement_must_be_completed(self):
        conversation = await self.orchestrator.create_conversation("user_r", "user_p", "match_1")
        engagement = self.repo.engagements.get_by_conversation_id(conversation.id)

        with self.assertRaises(RatingNotAllowedException):
            await self.orchestrator.create_rating("user_r", "user_p", engagement.id, 4)
        self.assertEqual(self.repo.ratings.get_all(), [])

    async def test_03_once_per_user_and_engagement(self):
        engagement = await self.completed_engagement()
        await self.orchestrator.create_rating("user_r", "user_p", engagement.id, 5)

        with self.assertRaises(RatingNotAllowedException):
            await self.orchestrator.create_rating("user_r", "user_p", engagement.id, 1)

        # the other party may still rate
        await self.orchestrator.create_rating("user_p", "user_r", engagement.id, 4)
        self.assertEqual(len(self.repo.ratings.get_all()), 2)

    async def test_04_score_must_be_integer_1_to_5(self):
        engagement = await self.completed_engagement()

        for score in (0, 6, -1, 4.5, "5", True, None):
            with self.assertRaises(InvalidRatingException, msg=repr(score)):
                await self.orchestrator.create_rating("user_r", "user_p", engagement.id, score)
        self.assertEqual(self.repo.ratings.get_all(), [])

    async def test_05_unknown_engagement(self):
        with self.assertRaises(RatingNotAllowedException):
            await self.orchestrator.create_rating("user_r", "user_p", "engagement_missing", 5)

    async def test_06_provider_aggregate_is_updated(self):
        provider_user = make_user(self.repo, name="Proveedor", role=UserRole.PROVIDER.value)
        profile = make_provider(self.repo, user_id=provider_user.id, rating=4.0, review_count=4)
        engagement = await self.completed_engagement(provider_id=provider_user.id)

        await self.orchestrator.create_rating("user_r", provider_user.id, engagement.id, 5)

        profile = self.repo.providers.get_by_id(profile.id)
        self.assertEqual(profile.review_count, 5)
        self.assertAlmostEqual(profile.rating, 4.2)

    async def test_07_rating_a_requester_leaves_profiles_alone(self):
        engagement = await self.completed_engagement()

        await self.orchestrator.create_rating("user_p", "user_r", engagement.id, 3)

        self.assertEqual(self.repo.providers.get_all(), [])

    async def test_08_list_ratings_given_and_received(self):
        engagement = await self.completed_engagement()
        await self.orchestrator.create_rating("user_r", "user_p", engagement.id, 5)
        await self.orchestrator.create_rating("user_p", "user_r", engagement.id, 4)

        self.assertEqual(len(await self.orchestrator.list_ratings("user_r")), 2)
        self.assertEqual(await self.orchestrator.list_ratings("user_nobody"), [])

    async def test_09_rating_event(self):
        received = []
        self.events.subscribe(received.append)
        engagement = await self.completed_engagement()

        rating = await self.orchestrator.create_rating("user_r", "user_p", engagement.id, 5)

        self.assertEqual(received[-1].event_type, EventType.RATING_CREATED)
        self.assertEqual(received[-1].payload['rating_id'], rating.id)


if __name__ == '__main__':
    unittest.main()
