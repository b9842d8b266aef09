"""
Lifecycle Module - conversations, quotes, engagements and ratings.

- models.py: Quote value type and the engagement transition table
- orchestrator.py: LifecycleOrchestrator, the only writer of lifecycle records
"""
from core.lifecycle.models import Quote, ENGAGEMENT_TRANSITIONS, can_transition
from core.lifecycle.orchestrator import LifecycleOrchestrator

__all__ = [
    'Quote',
    'ENGAGEMENT_TRANSITIONS',
    'can_transition',
    'LifecycleOrchestrator',
]
