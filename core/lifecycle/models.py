#!/usr/bin/env python3
"""
Lifecycle value types.

Quote is embedded as JSON inside a conversation message; the transition
table guards engagement status changes requested by callers.
"""

from datetime import datetime, timedelta
from typing import Dict, FrozenSet, Optional

from pydantic import BaseModel, Field

from core.utils import generate_id, utcnow
from database.models import EngagementStatus, QuoteStatus


class Quote(BaseModel):
    """Priced proposal sent inside a message of type 'quote'."""
    id: str = Field(default_factory=lambda: generate_id("quote"))
    service_name: str
    description: str = ""
    price: float = Field(ge=0)
    currency: str = "MXN"
    terms: str = ""
    valid_until: Optional[datetime] = None
    status: str = QuoteStatus.PENDING.value

    @classmethod
    def build(
        cls,
        service_name: str,
        price: float,
        description: str = "",
        currency: str = "MXN",
        terms: str = "",
        validity_days: int = 7,
        created_at: Optional[datetime] = None
    ) -> "Quote":
        created_at = created_at or utcnow()
        return cls(
            service_name=service_name,
            description=description,
            price=price,
            currency=currency,
            terms=terms,
            valid_until=created_at + timedelta(days=validity_days),
        )

    def to_record(self) -> Dict:
        return self.model_dump(mode="json")

    @property
    def is_pending(self) -> bool:
        return self.status == QuoteStatus.PENDING.value


# Allowed caller-requested engagement transitions. Completed and cancelled
# are terminal. Closing a conversation bypasses this table.
ENGAGEMENT_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    EngagementStatus.PENDING.value: frozenset({
        EngagementStatus.IN_PROGRESS.value,
        EngagementStatus.CANCELLED.value,
    }),
    EngagementStatus.IN_PROGRESS.value: frozenset({
        EngagementStatus.COMPLETED.value,
        EngagementStatus.CANCELLED.value,
    }),
    EngagementStatus.COMPLETED.value: frozenset(),
    EngagementStatus.CANCELLED.value: frozenset(),
}


def can_transition(current: str, requested: str) -> bool:
    return requested in ENGAGEMENT_TRANSITIONS.get(current, frozenset())
