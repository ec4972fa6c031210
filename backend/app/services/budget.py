"""Budget admission control over a sliding 24h window per platform.

spent(platform) = sum of budgets of active campaigns created in the last 24h.
A request is admitted when spent + reserved + requested <= ceiling.

can_admit() alone is check-then-act: two callers evaluated before either
registers can both pass. reserve()/release() close that gap inside one
process by debiting the window until the campaign is registered.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from app.config import settings
from app.schemas.campaign import Platform
from app.services.campaign_ledger import CampaignLedger

logger = logging.getLogger(__name__)

WINDOW = timedelta(hours=24)


def ceiling(platform: Platform) -> float:
    if Platform(platform) == Platform.GOOGLE:
        return settings.total_max_daily_budget_google
    return settings.total_max_daily_budget_meta


class BudgetAdmissionController:
    def __init__(self, ledger: CampaignLedger):
        self._ledger = ledger
        self._reservations: dict[str, tuple[Platform, float]] = {}

    def spent(self, platform: Platform, now: datetime | None = None) -> float:
        now = now or datetime.now(timezone.utc)
        window_start = now - WINDOW
        return sum(
            c.budget for c in self._ledger.iter_campaigns(Platform(platform))
            if c.is_active and c.created_at > window_start
        )

    def reserved(self, platform: Platform) -> float:
        return sum(amount for p, amount in self._reservations.values() if p == Platform(platform))

    def can_admit(self, platform: Platform, requested_budget: float, now: datetime | None = None) -> bool:
        platform = Platform(platform)
        total_spent = self.spent(platform, now) + self.reserved(platform)
        limit = ceiling(platform)
        if total_spent + requested_budget <= limit:
            return True
        logger.warning(
            "Budget ceiling reached for %s: spent %.2f, requested %.2f, limit %.2f",
            platform.value, total_spent, requested_budget, limit,
        )
        return False

    def reserve(self, platform: Platform, amount: float, now: datetime | None = None) -> str | None:
        """Provisionally debit the window; returns a reservation id or None."""
        platform = Platform(platform)
        if not self.can_admit(platform, amount, now):
            return None
        reservation_id = uuid.uuid4().hex
        self._reservations[reservation_id] = (platform, amount)
        return reservation_id

    def release(self, reservation_id: str | None) -> None:
        if reservation_id is not None:
            self._reservations.pop(reservation_id, None)
