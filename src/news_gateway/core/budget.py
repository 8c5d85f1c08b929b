"""Daily call budget for the upstream news API.

One tracker is shared by every request in the process. The counter is
keyed by UTC calendar date and resets lazily: the first call observed on a
new date starts the count over before it is evaluated.
"""

import threading
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable

from ..logging_config import get_logger
from ..models.news import RateLimitStats


logger = get_logger("core.budget")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class BudgetDecision:
    permitted: bool
    remaining: int


class RateBudget:
    def __init__(self, daily_limit: int, clock: Callable[[], datetime] = _utc_now) -> None:
        if daily_limit < 0:
            raise ValueError("daily_limit must be >= 0")
        self.daily_limit = daily_limit
        self._clock = clock
        self._lock = threading.Lock()
        self._date = self._today()
        self._count = 0

    def _today(self) -> date:
        return self._clock().astimezone(timezone.utc).date()

    def _roll_over(self) -> None:
        today = self._today()
        if today != self._date:
            logger.info("rate_budget_reset", previous_date=self._date.isoformat(), used=self._count)
            self._date = today
            self._count = 0

    def _remaining(self) -> int:
        return max(0, self.daily_limit - self._count)

    def try_consume(self) -> BudgetDecision:
        with self._lock:
            self._roll_over()
            if self._count + 1 > self.daily_limit:
                return BudgetDecision(permitted=False, remaining=self._remaining())
            self._count += 1
            return BudgetDecision(permitted=True, remaining=self._remaining())

    def stats(self) -> RateLimitStats:
        with self._lock:
            self._roll_over()
            return RateLimitStats(
                daily_count=self._count,
                remaining=self._remaining(),
                daily_limit=self.daily_limit,
                budget_date=self._date,
            )
