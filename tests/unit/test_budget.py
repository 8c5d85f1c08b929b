import threading
from datetime import datetime, timedelta, timezone

from src.news_gateway.core.budget import RateBudget


class MutableClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def test_budget_exhausts_at_ceiling() -> None:
    budget = RateBudget(daily_limit=3)
    decisions = [budget.try_consume() for _ in range(3)]
    assert all(d.permitted for d in decisions)
    assert [d.remaining for d in decisions] == [2, 1, 0]

    denied = budget.try_consume()
    assert denied.permitted is False
    assert denied.remaining == 0
    assert budget.stats().daily_count == 3


def test_budget_resets_lazily_on_new_utc_day() -> None:
    clock = MutableClock(datetime(2024, 1, 15, 23, 59, tzinfo=timezone.utc))
    budget = RateBudget(daily_limit=2, clock=clock)
    budget.try_consume()
    budget.try_consume()
    assert budget.try_consume().permitted is False

    clock.now += timedelta(minutes=2)
    decision = budget.try_consume()
    assert decision.permitted is True
    assert decision.remaining == 1

    stats = budget.stats()
    assert stats.daily_count == 1
    assert stats.budget_date.isoformat() == "2024-01-16"


def test_day_boundary_uses_utc() -> None:
    # 23:30 at UTC-5 is already the next UTC day
    local = timezone(timedelta(hours=-5))
    clock = MutableClock(datetime(2024, 1, 15, 18, 0, tzinfo=local))
    budget = RateBudget(daily_limit=1, clock=clock)
    budget.try_consume()
    clock.now = datetime(2024, 1, 15, 23, 30, tzinfo=local)
    assert budget.try_consume().permitted is True


def test_stats_report_remaining_and_limit() -> None:
    budget = RateBudget(daily_limit=10)
    budget.try_consume()
    stats = budget.stats()
    assert stats.daily_count == 1
    assert stats.remaining == 9
    assert stats.daily_limit == 10
    assert stats.model_dump(by_alias=True)["dailyCount"] == 1


def test_concurrent_consumption_never_overshoots() -> None:
    budget = RateBudget(daily_limit=50)
    permitted = []
    lock = threading.Lock()
    start = threading.Barrier(20)

    def worker() -> None:
        start.wait()
        for _ in range(10):
            if budget.try_consume().permitted:
                with lock:
                    permitted.append(1)

    threads = [threading.Thread(target=worker) for _ in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(permitted) == 50
    assert budget.stats().remaining == 0
