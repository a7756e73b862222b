import time
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from gold_tracker.app import create_app
from gold_tracker.price_cache import GoldPriceService, PriceCache

IST = ZoneInfo('Asia/Kolkata')

SPOT_USD = 2400.0
UPSTREAM_UPDATED_AT = '2026-10-19T03:00:00Z'


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class FakeFetcher:
    """Stands in for fetch_spot_price; set `error` to make it fail."""

    def __init__(self, price=SPOT_USD, updated_at=UPSTREAM_UPDATED_AT, delay=0):
        self.delay = delay
        self.price = price
        self.updated_at = updated_at
        self.error = None
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.price, self.updated_at


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 19, 9, 0, tzinfo=IST))


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def service(fetcher, clock):
    return GoldPriceService(fetcher=fetcher, clock=clock, cache=PriceCache(duration_minutes=90))


@pytest.fixture
def app(service):
    app = create_app(service=service)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
