import threading
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
import requests

from gold_tracker import gold_price
from gold_tracker.gold_price import GoldApiError, fetch_spot_price
from gold_tracker.price_cache import (
    STALE_WARNING,
    GoldPriceService,
    PriceCache,
    PriceUnavailableError,
)

IST = ZoneInfo('Asia/Kolkata')


def test_first_request_fetches_fresh(service, fetcher):
    prices = service.get_prices()

    assert fetcher.calls == 1
    assert prices['fromCache'] is False
    assert prices['gold24K'] == 7320
    assert 'cacheAge' not in prices
    assert 'warning' not in prices


def test_serves_from_cache_within_duration(service, fetcher, clock):
    service.get_prices()
    clock.advance(minutes=30)

    prices = service.get_prices()

    assert fetcher.calls == 1
    assert prices['fromCache'] is True
    assert prices['cacheAge'] == '30 minutes'
    assert prices['gold22K'] == 6717


def test_cached_payload_recomputes_next_update(service, clock):
    assert service.get_prices()['nextChennaiUpdate'] == '3h 0m'
    clock.advance(minutes=30)

    assert service.get_prices()['nextChennaiUpdate'] == '2h 30m'


def test_cache_expires_after_duration(service, fetcher, clock):
    service.get_prices()
    clock.advance(minutes=89)
    assert service.get_prices()['fromCache'] is True

    clock.advance(minutes=1)
    prices = service.get_prices()

    assert fetcher.calls == 2
    assert prices['fromCache'] is False


def test_update_window_forces_refresh(service, fetcher, clock):
    clock.now = datetime(2026, 10, 19, 11, 40, tzinfo=IST)
    service.get_prices()
    clock.advance(minutes=16)  # 11:56

    prices = service.get_prices()

    assert fetcher.calls == 2
    assert prices['fromCache'] is False


def test_force_bypasses_valid_cache(service, fetcher):
    service.get_prices()

    prices = service.get_prices(force=True)

    assert fetcher.calls == 2
    assert prices['fromCache'] is False


@pytest.mark.parametrize('error', [
    requests.ConnectionError('upstream down'),
    requests.Timeout('slow'),
    GoldApiError('no price'),
])
def test_upstream_error_serves_stale_cache(service, fetcher, clock, error):
    service.get_prices()
    clock.advance(minutes=120)
    fetcher.error = error

    prices = service.get_prices()

    assert fetcher.calls == 2
    assert prices['fromCache'] is True
    assert prices['warning'] == STALE_WARNING
    assert prices['cacheAge'] == '120 minutes'
    assert prices['gold18K'] == 5572


def test_upstream_error_without_cache_raises(service, fetcher):
    fetcher.error = requests.ConnectionError('upstream down')

    with pytest.raises(PriceUnavailableError):
        service.get_prices()


def test_failed_refresh_keeps_previous_entry(service, fetcher, clock):
    service.get_prices()
    first = service.cache.snapshot()
    clock.advance(minutes=100)
    fetcher.error = GoldApiError('no price')

    service.get_prices()

    assert service.cache.snapshot() is first


def test_status_reports_cache_validity(service, clock):
    assert service.status()['cacheStatus'] == 'Expired'

    service.get_prices()
    assert service.status() == {'cacheStatus': 'Valid', 'nextChennaiUpdate': '3h 0m'}

    clock.advance(minutes=95)
    assert service.status()['cacheStatus'] == 'Expired'


def test_price_cache_store_copies_data():
    cache = PriceCache(duration_minutes=10)
    now = datetime(2026, 10, 19, 9, 0, tzinfo=IST)
    data = {'gold24K': 7320}

    entry = cache.store(data, now)
    data['gold24K'] = 1

    assert cache.snapshot() is entry
    assert entry.data == {'gold24K': 7320}
    assert cache.is_valid(now)


def test_cache_entry_age_rounds_to_nearest_minute():
    cache = PriceCache()
    now = datetime(2026, 10, 19, 9, 0, tzinfo=IST)
    entry = cache.store({}, now)

    assert entry.age_minutes(now.replace(minute=2, second=29)) == 2
    assert entry.age_minutes(now.replace(minute=2, second=30)) == 3


def test_forced_refresh_failure_serves_valid_cache(service, fetcher, clock):
    service.get_prices()
    clock.advance(minutes=20)
    fetcher.error = requests.ConnectionError('upstream down')

    prices = service.get_prices(force=True)

    assert fetcher.calls == 2
    assert prices['fromCache'] is True
    assert prices['warning'] == STALE_WARNING
    assert prices['cacheAge'] == '20 minutes'


def test_failure_inside_update_window_serves_cache(service, fetcher, clock):
    clock.now = datetime(2026, 10, 19, 11, 50, tzinfo=IST)
    service.get_prices()
    clock.advance(minutes=7)  # 11:57, cache still young
    fetcher.error = GoldApiError('no price')

    prices = service.get_prices()

    assert prices['warning'] == STALE_WARNING
    assert prices['cacheAge'] == '7 minutes'


class _Response:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self._payload


def test_non_finite_upstream_price_serves_stale_cache(monkeypatch, clock):
    payloads = [{'price': 2400.0}, {'price': float('nan')}]
    monkeypatch.setattr(gold_price.requests, 'get', lambda *a, **kw: _Response(payloads.pop(0)))
    service = GoldPriceService(fetcher=fetch_spot_price, clock=clock, cache=PriceCache(duration_minutes=90))

    service.get_prices()
    clock.advance(minutes=100)
    prices = service.get_prices()

    assert prices['fromCache'] is True
    assert prices['warning'] == STALE_WARNING
    assert prices['gold24K'] == 7320


def test_concurrent_requests_share_one_fetch(service, fetcher):
    fetcher.delay = 0.2
    results = []

    def worker():
        results.append(service.get_prices())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert fetcher.calls == 1
    assert len(results) == 8
    assert sum(1 for r in results if r['fromCache'] is False) == 1
