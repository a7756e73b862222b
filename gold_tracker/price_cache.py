"""
In-process price cache and the refresh policy around it.

One entry, kept for CACHE_DURATION_MINUTES, except inside the window around the
12:00 AM / 12:00 PM Chennai revisions where every request goes upstream. When
the upstream fails, whatever is cached (however old) is served with a warning.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

import requests

from gold_tracker import config
from gold_tracker.gold_price import (
    GoldApiError,
    build_price_quote,
    fetch_spot_price,
    is_near_price_update_time,
    local_now,
    time_until_next_update,
)
from gold_tracker.utils import round_half_up

LOGGER = logging.getLogger(__name__)

STALE_WARNING = 'Using cached data (API error)'


class PriceUnavailableError(Exception):
    """No fresh price could be fetched and nothing is cached."""


@dataclass(frozen=True)
class CacheEntry:
    data: dict
    fetched_at: datetime

    def age_minutes(self, now: datetime) -> int:
        return round_half_up(max((now - self.fetched_at).total_seconds(), 0) / 60)


class PriceCache:
    """Single-slot cache shared by the request threads."""

    def __init__(self, duration_minutes: Optional[int] = None):
        self.duration_minutes = (
            config.CACHE_DURATION_MINUTES if duration_minutes is None else duration_minutes
        )
        self._entry: Optional[CacheEntry] = None
        self._lock = threading.Lock()

    def snapshot(self) -> Optional[CacheEntry]:
        with self._lock:
            return self._entry

    def store(self, data: dict, now: datetime) -> CacheEntry:
        entry = CacheEntry(data=dict(data), fetched_at=now)
        with self._lock:
            self._entry = entry
        return entry

    def is_valid(self, now: datetime) -> bool:
        return self.entry_is_valid(self.snapshot(), now)

    def entry_is_valid(self, entry: Optional[CacheEntry], now: datetime) -> bool:
        if entry is None:
            return False
        if is_near_price_update_time(now):
            LOGGER.info('Near Chennai update time - forcing refresh')
            return False
        return (now - entry.fetched_at).total_seconds() < self.duration_minutes * 60


class GoldPriceService:
    """Serves Chennai prices from the cache, the upstream, or stale cache."""

    def __init__(
        self,
        fetcher: Callable[[], tuple] = fetch_spot_price,
        clock: Callable[[], datetime] = local_now,
        cache: Optional[PriceCache] = None,
    ):
        self.fetcher = fetcher
        self.clock = clock
        self.cache = cache if cache is not None else PriceCache()
        # One upstream call at a time.
        self._refresh_lock = threading.Lock()

    def get_prices(self, force: bool = False) -> dict:
        now = self.clock()
        entry = self.cache.snapshot()
        if not force and self.cache.entry_is_valid(entry, now):
            LOGGER.info('Serving from cache')
            return self._cached_payload(entry, now)

        with self._refresh_lock:
            now = self.clock()
            entry = self.cache.snapshot()
            # Another thread may have refreshed while we waited.
            if not force and self.cache.entry_is_valid(entry, now):
                return self._cached_payload(entry, now)

            try:
                price_usd, updated_at = self.fetcher()
            except (requests.RequestException, GoldApiError) as e:
                LOGGER.error('Gold price fetch failed: %s', e)
                if entry is None:
                    raise PriceUnavailableError('Failed to fetch prices') from e
                LOGGER.warning('Serving stale cache (%s minutes old)', entry.age_minutes(now))
                payload = self._cached_payload(entry, now)
                payload['warning'] = STALE_WARNING
                return payload

            prices = build_price_quote(price_usd, updated_at, now)
            self.cache.store(prices, now)

        LOGGER.info('Updated! Next Chennai update: %s', prices['nextChennaiUpdate'])
        LOGGER.info(
            '24K: ₹%s | 22K: ₹%s | 18K: ₹%s',
            prices['gold24K'], prices['gold22K'], prices['gold18K'],
        )
        return {**prices, 'fromCache': False}

    def status(self) -> dict:
        now = self.clock()
        return {
            'cacheStatus': 'Valid' if self.cache.is_valid(now) else 'Expired',
            'nextChennaiUpdate': time_until_next_update(now)[1],
        }

    def _cached_payload(self, entry: CacheEntry, now: datetime) -> dict:
        payload = dict(entry.data)
        payload['nextChennaiUpdate'] = time_until_next_update(now)[1]
        payload['fromCache'] = True
        payload['cacheAge'] = f'{entry.age_minutes(now)} minutes'
        return payload
