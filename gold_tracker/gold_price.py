"""
Gold-API.com client and Chennai price arithmetic.

Spot gold comes in USD per troy ounce. Chennai retail rates are that price per
gram in INR, scaled by purity and by a per-karat local premium. Chennai
jewelers revise their boards at 12:00 AM and 12:00 PM, so the helpers here
also know where the next revision falls.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

import requests

from gold_tracker import config
from gold_tracker.utils import round_half_up, utc_now_iso

LOGGER = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60
NOON_MINUTE = 12 * 60


class GoldApiError(Exception):
    """The upstream answered, but not with a usable price."""


def local_now() -> datetime:
    """Current wall-clock time in the market's timezone."""
    return datetime.now(ZoneInfo(config.PRICE_TIMEZONE))


def fetch_spot_price() -> tuple[float, Optional[str]]:
    """
    Fetch the XAU spot price from Gold-API.com.

    Returns (price per ounce in USD, upstream `updatedAt` or None).
    Raises requests.RequestException on transport/HTTP errors and
    GoldApiError when the payload has no usable price.
    """
    headers = {'Content-Type': 'application/json'}
    if config.GOLD_API_KEY:
        headers['x-access-token'] = config.GOLD_API_KEY

    LOGGER.info('Fetching from Gold-API.com...')
    response = requests.get(
        config.GOLD_API_URL,
        headers=headers,
        timeout=config.GOLD_API_TIMEOUT_SECONDS,
    )
    response.raise_for_status()

    try:
        data = response.json()
    except ValueError as e:
        raise GoldApiError(f'Gold-API.com returned invalid JSON: {e}') from e

    if not isinstance(data, dict):
        raise GoldApiError("'price' not found in Gold-API.com response")
    price = data.get('price')
    value = None
    if isinstance(price, (int, float)) and not isinstance(price, bool):
        try:
            value = float(price)
        except OverflowError:
            value = None
    # json accepts NaN/Infinity literals
    if value is None or not math.isfinite(value) or value <= 0:
        raise GoldApiError(f"'price' missing or invalid in Gold-API.com response: {price!r}")

    return value, data.get('updatedAt') or None


def is_near_price_update_time(now: datetime) -> bool:
    """True within the update window around midnight or noon (minute resolution)."""
    window = config.UPDATE_WINDOW_MINUTES
    minute_of_day = now.hour * 60 + now.minute
    for boundary in (0, NOON_MINUTE, MINUTES_PER_DAY):
        if boundary - window <= minute_of_day <= boundary + window:
            return True
    return False


def time_until_next_update(now: datetime) -> tuple[int, str]:
    """Seconds until the next Chennai board revision and a 'Xh Ym' label."""
    if now.hour < 12:
        next_update = now.replace(hour=12, minute=0, second=0, microsecond=0)
    else:
        next_update = (now + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)

    seconds = int((next_update - now).total_seconds())
    hours, remainder = divmod(seconds, 3600)
    return seconds, f'{hours}h {remainder // 60}m'


def build_price_quote(price_per_ounce_usd: float, updated_at: Optional[str], now: datetime) -> dict:
    """Per-gram Chennai rates for 24K/22K/18K plus display metadata."""
    price_per_gram_usd = price_per_ounce_usd / config.TROY_OUNCE_GRAMS
    price_per_gram_inr = price_per_gram_usd * config.USD_TO_INR

    _, next_update = time_until_next_update(now)
    return {
        'gold24K': round_half_up(price_per_gram_inr * config.PREMIUM_24K),
        'gold22K': round_half_up(price_per_gram_inr * config.PURITY_22K * config.PREMIUM_22K),
        'gold18K': round_half_up(price_per_gram_inr * config.PURITY_18K * config.PREMIUM_18K),
        'location': config.LOCATION,
        'source': config.PRICE_SOURCE,
        'disclaimer': config.DISCLAIMER,
        'internationalPriceUSD': round_half_up(price_per_ounce_usd, 2),
        'nextChennaiUpdate': next_update,
        'lastUpdated': updated_at or utc_now_iso(now),
        'cachedAt': utc_now_iso(now),
    }
