"""GST and investment arithmetic for the calculator panels."""
import math

from gold_tracker import config
from gold_tracker.price_cache import PriceUnavailableError
from gold_tracker.utils import parse_positive_number, round_half_up

PURITY_FIELDS = {
    '24k': 'gold24K',
    '22k': 'gold22K',
    '18k': 'gold18K',
}
DEFAULT_PURITY = '22k'


class InvalidInputError(ValueError):
    """Calculator input is missing, non-numeric or not positive."""


def calculate_gst(gold_price, grams) -> dict:
    """
    Jewelry bill for `grams` at `gold_price` per gram.

    GST (3%) and making charges (2%) are both levied on the base price.
    """
    price = parse_positive_number(gold_price)
    weight = parse_positive_number(grams)
    if price is None or weight is None:
        raise InvalidInputError('Enter valid positive numbers')

    base_price = price * weight
    gst = base_price * config.GST_RATE
    making_charges = base_price * config.MAKING_CHARGES_RATE
    total_price = base_price + gst + making_charges
    if not math.isfinite(total_price):
        raise InvalidInputError('Enter valid positive numbers')

    return {
        'basePrice': round_half_up(base_price),
        'gst': round_half_up(gst),
        'makingCharges': round_half_up(making_charges),
        'totalPrice': round_half_up(total_price),
    }


def resolve_purity(purity) -> str:
    key = str(purity or '').strip().lower()
    return key if key in PURITY_FIELDS else DEFAULT_PURITY


def calculate_investment(budget, purity, prices) -> dict:
    """How many grams of `purity` gold `budget` rupees buys at current rates."""
    amount = parse_positive_number(budget)
    if amount is None:
        raise InvalidInputError('Enter valid budget')

    purity_key = resolve_purity(purity)
    price_per_gram = (prices or {}).get(PURITY_FIELDS[purity_key])
    if not price_per_gram:
        raise PriceUnavailableError('Wait for prices to load')

    return {
        'budget': amount,
        'purity': purity_key,
        'pricePerGram': price_per_gram,
        'grams': round_half_up(amount / price_per_gram, 2),
    }
