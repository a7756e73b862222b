import math
import re
import unicodedata
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, localcontext

# 1,234,567.89 or the Indian 12,34,567.89
GROUPED_NUMBER = re.compile(
    r'^(?:\d{1,3}(?:,\d{3})+|\d{1,2}(?:,\d{2})+,\d{3})(?:\.\d+)?$'
)

# Enough digits for any finite float rounded to a few decimals
DECIMAL_PRECISION = 400


# Convert any Unicode decimal digits (Devanagari, Tamil, Arabic-Indic...) to 0-9
def normalize_number(text):
    out = []
    for ch in text:
        if ch.isdigit() and not ch.isascii():
            try:
                out.append(str(unicodedata.digit(ch)))
                continue
            except ValueError:
                pass
        out.append(ch)
    text = ''.join(out).strip()
    # Only thousands separators are dropped; "1,5" stays invalid
    if GROUPED_NUMBER.match(text):
        text = text.replace(',', '')
    return text


def parse_positive_number(value):
    """Return `value` as a finite float > 0, or None when it isn't one.

    Accepts ints, floats and numeric strings (including localized digits and
    thousands separators). Booleans are rejected.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = normalize_number(value)
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def round_half_up(value, ndigits=0):
    """Round like the browser's Math.round / toFixed for positive amounts."""
    quantum = Decimal(1).scaleb(-ndigits)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    if ndigits == 0:
        return int(rounded)
    return float(rounded)


def utc_now_iso(now=None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')
