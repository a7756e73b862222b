# System settings
# All settings are read once at import time. A local `.env` file is loaded
# first so development machines don't need exported variables.
import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
	value = os.getenv(name)
	if value is None:
		return default
	return str(value).strip().lower() in ('1', 'true', 'yes', 'y', 'on')


def _env_int(name: str, default: int) -> int:
	value = os.getenv(name)
	if value is None:
		return default
	try:
		return int(str(value).strip())
	except (TypeError, ValueError):
		return default


def _env_float(name: str, default: float) -> float:
	value = os.getenv(name)
	if value is None:
		return default
	try:
		return float(str(value).strip())
	except (TypeError, ValueError):
		return default


# ╔════════════════════════════════════════════════════════════╗
# ║  Upstream (Gold-API.com)                                   ║
# ╚════════════════════════════════════════════════════════════╝
# The key is optional for the XAU endpoint. Never commit it; set GOLD_API_KEY.

GOLD_API_URL = os.getenv('GOLD_API_URL', 'https://api.gold-api.com/price/XAU').strip()
GOLD_API_KEY = os.getenv('GOLD_API_KEY', '').strip()
GOLD_API_TIMEOUT_SECONDS = _env_float('GOLD_API_TIMEOUT_SECONDS', default=10.0)


# ╔════════════════════════════════════════════════════════════╗
# ║  Conversion & Chennai premiums                             ║
# ╚════════════════════════════════════════════════════════════╝

TROY_OUNCE_GRAMS = 31.1035
USD_TO_INR = _env_float('USD_TO_INR', default=83.0)

PURITY_22K = 0.916
PURITY_18K = 0.75

# 24K: 14.3% | 22K: 14.5% | 18K: 16%
PREMIUM_24K = _env_float('PREMIUM_24K', default=1.143)
PREMIUM_22K = _env_float('PREMIUM_22K', default=1.145)
PREMIUM_18K = _env_float('PREMIUM_18K', default=1.16)

LOCATION = 'Chennai, Tamil Nadu'
PRICE_SOURCE = 'Gold-API.com with Chennai market adjustment'
UPDATE_SCHEDULE = '12:00 AM & 12:00 PM daily'
DISCLAIMER = (
	'Chennai gold prices update at 12:00 AM and 12:00 PM daily. '
	'These are indicative rates - verify with local jewelers.'
)


# ╔════════════════════════════════════════════════════════════╗
# ║  Cache                                                     ║
# ╚════════════════════════════════════════════════════════════╝
# 90 minutes keeps us at roughly 8 upstream calls per 12 hours.

CACHE_DURATION_MINUTES = _env_int('CACHE_DURATION_MINUTES', default=90)

# Minutes on either side of 00:00 / 12:00 during which the cache is bypassed.
UPDATE_WINDOW_MINUTES = _env_int('UPDATE_WINDOW_MINUTES', default=5)

PRICE_TIMEZONE = os.getenv('PRICE_TIMEZONE', 'Asia/Kolkata').strip() or 'Asia/Kolkata'


# ╔════════════════════════════════════════════════════════════╗
# ║  Calculators                                               ║
# ╚════════════════════════════════════════════════════════════╝

GST_RATE = _env_float('GST_RATE', default=0.03)
MAKING_CHARGES_RATE = _env_float('MAKING_CHARGES_RATE', default=0.02)


# ╔════════════════════════════════════════════════════════════╗
# ║  Server                                                    ║
# ╚════════════════════════════════════════════════════════════╝

PORT = _env_int('PORT', default=5000)
FLASK_DEBUG = _env_bool('FLASK_DEBUG', default=False)
CORS_ORIGINS = [
	origin.strip()
	for origin in os.getenv('CORS_ORIGINS', '*').split(',')
	if origin.strip()
] or ['*']
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').strip().upper() or 'INFO'
