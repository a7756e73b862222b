"""
API Routes for the gold price tracker (mounted under /api)
"""
import logging
import time

from flask import Blueprint, current_app, jsonify, request

from gold_tracker.calculators import InvalidInputError, calculate_gst, calculate_investment
from gold_tracker.price_cache import PriceUnavailableError
from gold_tracker.utils import parse_positive_number, round_half_up, utc_now_iso

LOGGER = logging.getLogger(__name__)

api = Blueprint('api', __name__)


def get_price_service():
    return current_app.extensions['gold_price_service']


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _prices_response(force=False):
    try:
        return jsonify(get_price_service().get_prices(force=force))
    except PriceUnavailableError as e:
        LOGGER.error('No gold price available: %s', e)
        return jsonify({
            'error': 'Failed to fetch prices',
            'message': 'Please try again',
        }), 500


@api.route('/gold-price', methods=['GET'])
def get_gold_price():
    """
    Chennai 24K/22K/18K rates per gram.

    Served from the cache while it is valid, otherwise fetched fresh. When the
    upstream fails, the last cached prices are returned with a warning.
    """
    return _prices_response()


# Manual refresh, bypasses the cache
@api.route('/gold-price/refresh', methods=['POST'])
def refresh_gold_price():
    return _prices_response(force=True)


@api.route('/calculate-gst', methods=['POST'])
def calculate_gst_route():
    data = _json_body()
    try:
        result = calculate_gst(data.get('goldPrice'), data.get('grams'))
    except InvalidInputError as e:
        return jsonify({'error': 'Invalid input', 'message': str(e)}), 400
    return jsonify(result)


@api.route('/calculate-investment', methods=['POST'])
def calculate_investment_route():
    """Grams of gold a budget buys at the current Chennai rate."""
    data = _json_body()
    try:
        prices = None
        if parse_positive_number(data.get('budget')) is not None:
            prices = get_price_service().get_prices()
        result = calculate_investment(data.get('budget'), data.get('purity'), prices)
    except InvalidInputError as e:
        return jsonify({'error': 'Invalid input', 'message': str(e)}), 400
    except PriceUnavailableError as e:
        LOGGER.error('Investment calculation without prices: %s', e)
        return jsonify({'error': 'Prices unavailable', 'message': 'Wait for prices to load'}), 503
    return jsonify(result)


@api.route('/health', methods=['GET'])
def health():
    started_at = current_app.config['STARTED_AT']
    return jsonify({
        'status': 'healthy',
        'uptime': round_half_up(time.monotonic() - started_at),
        'timestamp': utc_now_iso(),
    })
