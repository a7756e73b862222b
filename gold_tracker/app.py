# Flask app setup: CORS, price service, register routes, run server
import logging
import time

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from gold_tracker import config
from gold_tracker.price_cache import GoldPriceService
from gold_tracker.routes import api

LOGGER = logging.getLogger(__name__)


def create_app(service=None):
	"""Build the Flask app. Tests pass their own GoldPriceService."""
	app = Flask(__name__)
	app.config['STARTED_AT'] = time.monotonic()
	app.json.ensure_ascii = False
	app.json.sort_keys = False

	CORS(app, origins=config.CORS_ORIGINS)

	app.extensions['gold_price_service'] = service or GoldPriceService()
	app.register_blueprint(api, url_prefix='/api')

	@app.route('/')
	def index():
		status = app.extensions['gold_price_service'].status()
		return jsonify({
			'message': 'Gold Tracker API - Chennai Edition 🚀',
			'status': 'Active',
			'cacheStatus': status['cacheStatus'],
			'nextChennaiUpdate': status['nextChennaiUpdate'],
			'location': config.LOCATION,
			'updateSchedule': config.UPDATE_SCHEDULE,
		})

	@app.errorhandler(HTTPException)
	def handle_http_error(e):
		return jsonify({'error': e.name, 'message': e.description}), e.code

	return app


def configure_logging():
	logging.basicConfig(
		level=getattr(logging, config.LOG_LEVEL, logging.INFO),
		format='[%(levelname)s] %(message)s',
	)


def log_banner(service):
	status = service.status()
	LOGGER.info('=' * 60)
	LOGGER.info('🚀 Gold Tracker API - Chennai Edition')
	LOGGER.info('=' * 60)
	LOGGER.info('📍 http://localhost:%s', config.PORT)
	LOGGER.info(
		'🏙️  Chennai (24K: %.1f%% | 22K: %.1f%% | 18K: %.1f%% premium)',
		(config.PREMIUM_24K - 1) * 100,
		(config.PREMIUM_22K - 1) * 100,
		(config.PREMIUM_18K - 1) * 100,
	)
	LOGGER.info('⏰ Cache: %s min', config.CACHE_DURATION_MINUTES)
	LOGGER.info('🔄 Chennai updates: %s', config.UPDATE_SCHEDULE)
	LOGGER.info('⏳ Next update: %s', status['nextChennaiUpdate'])
	LOGGER.info('=' * 60)


def main():
	configure_logging()
	app = create_app()
	log_banner(app.extensions['gold_price_service'])
	app.run(host='0.0.0.0', port=config.PORT, debug=config.FLASK_DEBUG, threaded=True)


if __name__ == '__main__':
	main()
