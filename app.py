import logging
import signal
import sys
from functools import partial
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from api.routes import bp as api_bp
from config import Settings, get_settings
from services.market import fetch_gold_price
from services.scheduler import RefreshScheduler
from utils.cache import PriceCache
from utils.errors import InitializationError
from utils.log import configure_logging

logger = logging.getLogger(__name__)


def create_app(price_cache: PriceCache, settings: Optional[Settings] = None):
    settings = settings or get_settings()
    app = Flask(__name__)
    app.config['SETTINGS'] = settings
    app.extensions['price_cache'] = price_cache
    CORS(
        app,
        origins=settings.cors_origins,
        methods=['GET', 'POST', 'OPTIONS'],
        allow_headers=['Content-Type', 'Authorization', 'Accept'],
    )
    app.register_blueprint(api_bp)

    @app.before_request
    def log_request():
        logger.info(
            "%s %s user-agent=%s origin=%s",
            request.method, request.path,
            request.headers.get('User-Agent', 'N/A'),
            request.headers.get('Origin', 'N/A'),
        )

    # Return JSON for API errors so clients never see HTML
    @app.errorhandler(404)
    def handle_404(e):
        if request.path.startswith('/api/'):
            return jsonify(success=False, error="Not found"), 404
        return e, 404

    @app.errorhandler(405)
    def handle_405(e):
        if request.path.startswith('/api/'):
            return jsonify(success=False, error="Method not allowed"), 405
        return e, 405

    @app.errorhandler(500)
    def handle_500(e):
        logger.error("Unhandled error on %s", request.path, exc_info=getattr(e, 'original_exception', None))
        if request.path.startswith('/api/'):
            return jsonify(success=False, error="Internal server error"), 500
        return e, 500

    return app


def main():
    settings = get_settings()
    configure_logging(settings.log_level)

    price_cache = PriceCache(
        fetcher=partial(fetch_gold_price, settings.gold_symbol),
        symbol=settings.gold_symbol,
    )
    try:
        price_cache.initialize()
    except InitializationError:
        logger.exception("Failed to start server")
        sys.exit(1)

    scheduler = RefreshScheduler(price_cache, interval_minutes=settings.refresh_interval_minutes)
    scheduler.start()

    def _stop(signum, frame):
        logger.info("%s signal received: closing HTTP server", signal.Signals(signum).name)
        scheduler.shutdown()
        sys.exit(0)

    signal.signal(signal.SIGTERM, _stop)
    signal.signal(signal.SIGINT, _stop)

    app = create_app(price_cache, settings)
    logger.info("Gold price backend listening on %s:%s", settings.host, settings.port)
    app.run(host=settings.host, port=settings.port, use_reloader=False)


if __name__ == '__main__':
    main()
