from datetime import datetime, timezone
import logging

from flask import Blueprint, current_app, jsonify

from utils.cache import PriceCache
from utils.errors import UpstreamFetchError

logger = logging.getLogger(__name__)

bp = Blueprint('api', __name__)


def _cache() -> PriceCache:
    return current_app.extensions['price_cache']


def _settings():
    return current_app.config['SETTINGS']


def _iso(ts):
    return ts.isoformat() if ts else None


def _next_update_in(since):
    return max(0.0, _settings().refresh_interval_minutes - (since or 0))


@bp.get('/')
def index():
    return 'Welcome to the Gold Price Backend Service. Use /api/gold-price to get the current gold price.'


@bp.get('/health')
def health():
    return {
        'status': 'ok',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'service': _settings().service_name,
    }


@bp.get('/api/gold-price')
def gold_price():
    cache = _cache()
    # one view so data, lastUpdated and staleness come from the same fetch
    view = cache.view()
    if view is None:
        logger.info('No cached data available, service may be initializing')
        return jsonify(
            success=False,
            error='Gold price data not available',
            message='Service is initializing, please try again in a moment',
        ), 503

    since = view.minutes_since_update
    return jsonify(
        success=True,
        data=view.record.to_dict(),
        meta={
            'lastUpdated': _iso(view.last_updated),
            'timeSinceLastUpdate': since,
            'nextUpdateIn': _next_update_in(since),
            'source': _settings().price_source,
        },
    )


@bp.post('/api/gold-price/update')
def update_gold_price():
    logger.info('Manual update requested via API')
    try:
        record = _cache().refresh()
    except UpstreamFetchError as e:
        return jsonify(success=False, error='Failed to update gold price', message=str(e)), 502
    return jsonify(success=True, data=record.to_dict(), message='Gold price updated successfully')


@bp.get('/api/status')
def status():
    settings = _settings()
    cache = _cache()
    view = cache.view()
    since = view.minutes_since_update if view else None
    return jsonify(
        service=settings.service_name,
        version=settings.version,
        status='operational' if view else 'initializing',
        lastUpdated=_iso(view.last_updated) if view else None,
        timeSinceLastUpdate=since,
        nextUpdateIn=_next_update_in(since),
        cacheStatus='warm' if view else 'cold',
        currentPrice=view.record.price if view else None,
        refreshing=cache.refreshing,
    )
