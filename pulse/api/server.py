from __future__ import annotations
import logging
from datetime import datetime, timezone

from flask import Flask, request, jsonify

from pulse.config.env import get_aggregator_config, get_api_config
from pulse.kpi import compute_kpis

logger = logging.getLogger(__name__)

app = Flask(__name__)

# Configuration helpers (overridable via app.config in tests)

def _get_api_key() -> str | None:
    if 'API_KEY' in app.config:
        return app.config.get('API_KEY')
    return get_api_config().api_key


def _get_aggregator_config():
    cfg = app.config.get('AGGREGATOR_CONFIG')
    return cfg if cfg is not None else get_aggregator_config()


def _check_api_key():
    api_key = _get_api_key()
    if api_key:
        provided = request.headers.get('X-API-Key')
        if provided != api_key:
            return jsonify({'error': 'unauthorized'}), 401
    return None


@app.before_request
def _auth():
    # health stays open for uptime probes
    if request.path.startswith('/api/') and request.path != '/api/health':
        unauthorized = _check_api_key()
        if unauthorized is not None:
            return unauthorized
    return None


@app.get('/api/health')
def health():
    return jsonify({
        'status': 'ok',
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })


@app.post('/api/kpis')
def post_kpis():
    payload = request.get_json(force=True, silent=True)
    if not isinstance(payload, dict):
        return jsonify({'error': 'request body must be a JSON object'}), 400
    quotes = payload.get('quotes', [])
    jobs = payload.get('jobs', [])
    # sampled once; the aggregator never reads the clock itself.
    # a supplied but invalid now (null, "", 0) is rejected, not replaced
    now = payload['now'] if 'now' in payload else datetime.now(timezone.utc)
    try:
        report = compute_kpis(quotes, jobs, now, config=_get_aggregator_config())
    except (TypeError, ValueError) as exc:
        logger.warning("Rejected KPI request: %s", exc)
        return jsonify({'error': str(exc)}), 400
    body = report.to_dict()
    body['lastUpdated'] = datetime.now(timezone.utc).isoformat()
    return jsonify(body)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    app.run(host='0.0.0.0', port=8000)
