"""
Analysis blueprint — account analysis, segment benchmarks, leaderboards.

Thin JSON glue over app.engine; all numbers come from the Analyzer.
"""
import logging

from flask import Blueprint, jsonify, request, current_app

from app.config import LEADERBOARD_DEFAULT_LIMIT, RANK_SCOPES
from app.engine.errors import ProfileNotFound, TransientStoreError
from app.engine.types import Segment
from app.extensions import get_analyzer

logger = logging.getLogger('routes.analysis')

bp = Blueprint('analysis', __name__)


def _error(message, status, exc=None):
    body = {'error': message}
    if exc is not None and current_app.debug:
        body['details'] = repr(exc)
    return jsonify(body), status


# ── API: Analyze ─────────────────────────────────────────────────────────────

@bp.route('/api/analyze', methods=['POST'])
def api_analyze():
    """Score an account already present in the corpus against its segment."""
    data = request.get_json(silent=True) or {}
    username = (data.get('username') or '').strip().lstrip('@')
    industry = (data.get('industry') or '').strip()

    if not username or not industry:
        return _error('Missing required fields: username, industry', 400)

    segment = Segment(
        industry=industry,
        city=data.get('locationCity') or None,
        state=data.get('locationState') or None,
        country=data.get('locationCountry') or None,
    )

    try:
        result = get_analyzer().analyze(username, segment)
    except ProfileNotFound as e:
        return _error(str(e), 404)
    except TransientStoreError as e:
        return _error('Benchmark data temporarily unavailable', 503, e)
    except Exception as e:
        logger.error("Analysis failed for @%s", username, exc_info=True)
        return _error('Failed to analyze profile', 500, e)

    return jsonify({'success': True, **result.to_dict()})


# ── API: Segment benchmarks ──────────────────────────────────────────────────

@bp.route('/api/benchmarks/<industry>/<location>')
def api_benchmarks(industry, location):
    """City-level baseline for an industry (state and country unknown)."""
    segment = Segment(industry=industry, city=location)
    try:
        baseline = get_analyzer().resolver.resolve(segment)
    except TransientStoreError as e:
        return _error('Failed to fetch benchmarks', 503, e)
    except Exception as e:
        logger.error("Benchmarks failed for %s/%s", industry, location, exc_info=True)
        return _error('Failed to fetch benchmarks', 500, e)

    return jsonify({'success': True, 'benchmarks': baseline.summary()})


# ── API: Leaderboard ─────────────────────────────────────────────────────────

@bp.route('/api/leaderboard/<industry>/<scope>/<location>')
def api_leaderboard(industry, scope, location):
    """Top accounts of one scope, ordered by followers then engagement."""
    if scope not in RANK_SCOPES:
        return _error(f"Unknown scope '{scope}' (expected one of {', '.join(RANK_SCOPES)})", 400)

    limit = request.args.get('limit', LEADERBOARD_DEFAULT_LIMIT, type=int)
    try:
        entries = get_analyzer().ranker.leaderboard(scope, industry, location, limit=limit)
    except TransientStoreError as e:
        return _error('Failed to fetch leaderboard', 503, e)
    except Exception as e:
        logger.error("Leaderboard failed for %s/%s/%s", industry, scope, location, exc_info=True)
        return _error('Failed to fetch leaderboard', 500, e)

    return jsonify({
        'success': True,
        'industry': industry,
        'scope': scope,
        'location': location,
        'entries': [
            {
                'position': entry.position,
                'username': entry.username,
                'followers': entry.followers,
                'engagementRate': entry.engagement_rate,
            }
            for entry in entries
        ],
    })


# ── Health ───────────────────────────────────────────────────────────────────

@bp.route('/health')
def health():
    return jsonify({'status': 'ok'})
