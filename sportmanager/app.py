import logging
import os

import redis
from flask import Flask, request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from .config import config
from .errors import RosterError
from .models import db
from .roster_manager import RosterManager
from .roster_store import MemoryRosterStore
from .sql_store import SqlRosterStore

logger = logging.getLogger(__name__)


def create_app(config_name: str = None, overrides: dict = None) -> Flask:
    """Application factory for the match roster service."""
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])
    if overrides:
        app.config.update(overrides)

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)

    backend = app.config['ROSTER_BACKEND']
    if backend == 'sql':
        store = SqlRosterStore()
        with app.app_context():
            db.create_all()
    elif backend == 'memory':
        store = MemoryRosterStore()
    else:
        raise ValueError(f"Unknown ROSTER_BACKEND: {backend}")

    redis_client = None
    if app.config.get('REDIS_URL'):
        redis_client = redis.from_url(app.config['REDIS_URL'], decode_responses=True)

    # Store services on app for access in routes
    app.roster = RosterManager(
        store=store,
        redis_client=redis_client,
        events_channel=app.config['EVENTS_CHANNEL'],
        default_venue=app.config['DEFAULT_VENUE_NAME'],
        default_min_players=app.config['DEFAULT_MIN_PLAYERS'],
        default_max_players=app.config['DEFAULT_MAX_PLAYERS']
    )

    register_hooks(app)
    register_api_routes(app)

    logger.info(f"Roster service ready ({config_name}, {backend} backend)")
    return app


def configure_logging(app: Flask):
    level = app.config.get('LOG_LEVEL', 'INFO')
    logging.getLogger('sportmanager').setLevel(level)
    app.logger.setLevel(level)


def _payload() -> dict:
    """JSON body, or query args for clients that cannot send a DELETE body."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.args.to_dict()


def _first(data: dict, *keys):
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def register_hooks(app: Flask):

    @app.errorhandler(RosterError)
    def handle_roster_error(error: RosterError):
        logger.debug(f"{request.method} {request.path} -> {error.code}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.before_request
    def answer_preflight():
        if request.method == 'OPTIONS':
            return '', 204

    @app.after_request
    def add_cors_headers(response):
        response.headers['Access-Control-Allow-Origin'] = app.config['CORS_ALLOW_ORIGIN']
        response.headers['Access-Control-Allow-Methods'] = 'GET, POST, PUT, DELETE, OPTIONS'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type, Authorization'
        return response


def register_api_routes(app: Flask):
    """Register API routes."""

    # ==================== Matches ====================

    @app.route('/api/matches', methods=['GET'])
    def api_list_matches():
        """List matches ordered by date; ?active=true|false filters."""
        active = request.args.get('active')
        if active is not None:
            active = active.lower() in ('1', 'true', 'yes')

        matches = app.roster.list_matches(active=active)
        return jsonify([m.to_dict() for m in matches])

    @app.route('/api/matches', methods=['POST'])
    def api_create_match():
        """Create a new match."""
        data = request.get_json(silent=True) or {}

        match = app.roster.create_match(
            scheduled_at=_first(data, 'scheduledAt', 'date'),
            venue_name=data.get('venueName'),
            min_players=data.get('minPlayers'),
            max_players=data.get('maxPlayers'),
            location=data.get('location') or '',
            location_link=_first(data, 'locationLink', 'mapLink') or ''
        )
        return jsonify(match.to_dict()), 201

    @app.route('/api/matches/<match_id>', methods=['GET'])
    def api_get_match(match_id: str):
        return jsonify(app.roster.get_match(match_id).to_dict())

    @app.route('/api/matches/<match_id>', methods=['DELETE'])
    def api_delete_match(match_id: str):
        """Hard delete. Use /cancel for the reversible variant."""
        app.roster.delete_match(match_id)
        return jsonify({'message': 'Match deleted'})

    # ==================== Lifecycle ====================

    @app.route('/api/matches/<match_id>/cancel', methods=['POST'])
    def api_cancel_match(match_id: str):
        return jsonify(app.roster.cancel_match(match_id).to_dict())

    @app.route('/api/matches/<match_id>/restore', methods=['POST'])
    def api_restore_match(match_id: str):
        return jsonify(app.roster.restore_match(match_id).to_dict())

    # ==================== Roster ====================

    @app.route('/api/matches/<match_id>/join', methods=['POST'])
    def api_join_match(match_id: str):
        data = _payload()
        match = app.roster.join_match(
            match_id,
            _first(data, 'displayName', 'name'),
            _first(data, 'externalId', 'telegramId')
        )
        return jsonify(match.to_dict())

    @app.route('/api/matches/<match_id>/leave', methods=['DELETE'])
    def api_leave_match(match_id: str):
        data = _payload()
        match = app.roster.leave_match(
            match_id,
            _first(data, 'displayName', 'name'),
            _first(data, 'externalId', 'telegramId')
        )
        return jsonify(match.to_dict())

    @app.route('/api/players', methods=['GET'])
    def api_list_players():
        """Everyone who is currently on some roster."""
        return jsonify([p.to_dict() for p in app.roster.list_players()])

    # ==================== Health Check ====================

    @app.route('/health')
    def health_check():
        try:
            store_ok = app.roster.store.ping()
        except SQLAlchemyError as e:
            logger.error(f"Health check failed: {e}")
            store_ok = False

        if store_ok:
            return jsonify({'status': 'healthy'})
        return jsonify({'status': 'unavailable', 'reason': 'database connection error'}), 503
