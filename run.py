#!/usr/bin/env python3
"""
Entry point for the Sport Manager roster service.

Usage:
    python run.py

Environment Variables:
    FLASK_ENV: development or production (default: development)
    PORT: Port to run on (default: 8080)
    ROSTER_BACKEND: sql or memory (default: sql)
    DATABASE_URL: SQLAlchemy database URL (default: sqlite:///sportmanager.db)
    REDIS_URL: publish roster events to this Redis when set
    LOG_LEVEL: overrides the environment's default log level
"""
import logging
import os


def main():
    from sportmanager.app import create_app

    logging.basicConfig(format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    app = create_app()
    port = int(os.getenv('PORT', 8080))
    debug = os.getenv('FLASK_ENV', 'development') == 'development'

    app.logger.info(f"Starting roster service on port {port}...")
    # Matches are guarded by per-match locks, so threaded serving is safe
    app.run(host='0.0.0.0', port=port, debug=debug, threaded=True)


if __name__ == '__main__':
    main()
