"""
Pytest configuration and fixtures for roster service tests.
"""
import os
import sys
from datetime import datetime, timezone

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# Set testing environment before importing app
os.environ['FLASK_ENV'] = 'testing'

from sportmanager.app import create_app
from sportmanager.lifecycle import LifecycleController
from sportmanager.models import db
from sportmanager.roster_manager import RosterManager
from sportmanager.roster_store import MemoryRosterStore
from sportmanager.sql_store import SqlRosterStore


KICKOFF = datetime(2026, 11, 7, 18, 30, tzinfo=timezone.utc)


@pytest.fixture
def app():
    """Create application for testing (fresh in-memory database per test)."""
    app = create_app('testing')

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def memory_app():
    """Application running on the in-process store."""
    return create_app('testing', overrides={'ROSTER_BACKEND': 'memory'})


@pytest.fixture
def memory_client(memory_app):
    return memory_app.test_client()


@pytest.fixture
def lifecycle():
    return LifecycleController()


@pytest.fixture
def memory_store():
    return MemoryRosterStore()


@pytest.fixture
def sql_store(app):
    return SqlRosterStore()


@pytest.fixture(params=['memory', 'sql'])
def store(request):
    """Run a test against both store implementations."""
    if request.param == 'memory':
        return MemoryRosterStore()
    request.getfixturevalue('app')
    return SqlRosterStore()


@pytest.fixture
def manager(store):
    return RosterManager(store=store)


@pytest.fixture
def sample_match(manager):
    """Active match for 2 to 3 players."""
    return manager.create_match(
        scheduled_at=KICKOFF,
        venue_name='Riverside Park',
        min_players=2,
        max_players=3,
        location='North pitch',
        location_link='https://maps.example.com/riverside'
    )


@pytest.fixture
def mock_redis(mocker):
    """Mock Redis client."""
    client = mocker.MagicMock()
    client.publish = mocker.MagicMock(return_value=1)
    return client
