"""
Pytest configuration and shared fixtures.

This module provides common fixtures for testing:
- Member, relation and patron snapshots
- Graph service with a mocked association API
- API clients
"""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before imports
os.environ["ASSOCIATION_API_URL"] = "http://association.test"
os.environ["GRAPH_REFRESH_MINUTES"] = "0"

from member_graph.config import Config
from member_graph.graph import Member, MemberRelation, Patron, RelationType, build_graph
from member_graph.services import ServiceContext, RelationGraphService


# =============================================================================
# Snapshot Fixtures
# =============================================================================

def make_member(email: str, status: str = "active", score: float = 50, **fields) -> Member:
    """Create a member whose names derive from its email."""
    name = email.split("@")[0]
    return Member(
        id=fields.pop("id", f"id-{name}"),
        email=email,
        first_name=name.capitalize(),
        last_name="Test",
        status=status,
        engagement_score=score,
        **fields
    )


def make_relation(source: str, target: str, relation_type: str = "team", relation_id: str = None) -> MemberRelation:
    """Create a relation between two member emails."""
    return MemberRelation(
        id=relation_id or f"rel-{source}-{target}",
        member_email=source,
        related_member_email=target,
        relation_type=RelationType(relation_type),
        created_at="2026-01-10T10:00:00Z"
    )


@pytest.fixture
def member_factory():
    """Factory for members (see make_member)."""
    return make_member


@pytest.fixture
def relation_factory():
    """Factory for relations (see make_relation)."""
    return make_relation


@pytest.fixture
def abc_members() -> list:
    """Three members: a(active,80), b(active,10), c(inactive,50)."""
    return [
        make_member("a@cjd.test", "active", 80),
        make_member("b@cjd.test", "active", 10),
        make_member("c@cjd.test", "inactive", 50),
    ]


@pytest.fixture
def abc_relations() -> list:
    """(a,b,sponsor) and (b,c,team)."""
    return [
        make_relation("a@cjd.test", "b@cjd.test", "sponsor"),
        make_relation("b@cjd.test", "c@cjd.test", "team"),
    ]


@pytest.fixture
def abc_graph(abc_members, abc_relations):
    """Graph built from the a/b/c scenario."""
    return build_graph(abc_members, abc_relations)


@pytest.fixture
def roster_members() -> list:
    """Members with facet attributes."""
    return [
        make_member(
            "alice@cjd.test", "active", 90,
            company="Acme", role="CEO", cjd_role="president",
            department="69", city="Lyon", postal_code="69001", sector="Industry"
        ),
        make_member(
            "bruno@cjd.test", "active", 40,
            company="Beta", role="CTO", cjd_role="treasurer",
            department="69", city="Villeurbanne", postal_code="69100", sector="Software"
        ),
        make_member(
            "chloe@cjd.test", "inactive", 20,
            company="Acme", role="CFO",
            department="38", city="Grenoble", postal_code="38000", sector="Industry"
        ),
        make_member(
            "david@cjd.test", "active", 65,
            company="Delta", role="CEO", cjd_role="member",
            department="01", city="Bourg-en-Bresse", postal_code="01000"
        ),
    ]


@pytest.fixture
def roster_relations() -> list:
    """Relations between roster members, plus one dangling relation."""
    return [
        make_relation("alice@cjd.test", "bruno@cjd.test", "sponsor"),
        make_relation("alice@cjd.test", "chloe@cjd.test", "team"),
        make_relation("bruno@cjd.test", "david@cjd.test", "custom"),
        make_relation("chloe@cjd.test", "ghost@cjd.test", "team"),
    ]


@pytest.fixture
def patrons() -> list:
    """Patrons: one referred by alice, one without referrer."""
    return [
        Patron(
            id="p1",
            email="mecene@corp.test",
            first_name="Marc",
            last_name="Mecene",
            status="active",
            company="Corp",
            city="Lyon",
            referrer_id="id-alice"
        ),
        Patron(
            id="p2",
            email="prospect@corp.test",
            first_name="Paula",
            last_name="Prospect",
            status="prospect",
            company="Acme"
        ),
    ]


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def test_config() -> Config:
    """Configuration loaded from the test environment."""
    return Config()


@pytest.fixture
def mock_association_api(roster_members, roster_relations, patrons):
    """Association API double returning the roster snapshot."""
    api = MagicMock()
    api.get_members = MagicMock(return_value=roster_members)
    api.get_relations = MagicMock(return_value=roster_relations)
    api.get_patrons = MagicMock(return_value=patrons)
    return api


@pytest.fixture
def graph_service(test_config, mock_association_api) -> RelationGraphService:
    """RelationGraphService loaded with the roster snapshot."""
    context = ServiceContext(config=test_config, api=mock_association_api)
    service = RelationGraphService(context)
    service.refresh()
    return service


@pytest.fixture
def mock_services(test_config, graph_service):
    """Create services container around the real graph service."""
    services = MagicMock()
    services.config = test_config
    services.context = graph_service.context
    services.graph = graph_service
    return services


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_app():
    """Create FastAPI app for testing."""
    from api.main import app
    return app


@pytest.fixture
def api_client(api_app) -> TestClient:
    """Create synchronous test client for API."""
    return TestClient(api_app)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "api: mark test as API endpoint test"
    )
