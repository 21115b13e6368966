"""
Common fixtures for the War Room tests.
"""
import pytest
from datetime import date, datetime
from fastapi.testclient import TestClient

from warroom.api import app
from warroom.feature_flags import FeatureFlags
from warroom.projects.store import ProjectStore, get_project_store
from warroom.status_engine import ApprovalStatus, BOQCategory, ProjectItem


NOW = datetime(2024, 6, 15, 12, 0, 0)


def make_item(item_id="item-1", **overrides) -> ProjectItem:
    """Build an item with neutral defaults (not in BOQ, pending, nothing done)."""
    fields = dict(
        id=item_id,
        project_id="proj-1",
        category=BOQCategory.JOINERY,
        area="Kitchen",
        description=f"Item {item_id}",
    )
    fields.update(overrides)
    return ProjectItem(**fields)


@pytest.fixture(autouse=True)
def clean_feature_flags(monkeypatch):
    """Every test starts from default flags, whatever the environment holds."""
    for name in (
        "WARROOM_ITEM_STATUS_POLICY",
        "WARROOM_SEED_DEMO_DATA",
        "WARROOM_STORE_PATH",
        "WARROOM_LOG_LEVEL",
        "WARROOM_HOST",
        "WARROOM_PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    FeatureFlags.reset()
    yield
    FeatureFlags.reset()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sample_items():
    """
    Four items in the lifecycle:
    installed, approved-not-purchased, pending, rejected.
    """
    return [
        make_item(
            "item-1",
            boq_included=True,
            approval_status=ApprovalStatus.APPROVED,
            purchased=True,
            received=True,
            installed=True,
            delivery_date=date(2024, 5, 1),
        ),
        make_item(
            "item-2",
            category=BOQCategory.LIGHTING,
            area="Living Room",
            boq_included=True,
            approval_status=ApprovalStatus.APPROVED,
        ),
        make_item(
            "item-3",
            category=BOQCategory.LIGHTING,
            area="Living Room",
            boq_included=True,
            approval_status=ApprovalStatus.PENDING,
            delivery_date=date(2024, 6, 1),
        ),
        make_item(
            "item-4",
            category=BOQCategory.APPLIANCES,
            approval_status=ApprovalStatus.REJECTED,
        ),
    ]


@pytest.fixture
def store():
    """Empty in-memory project store."""
    return ProjectStore()


@pytest.fixture
def project_payload():
    return {
        "id": "proj-test",
        "code": "TS-001",
        "name": "Test Villa",
        "client": "Test Client",
        "start_date": "2024-05-01",
        "target_completion_date": "2024-09-30",
        "items": [
            {
                "id": "it-1",
                "category": "joinery",
                "area": "Kitchen",
                "description": "Kitchen Cabinets",
                "boq_included": True,
                "approval_status": "approved",
                "purchased": True,
                "received": True,
                "installed": True,
                "delivery_date": "2024-06-01",
                "production_due_date": "2024-05-20",
                "received_date": "2024-06-01",
                "installation_start_date": "2024-06-05",
                "installed_date": "2024-06-08",
            },
            {
                "id": "it-2",
                "category": "lighting",
                "area": "Living Room",
                "description": "Pendant Light",
                "boq_included": True,
                "approval_status": "pending",
                "delivery_date": "2024-06-01",
            },
        ],
    }


@pytest.fixture
def test_client(store):
    """FastAPI test client bound to an isolated store."""
    app.dependency_overrides[get_project_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def item_factory():
    """Factory for items with neutral defaults."""
    return make_item
