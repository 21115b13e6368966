"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    WAR ROOM — ITEM & PROJECT MODEL
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Data model for fit-out projects and their Bill of Quantities (BOQ) items.

DEFINITION
══════════

A PROJECT is a fit-out job (villa, penthouse, office floor) tracked against a
contracted BOQ. Each ITEM of the BOQ moves through:

    approval  →  purchase  →  delivery (received)  →  installation

The lifecycle flags are expected to be monotonic in practice

    installed ⇒ received ⇒ purchased

but the engines never rely on it: any combination is a valid input.

Records arriving from the store are plain dicts with snake_case keys and ISO
dates. `from_dict` is the validation boundary: unknown enum values or
malformed dates raise ValueError there, so the engines only ever see
well-typed items.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════════════════════════════════════════
# ENUMS
# ════════════════════════════════════════════════════════════════════════════════════════════════════

class StatusLevel(str, Enum):
    """Traffic-light status shared by items, KPIs and projects."""
    SAFE = "safe"
    AT_RISK = "at-risk"
    UNSAFE = "unsafe"


class ApprovalStatus(str, Enum):
    """Client / design approval state of an item."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REVISION = "revision"


class BOQCategory(str, Enum):
    """The fixed BOQ categories, in display order."""
    JOINERY = "joinery"
    LOOSE_FURNITURE = "loose-furniture"
    LIGHTING = "lighting"
    FINISHES = "finishes"
    FFE = "ffe"
    ACCESSORIES = "accessories"
    APPLIANCES = "appliances"


class BOQCoverage(str, Enum):
    """Coverage of a BOQ category in the contracted bill."""
    PRESENT = "present"
    MISSING = "missing"
    TO_CONFIRM = "to-confirm"


# ════════════════════════════════════════════════════════════════════════════════════════════════════
# DISPLAY TABLES
# ════════════════════════════════════════════════════════════════════════════════════════════════════

STATUS_DISPLAY: Dict[StatusLevel, Dict[str, str]] = {
    StatusLevel.SAFE: {"label": "Safe", "color": "green"},
    StatusLevel.AT_RISK: {"label": "At Risk", "color": "yellow"},
    StatusLevel.UNSAFE: {"label": "Unsafe", "color": "red"},
}

CATEGORY_LABELS: Dict[BOQCategory, str] = {
    BOQCategory.JOINERY: "Joinery",
    BOQCategory.LOOSE_FURNITURE: "Loose Furniture",
    BOQCategory.LIGHTING: "Lighting",
    BOQCategory.FINISHES: "Finishes",
    BOQCategory.FFE: "FF&E",
    BOQCategory.ACCESSORIES: "Accessories",
    BOQCategory.APPLIANCES: "Appliances",
}

APPROVAL_LABELS: Dict[ApprovalStatus, str] = {
    ApprovalStatus.PENDING: "Pending",
    ApprovalStatus.APPROVED: "Approved",
    ApprovalStatus.REJECTED: "Rejected",
    ApprovalStatus.REVISION: "In Revision",
}

COVERAGE_LABELS: Dict[BOQCoverage, str] = {
    BOQCoverage.PRESENT: "Present",
    BOQCoverage.MISSING: "Missing",
    BOQCoverage.TO_CONFIRM: "To Confirm",
}


def get_status_label(status: StatusLevel) -> str:
    return STATUS_DISPLAY[status]["label"]


def get_status_color(status: StatusLevel) -> str:
    return STATUS_DISPLAY[status]["color"]


def get_category_label(category: BOQCategory) -> str:
    return CATEGORY_LABELS[category]


def get_approval_label(status: ApprovalStatus) -> str:
    return APPROVAL_LABELS[status]


# ════════════════════════════════════════════════════════════════════════════════════════════════════
# PARSING HELPERS
# ════════════════════════════════════════════════════════════════════════════════════════════════════

def parse_date(value: Any) -> Optional[date]:
    """
    Parse an ISO date (or datetime) into a date.

    Accepts None/empty, date, datetime and ISO strings. Timestamps keep only
    their calendar day.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) > 10:
                return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
            return date.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid date: {value!r}")
    raise ValueError(f"Invalid date: {value!r}")


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"Invalid timestamp: {value!r}")


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


# ════════════════════════════════════════════════════════════════════════════════════════════════════
# ITEM DATA MODEL
# ════════════════════════════════════════════════════════════════════════════════════════════════════

@dataclass
class ProjectItem:
    """
    A single BOQ line of a project.

    Attributes:
        id: Unique identifier
        project_id: Owning project
        category: BOQ category (grouping only)
        area: Room / zone the item belongs to
        description: Free-text description
        boq_included: Whether the item is part of the contracted BOQ
        approval_status: Client/design approval state
        purchased, received, installed: Lifecycle flags
        delivery_date: Promised delivery date (drives delivery risk)

    Timeline fields (production_due_date ... installed_date) feed the Gantt
    view only.
    """
    id: str
    project_id: str = ""
    category: BOQCategory = BOQCategory.JOINERY
    area: str = ""
    description: str = ""
    boq_included: bool = False
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    purchased: bool = False
    received: bool = False
    installed: bool = False
    delivery_date: Optional[date] = None

    item_code: Optional[str] = None
    supplier: Optional[str] = None
    purchase_order_ref: Optional[str] = None
    quantity: Optional[float] = None
    unit_cost: Optional[float] = None
    notes: Optional[str] = None

    production_due_date: Optional[date] = None
    received_date: Optional[date] = None
    site_movement_date: Optional[date] = None
    installation_start_date: Optional[date] = None
    installed_date: Optional[date] = None

    created_at: Optional[datetime] = None

    @property
    def category_label(self) -> str:
        return get_category_label(self.category)

    @property
    def approval_label(self) -> str:
        return get_approval_label(self.approval_status)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            'id': self.id,
            'project_id': self.project_id,
            'category': self.category.value,
            'area': self.area,
            'description': self.description,
            'boq_included': self.boq_included,
            'approval_status': self.approval_status.value,
            'purchased': self.purchased,
            'received': self.received,
            'installed': self.installed,
            'delivery_date': _iso(self.delivery_date),
            'item_code': self.item_code,
            'supplier': self.supplier,
            'purchase_order_ref': self.purchase_order_ref,
            'quantity': self.quantity,
            'unit_cost': self.unit_cost,
            'notes': self.notes,
            'production_due_date': _iso(self.production_due_date),
            'received_date': _iso(self.received_date),
            'site_movement_date': _iso(self.site_movement_date),
            'installation_start_date': _iso(self.installation_start_date),
            'installed_date': _iso(self.installed_date),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectItem':
        """
        Deserialize from dictionary.

        Raises:
            ValueError: unknown category/approval value or malformed date
        """
        return cls(
            id=str(data['id']),
            project_id=str(data.get('project_id', '')),
            category=BOQCategory(data.get('category', BOQCategory.JOINERY.value)),
            area=data.get('area') or '',
            description=data.get('description') or '',
            boq_included=bool(data.get('boq_included', False)),
            approval_status=ApprovalStatus(data.get('approval_status', ApprovalStatus.PENDING.value)),
            purchased=bool(data.get('purchased', False)),
            received=bool(data.get('received', False)),
            installed=bool(data.get('installed', False)),
            delivery_date=parse_date(data.get('delivery_date')),
            item_code=data.get('item_code'),
            supplier=data.get('supplier'),
            purchase_order_ref=data.get('purchase_order_ref'),
            quantity=data.get('quantity'),
            unit_cost=data.get('unit_cost'),
            notes=data.get('notes'),
            production_due_date=parse_date(data.get('production_due_date')),
            received_date=parse_date(data.get('received_date')),
            site_movement_date=parse_date(data.get('site_movement_date')),
            installation_start_date=parse_date(data.get('installation_start_date')),
            installed_date=parse_date(data.get('installed_date')),
            created_at=parse_timestamp(data.get('created_at')),
        )


# ════════════════════════════════════════════════════════════════════════════════════════════════════
# PROJECT DATA MODEL
# ════════════════════════════════════════════════════════════════════════════════════════════════════

@dataclass
class Project:
    """
    A fit-out project and its BOQ items.

    `coverage_overrides` pins the coverage of individual categories when the
    team has confirmed it by hand; unpinned categories are derived from the
    items (see coverage.compute_boq_coverage).
    """
    id: str
    code: str
    name: str
    client: str = ""
    location: Optional[str] = None
    project_manager: Optional[str] = None
    start_date: Optional[date] = None
    target_completion_date: Optional[date] = None
    boq_master_ref: str = ""
    boq_version: str = ""
    coverage_overrides: Dict[BOQCategory, BOQCoverage] = field(default_factory=dict)
    items: List[ProjectItem] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def num_items(self) -> int:
        """Number of BOQ items in this project."""
        return len(self.items)

    def to_dict(self, include_items: bool = False) -> Dict[str, Any]:
        """Serialize to dictionary."""
        data = {
            'id': self.id,
            'code': self.code,
            'name': self.name,
            'client': self.client,
            'location': self.location,
            'project_manager': self.project_manager,
            'start_date': _iso(self.start_date),
            'target_completion_date': _iso(self.target_completion_date),
            'boq_master_ref': self.boq_master_ref,
            'boq_version': self.boq_version,
            'coverage_overrides': {k.value: v.value for k, v in self.coverage_overrides.items()},
            'num_items': self.num_items,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_items:
            data['items'] = [item.to_dict() for item in self.items]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Project':
        """
        Deserialize from dictionary.

        Raises:
            ValueError: malformed dates, categories or coverage values
        """
        overrides = {
            BOQCategory(k): BOQCoverage(v)
            for k, v in (data.get('coverage_overrides') or {}).items()
        }
        project_id = str(data['id'])
        items = []
        for raw in data.get('items', []):
            raw = dict(raw)
            raw.setdefault('project_id', project_id)
            items.append(ProjectItem.from_dict(raw))

        return cls(
            id=project_id,
            code=data.get('code', ''),
            name=data.get('name', ''),
            client=data.get('client') or '',
            location=data.get('location'),
            project_manager=data.get('project_manager'),
            start_date=parse_date(data.get('start_date')),
            target_completion_date=parse_date(data.get('target_completion_date')),
            boq_master_ref=data.get('boq_master_ref') or '',
            boq_version=data.get('boq_version') or '',
            coverage_overrides=overrides,
            items=items,
            created_at=parse_timestamp(data.get('created_at')),
            updated_at=parse_timestamp(data.get('updated_at')),
        )
