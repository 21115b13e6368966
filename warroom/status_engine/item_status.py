"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    WAR ROOM — ITEM STATUS CLASSIFIER
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Maps one BOQ item to a traffic-light StatusLevel.

DECISION LIST
═════════════

Rules are evaluated in order; the first match wins.

    1. approval = rejected                      → UNSAFE
       (BOQ_STRICT policy: also ¬boq_included   → UNSAFE)
    2. approval ∈ {pending, revision}           → AT_RISK
    3. approval = approved ∧ ¬purchased         → AT_RISK
    4. purchased ∧ ¬received                    → AT_RISK
    5. received ∧ ¬installed                    → AT_RISK
    6. received ∧ installed                     → SAFE
    7. otherwise                                → AT_RISK

The classifier is total: all 4 × 2 × 2 × 2 combinations of
(approval, purchased, received, installed) produce a status, including the
ones that break installed ⇒ received ⇒ purchased.

POLICIES
────────
APPROVAL_GATED  Only a rejected approval blocks an item (current behaviour).
BOQ_STRICT      An item missing from the contracted BOQ is blocked as well.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .item_model import (
    ApprovalStatus,
    BOQCategory,
    ProjectItem,
    StatusLevel,
    get_status_label,
)

logger = logging.getLogger(__name__)


class ItemStatusPolicy(str, Enum):
    """Which conditions make an item UNSAFE."""
    APPROVAL_GATED = "approval-gated"   # rejected only
    BOQ_STRICT = "boq-strict"           # rejected or not in BOQ


_AWAITING_APPROVAL = (ApprovalStatus.PENDING, ApprovalStatus.REVISION)


# ════════════════════════════════════════════════════════════════════════════════════════════════════
# CLASSIFIER
# ════════════════════════════════════════════════════════════════════════════════════════════════════

def classify_item_status(
    item: ProjectItem,
    policy: ItemStatusPolicy = ItemStatusPolicy.APPROVAL_GATED,
) -> StatusLevel:
    """
    Classify a single item.

    Args:
        item: The BOQ item
        policy: Which gating variant applies to rule 1

    Returns:
        StatusLevel for the item
    """
    if item.approval_status == ApprovalStatus.REJECTED:
        return StatusLevel.UNSAFE
    if policy == ItemStatusPolicy.BOQ_STRICT and not item.boq_included:
        return StatusLevel.UNSAFE

    if item.approval_status in _AWAITING_APPROVAL:
        return StatusLevel.AT_RISK

    if item.approval_status == ApprovalStatus.APPROVED and not item.purchased:
        return StatusLevel.AT_RISK

    if item.purchased and not item.received:
        return StatusLevel.AT_RISK

    if item.received and not item.installed:
        return StatusLevel.AT_RISK

    if item.received and item.installed:
        return StatusLevel.SAFE

    return StatusLevel.AT_RISK


# ════════════════════════════════════════════════════════════════════════════════════════════════════
# TRACKER HELPERS
# ════════════════════════════════════════════════════════════════════════════════════════════════════

def summarize_item_statuses(
    items: Iterable[ProjectItem],
    policy: ItemStatusPolicy = ItemStatusPolicy.APPROVAL_GATED,
) -> Dict[str, int]:
    """
    Count items per status.

    All three levels are always present so callers can render
    "N ready • N in progress • N blocked" without key checks.
    """
    counts = {level.value: 0 for level in StatusLevel}
    for item in items:
        counts[classify_item_status(item, policy).value] += 1
    return counts


def filter_items(
    items: Iterable[ProjectItem],
    category: Optional[BOQCategory] = None,
    status: Optional[StatusLevel] = None,
    area: Optional[str] = None,
    policy: ItemStatusPolicy = ItemStatusPolicy.APPROVAL_GATED,
) -> List[ProjectItem]:
    """Apply the tracker filters; None means no filtering on that axis."""
    result = []
    for item in items:
        if category is not None and item.category != category:
            continue
        if status is not None and classify_item_status(item, policy) != status:
            continue
        if area is not None and item.area != area:
            continue
        result.append(item)
    return result


def list_areas(items: Iterable[ProjectItem]) -> List[str]:
    """Distinct non-empty areas, sorted."""
    return sorted({item.area for item in items if item.area})


def build_item_tracker_table(
    items: List[ProjectItem],
    policy: ItemStatusPolicy = ItemStatusPolicy.APPROVAL_GATED,
) -> pd.DataFrame:
    """
    Create the item tracker table.

    Returns DataFrame suitable for display or export.
    """
    records = []
    for item in items:
        status = classify_item_status(item, policy)
        records.append({
            'Code': item.item_code or '-',
            'Description': item.description,
            'Area': item.area or '-',
            'Category': item.category_label,
            'In BOQ': item.boq_included,
            'Approval': item.approval_label,
            'Purchased': item.purchased,
            'Received': item.received,
            'Installed': item.installed,
            'Delivery': item.delivery_date.isoformat() if item.delivery_date else '-',
            'Status': get_status_label(status),
        })

    columns = [
        'Code', 'Description', 'Area', 'Category', 'In BOQ', 'Approval',
        'Purchased', 'Received', 'Installed', 'Delivery', 'Status',
    ]
    return pd.DataFrame(records, columns=columns)
