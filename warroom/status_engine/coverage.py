"""
BOQ coverage matrix.

One row per BOQ category, in the fixed category order:

    coverage = MISSING     no items in the category
             = PRESENT     every item is in the contracted BOQ
             = TO_CONFIRM  some items still outside the BOQ

A project can pin the coverage of a category by hand; pinned values win.
The approval rate is colour-coded with the shared KPI thresholds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .item_model import (
    ApprovalStatus,
    BOQCategory,
    BOQCoverage,
    ProjectItem,
    StatusLevel,
    get_category_label,
)
from .kpi_engine import classify_metric_status, percentage

logger = logging.getLogger(__name__)


@dataclass
class BOQCategoryStatus:
    """Coverage and approval of one BOQ category."""
    category: BOQCategory
    coverage: BOQCoverage
    item_count: int = 0
    approved_count: int = 0
    boq_included_count: int = 0

    @property
    def approval_rate(self) -> int:
        return percentage(self.approved_count, self.item_count)

    @property
    def approval_status(self) -> StatusLevel:
        return classify_metric_status(self.approval_rate)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'category': self.category.value,
            'label': get_category_label(self.category),
            'coverage': self.coverage.value,
            'item_count': self.item_count,
            'approved_count': self.approved_count,
            'boq_included_count': self.boq_included_count,
            'approval_rate': self.approval_rate,
            'approval_status': self.approval_status.value,
        }


def derive_coverage(item_count: int, boq_included_count: int) -> BOQCoverage:
    if item_count == 0:
        return BOQCoverage.MISSING
    if boq_included_count == item_count:
        return BOQCoverage.PRESENT
    return BOQCoverage.TO_CONFIRM


def compute_boq_coverage(
    items: Iterable[ProjectItem],
    overrides: Optional[Mapping[BOQCategory, BOQCoverage]] = None,
) -> List[BOQCategoryStatus]:
    """
    Build the coverage matrix for a project's items.

    Args:
        items: The project's items
        overrides: Hand-confirmed coverage per category

    Returns:
        One BOQCategoryStatus per category, in BOQCategory order
    """
    overrides = overrides or {}
    counts = {category: [0, 0, 0] for category in BOQCategory}

    for item in items:
        row = counts[item.category]
        row[0] += 1
        if item.approval_status == ApprovalStatus.APPROVED:
            row[1] += 1
        if item.boq_included:
            row[2] += 1

    matrix = []
    for category in BOQCategory:
        item_count, approved_count, included_count = counts[category]
        coverage = overrides.get(category) or derive_coverage(item_count, included_count)
        matrix.append(BOQCategoryStatus(
            category=category,
            coverage=coverage,
            item_count=item_count,
            approved_count=approved_count,
            boq_included_count=included_count,
        ))
    return matrix
