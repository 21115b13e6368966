"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    WAR ROOM — PROJECT KPI ENGINE
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Computes readiness KPIs for a project and collapses them into one status.

KPI DEFINITIONS
═══════════════

For a project with items I, N = |I|:

1. BOQ Completeness:
       BC = round(100 · |{i : boq_included(i)}| / N)

2. Item Approval Coverage:
       AC = round(100 · |{i : approval(i) = approved}| / N)

3. Procurement Readiness:
       PR = round(100 · |{i : purchased(i)}| / N)

4. Delivery Risk Indicator (lower is better):
       DR = round(100 · |{i : delivery(i) < now ∧ ¬received(i)}| / N)

5. Installation Readiness:
       IR = round(100 · |{i : installed(i)}| / N)

N = 0 gives 0 for every KPI. round() is half-up on whole percentages.

OVERALL STATUS
──────────────

       avg = (BC + AC + PR + (100 − DR) + IR) / 5

       avg ≥ 80 → SAFE,  avg ≥ 50 → AT_RISK,  else UNSAFE

The same thresholds classify single KPIs; inverse metrics are flipped
(100 − value) first.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, Iterable, Union

from .item_model import ApprovalStatus, ProjectItem, StatusLevel

logger = logging.getLogger(__name__)


SAFE_THRESHOLD = 80
AT_RISK_THRESHOLD = 50


class Direction(str, Enum):
    """Whether a higher metric value is better (NORMAL) or worse (INVERSE)."""
    NORMAL = "normal"
    INVERSE = "inverse"


# ════════════════════════════════════════════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ════════════════════════════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProjectKPIs:
    """
    The five readiness KPIs of a project, whole percentages in [0, 100].
    """
    boq_completeness: int = 0
    item_approval_coverage: int = 0
    procurement_readiness: int = 0
    delivery_risk_indicator: int = 0
    installation_readiness: int = 0

    def average_score(self) -> float:
        """Unweighted mean with delivery risk inverted."""
        return (
            self.boq_completeness
            + self.item_approval_coverage
            + self.procurement_readiness
            + (100 - self.delivery_risk_indicator)
            + self.installation_readiness
        ) / 5

    def metric_statuses(self) -> Dict[str, StatusLevel]:
        """Indicator status of each KPI on its own."""
        return {
            'boq_completeness': classify_metric_status(self.boq_completeness),
            'item_approval_coverage': classify_metric_status(self.item_approval_coverage),
            'procurement_readiness': classify_metric_status(self.procurement_readiness),
            'delivery_risk_indicator': classify_metric_status(
                self.delivery_risk_indicator, Direction.INVERSE
            ),
            'installation_readiness': classify_metric_status(self.installation_readiness),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'boq_completeness': self.boq_completeness,
            'item_approval_coverage': self.item_approval_coverage,
            'procurement_readiness': self.procurement_readiness,
            'delivery_risk_indicator': self.delivery_risk_indicator,
            'installation_readiness': self.installation_readiness,
        }


# ════════════════════════════════════════════════════════════════════════════════════════════════════
# THRESHOLDS
# ════════════════════════════════════════════════════════════════════════════════════════════════════

def _threshold(score: float) -> StatusLevel:
    if score >= SAFE_THRESHOLD:
        return StatusLevel.SAFE
    if score >= AT_RISK_THRESHOLD:
        return StatusLevel.AT_RISK
    return StatusLevel.UNSAFE


def classify_metric_status(
    value: float,
    direction: Direction = Direction.NORMAL,
) -> StatusLevel:
    """
    Classify a single percentage metric.

    Args:
        value: Percentage in [0, 100]
        direction: INVERSE for metrics where lower is better (risk)
    """
    effective = 100 - value if direction == Direction.INVERSE else value
    return _threshold(effective)


def resolve_overall_status(kpis: ProjectKPIs) -> StatusLevel:
    """Collapse the five KPIs into the project's overall status."""
    return _threshold(kpis.average_score())


# ════════════════════════════════════════════════════════════════════════════════════════════════════
# KPI COMPUTATION
# ════════════════════════════════════════════════════════════════════════════════════════════════════

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for value ≥ 0."""
    return int(math.floor(value + 0.5))


def percentage(count: int, total: int) -> int:
    """Whole percentage of count over total; 0 when total is 0."""
    if total <= 0:
        return 0
    return round_half_up(count * 100 / total)


def _as_datetime(value: Union[date, datetime], reference: datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min, tzinfo=reference.tzinfo)


def is_delivery_overdue(item: ProjectItem, now: Union[date, datetime]) -> bool:
    """Promised delivery date has passed and the item has not been received."""
    if item.delivery_date is None or item.received:
        return False
    if not isinstance(now, datetime):
        now = datetime.combine(now, time.min)
    return _as_datetime(item.delivery_date, now) < now


def compute_project_kpis(
    items: Iterable[ProjectItem],
    now: Union[date, datetime],
) -> ProjectKPIs:
    """
    Compute the KPIs of one project in a single pass over its items.

    Args:
        items: The project's items (any order)
        now: Reference time for the delivery-risk KPI

    Returns:
        ProjectKPIs
    """
    total = 0
    boq_included = 0
    approved = 0
    purchased = 0
    delivery_at_risk = 0
    installed = 0

    for item in items:
        total += 1
        if item.boq_included:
            boq_included += 1
        if item.approval_status == ApprovalStatus.APPROVED:
            approved += 1
        if item.purchased:
            purchased += 1
        if is_delivery_overdue(item, now):
            delivery_at_risk += 1
        if item.installed:
            installed += 1

    if total == 0:
        return ProjectKPIs()

    return ProjectKPIs(
        boq_completeness=percentage(boq_included, total),
        item_approval_coverage=percentage(approved, total),
        procurement_readiness=percentage(purchased, total),
        delivery_risk_indicator=percentage(delivery_at_risk, total),
        installation_readiness=percentage(installed, total),
    )
