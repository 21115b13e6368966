"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    WAR ROOM — PORTFOLIO OVERVIEW
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Aggregates every project into the war-room overview:

- per project: KPIs, overall status, item status counts
- portfolio: number of projects per overall status, mean of each KPI
- the worst projects by average score, for the "needs attention" strip
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Union

import numpy as np
import pandas as pd

from .item_model import Project, StatusLevel, get_status_label
from .item_status import ItemStatusPolicy, summarize_item_statuses
from .kpi_engine import ProjectKPIs, compute_project_kpis, resolve_overall_status

logger = logging.getLogger(__name__)


KPI_FIELDS = (
    'boq_completeness',
    'item_approval_coverage',
    'procurement_readiness',
    'delivery_risk_indicator',
    'installation_readiness',
)


# ════════════════════════════════════════════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ════════════════════════════════════════════════════════════════════════════════════════════════════

@dataclass
class ProjectStatusSummary:
    """Status snapshot of one project."""
    project_id: str
    code: str
    name: str
    client: str
    kpis: ProjectKPIs
    overall_status: StatusLevel
    item_counts: Dict[str, int] = field(default_factory=dict)
    total_items: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'project_id': self.project_id,
            'code': self.code,
            'name': self.name,
            'client': self.client,
            'kpis': self.kpis.to_dict(),
            'average_score': round(self.kpis.average_score(), 1),
            'overall_status': self.overall_status.value,
            'overall_label': get_status_label(self.overall_status),
            'item_counts': self.item_counts,
            'total_items': self.total_items,
        }


@dataclass
class PortfolioSummary:
    """War-room overview across all projects."""
    timestamp: str
    as_of: str = ''
    total_projects: int = 0
    status_counts: Dict[str, int] = field(default_factory=dict)
    average_kpis: Dict[str, float] = field(default_factory=dict)
    projects: List[ProjectStatusSummary] = field(default_factory=list)
    needs_attention: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'as_of': self.as_of,
            'total_projects': self.total_projects,
            'status_counts': self.status_counts,
            'average_kpis': {k: round(v, 1) for k, v in self.average_kpis.items()},
            'projects': [p.to_dict() for p in self.projects],
            'needs_attention': self.needs_attention,
        }


# ════════════════════════════════════════════════════════════════════════════════════════════════════
# COMPUTATION
# ════════════════════════════════════════════════════════════════════════════════════════════════════

def summarize_project(
    project: Project,
    now: Union[date, datetime],
    policy: ItemStatusPolicy = ItemStatusPolicy.APPROVAL_GATED,
) -> ProjectStatusSummary:
    """Compute KPIs, overall status and item counts for one project."""
    kpis = compute_project_kpis(project.items, now)
    return ProjectStatusSummary(
        project_id=project.id,
        code=project.code,
        name=project.name,
        client=project.client,
        kpis=kpis,
        overall_status=resolve_overall_status(kpis),
        item_counts=summarize_item_statuses(project.items, policy),
        total_items=project.num_items,
    )


def summarize_portfolio(
    projects: Iterable[Project],
    now: Union[date, datetime],
    policy: ItemStatusPolicy = ItemStatusPolicy.APPROVAL_GATED,
    attention_limit: int = 5,
) -> PortfolioSummary:
    """
    Build the war-room overview.

    Args:
        projects: All projects
        now: Reference time for delivery risk
        policy: Item status policy for the per-project item counts
        attention_limit: How many non-safe projects to list, worst first

    Returns:
        PortfolioSummary
    """
    summaries = [summarize_project(p, now, policy) for p in projects]

    summary = PortfolioSummary(
        timestamp=datetime.now().isoformat(),
        as_of=now.isoformat(),
        total_projects=len(summaries),
        status_counts={level.value: 0 for level in StatusLevel},
        projects=summaries,
    )

    if not summaries:
        summary.average_kpis = {name: 0.0 for name in KPI_FIELDS}
        return summary

    for s in summaries:
        summary.status_counts[s.overall_status.value] += 1

    matrix = np.array(
        [[getattr(s.kpis, name) for name in KPI_FIELDS] for s in summaries],
        dtype=float,
    )
    means = matrix.mean(axis=0)
    summary.average_kpis = {name: float(means[i]) for i, name in enumerate(KPI_FIELDS)}

    flagged = [s for s in summaries if s.overall_status != StatusLevel.SAFE]
    flagged.sort(key=lambda s: s.kpis.average_score())
    summary.needs_attention = [s.project_id for s in flagged[:attention_limit]]

    return summary


def filter_projects_by_status(
    summaries: Iterable[ProjectStatusSummary],
    status: Optional[StatusLevel] = None,
) -> List[ProjectStatusSummary]:
    """Keep summaries with the given overall status; None keeps all."""
    if status is None:
        return list(summaries)
    return [s for s in summaries if s.overall_status == status]


def build_portfolio_table(summaries: Iterable[ProjectStatusSummary]) -> pd.DataFrame:
    """
    Create a summary table of all projects.

    Returns DataFrame suitable for display or export.
    """
    records = []
    for s in summaries:
        records.append({
            'Code': s.code,
            'Project': s.name,
            'Client': s.client or '-',
            'Items': s.total_items,
            'BOQ %': s.kpis.boq_completeness,
            'Approved %': s.kpis.item_approval_coverage,
            'Procured %': s.kpis.procurement_readiness,
            'Delivery Risk %': s.kpis.delivery_risk_indicator,
            'Installed %': s.kpis.installation_readiness,
            'Score': round(s.kpis.average_score(), 1),
            'Status': get_status_label(s.overall_status),
        })

    columns = [
        'Code', 'Project', 'Client', 'Items', 'BOQ %', 'Approved %',
        'Procured %', 'Delivery Risk %', 'Installed %', 'Score', 'Status',
    ]
    return pd.DataFrame(records, columns=columns)
