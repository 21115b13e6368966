"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    WAR ROOM — STATUS ENGINE
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Derives traffic-light statuses and readiness KPIs from BOQ items.

Everything here is pure and synchronous: no I/O, no shared state. The
reference time for delivery risk is always passed in explicitly.

ARCHITECTURE
════════════

    ┌─────────────────────────────────────────────────────────────────────────┐
    │                          STATUS ENGINE                                   │
    │                                                                          │
    │  ┌──────────────┐  ┌──────────────┐  ┌──────────────┐  ┌──────────────┐ │
    │  │ item_model   │  │ item_status  │  │ kpi_engine   │  │ portfolio    │ │
    │  │              │  │              │  │              │  │              │ │
    │  │ • Project    │  │ • classifier │  │ • 5 KPIs     │  │ • overview   │ │
    │  │ • Item       │  │ • policies   │  │ • overall    │  │ • averages   │ │
    │  │ • labels     │  │ • tracker    │  │ • thresholds │  │ • table      │ │
    │  └──────────────┘  └──────────────┘  └──────────────┘  └──────────────┘ │
    │                          ┌──────────────┐                                │
    │                          │ coverage     │                                │
    │                          │ • BOQ matrix │                                │
    │                          └──────────────┘                                │
    └─────────────────────────────────────────────────────────────────────────┘
"""

from .item_model import (
    ApprovalStatus,
    BOQCategory,
    BOQCoverage,
    Project,
    ProjectItem,
    StatusLevel,
    STATUS_DISPLAY,
    get_approval_label,
    get_category_label,
    get_status_color,
    get_status_label,
    parse_date,
)
from .item_status import (
    ItemStatusPolicy,
    build_item_tracker_table,
    classify_item_status,
    filter_items,
    list_areas,
    summarize_item_statuses,
)
from .kpi_engine import (
    Direction,
    ProjectKPIs,
    classify_metric_status,
    compute_project_kpis,
    resolve_overall_status,
)
from .coverage import (
    BOQCategoryStatus,
    compute_boq_coverage,
)
from .portfolio import (
    PortfolioSummary,
    ProjectStatusSummary,
    build_portfolio_table,
    filter_projects_by_status,
    summarize_portfolio,
    summarize_project,
)

__all__ = [
    # Model
    "ApprovalStatus",
    "BOQCategory",
    "BOQCoverage",
    "Project",
    "ProjectItem",
    "StatusLevel",
    "STATUS_DISPLAY",
    "get_approval_label",
    "get_category_label",
    "get_status_color",
    "get_status_label",
    "parse_date",
    # Item status
    "ItemStatusPolicy",
    "build_item_tracker_table",
    "classify_item_status",
    "filter_items",
    "list_areas",
    "summarize_item_statuses",
    # KPIs
    "Direction",
    "ProjectKPIs",
    "classify_metric_status",
    "compute_project_kpis",
    "resolve_overall_status",
    # Coverage
    "BOQCategoryStatus",
    "compute_boq_coverage",
    # Portfolio
    "PortfolioSummary",
    "ProjectStatusSummary",
    "build_portfolio_table",
    "filter_projects_by_status",
    "summarize_portfolio",
    "summarize_project",
]
