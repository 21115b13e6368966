"""
════════════════════════════════════════════════════════════════════════════════════════════════════
PROJECTS API - Endpoints for Projects, BOQ Items and Readiness KPIs
════════════════════════════════════════════════════════════════════════════════════════════════════

REST API for:
- CRUD of projects and their BOQ items (incl. bulk item creation)
- Item status tracker with category / status / area filters
- Project KPIs, overall status and per-KPI indicators
- BOQ coverage matrix and Gantt timeline data
- Portfolio (war room) overview
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from warroom.feature_flags import FeatureFlags
from warroom.projects.schemas import (
    BulkItemsCreate,
    ItemCreate,
    ItemUpdate,
    ProjectCreate,
    ProjectUpdate,
)
from warroom.projects.store import (
    ItemNotFoundError,
    ProjectNotFoundError,
    ProjectStore,
    get_project_store,
)
from warroom.status_engine import (
    BOQCategory,
    ProjectItem,
    StatusLevel,
    classify_item_status,
    compute_boq_coverage,
    compute_project_kpis,
    filter_items,
    filter_projects_by_status,
    get_status_color,
    get_status_label,
    list_areas,
    resolve_overall_status,
    summarize_item_statuses,
    summarize_portfolio,
)
from warroom.timeline import Milestone, build_gantt

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["Projects"])
portfolio_router = APIRouter(prefix="/portfolio", tags=["Portfolio"])


_NON_NULLABLE_ITEM_FIELDS = (
    "category", "area", "description", "boq_included", "approval_status",
    "purchased", "received", "installed",
)
_NON_NULLABLE_PROJECT_FIELDS = (
    "code", "name", "client", "boq_master_ref", "boq_version", "coverage_overrides",
)


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def _reference_time(as_of: Optional[datetime]) -> datetime:
    return as_of or datetime.now()


def _status_payload(status: StatusLevel) -> Dict[str, str]:
    return {
        "status": status.value,
        "label": get_status_label(status),
        "color": get_status_color(status),
    }


def _item_payload(item: ProjectItem) -> Dict[str, Any]:
    status = classify_item_status(item, FeatureFlags.get_item_status_policy())
    data = item.to_dict()
    data["category_label"] = item.category_label
    data["approval_label"] = item.approval_label
    data["status"] = status.value
    data["status_label"] = get_status_label(status)
    return data


def _partial(body, non_nullable) -> Dict[str, Any]:
    updates = body.model_dump(mode="json", exclude_unset=True)
    return {k: v for k, v in updates.items() if not (v is None and k in non_nullable)}


def _not_found(exc: KeyError) -> HTTPException:
    kind = "Project" if isinstance(exc, ProjectNotFoundError) else "Item"
    return HTTPException(status_code=404, detail=f"{kind} {exc.args[0]} not found")


# ═══════════════════════════════════════════════════════════════════════════════
# PROJECT CRUD
# ═══════════════════════════════════════════════════════════════════════════════

@router.get("", summary="List projects")
def list_projects(
    as_of: Optional[datetime] = Query(None, description="Reference time for delivery risk"),
    store: ProjectStore = Depends(get_project_store),
) -> Dict[str, Any]:
    """
    List projects, newest first, each with its KPIs and overall status.
    """
    now = _reference_time(as_of)
    projects = []
    for project in store.list_projects():
        kpis = compute_project_kpis(project.items, now)
        data = project.to_dict()
        data["kpis"] = kpis.to_dict()
        data["overall"] = _status_payload(resolve_overall_status(kpis))
        projects.append(data)
    return {"total": len(projects), "projects": projects}


@router.post("", status_code=201, summary="Create project")
def create_project(
    body: ProjectCreate,
    store: ProjectStore = Depends(get_project_store),
) -> Dict[str, Any]:
    try:
        project = store.create_project(body.model_dump(mode="json", exclude_none=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return project.to_dict(include_items=True)


@router.get("/{project_id}", summary="Get project details")
def get_project(
    project_id: str,
    store: ProjectStore = Depends(get_project_store),
) -> Dict[str, Any]:
    try:
        project = store.get_project(project_id)
    except ProjectNotFoundError as e:
        raise _not_found(e)
    return project.to_dict()


@router.patch("/{project_id}", summary="Update project")
def update_project(
    project_id: str,
    body: ProjectUpdate,
    store: ProjectStore = Depends(get_project_store),
) -> Dict[str, Any]:
    try:
        project = store.update_project(project_id, _partial(body, _NON_NULLABLE_PROJECT_FIELDS))
    except ProjectNotFoundError as e:
        raise _not_found(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return project.to_dict()


@router.delete("/{project_id}", summary="Delete project")
def delete_project(
    project_id: str,
    store: ProjectStore = Depends(get_project_store),
) -> Dict[str, str]:
    try:
        store.delete_project(project_id)
    except ProjectNotFoundError as e:
        raise _not_found(e)
    return {"status": "deleted", "project_id": project_id}


# ═══════════════════════════════════════════════════════════════════════════════
# ITEMS
# ═══════════════════════════════════════════════════════════════════════════════

@router.get("/{project_id}/items", summary="List project items")
def list_items(
    project_id: str,
    category: Optional[BOQCategory] = Query(None, description="Filter by BOQ category"),
    status: Optional[StatusLevel] = Query(None, description="Filter by item status"),
    area: Optional[str] = Query(None, description="Filter by area"),
    store: ProjectStore = Depends(get_project_store),
) -> Dict[str, Any]:
    """
    Item tracker: filtered items with their status, plus status counts over
    the whole project.
    """
    try:
        items = store.list_items(project_id)
    except ProjectNotFoundError as e:
        raise _not_found(e)

    policy = FeatureFlags.get_item_status_policy()
    filtered = filter_items(items, category=category, status=status, area=area, policy=policy)

    return {
        "total": len(items),
        "filtered": len(filtered),
        "status_counts": summarize_item_statuses(items, policy),
        "areas": list_areas(items),
        "filters": {
            "category": category.value if category else None,
            "status": status.value if status else None,
            "area": area,
        },
        "items": [_item_payload(item) for item in filtered],
    }


@router.post("/{project_id}/items", status_code=201, summary="Create item")
def create_item(
    project_id: str,
    body: ItemCreate,
    store: ProjectStore = Depends(get_project_store),
) -> Dict[str, Any]:
    try:
        item = store.create_item(project_id, body.model_dump(mode="json", exclude_none=True))
    except ProjectNotFoundError as e:
        raise _not_found(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _item_payload(item)


@router.post("/{project_id}/items/bulk", status_code=201, summary="Create items in bulk")
def bulk_create_items(
    project_id: str,
    body: BulkItemsCreate,
    store: ProjectStore = Depends(get_project_store),
) -> Dict[str, Any]:
    rows = [item.model_dump(mode="json", exclude_none=True) for item in body.items]
    try:
        created = store.bulk_create_items(project_id, rows)
    except ProjectNotFoundError as e:
        raise _not_found(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"created": len(created), "items": [_item_payload(item) for item in created]}


@router.get("/{project_id}/items/{item_id}", summary="Get item")
def get_item(
    project_id: str,
    item_id: str,
    store: ProjectStore = Depends(get_project_store),
) -> Dict[str, Any]:
    try:
        item = store.get_item(project_id, item_id)
    except (ProjectNotFoundError, ItemNotFoundError) as e:
        raise _not_found(e)
    return _item_payload(item)


@router.patch("/{project_id}/items/{item_id}", summary="Update item")
def update_item(
    project_id: str,
    item_id: str,
    body: ItemUpdate,
    store: ProjectStore = Depends(get_project_store),
) -> Dict[str, Any]:
    try:
        item = store.update_item(project_id, item_id, _partial(body, _NON_NULLABLE_ITEM_FIELDS))
    except (ProjectNotFoundError, ItemNotFoundError) as e:
        raise _not_found(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _item_payload(item)


@router.delete("/{project_id}/items/{item_id}", summary="Delete item")
def delete_item(
    project_id: str,
    item_id: str,
    store: ProjectStore = Depends(get_project_store),
) -> Dict[str, str]:
    try:
        store.delete_item(project_id, item_id)
    except (ProjectNotFoundError, ItemNotFoundError) as e:
        raise _not_found(e)
    return {"status": "deleted", "item_id": item_id}


# ═══════════════════════════════════════════════════════════════════════════════
# KPIs, COVERAGE, TIMELINE
# ═══════════════════════════════════════════════════════════════════════════════

@router.get("/{project_id}/kpis", summary="Project KPIs and overall status")
def get_project_kpis(
    project_id: str,
    as_of: Optional[datetime] = Query(None, description="Reference time for delivery risk"),
    store: ProjectStore = Depends(get_project_store),
) -> Dict[str, Any]:
    try:
        project = store.get_project(project_id)
    except ProjectNotFoundError as e:
        raise _not_found(e)

    now = _reference_time(as_of)
    kpis = compute_project_kpis(project.items, now)
    overall = resolve_overall_status(kpis)

    return {
        "project_id": project.id,
        "as_of": now.isoformat(),
        "total_items": project.num_items,
        "kpis": kpis.to_dict(),
        "kpi_status": {name: s.value for name, s in kpis.metric_statuses().items()},
        "average_score": round(kpis.average_score(), 1),
        "overall": _status_payload(overall),
    }


@router.get("/{project_id}/coverage", summary="BOQ coverage matrix")
def get_project_coverage(
    project_id: str,
    store: ProjectStore = Depends(get_project_store),
) -> Dict[str, Any]:
    try:
        project = store.get_project(project_id)
    except ProjectNotFoundError as e:
        raise _not_found(e)

    matrix = compute_boq_coverage(project.items, project.coverage_overrides)
    return {"project_id": project.id, "categories": [row.to_dict() for row in matrix]}


@router.get("/{project_id}/timeline", summary="Gantt timeline data")
def get_project_timeline(
    project_id: str,
    zoom: str = Query("month", description="week | month | quarter"),
    today: Optional[date] = Query(None, description="Date of the today marker"),
    store: ProjectStore = Depends(get_project_store),
) -> Dict[str, Any]:
    try:
        project = store.get_project(project_id)
    except ProjectNotFoundError as e:
        raise _not_found(e)

    milestones: List[Milestone] = []
    if project.target_completion_date:
        milestones.append(Milestone(
            id="target-completion",
            label="Target completion",
            date=project.target_completion_date,
        ))

    try:
        chart = build_gantt(
            project.items,
            project.start_date,
            project.target_completion_date,
            zoom=zoom,
            today=today,
            milestones=milestones,
        )
    except ValueError:
        logger.warning(f"Invalid zoom level requested for {project_id}: {zoom}")
        raise HTTPException(status_code=400, detail=f"Invalid zoom level: {zoom}")

    data = chart.to_dict()
    data["project_id"] = project.id
    return data


# ═══════════════════════════════════════════════════════════════════════════════
# PORTFOLIO
# ═══════════════════════════════════════════════════════════════════════════════

@portfolio_router.get("/summary", summary="War room overview")
def get_portfolio_summary(
    status: Optional[StatusLevel] = Query(None, description="Only projects with this overall status"),
    as_of: Optional[datetime] = Query(None, description="Reference time for delivery risk"),
    store: ProjectStore = Depends(get_project_store),
) -> Dict[str, Any]:
    """
    Portfolio overview. Counts and averages always cover every project; the
    status filter only narrows the project list.
    """
    summary = summarize_portfolio(
        store.list_projects(),
        _reference_time(as_of),
        FeatureFlags.get_item_status_policy(),
    )
    data = summary.to_dict()
    data["projects"] = [s.to_dict() for s in filter_projects_by_status(summary.projects, status)]
    data["filter"] = status.value if status else None
    return data
