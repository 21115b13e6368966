"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    PROJECT TIMELINE (GANTT) DATA GENERATOR
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Generates the data behind the project Gantt chart. Each item contributes up
to four phase bars:

- Production:   production_due_date     → delivery_date
- Delivery:     delivery_date           → received_date
- Site Move:    site_movement_date      → installation_start_date
- Installation: installation_start_date → installed_date

Positions are percentages of the timeline range so any renderer can lay
them out. The range spans the project dates and every phase date, padded
7 days before and 14 days after.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from warroom.status_engine.item_model import ProjectItem

logger = logging.getLogger(__name__)


PAD_BEFORE_DAYS = 7
PAD_AFTER_DAYS = 14
OPEN_BAR_DAYS = 3


class ZoomLevel(str, Enum):
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"


@dataclass(frozen=True)
class GanttPhase:
    key: str
    end_key: Optional[str]
    label: str
    color: str


PHASES: Tuple[GanttPhase, ...] = (
    GanttPhase("production_due_date", "delivery_date", "Production", "blue"),
    GanttPhase("delivery_date", "received_date", "Delivery", "amber"),
    GanttPhase("site_movement_date", "installation_start_date", "Site Move", "purple"),
    GanttPhase("installation_start_date", "installed_date", "Installation", "emerald"),
)


# ════════════════════════════════════════════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ════════════════════════════════════════════════════════════════════════════════════════════════════

@dataclass
class GanttBar:
    """Single phase bar of an item row."""
    phase: str
    label: str
    color: str
    start: date
    end: Optional[date]
    left_pct: float
    width_pct: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase,
            "label": self.label,
            "color": self.color,
            "start": self.start.isoformat(),
            "end": self.end.isoformat() if self.end else None,
            "left_pct": round(self.left_pct, 3),
            "width_pct": round(self.width_pct, 3),
        }


@dataclass
class GanttRow:
    item_id: str
    description: str
    area: str
    bars: List[GanttBar] = field(default_factory=list)


@dataclass
class GanttColumn:
    label: str
    start_day: int
    width_days: int


@dataclass
class Milestone:
    id: str
    label: str
    date: date
    color: str = "red"


@dataclass
class GanttChartData:
    """Complete Gantt data for one project."""
    timeline_start: date
    timeline_end: date
    total_days: int
    zoom: ZoomLevel
    columns: List[GanttColumn] = field(default_factory=list)
    rows: List[GanttRow] = field(default_factory=list)
    milestones: List[Dict[str, Any]] = field(default_factory=list)
    today_pct: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timeline_start": self.timeline_start.isoformat(),
            "timeline_end": self.timeline_end.isoformat(),
            "total_days": self.total_days,
            "zoom": self.zoom.value,
            "columns": [
                {
                    "label": c.label,
                    "start_day": c.start_day,
                    "width_days": c.width_days,
                    "left_pct": round(self.day_to_pct(c.start_day), 3),
                    "width_pct": round(self.day_to_pct(c.width_days), 3),
                }
                for c in self.columns
            ],
            "rows": [
                {
                    "item_id": r.item_id,
                    "description": r.description,
                    "area": r.area,
                    "bars": [b.to_dict() for b in r.bars],
                }
                for r in self.rows
            ],
            "milestones": self.milestones,
            "today_pct": round(self.today_pct, 3) if self.today_pct is not None else None,
            "legend": [{"phase": p.key, "label": p.label, "color": p.color} for p in PHASES],
        }

    def day_to_pct(self, day: float) -> float:
        return day / self.total_days * 100 if self.total_days > 0 else 0.0


# ════════════════════════════════════════════════════════════════════════════════════════════════════
# RANGE & COLUMNS
# ════════════════════════════════════════════════════════════════════════════════════════════════════

def compute_timeline_range(
    items: Iterable[ProjectItem],
    project_start: Optional[date],
    project_end: Optional[date],
    today: date,
) -> Tuple[date, date, int]:
    """
    Return (timeline_start, timeline_end, total_days).

    Phase start dates can widen the range on either side; phase end dates
    only push the end out. Missing project dates fall back to today.
    """
    earliest = project_start or project_end or today
    latest = project_end or project_start or today

    for item in items:
        for phase in PHASES:
            start = getattr(item, phase.key)
            end = getattr(item, phase.end_key) if phase.end_key else None
            if start:
                earliest = min(earliest, start)
                latest = max(latest, start)
            if end:
                latest = max(latest, end)

    timeline_start = earliest - timedelta(days=PAD_BEFORE_DAYS)
    timeline_end = latest + timedelta(days=PAD_AFTER_DAYS)
    return timeline_start, timeline_end, (timeline_end - timeline_start).days


def build_columns(timeline_start: date, timeline_end: date, zoom: ZoomLevel) -> List[GanttColumn]:
    """Header columns for the zoom level, clipped to the range."""
    total_days = (timeline_end - timeline_start).days
    columns = []
    cursor = timeline_start

    while cursor < timeline_end:
        if zoom == ZoomLevel.WEEK:
            label = cursor.strftime("%d %b")
            next_cursor = cursor + timedelta(days=7)
        elif zoom == ZoomLevel.MONTH:
            label = cursor.strftime("%b %Y")
            next_cursor = cursor.replace(day=1) + relativedelta(months=1)
        else:
            quarter = (cursor.month - 1) // 3 + 1
            label = f"Q{quarter} {cursor.year}"
            quarter_start = date(cursor.year, 3 * (quarter - 1) + 1, 1)
            next_cursor = quarter_start + relativedelta(months=3)

        start_day = (cursor - timeline_start).days
        width_days = min((next_cursor - cursor).days, total_days - start_day)
        if width_days > 0:
            columns.append(GanttColumn(label=label, start_day=start_day, width_days=width_days))
        cursor = next_cursor

    return columns


# ════════════════════════════════════════════════════════════════════════════════════════════════════
# CHART
# ════════════════════════════════════════════════════════════════════════════════════════════════════

def _first_phase_date(item: ProjectItem) -> Optional[date]:
    for phase in PHASES:
        value = getattr(item, phase.key)
        if value:
            return value
    return None


def build_gantt(
    items: List[ProjectItem],
    project_start: Optional[date],
    project_end: Optional[date],
    zoom: str = "month",
    today: Optional[date] = None,
    milestones: Optional[List[Milestone]] = None,
) -> GanttChartData:
    """
    Build the Gantt chart data for a project.

    Args:
        items: Project items
        project_start, project_end: Project timeline
        zoom: week | month | quarter
        today: Date of the "today" marker (defaults to date.today())
        milestones: Optional flagged dates

    Raises:
        ValueError: unknown zoom level
    """
    zoom_level = ZoomLevel(zoom)
    today = today or date.today()

    timeline_start, timeline_end, total_days = compute_timeline_range(
        items, project_start, project_end, today
    )

    chart = GanttChartData(
        timeline_start=timeline_start,
        timeline_end=timeline_end,
        total_days=total_days,
        zoom=zoom_level,
        columns=build_columns(timeline_start, timeline_end, zoom_level),
    )

    dated = [item for item in items if _first_phase_date(item) is not None]
    dated.sort(key=_first_phase_date)

    for item in dated:
        row = GanttRow(item_id=item.id, description=item.description, area=item.area)
        for phase in PHASES:
            start = getattr(item, phase.key)
            if not start:
                continue
            end = getattr(item, phase.end_key) if phase.end_key else None
            start_day = (start - timeline_start).days
            end_day = (end - timeline_start).days if end else start_day + OPEN_BAR_DAYS
            width = max(end_day - start_day, 1)
            row.bars.append(GanttBar(
                phase=phase.key,
                label=phase.label,
                color=phase.color,
                start=start,
                end=end,
                left_pct=chart.day_to_pct(start_day),
                width_pct=chart.day_to_pct(width),
            ))
        chart.rows.append(row)

    for m in milestones or []:
        chart.milestones.append({
            "id": m.id,
            "label": m.label,
            "date": m.date.isoformat(),
            "color": m.color,
            "left_pct": round(chart.day_to_pct((m.date - timeline_start).days), 3),
        })

    today_pct = chart.day_to_pct((today - timeline_start).days)
    chart.today_pct = today_pct if 0 <= today_pct <= 100 else None

    logger.debug(f"Gantt built: {len(chart.rows)} rows, {len(chart.columns)} columns ({zoom_level.value})")
    return chart
