"""
Project timeline (Gantt) data for the war-room dashboards.
"""

from .gantt import (
    PHASES,
    GanttBar,
    GanttChartData,
    GanttColumn,
    GanttPhase,
    GanttRow,
    Milestone,
    ZoomLevel,
    build_columns,
    build_gantt,
    compute_timeline_range,
)

__all__ = [
    "PHASES",
    "GanttBar",
    "GanttChartData",
    "GanttColumn",
    "GanttPhase",
    "GanttRow",
    "Milestone",
    "ZoomLevel",
    "build_columns",
    "build_gantt",
    "compute_timeline_range",
]
