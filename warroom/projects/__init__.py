"""
War Room projects: storage, demo data and the HTTP routers.
"""

from .store import (
    ItemNotFoundError,
    ProjectNotFoundError,
    ProjectStore,
    get_project_store,
    reset_project_store,
)

__all__ = [
    "ItemNotFoundError",
    "ProjectNotFoundError",
    "ProjectStore",
    "get_project_store",
    "reset_project_store",
]
