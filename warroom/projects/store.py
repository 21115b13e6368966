"""
Project Store for the War Room

In-memory stand-in for the hosted project / item tables, with optional JSON
file persistence. Every write goes back through `from_dict`, so stored
records are always validated.

Ordering mirrors the dashboard queries: projects and items are listed newest
first.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from warroom.status_engine.item_model import Project, ProjectItem

logger = logging.getLogger(__name__)


class ProjectNotFoundError(KeyError):
    """No project with the given id."""


class ItemNotFoundError(KeyError):
    """No item with the given id in the project."""


_PROJECT_READONLY = ("id", "items", "num_items", "created_at", "updated_at")
_ITEM_READONLY = ("id", "project_id", "created_at")


def _now() -> datetime:
    return datetime.now(timezone.utc)


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _check_unique_item_ids(existing: Iterable[ProjectItem], new_items: Iterable[ProjectItem]) -> None:
    """Raise ValueError if a new item id is already taken or repeats in the batch."""
    seen = {item.id for item in existing}
    for item in new_items:
        if item.id in seen:
            raise ValueError(f"Item {item.id} already exists")
        seen.add(item.id)


def _newest_first_key(record) -> datetime:
    created = record.created_at
    if created is None:
        return _EPOCH
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


# -------------------------
# Project Store (In-Memory + File Persistence)
# -------------------------

class ProjectStore:
    """
    Thread-safe project store.

    With `store_path` set, the full state is written as JSON after each
    mutation and reloaded on construction.
    """

    def __init__(self, store_path: Optional[Path] = None):
        self.store_path = store_path
        self._projects: Dict[str, Project] = {}
        self._lock = threading.RLock()
        if self.store_path is not None:
            self.store_path.parent.mkdir(parents=True, exist_ok=True)
            self._load()

    def _load(self) -> None:
        """Load projects from file."""
        if not self.store_path.exists():
            return
        with open(self.store_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        for raw in data:
            project = Project.from_dict(raw)
            self._projects[project.id] = project
        logger.info(f"Loaded {len(self._projects)} projects from {self.store_path}")

    def _save(self) -> None:
        """Save projects to file."""
        if self.store_path is None:
            return
        data = [p.to_dict(include_items=True) for p in self._projects.values()]
        tmp_path = self.store_path.with_name(self.store_path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.store_path)

    # ── projects ──────────────────────────────────────────────────────────────

    def list_projects(self) -> List[Project]:
        """All projects, newest first."""
        with self._lock:
            projects = list(self._projects.values())
        projects.sort(key=_newest_first_key, reverse=True)
        return projects

    def get_project(self, project_id: str) -> Project:
        with self._lock:
            project = self._projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def create_project(self, data: Dict[str, Any]) -> Project:
        """
        Create a project (and any items nested under "items").

        Raises:
            ValueError: invalid field values
        """
        payload = dict(data)
        payload.setdefault("id", str(uuid.uuid4()))
        project = Project.from_dict(payload)
        _check_unique_item_ids([], project.items)

        now = _now()
        project.created_at = project.created_at or now
        project.updated_at = now
        for item in project.items:
            item.created_at = item.created_at or now

        with self._lock:
            if project.id in self._projects:
                raise ValueError(f"Project {project.id} already exists")
            self._projects[project.id] = project
            self._save()

        logger.info(f"Created project {project.code or project.id} with {project.num_items} items")
        return project

    def update_project(self, project_id: str, updates: Dict[str, Any]) -> Project:
        """
        Apply a partial update to a project's own fields.

        Items, ids and timestamps are not writable here.
        """
        with self._lock:
            current = self.get_project(project_id)
            merged = current.to_dict()
            merged.update({k: v for k, v in updates.items() if k not in _PROJECT_READONLY})
            updated = Project.from_dict(merged)
            updated.items = current.items
            updated.created_at = current.created_at
            updated.updated_at = _now()
            self._projects[project_id] = updated
            self._save()

        logger.info(f"Updated project {updated.code or project_id}")
        return updated

    def delete_project(self, project_id: str) -> None:
        with self._lock:
            if project_id not in self._projects:
                raise ProjectNotFoundError(project_id)
            del self._projects[project_id]
            self._save()
        logger.info(f"Deleted project {project_id}")

    # ── items ─────────────────────────────────────────────────────────────────

    def list_items(self, project_id: str) -> List[ProjectItem]:
        """Items of a project, newest first."""
        project = self.get_project(project_id)
        with self._lock:
            items = list(project.items)
        items.sort(key=_newest_first_key, reverse=True)
        return items

    def get_item(self, project_id: str, item_id: str) -> ProjectItem:
        project = self.get_project(project_id)
        with self._lock:
            for item in project.items:
                if item.id == item_id:
                    return item
        raise ItemNotFoundError(item_id)

    def _build_item(self, project_id: str, data: Dict[str, Any]) -> ProjectItem:
        payload = dict(data)
        payload.setdefault("id", str(uuid.uuid4()))
        payload["project_id"] = project_id
        item = ProjectItem.from_dict(payload)
        item.created_at = item.created_at or _now()
        return item

    def create_item(self, project_id: str, data: Dict[str, Any]) -> ProjectItem:
        return self.bulk_create_items(project_id, [data])[0]

    def bulk_create_items(self, project_id: str, rows: Iterable[Dict[str, Any]]) -> List[ProjectItem]:
        """
        Create several items at once.

        All rows are validated before any is stored, so a bad row leaves the
        project untouched.
        """
        with self._lock:
            project = self.get_project(project_id)
            created = [self._build_item(project_id, row) for row in rows]
            _check_unique_item_ids(project.items, created)
            project.items.extend(created)
            project.updated_at = _now()
            self._save()

        logger.info(f"Added {len(created)} items to project {project.code or project_id}")
        return created

    def update_item(self, project_id: str, item_id: str, updates: Dict[str, Any]) -> ProjectItem:
        with self._lock:
            project = self.get_project(project_id)
            for index, item in enumerate(project.items):
                if item.id == item_id:
                    break
            else:
                raise ItemNotFoundError(item_id)

            merged = item.to_dict()
            merged.update({k: v for k, v in updates.items() if k not in _ITEM_READONLY})
            updated = ProjectItem.from_dict(merged)
            project.items[index] = updated
            project.updated_at = _now()
            self._save()

        logger.info(f"Updated item {item_id} in project {project.code or project_id}")
        return updated

    def delete_item(self, project_id: str, item_id: str) -> None:
        with self._lock:
            project = self.get_project(project_id)
            remaining = [i for i in project.items if i.id != item_id]
            if len(remaining) == len(project.items):
                raise ItemNotFoundError(item_id)
            project.items = remaining
            project.updated_at = _now()
            self._save()
        logger.info(f"Deleted item {item_id} from project {project.code or project_id}")

    def clear_all(self) -> None:
        """Clear all projects (for testing)."""
        with self._lock:
            self._projects = {}
            self._save()


# Global store instance
_project_store: Optional[ProjectStore] = None


def get_project_store() -> ProjectStore:
    """Get the global project store instance."""
    global _project_store
    if _project_store is None:
        from warroom.feature_flags import FeatureFlags

        config = FeatureFlags.get_config()
        store_path = Path(config.store_path) if config.store_path else None
        _project_store = ProjectStore(store_path)
        if config.seed_demo_data and not _project_store.list_projects():
            from warroom.projects.seed_data import seed_demo_projects

            seed_demo_projects(_project_store)
    return _project_store


def reset_project_store() -> None:
    """Drop the global store so the next access rebuilds it."""
    global _project_store
    _project_store = None
