"""
ProjectStore: the single owner of application state.

All projects live in one JSON document (``<DATA_DIR>/projects.json``).
Reads go through ``get`` / ``list``; every change goes through ``commit``,
which applies the configured progress policy and then rewrites the whole
document. A missing or unreadable document is replaced by the bundled seed
dataset.

Usage:
    from siteledger.models import store

    project = store.get("proj-001")
    store.commit(dataclasses.replace(project, currency="NPR"))
"""

from __future__ import annotations

import json
import logging
import os
import threading
from importlib import resources

from siteledger.core.exceptions import NotFoundError, StorageError, ValidationError
from siteledger.models.project import Project

logger = logging.getLogger(__name__)

SEED_RESOURCE = "seed_projects.json"


def load_seed_projects() -> list[Project]:
    """Bundled default dataset shipped in ``siteledger/data``."""
    raw = resources.files("siteledger.data").joinpath(SEED_RESOURCE).read_text(encoding="utf-8")
    return [Project.from_dict(entry) for entry in json.loads(raw)]


class ProjectStore:
    """Load-all / mutate-copy / save-all store with a process-local commit lock."""

    def __init__(self, path: str | None = None, policy=None):
        self.path = path
        self.policy = policy
        self._projects: dict[str, Project] = {}
        self._lock = threading.RLock()
        self._loaded = False

    def init_app(self, app) -> None:
        from siteledger.services.reconciliation import ProgressPolicy

        data_dir = app.config["DATA_DIR"]
        self.path = os.path.join(data_dir, app.config.get("PROJECTS_FILE", "projects.json"))
        self.policy = ProgressPolicy.from_config(app.config.get("PROGRESS_SOURCE"))
        self._loaded = False
        self.load()
        app.extensions["siteledger_store"] = self
        logger.info(
            "Project store ready: path=%s projects=%d policy=%s",
            self.path, len(self._projects), self.policy.value,
        )

    # ── Persistence ──────────────────────────────────────────────────────

    def load(self) -> list[Project]:
        if self.path is None:
            raise RuntimeError("ProjectStore used before init_app()")
        with self._lock:
            try:
                with open(self.path, encoding="utf-8") as fh:
                    data = json.load(fh)
                if not isinstance(data, list):
                    raise ValueError("projects document must be a JSON array")
                if not all(isinstance(entry, dict) for entry in data):
                    raise ValueError("every project must be a JSON object")
                projects = [Project.from_dict(entry) for entry in data]
            except (OSError, ValueError, AttributeError, TypeError) as exc:
                logger.warning("Could not read %s (%s), reseeding default data", self.path, exc)
                projects = self.reseed()
            else:
                self._projects = {p.id: p for p in projects}
            self._loaded = True
            return projects

    def reseed(self) -> list[Project]:
        projects = load_seed_projects()
        with self._lock:
            self._projects = {p.id: p for p in projects}
            try:
                self.save()
            except StorageError:
                logger.exception("Seeding %s failed, continuing in memory", self.path)
        return projects

    def save(self) -> None:
        """Write every project to disk (indent 2), replacing the file atomically."""
        payload = [p.to_dict() for p in self._projects.values()]
        tmp_path = f"{self.path}.tmp"
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.error("Saving projects to %s failed: %s", self.path, exc)
            raise StorageError("Could not save projects", path=self.path) from exc

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    # ── Reads ────────────────────────────────────────────────────────────

    def list(self) -> list[Project]:
        self._ensure_loaded()
        return list(self._projects.values())

    def get(self, project_id: str) -> Project:
        self._ensure_loaded()
        project = self._projects.get(project_id)
        if project is None:
            raise NotFoundError(resource="Project", resource_id=project_id)
        return project

    # ── Writes ───────────────────────────────────────────────────────────

    def commit(self, project: Project) -> Project:
        """Apply the progress policy to ``project``, store it and persist.

        Returns the project as stored (possibly reconciled).
        """
        from siteledger.services.reconciliation import reconcile_project

        self._ensure_loaded()
        with self._lock:
            stored = reconcile_project(project, self.policy)
            previous = self._projects.get(stored.id)
            self._projects[stored.id] = stored
            try:
                self.save()
            except StorageError:
                if previous is None:
                    self._projects.pop(stored.id, None)
                else:
                    self._projects[stored.id] = previous
                raise
        logger.debug("Committed project %s", stored.id)
        return stored

    def add(self, project: Project) -> Project:
        self._ensure_loaded()
        with self._lock:
            if project.id in self._projects:
                raise ValidationError(
                    f"Project id {project.id} already exists", details={"id": "duplicate"}
                )
            if any(p.code == project.code for p in self._projects.values()):
                raise ValidationError(
                    f"Project code {project.code} already exists", details={"code": "duplicate"}
                )
            return self.commit(project)

    def delete(self, project_id: str) -> Project:
        self._ensure_loaded()
        with self._lock:
            project = self.get(project_id)
            del self._projects[project_id]
            try:
                self.save()
            except StorageError:
                self._projects[project_id] = project
                raise
        logger.info("Deleted project %s", project_id)
        return project
