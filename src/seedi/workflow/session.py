"""
Decision Session

Explicit state container for one user's projects and profile.

Every mutation runs under a single asyncio lock: the current collection
is read, a pure transition from ``seedi.workflow.transitions`` computes the
next one, the result is written through the persistence gateway and only
then does the in-memory reference change. A failed write propagates and
leaves memory exactly as it was.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from seedi.catalog.filters import filter_by_context
from seedi.catalog.ranking import rank
from seedi.catalog.store import CatalogStore
from seedi.core.enums import ProjectStatus, SortKey
from seedi.core.exceptions import LoadError, ProjectNotFoundError
from seedi.core.schemas import (
    Baseline,
    DecisionProject,
    Innovation,
    ProjectionResult,
    UserContext,
    UserProfile,
)
from seedi.core.vocabulary import ALL_CATEGORIES
from seedi.projection.brief import ActionBrief, build_action_brief
from seedi.projection.projector import project_impact
from seedi.storage.gateway import PROFILE_KEY, PROJECTS_KEY, PersistenceGateway
from seedi.workflow import selection, transitions
from seedi.workflow.transitions import Projects, Transition

logger = logging.getLogger(__name__)


class DecisionSession:
    """
    Projects, current project and profile for one user.

    Usage:
        session = DecisionSession(SqliteGateway(), CatalogStore.bundled())
        await session.load()
        project = await session.create_project("Maize storage 2026")
        await session.update_context(project.id, {"role": "Farmer", ...})

    Mutations on an unknown project ID are no-ops: a warning is logged,
    nothing is written and None is returned.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        catalog: CatalogStore,
        baseline: Baseline | None = None,
    ) -> None:
        self._gateway = gateway
        self._catalog = catalog
        self._baseline = baseline or Baseline.from_settings()
        self._projects: Projects = ()
        self._profile: UserProfile | None = None
        self._current_id: str | None = None
        self._lock = asyncio.Lock()

    async def load(self) -> None:
        """
        Read persisted projects and profile.

        Raises:
            LoadError: Persisted data is malformed.
        """
        async with self._lock:
            raw_projects = await self._gateway.load(PROJECTS_KEY)
            raw_profile = await self._gateway.load(PROFILE_KEY)

            if raw_projects is not None and not isinstance(raw_projects, list):
                raise LoadError("Persisted projects are not a list", {"key": PROJECTS_KEY})
            try:
                projects = tuple(DecisionProject.model_validate(r) for r in raw_projects or [])
                profile = (
                    UserProfile.model_validate(raw_profile) if raw_profile is not None else None
                )
            except PydanticValidationError as e:
                raise LoadError(
                    f"Persisted state is malformed: {e.error_count()} error(s)",
                    {"errors": [err["msg"] for err in e.errors()]},
                ) from e

            ids = [p.id for p in projects]
            if len(set(ids)) != len(ids):
                raise LoadError("Persisted projects have duplicate IDs", {"key": PROJECTS_KEY})

            self._projects = projects
            self._profile = profile
            self._current_id = None

        logger.info("Loaded %d project(s); onboarded=%s", len(projects), profile is not None)

    # ==================== Internals ====================

    async def _commit(
        self, transition: Transition, action: str, project_id: str, make_current: bool = True
    ) -> DecisionProject | None:
        """Persist a transition and swap it in. Caller holds the lock."""
        if not transition.found:
            logger.warning("%s: project %s not found; nothing written", action, project_id)
            return None

        if transition.projects is not self._projects:
            await self._gateway.save(
                PROJECTS_KEY, [p.to_record() for p in transition.projects]
            )
            self._projects = transition.projects

        if make_current:
            self._current_id = transition.project.id
        return transition.project

    # ==================== Project mutations ====================

    async def create_project(self, title: str) -> DecisionProject:
        """Create a project at stage 1 and make it current."""
        async with self._lock:
            transition = transitions.create_project(self._projects, title)
            project = await self._commit(transition, "create_project", transition.project.id)
        logger.info("Created project %s", project.id)
        return project

    async def update_context(
        self, project_id: str, context: UserContext | Mapping[str, Any]
    ) -> DecisionProject | None:
        async with self._lock:
            return await self._commit(
                transitions.update_context(self._projects, project_id, context),
                "update_context",
                project_id,
            )

    async def advance_stage(self, project_id: str) -> DecisionProject | None:
        """Next stage; at stage 4 the project is returned unchanged and nothing is written."""
        async with self._lock:
            return await self._commit(
                transitions.advance_stage(self._projects, project_id), "advance_stage", project_id
            )

    async def toggle_innovation(
        self, project_id: str, innovation_id: str
    ) -> DecisionProject | None:
        """
        Add or remove an innovation from the project's selection.

        Only additions must name a catalog innovation; an ID that has since
        left the catalog can still be deselected.
        """
        async with self._lock:
            if innovation_id not in self._catalog and not self.is_selected(
                project_id, innovation_id
            ):
                logger.warning("toggle_innovation: innovation %s not in catalog", innovation_id)
                return None
            return await self._commit(
                transitions.toggle_selection(self._projects, project_id, innovation_id),
                "toggle_innovation",
                project_id,
            )

    async def complete_project(self, project_id: str) -> DecisionProject | None:
        async with self._lock:
            return await self._commit(
                transitions.complete_project(self._projects, project_id),
                "complete_project",
                project_id,
                make_current=False,
            )

    async def archive_project(self, project_id: str) -> DecisionProject | None:
        async with self._lock:
            return await self._commit(
                transitions.archive_project(self._projects, project_id),
                "archive_project",
                project_id,
                make_current=False,
            )

    async def delete_project(self, project_id: str) -> DecisionProject | None:
        """Remove a project permanently; clears the current reference if it pointed here."""
        async with self._lock:
            removed = await self._commit(
                transitions.delete_project(self._projects, project_id),
                "delete_project",
                project_id,
                make_current=False,
            )
            if removed is not None and self._current_id == project_id:
                self._current_id = None
        return removed

    async def set_current_project(self, project_id: str | None) -> DecisionProject | None:
        """Point the session at a project (or at none). Not persisted."""
        async with self._lock:
            if project_id is None:
                self._current_id = None
                return None
            project = transitions.find_project(self._projects, project_id)
            if project is None:
                logger.warning("set_current_project: project %s not found", project_id)
                return None
            self._current_id = project.id
            return project

    # ==================== Profile ====================

    async def set_profile(self, profile: UserProfile | Mapping[str, Any]) -> UserProfile:
        """Save the onboarding profile."""
        if not isinstance(profile, UserProfile):
            profile = UserProfile.model_validate(profile)
        async with self._lock:
            await self._gateway.save(PROFILE_KEY, profile.model_dump(mode="json", by_alias=True))
            self._profile = profile
        return profile

    async def logout(self) -> None:
        """Forget the profile. Projects stay."""
        async with self._lock:
            await self._gateway.delete(PROFILE_KEY)
            self._profile = None

    @property
    def profile(self) -> UserProfile | None:
        return self._profile

    @property
    def is_onboarded(self) -> bool:
        return self._profile is not None

    # ==================== Reads ====================

    @property
    def catalog(self) -> CatalogStore:
        return self._catalog

    @property
    def baseline(self) -> Baseline:
        return self._baseline

    @property
    def projects(self) -> Projects:
        """All projects, newest first."""
        return self._projects

    @property
    def current_project(self) -> DecisionProject | None:
        if self._current_id is None:
            return None
        return transitions.find_project(self._projects, self._current_id)

    @property
    def active_projects(self) -> Projects:
        return tuple(p for p in self._projects if p.status == ProjectStatus.ACTIVE)

    @property
    def completed_projects(self) -> Projects:
        return tuple(p for p in self._projects if p.status == ProjectStatus.COMPLETED)

    def recent_projects(self, limit: int = 3) -> Projects:
        """Most recently created projects."""
        return self._projects[:limit]

    def get_project(self, project_id: str) -> DecisionProject | None:
        return transitions.find_project(self._projects, project_id)

    def _resolve(self, project_id: str | None) -> DecisionProject | None:
        if project_id is None:
            return self.current_project
        return self.get_project(project_id)

    def is_selected(self, project_id: str, innovation_id: str) -> bool:
        project = self.get_project(project_id)
        return project is not None and selection.contains(
            project.selected_innovations, innovation_id
        )

    def filtered_innovations(self, project_id: str | None = None) -> tuple[Innovation, ...]:
        """
        Catalog narrowed by a project's context.

        Defaults to the current project. With no project or no context the
        whole catalog is returned.
        """
        project = self._resolve(project_id)
        context = project.context if project else None
        return filter_by_context(self._catalog.get_all(), context)

    def explore(
        self,
        project_id: str | None = None,
        key: SortKey | str = SortKey.IMPACT_SCORE,
        search_term: str = "",
        category: str = ALL_CATEGORIES,
    ) -> list[Innovation]:
        """Context-filtered catalog, then ranked."""
        return rank(
            self.filtered_innovations(project_id),
            key=key,
            search_term=search_term,
            category=category,
        )

    def selected_innovations(self, project_id: str | None = None) -> tuple[Innovation, ...] | None:
        """Selected innovations in catalog order; None if the project is unknown."""
        project = self._resolve(project_id)
        if project is None:
            return None
        return self._catalog.get_many(project.selected_innovations)

    def project_impact(self, project_id: str | None = None) -> ProjectionResult | None:
        selected = self.selected_innovations(project_id)
        if selected is None:
            return None
        return project_impact(selected, self._baseline)

    def action_brief(self, project_id: str | None = None) -> ActionBrief:
        """
        Build the action brief for a project.

        Raises:
            ProjectNotFoundError: No such project (or no current project).
        """
        project = self._resolve(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id or "<current>")
        selected = self._catalog.get_many(project.selected_innovations)
        return build_action_brief(project, selected, project_impact(selected, self._baseline))
