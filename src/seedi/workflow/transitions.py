"""
Project State Machine

Pure transitions over the project collection. Each function takes the
current collection and returns a ``Transition``: the next collection plus
the affected project. Nothing here performs I/O.

States nest a stage (1-4) inside a status (active, completed, archived).
Operating on an unknown project ID returns the collection unchanged with
``project=None``. A transition that changes nothing returns the very same
collection object, so callers can skip the write with an identity check.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NamedTuple

from seedi.core.enums import ProjectStatus, Stage
from seedi.core.exceptions import IncompleteContextError, ValidationError
from seedi.core.schemas import DecisionProject, UserContext, today_utc
from seedi.workflow import selection

Projects = tuple[DecisionProject, ...]


class Transition(NamedTuple):
    """Result of applying a transition to the collection."""

    projects: Projects
    project: DecisionProject | None

    @property
    def found(self) -> bool:
        return self.project is not None


def find_project(projects: Projects, project_id: str) -> DecisionProject | None:
    """Project with the given ID, or None."""
    return next((p for p in projects if p.id == project_id), None)


def _replace(projects: Projects, updated: DecisionProject) -> Projects:
    return tuple(updated if p.id == updated.id else p for p in projects)


def _apply(projects: Projects, project_id: str, **changes: Any) -> Transition:
    """Copy the project with ``changes`` and a fresh ``updated_at``."""
    current = find_project(projects, project_id)
    if current is None:
        return Transition(projects, None)
    # Rebuild rather than model_copy so field validators run on the new values
    updated = DecisionProject.model_validate(
        {**current.model_dump(), **changes, "updated_at": today_utc()}
    )
    return Transition(_replace(projects, updated), updated)


# =============================================================================
# TRANSITIONS
# =============================================================================


def create_project(projects: Projects, title: str) -> Transition:
    """Start a new project at stage 1; it goes to the front of the collection."""
    project = DecisionProject(title=title)
    return Transition((project, *projects), project)


def update_context(
    projects: Projects, project_id: str, context: UserContext | Mapping[str, Any]
) -> Transition:
    """Attach or replace the context. Allowed at any stage; stage is unchanged."""
    if not isinstance(context, UserContext):
        context = UserContext.model_validate(context)
    return _apply(projects, project_id, context=context)


def advance_stage(projects: Projects, project_id: str) -> Transition:
    """
    Move to the next stage.

    At the last stage this is a no-op, never an error. Gating is left to
    the caller (see ``can_advance``).
    """
    current = find_project(projects, project_id)
    if current is None or current.current_stage >= Stage.last():
        return Transition(projects, current)
    return _apply(projects, project_id, current_stage=Stage(current.current_stage + 1))


def toggle_selection(projects: Projects, project_id: str, innovation_id: str) -> Transition:
    """Add or remove one innovation from the project's selection."""
    current = find_project(projects, project_id)
    if current is None:
        return Transition(projects, None)
    return _apply(
        projects,
        project_id,
        selected_innovations=selection.toggle(current.selected_innovations, innovation_id),
    )


def _set_status(projects: Projects, project_id: str, status: ProjectStatus) -> Transition:
    current = find_project(projects, project_id)
    if current is None or current.status == status:
        return Transition(projects, current)
    return _apply(projects, project_id, status=status)


def complete_project(projects: Projects, project_id: str) -> Transition:
    """Mark completed. Stage is kept; completing twice changes nothing."""
    return _set_status(projects, project_id, ProjectStatus.COMPLETED)


def archive_project(projects: Projects, project_id: str) -> Transition:
    """Mark archived. Stage is kept; archiving twice changes nothing."""
    return _set_status(projects, project_id, ProjectStatus.ARCHIVED)


def delete_project(projects: Projects, project_id: str) -> Transition:
    """Remove permanently. The returned project is the one removed."""
    current = find_project(projects, project_id)
    if current is None:
        return Transition(projects, None)
    return Transition(tuple(p for p in projects if p.id != project_id), current)


# =============================================================================
# GATING
# =============================================================================


def can_advance(project: DecisionProject) -> bool:
    """
    Whether the UI should offer "next" for the project's current stage.

    Stage 1 needs a complete context, stage 2 at least one selected
    innovation, stage 3 nothing. Stage 4 ends with ``complete``, not an
    advance.
    """
    stage = project.current_stage
    if stage == Stage.DEFINE_CONTEXT:
        return project.context is not None and project.context.is_complete
    if stage == Stage.EXPLORE_COMPARE:
        return project.innovation_count > 0
    return stage == Stage.ANALYZE_SIMULATE


def ensure_can_advance(project: DecisionProject) -> None:
    """Raise the reason ``can_advance`` would return False."""
    if can_advance(project):
        return
    stage = project.current_stage
    if stage == Stage.DEFINE_CONTEXT:
        context = project.context or UserContext()
        raise IncompleteContextError(context.missing_required)
    if stage == Stage.EXPLORE_COMPARE:
        raise ValidationError(
            "Select at least one innovation before advancing", {"project_id": project.id}
        )
    raise ValidationError(
        "Project is at the final stage; complete it instead", {"project_id": project.id}
    )


def resume_route(project: DecisionProject) -> str:
    """Workflow step to reopen the project at."""
    return project.current_stage.route
