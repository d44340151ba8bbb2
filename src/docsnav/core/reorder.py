"""Reorder protocol: accept a client's full proposed tree and persist it in one replace.

The client computes the new order (after a drag gesture) and submits
{"structure": {"title", "version", "routes"}}; array position is the only
order the server trusts. The same handler serves section renames, which
mutate one node in place before the same single write.
"""

import logging
from typing import Any, Optional

from pydantic import ValidationError

from docsnav.core.content import ContentManager
from docsnav.core.errors import DocsNavError, Forbidden, NotFound, Unauthorized, ValidationFailure
from docsnav.core.models import Actor, HandlerResult, Navigation, Outcome
from docsnav.crud.models import Project


logger = logging.getLogger(__name__)

EDITOR_ROLE = "editor"

_PUBLIC_MESSAGES = {
    Outcome.unauthorized: "Unauthorized",
    Outcome.forbidden: "Forbidden",
    Outcome.conflict: "Navigation was changed by someone else; reload and retry",
    Outcome.internal_error: "Failed to update navigation",
}


def _failure(error: DocsNavError) -> HandlerResult:
    """Map an exception to its outcome; only validation and not-found messages reach the caller."""
    outcome = error.outcome
    message = _PUBLIC_MESSAGES.get(outcome, str(error))
    return HandlerResult(outcome=outcome, error=message)


def _parse_structure(payload: Any) -> Navigation:
    """Validate a reorder payload into a Navigation. Raises ValidationFailure."""
    structure = payload.get("structure") if isinstance(payload, dict) else None
    if not isinstance(structure, dict) or not isinstance(structure.get("routes"), list):
        raise ValidationFailure("Invalid navigation structure")
    try:
        return Navigation.model_validate({
            "title": structure.get("title") or "Documentation",
            "version": str(structure.get("version") or "1.0"),
            "routes": structure["routes"],
            "revision": structure.get("revision"),
        })
    except ValidationError as e:
        raise ValidationFailure(f"Invalid navigation structure: {e.error_count()} malformed node(s)") from e


class ReorderHandler:

    def __init__(self, manager: ContentManager):
        self.manager = manager

    def _authorize(self, project_slug: str, actor: Optional[Actor]) -> Project:
        project = self.manager.resolve_project(slug=project_slug)
        if project is None:
            raise NotFound("Project not found")
        if not self.manager.check_access(actor, project.id, EDITOR_ROLE):
            raise Forbidden(f"{actor.id} is not an editor of {project_slug}")
        return project

    def reorder(self, project_slug: str, payload: Any, actor: Optional[Actor]) -> HandlerResult:
        """Replace the project's navigation with the proposed tree."""
        try:
            if actor is None:
                raise Unauthorized("No session")
            navigation = _parse_structure(payload)
            project = self._authorize(project_slug, actor)
            saved = self.manager.write_navigation(project.id, navigation, actor)
        except DocsNavError as e:
            logger.warning("Reorder of %s rejected (%s): %s", project_slug, e.outcome.value, e)
            return _failure(e)
        logger.info("Navigation of %s reordered by %s (revision %s)", project_slug, actor.id, saved.revision)
        return HandlerResult(outcome=Outcome.ok)

    def rename_section(self, project_slug: str, section_slug: str, payload: Any, actor: Optional[Actor]) -> HandlerResult:
        """Retitle a section and its overview document from {"title": ...}."""
        try:
            if actor is None:
                raise Unauthorized("No session")
            title = payload.get("title") if isinstance(payload, dict) else None
            if not isinstance(title, str) or not title.strip():
                raise ValidationFailure("Title is required")
            project = self._authorize(project_slug, actor)
            section = self.manager.rename_section(project.id, section_slug, title.strip(), actor)
        except DocsNavError as e:
            logger.warning("Rename of %s/%s rejected (%s): %s", project_slug, section_slug, e.outcome.value, e)
            return _failure(e)
        return HandlerResult(outcome=Outcome.ok, section=section)
