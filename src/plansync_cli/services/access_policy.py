"""Access control policy for project plans.

Owners may read, update and delete. Collaborators may read. Nobody else may
do anything, and a missing identity is never authorized.

These checks are advisory on the client: the store's filtered queries are the
enforcement boundary. ``read_query`` and ``write_query`` build those filters
from the same rules, and ``matches`` evaluates a query exactly the way the
predicates below do, so client expectations and store outcomes agree.
"""

from __future__ import annotations

from plansync_cli.models import Project, ProjectQuery


def can_read(project: Project, identity_id: str | None) -> bool:
    """True iff the identity owns the project or is one of its collaborators."""
    if not identity_id:
        return False
    return identity_id == project.created_by or identity_id in project.collaborators


def can_write(project: Project, identity_id: str | None) -> bool:
    """True iff the identity owns the project."""
    if not identity_id:
        return False
    return identity_id == project.created_by


def can_delete(project: Project, identity_id: str | None) -> bool:
    """Deleting requires the same rights as writing."""
    return can_write(project, identity_id)


def read_query(identity_id: str, project_id: str | None = None) -> ProjectQuery:
    """Store filter for everything ``identity_id`` may read."""
    return ProjectQuery(readable_by=identity_id, project_id=project_id)


def write_query(identity_id: str, project_id: str) -> ProjectQuery:
    """Store filter for updating or deleting one project ``identity_id`` owns."""
    return ProjectQuery(owned_by=identity_id, project_id=project_id, newest_first=False)


def matches(project: Project, query: ProjectQuery) -> bool:
    """Evaluate a store filter against a project. Unscoped queries match nothing."""
    if query.readable_by is None and query.owned_by is None:
        return False
    if query.project_id is not None and project.id != query.project_id:
        return False
    if query.readable_by is not None and not can_read(project, query.readable_by):
        return False
    if query.owned_by is not None and not can_write(project, query.owned_by):
        return False
    return True
