"""Tests for the project access policy."""

import pytest

from plansync_cli.models import Identity, ProjectQuery
from plansync_cli.services.access_policy import (
    can_delete,
    can_read,
    can_write,
    matches,
    read_query,
    write_query,
)

OWNER = Identity(id="owner-id", email="owner@example.com")
COLLABORATOR = Identity(id="collab-id", email="collab@example.com")
STRANGER = Identity(id="stranger-id", email="stranger@example.com")


@pytest.fixture
def shared_project(make_project):
    return make_project("p1", OWNER, collaborators=[COLLABORATOR])


class TestPredicates:
    def test_owner_has_full_access(self, shared_project):
        assert can_read(shared_project, OWNER.id)
        assert can_write(shared_project, OWNER.id)
        assert can_delete(shared_project, OWNER.id)

    def test_collaborator_may_only_read(self, shared_project):
        assert can_read(shared_project, COLLABORATOR.id)
        assert not can_write(shared_project, COLLABORATOR.id)
        assert not can_delete(shared_project, COLLABORATOR.id)

    def test_stranger_has_no_access(self, shared_project):
        assert not can_read(shared_project, STRANGER.id)
        assert not can_write(shared_project, STRANGER.id)
        assert not can_delete(shared_project, STRANGER.id)

    @pytest.mark.parametrize("identity_id", [None, ""])
    def test_missing_identity_is_never_authorized(self, shared_project, identity_id):
        assert not can_read(shared_project, identity_id)
        assert not can_write(shared_project, identity_id)
        assert not can_delete(shared_project, identity_id)

    def test_writers_are_readers(self, make_project):
        projects = [
            make_project("a", OWNER),
            make_project("b", OWNER, collaborators=[COLLABORATOR, STRANGER]),
        ]
        for project in projects:
            for who in (OWNER, COLLABORATOR, STRANGER):
                if can_write(project, who.id):
                    assert can_read(project, who.id)


class TestQueries:
    def test_read_query_scopes_to_identity(self):
        query = read_query("me")
        assert query.readable_by == "me"
        assert query.owned_by is None
        assert query.project_id is None
        assert query.newest_first is True

    def test_read_query_for_one_project(self):
        assert read_query("me", "p1").project_id == "p1"

    def test_write_query_scopes_to_owner(self):
        query = write_query("me", "p1")
        assert query.owned_by == "me"
        assert query.readable_by is None
        assert query.project_id == "p1"


class TestMatches:
    def test_read_query_matches_owner_and_collaborator(self, shared_project):
        assert matches(shared_project, read_query(OWNER.id))
        assert matches(shared_project, read_query(COLLABORATOR.id))
        assert not matches(shared_project, read_query(STRANGER.id))

    def test_write_query_matches_owner_only(self, shared_project):
        assert matches(shared_project, write_query(OWNER.id, "p1"))
        assert not matches(shared_project, write_query(COLLABORATOR.id, "p1"))

    def test_project_id_restricts_match(self, shared_project):
        assert not matches(shared_project, read_query(OWNER.id, "other"))

    def test_unscoped_query_matches_nothing(self, shared_project):
        assert not matches(shared_project, ProjectQuery())
        assert not matches(shared_project, ProjectQuery(project_id="p1"))
