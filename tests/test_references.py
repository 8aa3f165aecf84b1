"""
Unit tests for the references manager.
"""
import pytest

from careerhub.models import Reference, ReferenceStatus
from careerhub.references import ReferencesApi, ReferencesManager


pytestmark = [pytest.mark.unit]

REFS = {"references": [
    {"id": "r1", "name": "Sam Park", "email": "sam@example.com", "relationship": "manager", "status": "active"},
    {"id": "r2", "name": "Ana Cruz", "email": "ana@example.com", "relationship": "colleague", "status": "active"},
]}


@pytest.fixture
def manager(api, session):
    session.add("GET", "/api/references", payload=REFS)
    session.add("GET", "/api/references/lists", payload={"lists": [{"id": "l1", "name": "Default", "references": ["r1"]}]})
    m = ReferencesManager(ReferencesApi(api))
    assert m.load()
    return m


class TestReferences:

    def test_load(self, manager):
        assert [r.id for r in manager.references] == ["r1", "r2"]
        assert manager.lists[0].references == ["r1"]

    def test_create(self, manager, session):
        """New references show as pending until the server confirms."""
        session.add("POST", "/api/references", payload={"id": "r3", "name": "Lee", "status": "pending"})
        assert manager.save(Reference(id="", name="Lee", email="lee@example.com"))
        assert manager.references[0].id == "r3"
        assert manager.references[0].status is ReferenceStatus.PENDING
        assert "id" not in session.calls[-1]["json"]

    def test_update_sends_changed_fields(self, manager, session):
        session.add("PATCH", "/api/references/r1", payload={**REFS["references"][0], "company": "Globex"})
        edited = Reference.from_dict({**REFS["references"][0], "company": "Globex"})
        assert manager.save(edited)
        assert session.calls[-1]["json"] == {"company": "Globex"}

    def test_unchanged_save_sends_nothing(self, manager, session):
        calls = len(session.calls)
        assert manager.save(manager.references[0])
        assert len(session.calls) == calls

    def test_delete_failure_restores(self, manager, session):
        """A failed delete puts the reference back where it was."""
        session.add("DELETE", "/api/references/r1", status=500, payload={})
        assert not manager.delete("r1")
        assert [r.id for r in manager.references] == ["r1", "r2"]
        assert manager.error == "Failed to delete reference"

    def test_delete(self, manager, session):
        session.add("DELETE", "/api/references/r1", status=204)
        assert manager.delete("r1")
        assert [r.id for r in manager.references] == ["r2"]

    def test_send_request_marks_pending(self, manager, session):
        session.add("POST", "/api/references/r2/request", payload={})
        assert manager.send_request("r2", "Could you vouch for me?")
        assert manager.references[1].status is ReferenceStatus.PENDING
        assert session.calls[-1]["json"] == {"message": "Could you vouch for me?"}


class TestLists:

    def test_share_list(self, manager, session):
        session.add("POST", "/api/references/lists/l1/share", payload={"link": "https://x.test/s/abc"})
        assert manager.share_list("l1", 7) == "https://x.test/s/abc"
        assert manager.lists[0].share_link == "https://x.test/s/abc"

    def test_share_expiry_validated(self, manager):
        with pytest.raises(ValueError):
            manager.share_list("l1", 3)

    def test_share_without_link_fails(self, manager, session):
        session.add("POST", "/api/references/lists/l1/share", payload={})
        assert manager.share_list("l1") is None
        assert manager.error == "Failed to share list"

    def test_create_list(self, manager, session):
        session.add("POST", "/api/references/lists", payload={"id": "l2", "name": "Tech", "references": ["r2"]})
        created = manager.create_list("Tech", ["r2"])
        assert created.id == "l2"
        assert [rl.id for rl in manager.lists] == ["l1", "l2"]

    def test_linkedin_import_reloads(self, manager, session):
        session.add("POST", "/api/references/import/linkedin", payload={"imported": 2})
        assert manager.import_from_linkedin() == 2
        assert len(session.calls_to("GET", "/api/references")) == 2
