"""
Unit tests for feature-flag administration and the session flag cache.
"""
import pytest

from careerhub.context import SessionContext
from careerhub.feature_flags import BASE_PATH, FeatureFlagsAdmin, FeatureFlagsApi
from careerhub.models import FeatureFlag

from conftest import FakeSession


pytestmark = [pytest.mark.unit]

FLAGS = {"flags": [
    {"id": "f1", "key": "new-feed", "name": "New feed", "enabled": False, "value": True, "defaultValue": False},
    {"id": "f2", "key": "dark-mode", "enabled": True, "value": "auto"},
]}


@pytest.fixture
def context(settings, session):
    ctx = SessionContext(settings, session_factory=lambda: session)
    ctx.login("tok")
    return ctx


@pytest.fixture
def admin(context, session):
    session.add("GET", BASE_PATH, payload=FLAGS)
    a = FeatureFlagsAdmin(FeatureFlagsApi(context.api), context)
    assert a.load()
    return a


class TestFeatureFlagsAdmin:

    def test_load_fills_cache(self, admin, context):
        assert not context.is_enabled("new-feed")
        assert context.flag_value("dark-mode") == "auto"

    def test_toggle(self, admin, context, session):
        session.add("POST", f"{BASE_PATH}/f1/toggle", payload={})
        assert admin.toggle("f1")
        assert session.calls[-1]["json"] == {"enabled": True}
        assert admin.flags[0].enabled
        assert context.is_enabled("new-feed")

    def test_toggle_failure_rolls_back(self, admin, context, session):
        session.add("POST", f"{BASE_PATH}/f1/toggle", status=500, payload={})
        assert not admin.toggle("f1")
        assert not admin.flags[0].enabled
        assert not context.is_enabled("new-feed")
        assert admin.error == "Failed to toggle flag"

    def test_create(self, admin, session):
        session.add("POST", BASE_PATH, payload={"id": "f3", "key": "beta", "enabled": False})
        assert admin.save(FeatureFlag(id="", key="beta"))
        assert admin.flags[0].id == "f3"

    def test_save_requires_key(self, admin):
        with pytest.raises(ValueError):
            admin.save(FeatureFlag(id="", key=""))

    def test_update_uses_put(self, admin, session):
        flag = admin.flags[1]
        session.add("PUT", f"{BASE_PATH}/f2", payload={"id": "f2", "key": "dark-mode", "enabled": True, "value": "on"})
        assert admin.save(flag)
        assert admin.flags[1].value == "on"

    def test_delete_forgets_cached_flag(self, admin, context, session):
        session.add("DELETE", f"{BASE_PATH}/f2", status=204)
        assert admin.delete("f2")
        assert [f.id for f in admin.flags] == ["f1"]
        assert context.flag_value("dark-mode", "default") == "default"

    def test_add_rule(self, admin, session):
        session.add("POST", f"{BASE_PATH}/f1/rules", payload={
            "id": "rule1", "attribute": "country", "operator": "equals", "value": "AU",
        })
        rule = admin.add_rule("f1", "country", "equals", "AU")
        assert rule.id == "rule1"
        assert [r.id for r in admin.flags[0].targeting_rules] == ["rule1"]
        assert len(session.calls_to("POST", f"{BASE_PATH}/f1/rules")) == 1

    def test_add_rule_validates_operator(self, admin):
        with pytest.raises(ValueError):
            admin.add_rule("f1", "country", "matches", "AU")

    def test_audit_log_failure_is_empty(self, admin, session):
        session.add("GET", f"{BASE_PATH}/f1/audit", status=403, payload={})
        assert admin.audit_log("f1") == []


class TestSessionContext:

    def test_api_requires_login(self, settings):
        from careerhub.errors import NotAuthenticated

        ctx = SessionContext(settings, session_factory=FakeSession)
        with pytest.raises(NotAuthenticated):
            ctx.api

    def test_empty_token_rejected(self, settings):
        with pytest.raises(ValueError):
            SessionContext(settings, session_factory=FakeSession).login("")

    def test_logout_clears_everything(self, context, session):
        context.remember_flags([FeatureFlag(id="f", key="k", enabled=True)])
        context.logout()
        assert session.closed
        assert not context.is_authenticated
        assert not context.is_enabled("k")

    def test_contexts_do_not_share_state(self, settings):
        a = SessionContext(settings, session_factory=FakeSession)
        b = SessionContext(settings, session_factory=FakeSession)
        a.remember_flags([FeatureFlag(id="f", key="k", enabled=True)])
        assert a.is_enabled("k")
        assert not b.is_enabled("k")

    def test_disabled_flag_value_falls_back(self, settings):
        ctx = SessionContext(settings, session_factory=FakeSession)
        ctx.remember_flags([FeatureFlag(id="f", key="k", enabled=False, value=3)])
        assert ctx.flag_value("k", 0) == 0

    def test_context_manager_logs_out(self, settings):
        created = []

        def factory():
            created.append(FakeSession())
            return created[-1]

        with SessionContext(settings, session_factory=factory) as ctx:
            ctx.login("tok")
        assert created[0].closed
