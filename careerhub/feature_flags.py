"""Admin management of feature flags and their targeting rules."""
from __future__ import annotations

from dataclasses import replace

from careerhub.api import ApiClient, payload_dict, payload_list
from careerhub.context import SessionContext
from careerhub.errors import ApiError
from careerhub.log import get_logger
from careerhub.models import FeatureFlag, FlagEnvironment, TargetingRule
from careerhub.optimistic import Insert, OptimisticList, Remove, Replace

log = get_logger(__name__)

RULE_OPERATORS: frozenset[str] = frozenset(
    {"equals", "not_equals", "contains", "in", "not_in", "greater_than", "less_than"}
)

BASE_PATH = "/api/admin/feature-flags"


class FeatureFlagsApi:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def get_flags(self, environment: FlagEnvironment | None = None, search: str | None = None) -> list[FeatureFlag]:
        params = {"environment": environment.value if environment else None, "search": search}
        data = self.api.get(BASE_PATH, action="fetch flags", params=params)
        return [FeatureFlag.from_dict(f) for f in payload_list(data, "flags")]

    def get_flag(self, flag_id: str) -> FeatureFlag:
        data = self.api.get(f"{BASE_PATH}/{flag_id}", action="fetch flag")
        return FeatureFlag.from_dict(payload_dict(data, "fetch flag"))

    def create_flag(self, flag: FeatureFlag) -> FeatureFlag:
        data = self.api.post(BASE_PATH, action="create flag", body=flag.to_payload())
        return FeatureFlag.from_dict(payload_dict(data, "create flag"))

    def update_flag(self, flag: FeatureFlag) -> FeatureFlag:
        data = self.api.put(f"{BASE_PATH}/{flag.id}", action="update flag", body=flag.to_payload())
        return FeatureFlag.from_dict(payload_dict(data, "update flag"))

    def toggle_flag(self, flag_id: str, enabled: bool) -> None:
        self.api.post(f"{BASE_PATH}/{flag_id}/toggle", action="toggle flag", body={"enabled": enabled})

    def delete_flag(self, flag_id: str) -> None:
        self.api.delete(f"{BASE_PATH}/{flag_id}", action="delete flag")

    def get_audit_logs(self, flag_id: str) -> list[dict]:
        data = self.api.get(f"{BASE_PATH}/{flag_id}/audit", action="fetch audit logs")
        return payload_list(data, "logs")

    def add_rule(self, flag_id: str, attribute: str, operator: str, value, enabled: bool = True) -> TargetingRule:
        data = self.api.post(
            f"{BASE_PATH}/{flag_id}/rules",
            action="add rule",
            body={"attribute": attribute, "operator": operator, "value": value, "enabled": enabled},
        )
        return TargetingRule.from_dict(payload_dict(data, "add rule"))

    def delete_rule(self, flag_id: str, rule_id: str) -> None:
        self.api.delete(f"{BASE_PATH}/{flag_id}/rules/{rule_id}", action="delete rule")


class FeatureFlagsAdmin:
    """Flag list with optimistic toggle/save/delete.

    When a :class:`SessionContext` is supplied its flag cache follows every
    successful load and mutation.
    """

    def __init__(self, flags: FeatureFlagsApi, context: SessionContext | None = None) -> None:
        self.flags_api = flags
        self.context = context
        self._list: OptimisticList[FeatureFlag] = OptimisticList(name="feature-flags")

    @property
    def flags(self) -> list[FeatureFlag]:
        return self._list.items

    @property
    def error(self) -> str | None:
        return self._list.error

    def _sync_cache(self) -> None:
        if self.context is not None:
            self.context.remember_flags(self.flags)

    def load(self, environment: FlagEnvironment | None = None, search: str | None = None) -> bool:
        ok = self._list.load(lambda: self.flags_api.get_flags(environment, search))
        if ok:
            self._sync_cache()
        return ok

    def toggle(self, flag_id: str) -> bool:
        flag = self._list.get(flag_id)
        if flag is None:
            log.warning("Unknown flag %s", flag_id)
            return False
        enabled = not flag.enabled
        ok = self._list.mutate(
            Replace(replace(flag, enabled=enabled)),
            lambda: self.flags_api.toggle_flag(flag_id, enabled),
        )
        if ok:
            log.info("Flag %s %s", flag.key, "enabled" if enabled else "disabled")
            self._sync_cache()
        return ok

    def save(self, flag: FeatureFlag) -> bool:
        if not flag.key:
            raise ValueError("flag key is required")
        if flag.id:
            ok = self._list.mutate(Replace(flag), lambda: self.flags_api.update_flag(flag))
        else:
            draft = replace(flag, id=f"tmp-{self._list.next_mutation_id()}")
            ok = self._list.mutate(Insert(draft), lambda: self.flags_api.create_flag(flag))
        if ok:
            self._sync_cache()
        return ok

    def delete(self, flag_id: str) -> bool:
        flag = self._list.get(flag_id)
        if flag is None:
            return False
        ok = self._list.mutate(Remove(flag_id), lambda: self.flags_api.delete_flag(flag_id))
        if ok and self.context is not None:
            self.context.forget_flag(flag.key)
        return ok

    def add_rule(self, flag_id: str, attribute: str, operator: str, value) -> TargetingRule | None:
        if operator not in RULE_OPERATORS:
            raise ValueError(f"unsupported operator {operator!r}")
        flag = self._list.get(flag_id)
        if flag is None:
            return None
        try:
            rule = self.flags_api.add_rule(flag_id, attribute, operator, value)
        except ApiError as exc:
            log.error("Adding rule to %s failed: %s", flag.key, exc)
            self._list.fail(str(exc))
            return None
        # the server already has the rule; record it locally without a second call
        self._list.mutate(Replace(replace(flag, targeting_rules=[*flag.targeting_rules, rule])), lambda: None)
        log.debug("Rule %s added to %s", rule.id, flag.key)
        return rule

    def remove_rule(self, flag_id: str, rule_id: str) -> bool:
        flag = self._list.get(flag_id)
        if flag is None:
            return False
        rules = [r for r in flag.targeting_rules if r.id != rule_id]
        return self._list.mutate(
            Replace(replace(flag, targeting_rules=rules)),
            lambda: self.flags_api.delete_rule(flag_id, rule_id),
        )

    def audit_log(self, flag_id: str) -> list[dict]:
        try:
            return self.flags_api.get_audit_logs(flag_id)
        except ApiError as exc:
            log.error("Audit log for %s unavailable: %s", flag_id, exc)
            return []

    def close(self) -> None:
        self._list.close()
