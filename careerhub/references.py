"""Professional references: list, save, delete, request, share."""
from __future__ import annotations

from dataclasses import replace

from careerhub.api import ApiClient, payload_dict, payload_list
from careerhub.errors import ApiError, ErrorKind
from careerhub.log import get_logger
from careerhub.models import Reference, ReferenceList, ReferenceStatus
from careerhub.optimistic import Insert, OptimisticList, Remove, Replace

log = get_logger(__name__)

SHARE_EXPIRY_DAYS: tuple[int, ...] = (7, 14, 30)


class ReferencesApi:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def get_references(self) -> list[Reference]:
        data = self.api.get("/api/references", action="fetch references")
        return [Reference.from_dict(r) for r in payload_list(data, "references")]

    def add_reference(self, reference: Reference) -> Reference:
        data = self.api.post("/api/references", action="add reference", body=reference.to_payload())
        return Reference.from_dict(payload_dict(data, "add reference"))

    def update_reference(self, reference_id: str, changes: dict) -> Reference:
        data = self.api.patch(f"/api/references/{reference_id}", action="update reference", body=changes)
        return Reference.from_dict(payload_dict(data, "update reference"))

    def delete_reference(self, reference_id: str) -> None:
        self.api.delete(f"/api/references/{reference_id}", action="delete reference")

    def request_reference(self, reference_id: str, message: str) -> None:
        self.api.post(
            f"/api/references/{reference_id}/request",
            action="send request",
            body={"message": message},
        )

    def get_requests(self) -> list[dict]:
        data = self.api.get("/api/references/requests", action="fetch requests")
        return payload_list(data, "requests")

    def get_lists(self) -> list[ReferenceList]:
        data = self.api.get("/api/references/lists", action="fetch lists")
        return [ReferenceList.from_dict(r) for r in payload_list(data, "lists")]

    def create_list(self, name: str, reference_ids: list[str]) -> ReferenceList:
        data = self.api.post(
            "/api/references/lists",
            action="create list",
            body={"name": name, "references": list(reference_ids)},
        )
        return ReferenceList.from_dict(payload_dict(data, "create list"))

    def share_list(self, list_id: str, expiry_days: int) -> str:
        data = self.api.post(
            f"/api/references/lists/{list_id}/share",
            action="share list",
            body={"expiryDays": expiry_days},
        )
        link = payload_dict(data, "share list").get("link")
        if not isinstance(link, str) or not link:
            raise ApiError("Failed to share list", ErrorKind.MALFORMED)
        return link

    def import_from_linkedin(self) -> int:
        data = self.api.post("/api/references/import/linkedin", action="import")
        imported = payload_dict(data, "import").get("imported", 0)
        return imported if isinstance(imported, int) else 0


class ReferencesManager:
    def __init__(self, references: ReferencesApi) -> None:
        self.references_api = references
        self._list: OptimisticList[Reference] = OptimisticList(name="references")
        self.lists: list[ReferenceList] = []

    @property
    def references(self) -> list[Reference]:
        return self._list.items

    @property
    def error(self) -> str | None:
        return self._list.error

    def load(self) -> bool:
        ok = self._list.load(self.references_api.get_references)
        try:
            self.lists = self.references_api.get_lists()
        except ApiError as exc:
            log.warning("Reference lists unavailable: %s", exc)
        return ok

    def save(self, reference: Reference) -> bool:
        """Create *reference* when it has no id, otherwise update it."""
        if not reference.id:
            draft = replace(reference, id=f"tmp-{self._list.next_mutation_id()}", status=ReferenceStatus.PENDING)
            return self._list.mutate(Insert(draft), lambda: self.references_api.add_reference(reference))

        current = self._list.get(reference.id)
        if current is None:
            log.warning("Unknown reference %s", reference.id)
            return False
        before = current.to_payload()
        changes = {k: v for k, v in reference.to_payload().items() if before.get(k) != v}
        if not changes:
            return True
        return self._list.mutate(
            Replace(reference),
            lambda: self.references_api.update_reference(reference.id, changes),
        )

    def delete(self, reference_id: str) -> bool:
        if self._list.get(reference_id) is None:
            return False
        return self._list.mutate(
            Remove(reference_id),
            lambda: self.references_api.delete_reference(reference_id),
        )

    def send_request(self, reference_id: str, message: str) -> bool:
        reference = self._list.get(reference_id)
        if reference is None:
            return False
        return self._list.mutate(
            Replace(replace(reference, status=ReferenceStatus.PENDING)),
            lambda: self.references_api.request_reference(reference_id, message),
        )

    def create_list(self, name: str, reference_ids: list[str]) -> ReferenceList | None:
        try:
            created = self.references_api.create_list(name, reference_ids)
        except ApiError as exc:
            log.error("Creating reference list %r failed: %s", name, exc)
            self._list.fail(str(exc))
            return None
        self.lists.append(created)
        return created

    def share_list(self, list_id: str, expiry_days: int = 14) -> str | None:
        if expiry_days not in SHARE_EXPIRY_DAYS:
            raise ValueError(f"expiry must be one of {SHARE_EXPIRY_DAYS} days")
        try:
            link = self.references_api.share_list(list_id, expiry_days)
        except ApiError as exc:
            log.error("Sharing list %s failed: %s", list_id, exc)
            self._list.fail(str(exc))
            return None
        self.lists = [replace(rl, share_link=link) if rl.id == list_id else rl for rl in self.lists]
        return link

    def import_from_linkedin(self) -> int:
        try:
            imported = self.references_api.import_from_linkedin()
        except ApiError as exc:
            log.error("LinkedIn import failed: %s", exc)
            self._list.fail(str(exc))
            return 0
        if imported:
            self._list.load(self.references_api.get_references)
        return imported

    def close(self) -> None:
        self._list.close()
