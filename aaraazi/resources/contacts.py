"""
Contacts resource.

Lists are paginated and filtered by a query object (type, category, status,
agent, free-text search). Updates use PUT; deletes are soft on the backend.
"""

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, Field

from aaraazi.resources.base import ApiModel, BaseResource, dump_payload


class Contact(ApiModel):
    id: str
    name: str = ""
    phone: str = ""
    email: str | None = None
    alternate_phone: str | None = None
    address: str | None = None
    type: str | None = None
    category: str | None = None
    status: str | None = None
    tenant_id: str | None = None
    agency_id: str | None = None
    branch_id: str | None = None
    agent_id: str | None = None
    tags: str | None = None
    is_shared: bool = False
    created_at: str | None = None
    updated_at: str | None = None


class CreateContactPayload(ApiModel):
    name: str
    phone: str
    type: str
    category: str
    tenant_id: str
    agency_id: str
    email: str | None = None
    alternate_phone: str | None = None
    address: str | None = None
    status: str | None = None
    branch_id: str | None = None
    agent_id: str | None = None
    preferences: str | None = None  # JSON string
    tags: str | None = None
    is_shared: bool | None = None
    origin_lead_id: str | None = None


class UpdateContactPayload(ApiModel):
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    alternate_phone: str | None = None
    address: str | None = None
    type: str | None = None
    category: str | None = None
    status: str | None = None
    agent_id: str | None = None
    tags: str | None = None
    is_shared: bool | None = None


class ContactQuery(ApiModel):
    """Query object for the contacts list; ``to_params`` feeds the cache key."""

    type: str | None = None
    category: str | None = None
    status: str | None = None
    agent_id: str | None = None
    search: str | None = None
    tags: str | None = None
    page: int | None = None
    limit: int | None = None
    sort_by: str | None = None
    sort_order: str | None = None

    def to_params(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ContactPage(BaseModel):
    items: list[Contact] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 0
    pages: int = 0

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)


class ContactStatistics(ApiModel):
    total: int = 0
    by_type: dict[str, int] = Field(default_factory=dict)
    by_category: dict[str, int] = Field(default_factory=dict)
    by_status: dict[str, int] = Field(default_factory=dict)
    recent_contacts: int = 0


class ContactsResource(BaseResource[Contact]):
    path = "/contacts"
    label = "contact"
    model = Contact
    update_method = "PUT"

    def list_params(self, filter_param: Any) -> dict[str, Any] | None:
        if isinstance(filter_param, ContactQuery):
            return filter_param.to_params()
        if isinstance(filter_param, Mapping):
            return dict(filter_param)
        return None

    async def find_all(self, filter_param: Any = None) -> ContactPage:
        data = await self._call(
            "fetch contacts", "GET", self.path, params=self.list_params(filter_param)
        )
        if not isinstance(data, dict):
            return ContactPage()
        items = self.parse_list(data.get("data"))
        return ContactPage(
            items=items,
            total=data.get("total") or len(items),
            page=data.get("page") or 1,
            limit=data.get("limit") or len(items),
            pages=data.get("pages") or 1,
        )

    async def get_statistics(self) -> ContactStatistics:
        data = await self._call(
            "fetch contact statistics", "GET", f"{self.path}/statistics"
        )
        return self.parse(data, ContactStatistics)

    async def bulk_update(
        self, ids: Sequence[str], payload: UpdateContactPayload | dict
    ) -> list[Contact]:
        body = dump_payload(payload)
        return list(await asyncio.gather(*(self.update(id, body) for id in ids)))

    async def bulk_delete(self, ids: Sequence[str]) -> None:
        await asyncio.gather(*(self.remove(id) for id in ids))
