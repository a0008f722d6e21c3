"""
Documents resource.

Generated and uploaded agreements (sales agreements, sale deeds, rental
agreements, receipts). The backend speaks SCREAMING_CASE document types;
the dashboard uses kebab-case ones, and several backend types fold into
the closest dashboard type on the way in.
"""

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from aaraazi.resources.base import ApiModel, BaseResource, dump_payload

TYPE_TO_BACKEND = {
    "sales-agreement": "SALES_AGREEMENT",
    "final-sale-deed": "FINAL_SALE_DEED",
    "rental-agreement": "RENTAL_AGREEMENT",
    "property-disclosure": "PROPERTY_DISCLOSURE",
    "payment-receipt": "PAYMENT_RECEIPT",
}

TYPE_FROM_BACKEND = {
    "SALES_AGREEMENT": "sales-agreement",
    "FINAL_SALE_DEED": "final-sale-deed",
    "RENTAL_AGREEMENT": "rental-agreement",
    "PROPERTY_DISCLOSURE": "property-disclosure",
    "PAYMENT_RECEIPT": "payment-receipt",
    "PAYMENT_SCHEDULE": "payment-receipt",
    "OFFER_LETTER": "sales-agreement",
    "LISTING_AGREEMENT": "sales-agreement",
    "BUYER_REPRESENTATION": "sales-agreement",
    "PROPERTY_BROCHURE": "property-disclosure",
    "CUSTOM": "sales-agreement",
}


def to_backend_type(document_type: str) -> str:
    return TYPE_TO_BACKEND.get(document_type, document_type)


class Document(ApiModel):
    id: str
    document_type: str = ""
    document_name: str = ""
    status: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    clauses: list[dict[str, Any]] = Field(default_factory=list)
    property_id: str | None = None
    transaction_id: str | None = None
    contact_id: str | None = None
    agency_id: str | None = None
    tenant_id: str | None = None
    pdf_url: str | None = None
    file_size: int | None = None
    created_by: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @field_validator("document_type", mode="before")
    @classmethod
    def _dashboard_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return TYPE_FROM_BACKEND.get(value, value)
        return value

    @field_validator("details", "clauses", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return {} if info.field_name == "details" else []
        return value


class CreateDocumentPayload(ApiModel):
    document_type: str
    document_name: str
    agency_id: str
    tenant_id: str
    details: dict[str, Any] = Field(default_factory=dict)
    clauses: list[dict[str, Any]] = Field(default_factory=list)
    property_id: str | None = None
    transaction_id: str | None = None
    contact_id: str | None = None


class UpdateDocumentPayload(ApiModel):
    document_name: str | None = None
    status: str | None = None
    details: dict[str, Any] | None = None
    clauses: list[dict[str, Any]] | None = None
    pdf_url: str | None = None
    file_size: int | None = None


class DocumentQuery(ApiModel):
    agency_id: str | None = None
    tenant_id: str | None = None
    property_id: str | None = None
    transaction_id: str | None = None
    contact_id: str | None = None
    document_type: str | None = None
    status: str | None = None
    created_by: str | None = None
    search: str | None = None
    page: int | None = None
    limit: int | None = None

    def to_params(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def merged(self, other: "DocumentQuery | None") -> "DocumentQuery":
        """This query overridden by every field ``other`` sets."""
        if other is None:
            return self
        return self.model_copy(update=other.model_dump(exclude_none=True))


class DocumentPage(BaseModel):
    items: list[Document] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20
    total_pages: int = 0

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)


class DocumentsResource(BaseResource[Document]):
    path = "/documents"
    label = "document"
    model = Document

    def list_params(self, filter_param: Any) -> dict[str, Any] | None:
        if isinstance(filter_param, DocumentQuery):
            return filter_param.to_params()
        if isinstance(filter_param, Mapping):
            return dict(filter_param)
        return None

    async def find_all(self, filter_param: Any = None) -> DocumentPage:
        data = await self._call(
            "fetch documents", "GET", self.path, params=self.list_params(filter_param)
        )
        if not isinstance(data, dict):
            return DocumentPage()
        items = self.parse_list(data.get("data"))
        meta = data.get("meta") if isinstance(data.get("meta"), dict) else {}
        return DocumentPage(
            items=items,
            total=meta.get("total", len(items)),
            page=meta.get("page", 1),
            limit=meta.get("limit", 20),
            total_pages=meta.get("totalPages", 1),
        )

    async def create(self, payload: CreateDocumentPayload | dict) -> Document:
        body = dict(dump_payload(payload))
        if body.get("documentType"):
            body["documentType"] = to_backend_type(body["documentType"])
        return await super().create(body)

    async def bulk_delete(self, ids: Sequence[str]) -> None:
        await asyncio.gather(*(self.remove(id) for id in ids))
