"""
Documents store.

Lists are keyed by the effective query: the store's standing filters with the
caller's query laid over them. Every mutation drops all cached lists, as for
properties and contacts, and re-fetches the unfiltered one.
"""

from collections.abc import Sequence

from aaraazi.cache import CacheEntry, ResourceCache
from aaraazi.cache.keys import FilterParam
from aaraazi.resources.documents import (
    Document,
    DocumentPage,
    DocumentQuery,
    DocumentsResource,
)


class DocumentsStore(ResourceCache[Document, DocumentPage]):
    """
    Usage:
        documents = DocumentsStore(DocumentsResource(client))
        documents.set_filters(DocumentQuery(property_id="pl-1"))
        await documents.fetch_list(DocumentQuery(status="SIGNED"))
        page = documents.list_entry(DocumentQuery(status="SIGNED")).data
    """

    def __init__(
        self, service: DocumentsResource, coalesce: bool = False, debug: bool = False
    ):
        super().__init__(
            service,
            name="documents",
            list_error="Failed to load documents",
            detail_error="Failed to load document",
            empty_list=DocumentPage,
            invalidate_lists_on_mutation=True,
            coalesce=coalesce,
            debug=debug,
        )
        self.filters = DocumentQuery()

    def set_filters(self, filters: DocumentQuery) -> None:
        self.filters = filters

    def clear_filters(self) -> None:
        self.filters = DocumentQuery()

    def effective_query(self, query: DocumentQuery | None = None) -> FilterParam:
        return self.filters.merged(query).to_params()

    def list_entry(self, query: DocumentQuery | None = None) -> CacheEntry[DocumentPage]:
        return super().list_entry(self.effective_query(query))

    async def fetch_list(self, query: DocumentQuery | None = None) -> None:
        await super().fetch_list(self.effective_query(query))

    async def bulk_delete(self, ids: Sequence[str]) -> None:
        await self._mutate(lambda: self.service.bulk_delete(ids), purge=ids)
