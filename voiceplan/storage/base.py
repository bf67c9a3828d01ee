"""Storage contract for stored plans and itineraries."""

from typing import List, Literal, Optional, Protocol, Union

from voiceplan.schemas.content import StoredItinerary, StoredPlan

ContentKind = Literal["plan", "itinerary"]
StoredContent = Union[StoredPlan, StoredItinerary]


class ContentStore(Protocol):
    """Read/write/delete contract any storage backend must satisfy."""

    async def upsert(self, kind: ContentKind, document: StoredContent) -> StoredContent:
        """Insert or replace a document by id."""
        ...

    async def get(self, kind: ContentKind, user_id: str, content_id: str) -> StoredContent:
        """
        Fetch one of the user's documents.

        Raises:
            NotFoundError: If the user owns no such document
        """
        ...

    async def delete(self, kind: ContentKind, user_id: str, content_id: str) -> None:
        """Delete one of the user's documents; raises NotFoundError if absent."""
        ...

    async def list(self, kind: ContentKind, user_id: str) -> List[StoredContent]:
        """The user's documents, newest ``createdAt`` first."""
        ...

    async def get_shared(self, kind: ContentKind, content_id: str) -> Optional[StoredContent]:
        """Read-only lookup by id regardless of owner."""
        ...
