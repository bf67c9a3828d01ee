"""In-process ContentStore keeping documents in dictionaries."""

from typing import Dict, List, Optional, Tuple

from voiceplan.storage.base import ContentKind, StoredContent
from voiceplan.utils.exceptions import NotFoundError
from voiceplan.utils.logger import get_logger

logger = get_logger(__name__)


class InMemoryContentStore:
    """
    Dictionary-backed store.

    Documents are stored as deep copies so callers cannot mutate stored
    state through a returned object.
    """

    def __init__(self):
        self._documents: Dict[Tuple[str, str], StoredContent] = {}

    async def upsert(self, kind: ContentKind, document: StoredContent) -> StoredContent:
        self._documents[(kind, document.id)] = document.model_copy(deep=True)
        logger.info("document_upserted", kind=kind, content_id=document.id, user_id=document.user_id)
        return document

    async def get(self, kind: ContentKind, user_id: str, content_id: str) -> StoredContent:
        document = self._documents.get((kind, content_id))
        if document is None or document.user_id != user_id:
            raise NotFoundError(
                f"{kind.capitalize()} not found: {content_id}",
                context={"kind": kind, "content_id": content_id, "user_id": user_id},
            )
        return document.model_copy(deep=True)

    async def delete(self, kind: ContentKind, user_id: str, content_id: str) -> None:
        await self.get(kind, user_id, content_id)
        del self._documents[(kind, content_id)]
        logger.info("document_deleted", kind=kind, content_id=content_id, user_id=user_id)

    async def list(self, kind: ContentKind, user_id: str) -> List[StoredContent]:
        documents = [
            document
            for (stored_kind, _), document in self._documents.items()
            if stored_kind == kind and document.user_id == user_id
        ]
        documents.sort(key=lambda document: document.created_at, reverse=True)
        return [document.model_copy(deep=True) for document in documents]

    async def get_shared(self, kind: ContentKind, content_id: str) -> Optional[StoredContent]:
        document = self._documents.get((kind, content_id))
        return document.model_copy(deep=True) if document is not None else None
