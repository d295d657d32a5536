"""Case-document vector search through the ``vector-store`` edge function."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from core.exceptions import StorageError
from tools.supabase_client import SupabaseClient

logger = logging.getLogger("discovery.vector_store")

VECTOR_STORE_FUNCTION = "vector-store"


@dataclass(slots=True)
class SearchResult:
    """One chunk returned by a similarity search."""

    id: str
    content: str
    score: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SearchResult:
        return cls(
            id=str(data.get("id", "")),
            content=str(data.get("content", "")),
            score=float(data.get("score") or 0.0),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass(slots=True)
class IndexedDocument:
    """A document handed to the index, in the shape the edge function expects."""

    id: str
    name: str
    content: str
    type: str = "demand_support"

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "content": self.content, "type": self.type}


class VectorStoreClient:
    """Search and maintain the per-case document index."""

    def __init__(self, supabase: SupabaseClient):
        self.supabase = supabase

    async def search(self, query: str, case_id: str, top_k: int = 5) -> list[SearchResult]:
        """Return the chunks most similar to ``query`` for one case.

        Raises:
            StorageError: If the function call fails or answers without results.
        """
        data = await self.supabase.invoke(
            VECTOR_STORE_FUNCTION,
            {"action": "search", "data": {"query": query, "caseId": case_id, "topK": top_k}},
        )
        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            raise StorageError("vector search", "response did not include a results list")

        results = [SearchResult.from_dict(item) for item in data["results"] if isinstance(item, dict)]
        logger.debug(f"Vector search for case {case_id} returned {len(results)} chunks")
        return results

    async def search_contents(self, query: str, case_id: str, top_k: int = 5) -> list[str]:
        return [result.content for result in await self.search(query, case_id, top_k)]

    async def add_documents(
        self,
        documents: list[IndexedDocument],
        case_id: str,
        user_id: str | None = None,
    ) -> None:
        """Chunk, embed and store documents for a case."""
        if not documents:
            return
        data: dict[str, Any] = {
            "documents": [document.to_dict() for document in documents],
            "caseId": case_id,
        }
        if user_id:
            data["userId"] = user_id
        await self.supabase.invoke(VECTOR_STORE_FUNCTION, {"action": "addDocuments", "data": data})
        logger.info(f"Added {len(documents)} documents to the vector store for case {case_id}")

    async def delete_document(self, document_id: str) -> None:
        """Remove every chunk stored for one document."""
        await self.supabase.invoke(
            VECTOR_STORE_FUNCTION,
            {"action": "deleteDocument", "data": {"documentId": document_id}},
        )
        logger.info(f"Deleted vectors for document {document_id}")
