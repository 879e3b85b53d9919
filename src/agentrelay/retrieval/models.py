"""Documents and search results exchanged with the retrieval collaborator."""

from typing import Any

from pydantic import BaseModel, Field


class Document(BaseModel):
    """A knowledge-base document.

    Attributes:
        doc_id: Identifier of the document
        content: Document text
        metadata: Free-form metadata (title, category, subcategory, ...)
    """

    doc_id: str = Field(..., min_length=1)
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def title(self) -> str:
        return str(self.metadata.get("title") or "Untitled")


class SearchResult(BaseModel):
    """A ranked snippet returned for a query.

    Attributes:
        id: Identifier of the hit
        doc_id: Identifier of the matched document
        content: Snippet text
        relevance_score: Retrieval score (higher is better)
        metadata: Metadata of the matched document
    """

    id: str
    doc_id: str
    content: str
    relevance_score: float = 0.0
    metadata: dict[str, Any] = Field(default_factory=dict)
