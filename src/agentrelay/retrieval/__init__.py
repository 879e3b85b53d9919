"""Knowledge retrieval collaborator used by the specialist agents."""

from agentrelay.retrieval.base import KnowledgeRetriever, prepare_context
from agentrelay.retrieval.memory import (
    InMemoryKnowledgeRetriever,
    KnowledgeLoadError,
    load_documents,
)
from agentrelay.retrieval.models import Document, SearchResult

__all__ = [
    "Document",
    "SearchResult",
    "KnowledgeRetriever",
    "InMemoryKnowledgeRetriever",
    "KnowledgeLoadError",
    "load_documents",
    "prepare_context",
]
