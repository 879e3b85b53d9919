"""In-memory knowledge retriever.

A small term-overlap scorer over a list of documents, used for local runs
and tests in place of a vector search backend.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable, Optional, Union

import yaml

from agentrelay.retrieval.models import Document, SearchResult

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[a-z0-9]+")
_STOPWORDS = frozenset(
    {"a", "an", "and", "are", "do", "does", "for", "how", "i", "in", "is", "it", "of", "on",
     "or", "the", "to", "what", "when", "why", "with", "you"}
)


class KnowledgeLoadError(Exception):
    """Raised when a knowledge corpus file cannot be read or parsed."""


def tokenize(text: str) -> list[str]:
    """Lower-case word tokens of ``text`` without stopwords."""
    return [token for token in _TOKEN_RE.findall(text.lower()) if token not in _STOPWORDS]


def _matches_filter(metadata: dict[str, Any], filter: Optional[dict[str, Any]]) -> bool:
    if not filter:
        return True
    return all(metadata.get(key) == value for key, value in filter.items())


class InMemoryKnowledgeRetriever:
    """Scores documents by the share of query terms they contain.

    Title terms count double. Documents that share no term with the query
    are never returned.

    Attributes:
        _documents: Indexed documents in insertion order
    """

    def __init__(self, documents: Optional[Iterable[Document]] = None) -> None:
        self._documents: list[Document] = []
        self._terms: dict[str, set[str]] = {}
        self._title_terms: dict[str, set[str]] = {}
        for document in documents or []:
            self.add_document(document)

    def add_document(self, document: Document) -> None:
        """Index a document (replacing any document with the same ID)."""
        self._documents = [d for d in self._documents if d.doc_id != document.doc_id]
        self._documents.append(document)
        self._terms[document.doc_id] = set(tokenize(document.content))
        self._title_terms[document.doc_id] = set(tokenize(document.title))

    def __len__(self) -> int:
        return len(self._documents)

    async def find(
        self,
        query: str,
        filter: Optional[dict[str, Any]] = None,
        limit: int = 3,
    ) -> list[SearchResult]:
        """Return the best matching documents for ``query``.

        Args:
            query: Free-text query
            filter: Metadata fields every result must match exactly
            limit: Maximum number of results

        Returns:
            Results ordered by decreasing score (ties keep corpus order)
        """
        query_terms = set(tokenize(query))
        if not query_terms or limit <= 0:
            return []

        scored: list[tuple[float, int, Document]] = []
        for position, document in enumerate(self._documents):
            if not _matches_filter(document.metadata, filter):
                continue
            body_hits = len(query_terms & self._terms[document.doc_id])
            title_hits = len(query_terms & self._title_terms[document.doc_id])
            if body_hits == 0 and title_hits == 0:
                continue
            score = (body_hits + 2 * title_hits) / len(query_terms)
            scored.append((score, position, document))

        scored.sort(key=lambda item: (-item[0], item[1]))
        logger.debug("Found %d matching documents for query: %s", len(scored), query)

        return [
            SearchResult(
                id=f"{document.doc_id}#{rank}",
                doc_id=document.doc_id,
                content=document.content,
                relevance_score=round(score, 4),
                metadata=dict(document.metadata),
            )
            for rank, (score, _, document) in enumerate(scored[:limit])
        ]


def load_documents(path: Union[str, Path]) -> list[Document]:
    """Load a document corpus from a YAML or JSON file.

    The file holds either a list of documents or a mapping with a
    ``documents`` list. Each document needs ``doc_id`` (or ``id``) and
    ``content``; every other key besides ``metadata`` is merged into the
    metadata.

    Args:
        path: Path to a ``.yaml``/``.yml`` or ``.json`` file

    Returns:
        The parsed documents

    Raises:
        KnowledgeLoadError: If the file is missing or malformed
    """
    path = Path(path)
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise KnowledgeLoadError(f"Cannot read knowledge file {path}: {e}") from e

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(raw_text)
        else:
            data = yaml.safe_load(raw_text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise KnowledgeLoadError(f"Cannot parse knowledge file {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("documents")
    if not isinstance(data, list):
        raise KnowledgeLoadError(f"Knowledge file {path} must contain a list of documents")

    documents = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict) or "content" not in entry:
            raise KnowledgeLoadError(f"Document {index} in {path} has no content")

        entry = dict(entry)
        doc_id, fallback_id = entry.pop("doc_id", None), entry.pop("id", None)
        doc_id = str(doc_id or fallback_id or f"doc-{index + 1}")
        content = str(entry.pop("content"))
        metadata = dict(entry.pop("metadata", None) or {})
        metadata.update(entry)
        documents.append(Document(doc_id=doc_id, content=content, metadata=metadata))

    logger.info("Loaded %d documents from %s", len(documents), path)
    return documents
