"""Knowledge retrieval contract and context formatting."""

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from agentrelay.retrieval.models import SearchResult

CONTEXT_HEADER = "Context information from our knowledge base:\n\n"


@runtime_checkable
class KnowledgeRetriever(Protocol):
    """Anything that can return ranked snippets for a query."""

    async def find(
        self,
        query: str,
        filter: Optional[dict[str, Any]] = None,
        limit: int = 3,
    ) -> list[SearchResult]:
        """Return at most ``limit`` results matching ``query`` and ``filter``.

        Args:
            query: Free-text query
            filter: Metadata fields that every result must match exactly
            limit: Maximum number of results

        Returns:
            Results ordered by decreasing relevance
        """
        ...


def prepare_context(results: Sequence[SearchResult]) -> str:
    """Format search results as a numbered context block for an LLM prompt.

    Args:
        results: Search results, most relevant first

    Returns:
        The formatted context, or an empty string when there are no results

    Example:
        >>> print(prepare_context([SearchResult(id="1", doc_id="d", content="Getters...",
        ...                                     metadata={"title": "Getters"})]))
        Context information from our knowledge base:
        <BLANKLINE>
        Document 1: "Getters"
        Getters...
    """
    if not results:
        return ""

    blocks = [CONTEXT_HEADER]
    for index, result in enumerate(results, start=1):
        title = (result.metadata or {}).get("title") or "Untitled"
        blocks.append(f'Document {index}: "{title}"\n')
        blocks.append(f"{result.content or 'No content available'}\n\n")
    return "".join(blocks)
