"""Retrieval-backed specialist agents.

A specialist answers questions about one slice of the documentation: it
retrieves the most relevant snippets under a fixed metadata filter and
either returns them as context or, when an LLM is configured, has the LLM
phrase an answer from them.
"""

import logging
from typing import Any, Optional

from agentrelay.agents.base import TaskContext
from agentrelay.agents.helpers import create_error_message, create_response_message, extract_text
from agentrelay.agents.models import AgentCapabilities, AgentCard, AgentSkill, Message
from agentrelay.llm.client import LLMCompletion
from agentrelay.retrieval.base import KnowledgeRetriever, prepare_context
from agentrelay.retrieval.models import SearchResult

logger = logging.getLogger(__name__)

DOCUMENTATION_CATEGORY = "Vue.js Documentation"

ANSWER_SYSTEM_PROMPT = (
    "You are a helpful assistant answering questions about {topic}. "
    "Answer using only the context provided. If the context does not contain the "
    "answer, say so. Keep the answer concise and include code examples from the "
    "context when they help."
)
ANSWER_MAX_TOKENS = 800
ANSWER_TEMPERATURE = 0.3


class SpecialistAgent:
    """Agent answering from a filtered slice of the knowledge base.

    Attributes:
        card: The agent card served for this agent
        retriever: Knowledge retrieval collaborator
        retrieval_filter: Metadata filter applied to every search
        topic: Subject used in "not enough information" replies
        source_label: Name used in "Based on ... documentation" replies
        llm: Optional completion collaborator for answer synthesis
        max_results: Maximum number of snippets retrieved per query
    """

    def __init__(
        self,
        card: AgentCard,
        retriever: KnowledgeRetriever,
        retrieval_filter: dict[str, Any],
        topic: str,
        source_label: str,
        llm: Optional[LLMCompletion] = None,
        max_results: int = 3,
    ) -> None:
        self.card = card
        self.retriever = retriever
        self.retrieval_filter = dict(retrieval_filter)
        self.topic = topic
        self.source_label = source_label
        self.llm = llm
        self.max_results = max_results

    def get_agent_card(self) -> AgentCard:
        return self.card

    async def find_documents(self, query: str) -> list[SearchResult]:
        """Retrieve snippets for ``query``; retrieval failures yield no results."""
        try:
            documents = await self.retriever.find(
                query, filter=self.retrieval_filter, limit=self.max_results
            )
        except Exception as e:
            logger.error("Error finding %s documents: %s", self.source_label, e)
            return []

        logger.info("Found %d %s documents", len(documents), self.source_label)
        return documents

    async def process_message(
        self,
        message: Message,
        task_id: str,
        session_id: Optional[str] = None,
        context: Optional[TaskContext] = None,
    ) -> Message:
        """Answer a question from the knowledge base.

        Args:
            message: The user message
            task_id: ID of the task being processed
            session_id: Optional session identifier (unused)
            context: Optional task handle (unused)

        Returns:
            The answer message
        """
        logger.info("Processing message for task %s", task_id)

        query = extract_text(message)
        if not query:
            return create_error_message("No text content found in the message")

        documents = await self.find_documents(query)
        if not documents:
            return create_response_message(
                f"I don't have enough information to answer that question about {self.topic}."
            )

        knowledge = prepare_context(documents)
        if self.llm is not None:
            try:
                answer = await self.llm.complete(
                    ANSWER_SYSTEM_PROMPT.format(topic=self.topic),
                    f"{knowledge}Question: {query}",
                    temperature=ANSWER_TEMPERATURE,
                    max_tokens=ANSWER_MAX_TOKENS,
                )
                return create_response_message(answer)
            except Exception as e:
                logger.warning("Answer synthesis failed, returning raw context: %s", e)

        return create_response_message(
            f"Based on {self.source_label} documentation:\n\n{knowledge}"
        )


_CAPABILITIES = AgentCapabilities(
    streaming=False, push_notifications=False, state_transition_history=True
)


def create_vue_core_agent(
    url: str,
    retriever: KnowledgeRetriever,
    llm: Optional[LLMCompletion] = None,
) -> SpecialistAgent:
    """Build the "Vue Core A2A Agent" served at ``url``."""
    card = AgentCard(
        name="Vue Core A2A Agent",
        description="Agent providing information about Vue.js core concepts",
        url=url,
        version="1.0.0",
        capabilities=_CAPABILITIES,
        skills=[
            AgentSkill(
                name="vue_core_knowledge",
                description="Knowledge about Vue.js core concepts, components and templates",
                input_modes=["text"],
                output_modes=["text"],
            )
        ],
    )
    return SpecialistAgent(
        card=card,
        retriever=retriever,
        retrieval_filter={"category": DOCUMENTATION_CATEGORY, "subcategory": "Core"},
        topic="Vue.js core concepts",
        source_label="Vue.js",
        llm=llm,
    )


def create_vuex_agent(
    url: str,
    retriever: KnowledgeRetriever,
    llm: Optional[LLMCompletion] = None,
) -> SpecialistAgent:
    """Build the "Vuex A2A Agent" served at ``url``."""
    card = AgentCard(
        name="Vuex A2A Agent",
        description="Agent providing information about Vue.js Vuex state management",
        url=url,
        version="1.0.0",
        capabilities=_CAPABILITIES,
        skills=[
            AgentSkill(
                name="vuex_knowledge",
                description="Knowledge about Vuex state management for Vue.js",
                input_modes=["text"],
                output_modes=["text"],
            )
        ],
    )
    return SpecialistAgent(
        card=card,
        retriever=retriever,
        retrieval_filter={"category": DOCUMENTATION_CATEGORY, "subcategory": "Vuex"},
        topic="Vuex state management",
        source_label="Vuex",
        llm=llm,
    )
