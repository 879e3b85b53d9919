"""FastAPI application factory for the agentrelay server.

One application hosts the orchestrator and the two specialist agents, each
under its own A2A prefix, plus a health endpoint. Agent discovery and the
manual registration fallback run as background tasks for the lifetime of
the application.
"""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agentrelay.agents.specialist import create_vue_core_agent, create_vuex_agent
from agentrelay.api.middleware.correlation import CorrelationIdMiddleware
from agentrelay.api.middleware.error_handler import setup_error_handlers
from agentrelay.api.routes.a2a import create_a2a_router, create_orchestrator_router
from agentrelay.api.routes.health import router as health_router
from agentrelay.config import (
    ORCHESTRATOR_SLUG,
    VUE_CORE_SLUG,
    VUEX_SLUG,
    RelaySettings,
    load_settings_from_env,
)
from agentrelay.llm.client import LiteLLMCompletion, LLMCompletion
from agentrelay.llm.config import load_config_from_env
from agentrelay.observability.logging import setup_logging
from agentrelay.orchestration.client import A2AClient
from agentrelay.orchestration.orchestrator import OrchestratorAgent
from agentrelay.orchestration.registry import AgentRegistry
from agentrelay.orchestration.selector import LLMAgentSelector
from agentrelay.retrieval.base import KnowledgeRetriever
from agentrelay.retrieval.memory import InMemoryKnowledgeRetriever, load_documents
from agentrelay.tasks.runner import ProtocolRunner

logger = logging.getLogger(__name__)

BUNDLED_KNOWLEDGE_PATH = Path(__file__).resolve().parent.parent / "data" / "vue_docs.yaml"


def build_retriever(settings: RelaySettings) -> InMemoryKnowledgeRetriever:
    """Build the in-memory retriever from the configured or bundled corpus."""
    path = Path(settings.knowledge_path) if settings.knowledge_path else BUNDLED_KNOWLEDGE_PATH
    return InMemoryKnowledgeRetriever(load_documents(path))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Run discovery in the background while the application serves.

    Args:
        app: FastAPI application instance

    Yields:
        None during application runtime
    """
    settings: RelaySettings = app.state.settings
    registry: AgentRegistry = app.state.registry
    orchestrator: OrchestratorAgent = app.state.orchestrator
    client: A2AClient = app.state.client

    setup_logging(log_level=settings.log_level, json_logs=settings.json_logs)
    logger.info("Application startup: scheduling agent discovery")

    background = [
        asyncio.create_task(registry.bootstrap(), name="agent-discovery"),
        asyncio.create_task(
            orchestrator.register_fallback_after_delay(), name="agent-registration-fallback"
        ),
    ]
    app.state.background_tasks = background

    try:
        yield
    finally:
        logger.info("Application shutdown: stopping background tasks")
        for task in background:
            task.cancel()
        for task in background:
            with suppress(asyncio.CancelledError):
                await task
        await registry.stop_discovery_retry()
        await client.close()
        logger.info("Application shutdown complete")


def create_app(
    settings: Optional[RelaySettings] = None,
    llm: Optional[LLMCompletion] = None,
    retriever: Optional[KnowledgeRetriever] = None,
    client: Optional[A2AClient] = None,
) -> FastAPI:
    """Create and configure the agentrelay application.

    The application contains:
    - the orchestrator at ``{api_prefix}/agents/a2a/orchestrator``
    - the Vue core specialist at ``{api_prefix}/agents/a2a/vue-core``
    - the Vuex specialist at ``{api_prefix}/agents/a2a/vuex``
    - ``GET /health``

    Args:
        settings: Settings (loaded from the environment by default)
        llm: Completion collaborator; built from ``AGENTRELAY_LLM_*``
            variables when omitted and ``settings.use_llm`` is set
        retriever: Knowledge retriever (in-memory over the configured or
            bundled corpus by default)
        client: A2A client used by discovery and delegation

    Returns:
        Configured FastAPI application instance

    Example:
        >>> app = create_app(RelaySettings(use_llm=False))
        >>> # uvicorn agentrelay.api.app:create_app --factory
    """
    settings = settings or load_settings_from_env()
    if llm is None and settings.use_llm:
        llm = LiteLLMCompletion(load_config_from_env())
    if retriever is None:
        retriever = build_retriever(settings)
    client = client or A2AClient(timeout=settings.rpc_timeout)

    registry = AgentRegistry(client, settings.candidate_urls, settings.retry_policy)
    orchestrator = OrchestratorAgent(
        registry=registry,
        client=client,
        selector=LLMAgentSelector(llm) if llm is not None else None,
        settings=settings,
    )
    agents = {
        ORCHESTRATOR_SLUG: orchestrator,
        VUE_CORE_SLUG: create_vue_core_agent(
            settings.agent_url(VUE_CORE_SLUG), retriever, llm=llm
        ),
        VUEX_SLUG: create_vuex_agent(settings.agent_url(VUEX_SLUG), retriever, llm=llm),
    }

    app = FastAPI(
        title="agentrelay",
        version="0.1.0",
        description="A2A multi-agent server with an orchestrating router agent",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.client = client
    app.state.registry = registry
    app.state.orchestrator = orchestrator
    app.state.runners = {slug: ProtocolRunner(agent) for slug, agent in agents.items()}

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)  # type: ignore[arg-type]
    setup_error_handlers(app)

    for slug, runner in app.state.runners.items():
        app.include_router(create_a2a_router(runner, settings.agent_path(slug)))
    app.include_router(
        create_orchestrator_router(orchestrator, settings.agent_path(ORCHESTRATOR_SLUG))
    )
    app.include_router(health_router)

    return app
