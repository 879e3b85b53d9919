"""Inter-agent client, agent directory and query routing.

The orchestrator agent lives in :mod:`agentrelay.orchestration.orchestrator`;
it depends on :mod:`agentrelay.config`, which imports the retry policy from
this package, so it is not re-exported here.
"""

from agentrelay.orchestration.client import A2AClient
from agentrelay.orchestration.registry import AgentRegistry, classify_query
from agentrelay.orchestration.retry import RetryOutcome, RetryPolicy, retry_until
from agentrelay.orchestration.selector import AgentSelectionError, LLMAgentSelector

__all__ = [
    "A2AClient",
    "AgentRegistry",
    "classify_query",
    "RetryOutcome",
    "RetryPolicy",
    "retry_until",
    "AgentSelectionError",
    "LLMAgentSelector",
]
