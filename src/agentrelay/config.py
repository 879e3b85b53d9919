"""Runtime settings for the agentrelay server and CLI.

Settings are read from ``AGENTRELAY_*`` environment variables (after loading
a ``.env`` file when present). Every timing used by discovery and the
registration fallback lives here instead of in code.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from agentrelay.orchestration.retry import RetryPolicy

DEFAULT_BASE_URL = "http://localhost:3333"
DEFAULT_API_PREFIX = "/api"

ORCHESTRATOR_SLUG = "orchestrator"
VUE_CORE_SLUG = "vue-core"
VUEX_SLUG = "vuex"

_TRUTHY = ("true", "1", "yes")


class RelaySettings(BaseModel):
    """Server, discovery and logging settings.

    Attributes:
        base_url: Public base URL of this server, used in agent card URLs
        api_prefix: Path prefix under which the agents are mounted
        agent_urls: Candidate endpoints probed by discovery (defaults to the
            two local specialists)
        discovery_max_retries: Discovery retries after the first attempt
        discovery_initial_delay: Seconds before the first discovery attempt
        discovery_retry_delay: Seconds between discovery attempts
        registration_fallback_delay: Seconds before the orchestrator
            registers the known specialists manually
        rpc_timeout: Timeout in seconds for inter-agent HTTP calls
        knowledge_path: Optional YAML/JSON corpus for the specialists
        use_llm: Whether to build a LiteLLM collaborator at startup
        log_level: Logging level name
        json_logs: Emit JSON log lines instead of console output
    """

    base_url: str = DEFAULT_BASE_URL
    api_prefix: str = DEFAULT_API_PREFIX
    agent_urls: list[str] = Field(default_factory=list)
    discovery_max_retries: int = Field(default=5, ge=0)
    discovery_initial_delay: float = Field(default=1.0, ge=0)
    discovery_retry_delay: float = Field(default=2.0, ge=0)
    registration_fallback_delay: float = Field(default=5.0, ge=0)
    rpc_timeout: float = Field(default=10.0, gt=0)
    knowledge_path: Optional[str] = None
    use_llm: bool = True
    log_level: str = "INFO"
    json_logs: bool = False

    model_config = ConfigDict(frozen=True)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("api_prefix")
    @classmethod
    def normalize_prefix(cls, value: str) -> str:
        """Ensure the prefix starts with a slash and does not end with one."""
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = f"/{value}"
        return value

    def agent_path(self, slug: str) -> str:
        """Return the mount path of an agent, e.g. ``/api/agents/a2a/vuex``."""
        return f"{self.api_prefix}/agents/a2a/{slug}"

    def agent_url(self, slug: str) -> str:
        """Return the absolute URL of an agent endpoint."""
        return f"{self.base_url}{self.agent_path(slug)}"

    @property
    def candidate_urls(self) -> list[str]:
        """Discovery candidates: configured URLs or the local specialists."""
        if self.agent_urls:
            return list(self.agent_urls)
        return [self.agent_url(VUE_CORE_SLUG), self.agent_url(VUEX_SLUG)]

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.discovery_max_retries,
            initial_delay=self.discovery_initial_delay,
            retry_delay=self.discovery_retry_delay,
        )


def _split_urls(raw: str) -> list[str]:
    return [url.strip() for url in raw.split(",") if url.strip()]


def load_settings_from_env() -> RelaySettings:
    """Load settings from environment variables.

    Reads:
    - AGENTRELAY_BASE_URL, AGENTRELAY_API_PREFIX
    - AGENTRELAY_AGENT_URLS: Comma-separated discovery candidates
    - AGENTRELAY_DISCOVERY_MAX_RETRIES, AGENTRELAY_DISCOVERY_INITIAL_DELAY,
      AGENTRELAY_DISCOVERY_RETRY_DELAY
    - AGENTRELAY_REGISTRATION_FALLBACK_DELAY
    - AGENTRELAY_RPC_TIMEOUT
    - AGENTRELAY_KNOWLEDGE_PATH
    - AGENTRELAY_USE_LLM (true/false)
    - AGENTRELAY_LOG_LEVEL, AGENTRELAY_JSON_LOGS (true/false)

    Returns:
        RelaySettings loaded from the environment

    Example:
        >>> os.environ["AGENTRELAY_DISCOVERY_MAX_RETRIES"] = "2"
        >>> load_settings_from_env().discovery_max_retries
        2
    """
    load_dotenv()

    return RelaySettings(
        base_url=os.getenv("AGENTRELAY_BASE_URL", DEFAULT_BASE_URL),
        api_prefix=os.getenv("AGENTRELAY_API_PREFIX", DEFAULT_API_PREFIX),
        agent_urls=_split_urls(os.getenv("AGENTRELAY_AGENT_URLS", "")),
        discovery_max_retries=int(os.getenv("AGENTRELAY_DISCOVERY_MAX_RETRIES", "5")),
        discovery_initial_delay=float(os.getenv("AGENTRELAY_DISCOVERY_INITIAL_DELAY", "1.0")),
        discovery_retry_delay=float(os.getenv("AGENTRELAY_DISCOVERY_RETRY_DELAY", "2.0")),
        registration_fallback_delay=float(
            os.getenv("AGENTRELAY_REGISTRATION_FALLBACK_DELAY", "5.0")
        ),
        rpc_timeout=float(os.getenv("AGENTRELAY_RPC_TIMEOUT", "10.0")),
        knowledge_path=os.getenv("AGENTRELAY_KNOWLEDGE_PATH") or None,
        use_llm=os.getenv("AGENTRELAY_USE_LLM", "true").lower() in _TRUTHY,
        log_level=os.getenv("AGENTRELAY_LOG_LEVEL", "INFO"),
        json_logs=os.getenv("AGENTRELAY_JSON_LOGS", "false").lower() in _TRUTHY,
    )
