"""LLM configuration for agent selection and answer synthesis.

The orchestrator uses the LLM as a router (short, near-deterministic
completions); specialists may use it to phrase answers from retrieved
context. Both share one configuration loaded from the environment.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MODEL = "gpt-4o-mini"


class LLMConfig(BaseModel):
    """LLM completion settings.

    Attributes:
        model: LiteLLM model identifier (e.g. "gpt-4o-mini")
        temperature: Sampling temperature
        max_tokens: Maximum tokens in a completion
        timeout: Request timeout in seconds
        api_key: Optional API key passed to the provider (never logged)
        api_base: Optional custom API endpoint

    Example:
        >>> config = LLMConfig(model="gpt-4o-mini", temperature=0.1, max_tokens=50)
    """

    model: str = Field(default=DEFAULT_MODEL, min_length=1)
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(default=50, ge=1)
    timeout: float = Field(default=30.0, gt=0)
    api_key: Optional[str] = Field(default=None, repr=False)
    api_base: Optional[str] = None

    model_config = ConfigDict(frozen=True)


def load_config_from_env() -> LLMConfig:
    """Load the LLM configuration from environment variables.

    Variables from a ``.env`` file in the working directory are loaded first.

    Reads:
    - AGENTRELAY_LLM_MODEL: LiteLLM model identifier
    - AGENTRELAY_LLM_TEMPERATURE: Sampling temperature
    - AGENTRELAY_LLM_MAX_TOKENS: Maximum completion tokens
    - AGENTRELAY_LLM_TIMEOUT: Request timeout in seconds
    - AGENTRELAY_LLM_API_KEY: Provider API key
    - AGENTRELAY_LLM_API_BASE: Custom API endpoint

    Returns:
        LLMConfig loaded from the environment
    """
    load_dotenv()

    return LLMConfig(
        model=os.getenv("AGENTRELAY_LLM_MODEL", DEFAULT_MODEL),
        temperature=float(os.getenv("AGENTRELAY_LLM_TEMPERATURE", "0.1")),
        max_tokens=int(os.getenv("AGENTRELAY_LLM_MAX_TOKENS", "50")),
        timeout=float(os.getenv("AGENTRELAY_LLM_TIMEOUT", "30")),
        api_key=os.getenv("AGENTRELAY_LLM_API_KEY") or None,
        api_base=os.getenv("AGENTRELAY_LLM_API_BASE") or None,
    )
