"""LLM completion collaborator and its configuration."""

from agentrelay.llm.client import LiteLLMCompletion, LLMCompletion, LLMError
from agentrelay.llm.config import LLMConfig, load_config_from_env

__all__ = ["LLMCompletion", "LiteLLMCompletion", "LLMError", "LLMConfig", "load_config_from_env"]
