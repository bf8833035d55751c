#File: services/llm_factory.py
import os
import logging
import threading
from typing import Any, Dict, Tuple, Union
from openai import OpenAI, AzureOpenAI

logger = logging.getLogger(__name__)

class LLMProvider:
    OPENAI = "openai"
    OPENROUTER = "openrouter"
    AZURE = "azure"
    LOCAL = "local"

    ALL = (OPENAI, OPENROUTER, AZURE, LOCAL)


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ValueError(f"{name} not set")
    return value


class LLMFactory:
    """
    Builds the OpenAI-compatible client behind CompletionClient from the
    environment. One client is kept per provider settings, so the process
    shares a connection pool.
    """

    _instances: Dict[Tuple, Union[OpenAI, AzureOpenAI]] = {}
    _lock = threading.Lock()

    @staticmethod
    def provider_from_env() -> str:
        provider = os.getenv("LLM_PROVIDER", LLMProvider.OPENAI).strip().lower()
        if provider not in LLMProvider.ALL:
            raise ValueError(f"Unsupported LLM_PROVIDER '{provider}'. Expected one of {', '.join(LLMProvider.ALL)}")
        return provider

    @staticmethod
    def client_settings(provider: str) -> Dict[str, Any]:
        """Constructor arguments for the provider's client, read from the environment."""
        settings: Dict[str, Any] = {
            "timeout": float(os.getenv("LLM_TIMEOUT", "60")),
            "max_retries": int(os.getenv("LLM_MAX_RETRIES", "2")),
        }
        if provider == LLMProvider.OPENAI:
            settings["api_key"] = _require("OPENAI_API_KEY")
        elif provider == LLMProvider.OPENROUTER:
            settings["api_key"] = _require("OPENROUTER_API_KEY")
            settings["base_url"] = "https://openrouter.ai/api/v1"
        elif provider == LLMProvider.AZURE:
            settings["api_key"] = _require("AZURE_OPENAI_API_KEY")
            settings["azure_endpoint"] = _require("AZURE_OPENAI_ENDPOINT")
            settings["api_version"] = os.getenv("AZURE_OPENAI_API_VERSION", "2024-06-01")
        elif provider == LLMProvider.LOCAL:
            settings["base_url"] = os.getenv("LOCAL_LLM_URL", "http://localhost:11434/v1")
            settings["api_key"] = "ollama"  # ignored by Ollama, required by the SDK
        else:
            raise ValueError(f"Unsupported LLM provider '{provider}'")
        return settings

    @staticmethod
    def get_client(provider: str) -> Union[OpenAI, AzureOpenAI]:
        settings = LLMFactory.client_settings(provider)
        cache_key = (provider,) + tuple(sorted(settings.items()))

        with LLMFactory._lock:
            client = LLMFactory._instances.get(cache_key)
            if client is None:
                logger.info(f"Initializing LLM client for provider: {provider}")
                client_class = AzureOpenAI if provider == LLMProvider.AZURE else OpenAI
                client = client_class(**settings)
                LLMFactory._instances[cache_key] = client
            return client

    @staticmethod
    def get_default_model(provider: str) -> str:
        defaults = {
            LLMProvider.OPENAI: ("OPENAI_MODEL", "gpt-4o-mini"),
            LLMProvider.OPENROUTER: ("OPENROUTER_MODEL", "openai/gpt-4o-mini"),
            LLMProvider.AZURE: ("AZURE_OPENAI_DEPLOYMENT", "gpt-4o-mini"),
            LLMProvider.LOCAL: ("LOCAL_MODEL", "llama3"),
        }
        env_name, fallback = defaults.get(provider, ("LLM_MODEL", "gpt-4o-mini"))
        return os.getenv(env_name, fallback)
