import json
import re
import logging
import threading
from typing import Any, Dict, List, Optional

from services.llm_factory import LLMFactory

logger = logging.getLogger(__name__)

_client: Optional["CompletionClient"] = None
_client_lock = threading.Lock()

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class LLMGenerationError(Exception):
    """Raised when the LLM fails to generate a response."""
    pass


class LLMJSONParseError(Exception):
    """Raised when the LLM response cannot be parsed as JSON."""
    pass


class CompletionClient:
    """
    Thin wrapper over an OpenAI-compatible chat client. One instance is
    shared by the process; routers receive it as a dependency.
    """

    def __init__(self, client: Any, default_model: str):
        self._client = client
        self.default_model = default_model

    def chat(self, messages: List[Dict[str, str]], model: Optional[str] = None,
             temperature: Optional[float] = None, max_tokens: Optional[int] = None,
             allow_empty: bool = False) -> str:
        """
        Sends one chat completion request and returns the text content.
        With allow_empty, a response without content comes back as "".
        Raises:
            LLMGenerationError: If the API call fails, or returns no content and allow_empty is False.
        """
        params: Dict[str, Any] = {
            "model": model or self.default_model,
            "messages": messages,
        }
        if temperature is not None:
            params["temperature"] = temperature
        if max_tokens is not None:
            params["max_tokens"] = max_tokens

        try:
            response = self._client.chat.completions.create(**params)
        except Exception as e:
            logger.error(f"LLM Generation Failed: {e}", exc_info=True)
            raise LLMGenerationError(f"Failed to generate LLM response: {e}") from e

        if not response.choices or not response.choices[0].message.content:
            if allow_empty:
                return ""
            logger.error("LLM returned empty response or no content")
            raise LLMGenerationError("LLM returned empty response")
        return response.choices[0].message.content

    def complete(self, prompt: str, system_prompt: str = "", **kwargs) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return self.chat(messages, **kwargs)


def parse_json_text(content: str) -> Any:
    """
    json.loads for model output. A surrounding markdown code fence is
    tolerated; nothing else is repaired.
    Raises:
        LLMJSONParseError: If the content is not valid JSON.
    """
    text = (content or "").strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse LLM JSON response: {e}. Content: {content[:500] if content else ''}")
        raise LLMJSONParseError(f"Failed to parse JSON from LLM response: {e}") from e


def get_completion_client() -> CompletionClient:
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                provider = LLMFactory.provider_from_env()
                _client = CompletionClient(
                    LLMFactory.get_client(provider),
                    LLMFactory.get_default_model(provider),
                )
    return _client
