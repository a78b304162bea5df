# interview_service/llm.py
"""
Streaming chat-completion client.

Works with any SDK client exposing ``chat.completions.create(stream=True)``:
the openai SDK pointed at OpenRouter, or the groq SDK. Responses are always
drained to a single string before parsing; incremental JSON parsing is not
attempted.
"""
import logging
import time
from typing import Any, Callable, Dict, Iterator, List, Optional

from groq import Groq
from openai import OpenAI

from . import config
from .errors import ConfigurationError, TransportError

logger = logging.getLogger("ai-service.llm")

OPENROUTER_HEADERS = {
    "HTTP-Referer": "http://localhost",
    "X-Title": "ai-interview-assistant",
}


class LLMClient:
    """Model-chain wrapper around an OpenAI-compatible SDK client."""

    def __init__(self,
                 sdk_client: Any,
                 models: List[str],
                 timeout: float = config.LLM_TIMEOUT_SECONDS,
                 extra_headers: Optional[Dict[str, str]] = None,
                 clock: Callable[[], float] = time.monotonic):
        if not models:
            raise ValueError("At least one model is required")
        self.sdk_client = sdk_client
        self.models = list(models)
        self.timeout = timeout
        self.extra_headers = extra_headers or {}
        self.clock = clock

    def stream(self, prompt: str, model: str, temperature: float = 0.3,
               max_tokens: int = 1500) -> Iterator[str]:
        """Yield text fragments of one streamed completion."""
        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": True,
            "timeout": self.timeout,
        }
        if self.extra_headers:
            kwargs["extra_headers"] = self.extra_headers

        response = self.sdk_client.chat.completions.create(**kwargs)
        for chunk in response:
            if not chunk.choices:
                continue
            content = chunk.choices[0].delta.content
            if content:
                yield content

    def _drain(self, prompt: str, model: str, temperature: float, max_tokens: int) -> str:
        # The SDK timeout covers each read; this bounds the whole stream
        started = self.clock()
        parts: List[str] = []
        fragments = self.stream(prompt, model, temperature, max_tokens)
        try:
            for fragment in fragments:
                parts.append(fragment)
                if self.timeout and self.clock() - started > self.timeout:
                    raise TransportError(f"Model {model} stream exceeded {self.timeout}s")
        finally:
            fragments.close()
        return "".join(parts).strip()

    def complete(self, prompt: str, temperature: float = 0.3, max_tokens: int = 1500) -> str:
        """
        Drain a streamed completion into one string, cycling through the
        model chain. Returns "" when the last model answered with nothing;
        raises TransportError when every model raised.
        """
        last_error: Optional[Exception] = None
        for model in self.models:
            try:
                text = self._drain(prompt, model, temperature, max_tokens)
            except Exception as e:
                logger.warning(f"Model {model} failed: {e}")
                last_error = e
                continue

            if text:
                logger.debug(f"Model {model} answered with {len(text)} chars")
                return text

            logger.warning(f"Model {model} returned an empty response")
            last_error = None

        if last_error is not None:
            raise TransportError(f"All models failed: {last_error}") from last_error
        return ""


def build_llm_client() -> LLMClient:
    """Build the client for the configured provider."""
    if config.LLM_PROVIDER == "groq":
        if not config.GROQ_API_KEY:
            raise ConfigurationError("GROQ_API_KEY not set")
        return LLMClient(
            Groq(api_key=config.GROQ_API_KEY),
            models=[config.GROQ_MODEL],
            timeout=config.LLM_TIMEOUT_SECONDS,
        )

    if config.LLM_PROVIDER != "openrouter":
        raise ConfigurationError(f"Unknown LLM_PROVIDER: {config.LLM_PROVIDER}")
    if not config.OPENROUTER_API_KEY:
        raise ConfigurationError("OPENROUTER_API_KEY not set")
    return LLMClient(
        OpenAI(base_url=config.OPENROUTER_BASE_URL, api_key=config.OPENROUTER_API_KEY),
        models=config.INTERVIEW_MODELS,
        timeout=config.LLM_TIMEOUT_SECONDS,
        extra_headers=OPENROUTER_HEADERS,
    )
