"""
OpenAI-compatible chat client used for query expansion and answer synthesis.

Defaults to Gemini's OpenAI-compatible endpoint; any provider that speaks
the chat-completions API (OpenAI, DeepSeek, a local server) works by
changing `base_url` and `model`.

A per-request timeout is treated like any other transient remote error:
retried with exponential backoff, then re-raised to the caller.
"""
import hashlib
import json
import logging
import os
import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from openai import (
    APIConnectionError,
    APITimeoutError,
    InternalServerError,
    OpenAI,
    RateLimitError,
)
from pydantic import BaseModel
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential


logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_MODEL = "gemini-2.0-flash"

TRANSIENT_ERRORS = (APIConnectionError, APITimeoutError, RateLimitError, InternalServerError)


class Completion(BaseModel):
    """One chat completion."""
    content: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    finish_reason: Optional[str] = None
    cached: bool = False

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass
class UsageStats:
    input_tokens: int = 0
    output_tokens: int = 0
    cache_hits: int = 0
    api_calls: int = 0

    def as_dict(self) -> Dict[str, float]:
        lookups = self.cache_hits + self.api_calls
        return {
            "total_input_tokens": self.input_tokens,
            "total_output_tokens": self.output_tokens,
            "total_tokens": self.input_tokens + self.output_tokens,
            "cache_hits": self.cache_hits,
            "api_calls": self.api_calls,
            "cache_hit_rate": self.cache_hits / lookups if lookups else 0.0,
        }


class ResponseCache:
    """SQLite store of completions keyed by a hash of the request."""

    def __init__(self, cache_path: str = "data/cache/llm_cache.db"):
        self.cache_path = Path(cache_path)
        self.cache_path.parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(self.cache_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS completions (
                    request_key TEXT PRIMARY KEY,
                    model TEXT NOT NULL,
                    completion TEXT NOT NULL,
                    created_at REAL NOT NULL
                )
            """)

    @staticmethod
    def request_key(messages: List[Dict[str, str]], model: str, temperature: float, max_tokens: int) -> str:
        payload = json.dumps(
            {"messages": messages, "model": model, "temperature": temperature, "max_tokens": max_tokens},
            sort_keys=True
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    def get(self, request_key: str) -> Optional[Completion]:
        with sqlite3.connect(self.cache_path) as conn:
            row = conn.execute(
                "SELECT completion FROM completions WHERE request_key = ?",
                (request_key,)
            ).fetchone()
        if row is None:
            return None
        return Completion.model_validate_json(row[0]).model_copy(update={"cached": True})

    def put(self, request_key: str, completion: Completion) -> None:
        with sqlite3.connect(self.cache_path) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO completions (request_key, model, completion, created_at) VALUES (?, ?, ?, ?)",
                (request_key, completion.model, completion.model_dump_json(), time.time())
            )


class LLMClient:
    """
    Text generator backed by a chat-completions endpoint.

    Completion caching is off unless enabled (see LLM_CACHE_ENABLED).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        cache_enabled: bool = False,
        cache_path: str = "data/cache/llm_cache.db"
    ):
        """
        Initialize LLM client.

        Args:
            api_key: API key (or from LLM_API_KEY / GEMINI_API_KEY env vars)
            base_url: OpenAI-compatible API base URL
            model: Model used when a call does not name one
            timeout: Per-request timeout in seconds
            cache_enabled: Whether to cache completions
            cache_path: Path to cache database
        """
        self.api_key = api_key or os.getenv("LLM_API_KEY") or os.getenv("GEMINI_API_KEY")
        if not self.api_key:
            raise ValueError("LLM API key not provided and LLM_API_KEY / GEMINI_API_KEY env vars not set")

        # Retries are handled by tenacity below
        self.client = OpenAI(api_key=self.api_key, base_url=base_url, timeout=timeout, max_retries=0)
        self.model = model
        self.cache = ResponseCache(cache_path) if cache_enabled else None
        self.usage = UsageStats()

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True
    )
    def _create(self, messages: List[Dict[str, str]], model: str, **params) -> Completion:
        response = self.client.chat.completions.create(model=model, messages=messages, **params)
        choice = response.choices[0]
        usage = response.usage
        return Completion(
            content=choice.message.content or "",
            model=response.model or model,
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
            finish_reason=choice.finish_reason
        )

    def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.0,
        max_tokens: int = 1024,
        **kwargs
    ) -> Completion:
        """
        Run one chat completion.

        Args:
            messages: Chat messages in OpenAI format
            model: Model to use (default: self.model)
            temperature: Sampling temperature
            max_tokens: Maximum output tokens
            **kwargs: Additional API parameters

        Returns:
            Completion (served from cache when enabled and present)
        """
        model = model or self.model

        request_key = None
        if self.cache is not None:
            request_key = ResponseCache.request_key(messages, model, temperature, max_tokens)
            cached = self.cache.get(request_key)
            if cached is not None:
                self.usage.cache_hits += 1
                logger.debug(f"Cache hit for request {request_key[:8]}")
                return cached

        logger.debug(f"Calling chat API: model={model}, temp={temperature}, max_tokens={max_tokens}")
        completion = self._create(messages, model, temperature=temperature, max_tokens=max_tokens, **kwargs)

        self.usage.api_calls += 1
        self.usage.input_tokens += completion.prompt_tokens
        self.usage.output_tokens += completion.completion_tokens

        if request_key is not None:
            self.cache.put(request_key, completion)
        return completion

    def generate(
        self,
        user_prompt: str,
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs
    ) -> str:
        """
        Text-in/text-out generation.

        Keep system_prompt identical across calls so providers can reuse
        the cached prompt prefix.
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})
        return self.complete(messages, model=model, **kwargs).content

    def get_stats(self) -> Dict[str, float]:
        """Token usage and cache statistics."""
        return self.usage.as_dict()
