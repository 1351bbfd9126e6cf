"""
LLM HTTP client for OpenAI-compatible chat-completions backends.

One pooled httpx client per process. Every failure mode of the backend
(missing API key, transport error, HTTP error status, malformed body) is
surfaced as ModelUnavailableError so the conversation layer has a single
failure to handle.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from opsassist.chat.errors import ModelUnavailableError
from opsassist.chat.logging_utils import should_log_feature
from opsassist.chat.models import (
    AssistantMessage,
    ChatCompletionMessage,
    LLMResponseData,
    ToolDefinition,
    message_to_dict,
)
from opsassist.config import Configuration

logger = logging.getLogger(__name__)


class LLMClient:
    """Chat-completions client bound to the active provider of a Configuration."""

    def __init__(
        self,
        configuration: Configuration,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.configuration: Configuration = configuration
        self._current_config: dict[str, Any] = configuration.get_llm_config()
        self._current_provider: str = self._detect_provider(
            self._current_config.get("base_url", "")
        )
        self.client: httpx.AsyncClient | None = None

        try:
            api_key = configuration.llm_api_key
        except ValueError as e:
            # served requests fail with ModelUnavailableError until a key is configured
            logger.warning("LLM client not configured: %s", e)
            return

        pool_config = configuration.get_connection_pool_config()
        timeouts = configuration.get_timeouts()
        self.client = httpx.AsyncClient(
            base_url=self._current_config["base_url"],
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeouts["model_timeout_seconds"],
            http2=transport is None,
            limits=httpx.Limits(
                max_connections=pool_config["max_connections"],
                max_keepalive_connections=pool_config["max_keepalive_connections"],
                keepalive_expiry=pool_config["keepalive_expiry_seconds"],
            ),
            transport=transport,
            trust_env=False,
        )
        logger.info("LLM client initialized with provider: %s", self._current_provider)
        logger.info("Model: %s", self._current_config.get("model", "unknown"))

    @property
    def config(self) -> dict[str, Any]:
        return self._current_config

    @property
    def provider(self) -> str:
        return self._current_provider

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def _detect_provider(self, base_url: str) -> str:
        """Detect provider from base URL for provider-specific handling."""
        if "openai.com" in base_url:
            return "openai"
        if "groq.com" in base_url:
            return "groq"
        if "openrouter.ai" in base_url:
            return "openrouter"
        return "unknown"

    def _log_http_request(
        self,
        method: str,
        url: str,
        status_code: int | None = None,
        duration_ms: float | None = None,
    ) -> None:
        if not should_log_feature("clients", "http_requests"):
            return

        message_parts = [f"🔌 HTTP {method} {url}"]
        if status_code is not None:
            message_parts.append(f"Status: {status_code}")
        if duration_ms is not None:
            message_parts.append(f"Duration: {duration_ms:.2f}ms")

        logger.info(" | ".join(message_parts))

    def _build_payload(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """
        Build the request body, passing through every provider setting
        except the infrastructure keys.
        """
        payload: dict[str, Any] = {
            "model": self.config["model"],
            "messages": messages,
        }

        excluded_keys = {"base_url", "model"}
        for key, value in self.config.items():
            if key not in excluded_keys and value is not None:
                payload[key] = value

        if tools:
            payload["tools"] = tools

        return payload

    async def get_response_with_tools(
        self,
        messages: list[ChatCompletionMessage],
        tools: list[ToolDefinition] | None = None,
    ) -> LLMResponseData:
        """
        Request one assistant message for the given history.

        Raises:
            ModelUnavailableError: On any backend failure.
        """
        if not self.client:
            raise ModelUnavailableError("LLM client not configured")

        dict_messages = [message_to_dict(msg) for msg in messages]
        dict_tools = [tool.model_dump(exclude_none=True) for tool in tools] if tools else None
        payload = self._build_payload(dict_messages, dict_tools)

        logger.debug("→ LLM: %d messages, %d tools", len(dict_messages), len(dict_tools or []))
        try:
            start_time = time.monotonic()
            response = await self.client.post("/chat/completions", json=payload)
            duration_ms = (time.monotonic() - start_time) * 1000
            self._log_http_request("POST", "/chat/completions", response.status_code, duration_ms)

            response.raise_for_status()
            result = response.json()

            if not result.get("choices"):
                raise ModelUnavailableError("No choices in API response")

            choice = result["choices"][0]
            assistant_msg = AssistantMessage.from_dict(choice["message"])

            return LLMResponseData(
                message=assistant_msg,
                finish_reason=choice.get("finish_reason"),
                index=choice.get("index", 0),
                model=result.get("model", self.config["model"]),
            )

        except ModelUnavailableError:
            logger.error("LLM returned an empty response")
            raise
        except httpx.HTTPError as e:
            logger.error("HTTP error: %s", e)
            raise ModelUnavailableError(f"HTTP error: {e!s}") from e
        except (KeyError, TypeError, ValueError) as e:
            # ValueError covers undecodable JSON and pydantic validation errors
            logger.error("Unexpected response format: %s", e)
            raise ModelUnavailableError(f"Unexpected response format: {e!s}") from e

    async def close(self) -> None:
        """Close the HTTP client."""
        if self.client:
            await self.client.aclose()
            logger.info("LLM client closed (%s)", self._current_provider)

    async def __aenter__(self):
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()
