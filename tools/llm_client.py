"""LLM client for interacting with language models (Anthropic Claude).

The drafting pipeline talks to Anthropic's Claude models. The test suite and
local development still need the pipeline to run when no API key is
available, so the client operates in two modes:

* When an API key is configured, requests are proxied to the official
  Anthropic SDK.
* Otherwise, the client falls back to a deterministic stub that heuristically
  answers the extraction, analysis, drafting and editing prompts. The stub
  never performs network operations but mirrors the shape of the responses
  expected by the rest of the system.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any

from anthropic import (
    APIConnectionError,
    APIError,
    AsyncAnthropic,
    InternalServerError,
    RateLimitError,
)
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from core.config import DEFAULT_MODEL, Settings
from core.exceptions import LLMError
from tools.json_parsing import parse_llm_json
from tools.stub_llm_client import StubLLMHandler

logger = logging.getLogger("discovery.llm_client")

_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


@dataclass(slots=True)
class FilePart:
    """A file sent inline with a prompt."""

    data: bytes
    mime_type: str

    def to_content_block(self) -> dict[str, Any]:
        """Build the Messages API content block for this file.

        Raises:
            LLMError: If the MIME type cannot be sent inline.
        """
        mime_type = self.mime_type.lower()
        if mime_type == "application/pdf":
            return {
                "type": "document",
                "source": {
                    "type": "base64",
                    "media_type": mime_type,
                    "data": base64.b64encode(self.data).decode("ascii"),
                },
            }
        if mime_type == "image/jpg":
            mime_type = "image/jpeg"
        if mime_type in _IMAGE_TYPES:
            return {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": mime_type,
                    "data": base64.b64encode(self.data).decode("ascii"),
                },
            }
        if mime_type.startswith("text/"):
            return {
                "type": "document",
                "source": {
                    "type": "text",
                    "media_type": "text/plain",
                    "data": self.data.decode("utf-8", errors="replace"),
                },
            }
        raise LLMError("attachment", f"unsupported MIME type '{self.mime_type}'")


class LLMClient:
    """Wrapper for the Anthropic Messages API with inline file support."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 4096,
        use_prompt_caching: bool = True,
    ):
        """Initialise the client.

        Args:
            api_key: Anthropic API key. If ``None`` the client runs in stub
                mode.
            model: Claude model to use when the API key is present.
            max_tokens: Default token cap per call.
            use_prompt_caching: Mark system prompts as cacheable.
        """
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.use_prompt_caching = use_prompt_caching
        self._stub_mode = not self.api_key
        self.client = None if self._stub_mode else AsyncAnthropic(api_key=self.api_key)
        self._stub_handler = StubLLMHandler() if self._stub_mode else None

    @classmethod
    def from_settings(cls, settings: Settings) -> LLMClient:
        return cls(
            api_key=settings.anthropic_api_key,
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
        )

    @property
    def stub_mode(self) -> bool:
        return self._stub_mode

    @retry(
        retry=retry_if_exception_type(
            (APIConnectionError, RateLimitError, InternalServerError)
        ),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _call_anthropic_api(
        self,
        system_prompt: str,
        messages: list[dict[str, Any]],
        max_tokens: int,
    ) -> str:
        """Call Anthropic API with retry logic.

        Retries up to 3 times with exponential backoff (2s, 4s, 8s) on
        connection errors, rate limiting and server errors.
        """
        logger.debug(
            f"Calling Anthropic API (model: {self.model}, max_tokens: {max_tokens}, "
            f"caching: {self.use_prompt_caching})"
        )

        request_params: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": messages,
        }

        if self.use_prompt_caching:
            request_params["system"] = [
                {
                    "type": "text",
                    "text": system_prompt,
                    "cache_control": {"type": "ephemeral"},
                }
            ]
        else:
            request_params["system"] = system_prompt

        response = await self.client.messages.create(**request_params)

        content_parts = []
        for block in response.content:
            if getattr(block, "type", None) == "text":
                content_parts.append(block.text)

        content = "\n".join(content_parts)
        logger.debug(f"Received response from Anthropic API ({len(content)} chars)")
        return content

    async def generate_text(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int | None = None,
        attachments: list[FilePart] | None = None,
    ) -> str:
        """Generate a plain-text response from the LLM.

        Automatically retries transient failures with exponential backoff.

        Args:
            system_prompt: System prompt for the model.
            user_prompt: User prompt for the model.
            max_tokens: Maximum tokens to generate; defaults to the client cap.
            attachments: Files sent inline ahead of the prompt text.

        Raises:
            LLMError: If the request fails after retries or an attachment
                cannot be encoded.
        """
        max_tokens = max_tokens or self.max_tokens
        attachments = attachments or []

        if self._stub_mode:
            return self._stub_handler.generate_text(
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                attachments=attachments,
            )

        content: list[dict[str, Any]] = [part.to_content_block() for part in attachments]
        content.append({"type": "text", "text": user_prompt})
        messages = [{"role": "user", "content": content}]

        try:
            return await self._call_anthropic_api(system_prompt, messages, max_tokens)
        except APIError as e:
            logger.warning(f"Anthropic request failed: {e}")
            raise LLMError("generation", str(e), {"model": self.model}) from e

    async def generate_structured(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int | None = None,
        attachments: list[FilePart] | None = None,
        expect: type | tuple[type, ...] = dict,
    ) -> Any:
        """Generate a JSON response and parse it.

        Raises:
            LLMError: If the request fails.
            LLMResponseError: If the response does not contain JSON of the
                expected type.
        """
        text = await self.generate_text(
            system_prompt,
            user_prompt,
            max_tokens=max_tokens,
            attachments=attachments,
        )
        return parse_llm_json(text, expect=expect, operation="structured generation")
