# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Model capabilities.

Both pipeline stages talk to a model through the same one-method interface,
``complete(prompt) -> str``. The LangChain-backed implementation owns
transient-error retry; callers see either a completion or a
``CapabilityError``.
"""

import asyncio
import logging
import os
from typing import Any, Optional, Protocol, runtime_checkable

from context_engine.config import settings
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI
from pydantic import SecretStr

logger = logging.getLogger(__name__)


class CapabilityError(Exception):
    """A model backend failed to produce a completion.

    Attributes:
        model (str): Model id of the failing backend.
    """

    def __init__(self, model: str, message: str):
        super().__init__(message)
        self.model = model


@runtime_checkable
class ModelCapability(Protocol):
    """Anything that turns a prompt into a completion."""

    async def complete(self, prompt: str) -> str:
        ...


def _is_retryable_error(error: Exception) -> bool:
    """Check whether an LLM error is transient and worth retrying.

    Covers server errors (5xx), rate limits (429), and other transient
    provider-side availability failures.

    Args:
        error (Exception): The exception to inspect.

    Returns:
        bool: True if the error is likely transient.
    """
    msg = str(error).lower()
    retryable_patterns = (
        "500",
        "502",
        "503",
        "504",
        "rate limit",
        "rate_limit",
        "429",
        "overloaded",
        "temporarily unavailable",
        "internal server error",
        "service unavailable",
        "resource exhausted",
        "resource_exhausted",
        "deadline exceeded",
    )
    return any(s in msg for s in retryable_patterns)


def _content_to_text(content: Any) -> str:
    """Flatten a LangChain message content into plain text.

    Gemini may return a list of content blocks instead of a string.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return str(content)


class LangChainCapability:
    """``ModelCapability`` backed by a LangChain chat model.

    Args:
        llm (BaseChatModel): Configured chat model.
        model_name (str): Model id, used in logs and errors.
        max_retries (int): Retries for transient errors.
        retry_base_delay (float): First backoff delay in seconds; doubles
            on each retry.
    """

    def __init__(
        self,
        llm: BaseChatModel,
        model_name: str,
        max_retries: int = 0,
        retry_base_delay: float = 1.0,
    ):
        self.llm = llm
        self.model_name = model_name
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay

    async def complete(self, prompt: str) -> str:
        """Send *prompt* as a single human message and return the reply text.

        Raises:
            CapabilityError: When the call fails and retries are exhausted,
                or the error is not transient.
        """
        retries = 0
        while True:
            try:
                response = await self.llm.ainvoke([HumanMessage(content=prompt)])
                return _content_to_text(response.content)
            except Exception as e:
                if _is_retryable_error(e) and retries < self.max_retries:
                    retries += 1
                    delay = self.retry_base_delay * (2 ** (retries - 1))
                    logger.warning(
                        "Retryable error from %s (attempt %d/%d), retrying in %.1fs: %s",
                        self.model_name,
                        retries,
                        self.max_retries,
                        delay,
                        e,
                    )
                    await asyncio.sleep(delay)
                    continue
                raise CapabilityError(self.model_name, f"{self.model_name} call failed: {e}") from e


def create_chat_model(model: str, temperature: float, max_tokens: int) -> BaseChatModel:
    """Create a LangChain chat model for *model*.

    Gemini routing:
      - GOOGLE_API_KEY set -> Google AI Studio (simple API key auth)
      - Otherwise -> Vertex AI (GCP service account / ADC)

    Any other model id is served by OpenAI.
    """
    if model.startswith("gemini"):
        if settings.GOOGLE_API_KEY:
            return ChatGoogleGenerativeAI(
                model=model,
                google_api_key=settings.GOOGLE_API_KEY,
                temperature=temperature,
                max_output_tokens=max_tokens,
            )
        # pydantic-settings reads .env into its own fields but does NOT
        # export to os.environ, which google.auth.default() reads.
        if settings.GOOGLE_APPLICATION_CREDENTIALS:
            os.environ.setdefault(
                "GOOGLE_APPLICATION_CREDENTIALS",
                settings.GOOGLE_APPLICATION_CREDENTIALS,
            )
        return ChatGoogleGenerativeAI(
            model=model,
            vertexai=True,
            project=settings.GOOGLE_CLOUD_PROJECT,
            location=settings.GOOGLE_CLOUD_LOCATION,
            temperature=temperature,
            max_output_tokens=max_tokens,
        )
    return ChatOpenAI(
        api_key=SecretStr(settings.OPENAI_API_KEY),
        model=model,
        temperature=temperature,
        max_completion_tokens=max_tokens,
    )


def _create_capability(model: str, temperature: float, max_tokens: int) -> LangChainCapability:
    return LangChainCapability(
        create_chat_model(model, temperature, max_tokens),
        model_name=model,
        max_retries=settings.MAX_LLM_RETRIES,
        retry_base_delay=settings.LLM_RETRY_BASE_DELAY,
    )


def create_inference_capability(model: Optional[str] = None) -> LangChainCapability:
    """Expensive model that answers the user's question."""
    return _create_capability(
        model or settings.INFERENCE_MODEL,
        settings.INFERENCE_TEMPERATURE,
        settings.INFERENCE_MAX_TOKENS,
    )


def create_compactor_capability(model: Optional[str] = None) -> LangChainCapability:
    """Cheap model that summarizes long histories."""
    return _create_capability(
        model or settings.COMPACTOR_MODEL,
        settings.COMPACTOR_TEMPERATURE,
        settings.COMPACTOR_MAX_TOKENS,
    )
