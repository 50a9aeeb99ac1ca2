"""
Chat Completion Client

Thin async wrapper around LangChain chat models. Every call sends a single
user message and returns the text content of the reply (or None when the
model returned nothing).
"""

import asyncio
import logging
from typing import Dict, Optional, Tuple

from langchain.chat_models import init_chat_model
from langchain_core.messages import HumanMessage

from skybrief.constants import LLM_SETTINGS
from skybrief.exceptions import LLMTransportError, OperationTimeoutError

logger = logging.getLogger(__name__)


class ChatCompletionClient:
    """
    Completion endpoint used by extraction and generation.

    Chat model instances are created lazily and cached per
    (temperature, max_tokens) pair.
    """

    def __init__(
        self,
        model: str = LLM_SETTINGS.MODEL,
        provider: str = LLM_SETTINGS.PROVIDER,
        api_key: str = LLM_SETTINGS.API_KEY,
    ):
        self.model_name = model
        self.provider = provider
        self.api_key = api_key
        self._models: Dict[Tuple[float, Optional[int]], object] = {}

    def _get_model(self, temperature: float, max_tokens: Optional[int]):
        key = (temperature, max_tokens)
        if key not in self._models:
            kwargs = {}
            if max_tokens is not None:
                kwargs["max_tokens"] = max_tokens
            self._models[key] = init_chat_model(
                model=self.model_name,
                model_provider=self.provider,
                api_key=self.api_key,
                temperature=temperature,
                **kwargs,
            )
        return self._models[key]

    async def complete(
        self,
        prompt: str,
        temperature: float,
        timeout: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Optional[str]:
        """
        Send ``prompt`` as the sole user message.

        Args:
            prompt: Fully built prompt text
            temperature: Sampling temperature
            timeout: Seconds before the in-flight call is cancelled (None = unbounded)
            max_tokens: Optional completion length cap

        Returns:
            Reply text, or None when the reply had no content

        Raises:
            OperationTimeoutError: the call exceeded ``timeout``
            LLMTransportError: the provider call itself failed
        """
        try:
            model = self._get_model(temperature, max_tokens)
            call = model.ainvoke([HumanMessage(content=prompt)])
            if timeout is not None:
                response = await asyncio.wait_for(call, timeout=timeout)
            else:
                response = await call
        except asyncio.TimeoutError as e:
            raise OperationTimeoutError(f"Completion timed out after {timeout} seconds") from e
        except Exception as e:
            logger.error(f"Completion call failed: {str(e)}")
            raise LLMTransportError("Completion request failed", original_error=e) from e

        content = getattr(response, "content", None)
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part) for part in content
            )
        return content or None
