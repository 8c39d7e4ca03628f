"""Completion gateway - the only path from the pipeline to the LLM"""

import asyncio
import logging
from typing import Optional, Protocol
import openai
from openai import OpenAI
from landify_api.models.errors import ApplicationError, ErrorCode, GatewayError

logger = logging.getLogger(__name__)


class CompletionGateway(Protocol):
    """Anything that turns a system + user prompt into completion text.

    Low-temperature analysis calls and high-temperature creative calls are the
    same operation with different temperatures.
    """

    async def complete(self, system_prompt: str, user_prompt: str, *, temperature: float, max_tokens: int) -> str:
        ...


class OpenAIGateway:
    """
    CompletionGateway backed by the OpenAI chat completions API.

    The sync SDK client runs in a worker thread and every call is bounded by
    a client-side timeout. The SDK's own retries are disabled: retry policy
    belongs to the caller.
    """

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = 60.0, client: Optional[OpenAI] = None):
        if not api_key and client is None:
            logger.warning("OPENAI_API_KEY not set; generation requests will fail")
        self.model = model
        self.timeout = timeout
        if client is not None:
            self.client = client
        elif api_key:
            self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        else:
            self.client = None

    async def complete(self, system_prompt: str, user_prompt: str, *, temperature: float, max_tokens: int) -> str:
        if self.client is None:
            raise ApplicationError(
                code=ErrorCode.CONFIGURATION_ERROR,
                message="OpenAI API key not configured. Please set OPENAI_API_KEY in .env file."
            )

        kwargs = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        logger.info(f"[OpenAI] Calling {self.model} | temperature={temperature} | max_tokens={max_tokens} | timeout={self.timeout}s")

        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(self.client.chat.completions.create, **kwargs),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.error(f"[OpenAI] ✗ Timeout after {self.timeout}s | model: {self.model}")
            raise GatewayError(f"OpenAI call timed out after {self.timeout}s")
        except openai.OpenAIError as e:
            logger.error(f"[OpenAI] ✗ Call failed | error_type: {type(e).__name__} | {e}")
            raise GatewayError(f"OpenAI API call failed: {e}")

        result_text = response.choices[0].message.content or ""
        if response.usage:
            logger.info(
                f"[OpenAI] ✓ Response received | "
                f"tokens: {response.usage.total_tokens} (prompt: {response.usage.prompt_tokens}, "
                f"completion: {response.usage.completion_tokens}) | "
                f"response_length: {len(result_text)} chars"
            )
        else:
            logger.warning("[OpenAI] No usage data in response")
        return result_text
