"""Chat client for the language model backends."""

import asyncio
from typing import Awaitable, Callable, Optional

import aiohttp
from claude_agent_sdk import (
    ClaudeSDKClient,
    ClaudeAgentOptions,
    AssistantMessage,
    TextBlock,
    ResultMessage,
)

from ..config import LLMConfig, get_api_key
from ..errors import DriftcheckError, LLMError, LLMResponseParseError, LLMTimeoutError
from ..utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_OPENAI_MODEL = "gpt-4o"
BACKOFF_BASE_SECONDS = 0.5


Transport = Callable[[str, str], Awaitable[str]]


class LLMClient:
    """
    Stateless system+user chat interface with bounded retries.

    Each attempt is limited to `timeout` seconds. A failed attempt is retried
    up to `max_retries` times with exponential backoff (0.5s, 1s, 2s, ...);
    the last error is raised.
    """

    def __init__(self, config: LLMConfig, transport: Optional[Transport] = None):
        """
        Args:
            config: Backend selection, timeout and retry settings
            transport: Override for the single-attempt request (tests)
        """
        self.config = config
        if transport is not None:
            self._transport = transport
        elif config.provider == "claude":
            self._transport = self._claude_request
        elif config.provider == "openai":
            self._api_key = get_api_key()
            self._transport = self._openai_request
        else:
            raise LLMError(f"Unknown provider '{config.provider}' (expected claude or openai)")

    async def chat(self, system_prompt: str, user_message: str) -> str:
        """
        Send one system prompt and one user message, return the reply text.

        Raises:
            LLMTimeoutError: If the final attempt timed out
            LLMError: If the final attempt failed
            LLMResponseParseError: If the backend reply had no content
        """
        logger.debug(f"LLM provider: {self.config.provider}, model: {self.config.model or 'default'}")
        logger.debug(f"System prompt: {system_prompt}")
        logger.debug(f"User message length: {len(user_message)} chars")

        last_error: Optional[DriftcheckError] = None

        for attempt in range(self.config.max_retries + 1):
            if attempt > 0:
                delay = BACKOFF_BASE_SECONDS * (2 ** (attempt - 1))
                logger.debug(f"Retrying LLM request after {delay}s")
                await asyncio.sleep(delay)

            try:
                response = await asyncio.wait_for(
                    self._transport(system_prompt, user_message),
                    timeout=self.config.timeout,
                )
            except asyncio.TimeoutError:
                last_error = LLMTimeoutError(self.config.timeout)
            except LLMResponseParseError:
                raise
            except DriftcheckError as e:
                last_error = e
            except (aiohttp.ClientError, OSError) as e:
                last_error = LLMError(str(e))
            else:
                logger.debug(f"LLM response: {response[:500]}")
                return response

            logger.warning(f"LLM request attempt {attempt + 1} failed: {last_error}")

        raise last_error

    async def _claude_request(self, system_prompt: str, user_message: str) -> str:
        """One request through the Claude Agent SDK, with tools disabled."""
        options = ClaudeAgentOptions(
            system_prompt=system_prompt,
            model=self.config.model or None,
            allowed_tools=[],
            max_turns=1,
        )

        parts = []
        try:
            async with ClaudeSDKClient(options=options) as client:
                await client.query(user_message)

                async for message in client.receive_response():
                    if isinstance(message, AssistantMessage):
                        for block in message.content:
                            if isinstance(block, TextBlock):
                                parts.append(block.text)

                    elif isinstance(message, ResultMessage):
                        logger.debug(f"LLM request completed in {message.duration_ms}ms")
                        if message.is_error:
                            raise LLMError(message.result or "request failed")
        except DriftcheckError:
            raise
        except Exception as e:
            # The SDK surfaces CLI/transport failures as plain exceptions
            raise LLMError(str(e)) from e

        text = "".join(parts).strip()
        if not text:
            raise LLMResponseParseError("No response content")
        return text

    async def _openai_request(self, system_prompt: str, user_message: str) -> str:
        """One request against an OpenAI-compatible chat completions endpoint."""
        url = f"{self.config.base_url.rstrip('/')}/chat/completions"
        payload = {
            "model": self.config.model or DEFAULT_OPENAI_MODEL,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            "temperature": self.config.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        async with aiohttp.ClientSession() as session:
            async with session.post(url, json=payload, headers=headers) as response:
                if response.status != 200:
                    body = await response.text()
                    raise LLMError(f"HTTP {response.status}: {body}")
                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise LLMResponseParseError(str(e)) from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMResponseParseError("No response choices") from e

        if not isinstance(content, str):
            raise LLMResponseParseError("No response content")
        return content
