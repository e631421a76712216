"""Anthropic Messages API access with retry and jittered exponential backoff."""
from __future__ import annotations
import asyncio
import logging
import random
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Optional
import anthropic
from anthropic import AsyncAnthropic
from app.core.config import settings
from app.core.errors import ModelFatalError, ModelRetryExhaustedError, ModelTransportError, SitecraftError

log = logging.getLogger(__name__)

# Substrings (lower-cased) of transient network and overload failures
TRANSIENT_SIGNATURES = (
    "econnreset",
    "etimedout",
    "econnrefused",
    "connection reset",
    "connection aborted",
    "socket hang up",
    "temporarily unavailable",
    "overloaded",
    "timed out",
)


@dataclass
class RetryPolicy:
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0

    @staticmethod
    def from_settings() -> "RetryPolicy":
        return RetryPolicy(
            max_retries=settings.model_max_retries,
            base_delay=settings.model_retry_base_delay,
            max_delay=settings.model_retry_max_delay,
        )

    def compute_delay(self, attempt: int, rng: Callable[[float, float], float] = random.uniform) -> float:
        """Full jitter: uniform(0, min(cap, base * 2**attempt))."""
        ceiling = min(self.max_delay, self.base_delay * (2 ** attempt))
        return rng(0, ceiling)


def is_retryable(exc: BaseException) -> bool:
    """True for rate limits, 5xx, overload, timeouts and transient network failures."""
    if isinstance(exc, ModelTransportError):
        return True
    if isinstance(exc, SitecraftError):
        return False
    if isinstance(exc, (anthropic.APITimeoutError, anthropic.APIConnectionError, asyncio.TimeoutError)):
        return True
    status = getattr(exc, "status_code", None)
    if isinstance(status, int) and (status == 429 or status >= 500):
        return True
    message = str(exc).lower()
    return any(sig in message for sig in TRANSIENT_SIGNATURES)


class ModelClient:
    """Streaming and non-streaming completions against one model.

    The underlying SDK client is created on first use so the service can start
    without an API key configured.
    """

    def __init__(
        self,
        client: Optional[AsyncAnthropic] = None,
        model: Optional[str] = None,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._client = client
        self.model = model or settings.generation_model
        self.policy = policy or RetryPolicy.from_settings()
        self._sleep = sleep

    @property
    def client(self) -> AsyncAnthropic:
        if self._client is None:
            self._client = AsyncAnthropic(api_key=settings.anthropic_api_key)
        return self._client

    async def _backoff_or_raise(self, exc: Exception, attempt: int) -> None:
        """Sleep before the next attempt, or raise if the failure is final."""
        if not is_retryable(exc):
            if isinstance(exc, SitecraftError):
                raise exc
            raise ModelFatalError(str(exc)) from exc
        if attempt >= self.policy.max_retries:
            raise ModelRetryExhaustedError(
                f"Model request failed after {attempt + 1} attempts: {exc}"
            ) from exc
        delay = self.policy.compute_delay(attempt)
        log.warning("Model request failed, retrying in %.2fs (attempt %d/%d): %s",
                    delay, attempt + 1, self.policy.max_retries, exc)
        await self._sleep(delay)

    async def stream_completion(self, system_prompt: str, user_prompt: str, max_tokens: int) -> AsyncIterator[str]:
        """Yield text deltas in arrival order.

        A failure before the first delta is retried; once output has been
        yielded the stream cannot be replayed, so later failures propagate.
        """
        attempt = 0
        while True:
            yielded = False
            try:
                async with self.client.messages.stream(
                    model=self.model,
                    max_tokens=max_tokens,
                    system=system_prompt,
                    messages=[{"role": "user", "content": user_prompt}],
                ) as stream:
                    async for text in stream.text_stream:
                        if text:
                            yielded = True
                            yield text
                return
            except Exception as e:
                if yielded:
                    if isinstance(e, SitecraftError):
                        raise
                    raise ModelFatalError(f"Stream interrupted: {e}") from e
                await self._backoff_or_raise(e, attempt)
                attempt += 1

    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        attempt = 0
        while True:
            try:
                response = await self.client.messages.create(
                    model=self.model,
                    max_tokens=max_tokens,
                    system=system_prompt,
                    messages=[{"role": "user", "content": user_prompt}],
                )
                break
            except Exception as e:
                await self._backoff_or_raise(e, attempt)
                attempt += 1

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        if not text:
            raise ModelFatalError("No text response from model")
        return text
