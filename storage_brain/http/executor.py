import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from storage_brain.constants import (
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_INITIAL_DELAY_SECONDS,
    DEFAULT_MAX_DELAY_SECONDS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_SECONDS,
)
from storage_brain.errors.classifier import classify
from storage_brain.errors.exceptions import StorageBrainError
from storage_brain.logging.logger import Log

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff between attempts, capped at ``max_delay``."""

    initial_delay: float = DEFAULT_INITIAL_DELAY_SECONDS
    max_delay: float = DEFAULT_MAX_DELAY_SECONDS
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the zero-based ``attempt`` failed."""
        return min(self.initial_delay * self.backoff_multiplier**attempt, self.max_delay)


class RequestExecutor:
    """Issues authenticated JSON API calls with bounded retry.

    Failures carrying a status below 500 are raised at once. Network failures,
    5xx responses and status-less errors are retried until ``max_attempts`` is
    spent, then reported as a single network error.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_attempts: int = DEFAULT_MAX_RETRIES,
        retry_policy: RetryPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._http_client = http_client
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._max_attempts = max_attempts
        self._retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    async def execute(self, method: str, path: str, body: Any = None) -> Any:
        """Run one logical API call and return the parsed JSON body."""
        url = f"{self._base_url}{path}"
        last_error: StorageBrainError | None = None

        for attempt in range(self._max_attempts):
            try:
                return await self._attempt(method, url, body)
            except StorageBrainError as exc:
                error = exc
            except (httpx.HTTPError, TimeoutError) as exc:
                error = classify(exc)

            if error.status_code is not None and error.status_code < 500:
                Log.warning(f"{method} {path} failed with {error.code} ({error.status_code})")
                raise error

            last_error = error
            if attempt < self._max_attempts - 1:
                delay = self._retry_policy.delay_for(attempt)
                Log.warning(
                    f"{method} {path} attempt {attempt + 1}/{self._max_attempts} "
                    f"failed: {error.message}; retrying in {delay:.2f}s"
                )
                await self._sleep(delay)

        Log.error(f"{method} {path} failed after {self._max_attempts} attempts")
        raise StorageBrainError.network(
            f"Request failed after {self._max_attempts} attempts",
            cause=last_error,
        ) from last_error

    async def _attempt(self, method: str, url: str, body: Any) -> Any:
        async with asyncio.timeout(self._timeout_seconds):
            response = await self._http_client.request(
                method,
                url,
                headers=self._headers(),
                json=body,
                timeout=self._timeout_seconds,
            )
        if not response.is_success:
            raise classify(response)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise StorageBrainError.generic(
                f"Invalid JSON in response: {exc}",
                "INVALID_RESPONSE",
            ) from exc

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
