"""Bounded fixed-interval retry for background operations.

Used by agent discovery: the operation is repeated until a completion
predicate holds or the retry limit is reached, with the same delay between
every attempt. Errors raised by the operation are logged and count as a
failed attempt; the loop gives up silently once the limit is reached.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class RetryPolicy(BaseModel):
    """Timing and limits of a retry loop.

    Attributes:
        max_retries: Retries allowed after the first attempt
        initial_delay: Seconds to wait before the first attempt when the
            loop is started in the background
        retry_delay: Seconds to wait between attempts
    """

    max_retries: int = Field(default=5, ge=0)
    initial_delay: float = Field(default=1.0, ge=0)
    retry_delay: float = Field(default=2.0, ge=0)

    model_config = ConfigDict(frozen=True)

    @property
    def max_attempts(self) -> int:
        """Total number of attempts the policy allows."""
        return self.max_retries + 1


class RetryOutcome(BaseModel):
    """Result of a retry loop.

    Attributes:
        attempts: Number of attempts actually made
        succeeded: Whether the completion predicate held at the end
    """

    attempts: int
    succeeded: bool


async def retry_until(
    operation: Callable[[], Awaitable[object]],
    is_done: Callable[[], bool],
    policy: RetryPolicy,
    sleep: SleepFunc = asyncio.sleep,
    start_attempt: int = 0,
) -> RetryOutcome:
    """Run ``operation`` until ``is_done()`` holds or the retries run out.

    Args:
        operation: Async callable performing one attempt
        is_done: Predicate checked after each attempt
        policy: Retry limit and spacing
        sleep: Sleep function, injectable for tests
        start_attempt: Number of retries already used by the caller

    Returns:
        RetryOutcome with the number of attempts made by this call

    Example:
        >>> outcome = await retry_until(registry.discover_agents, registry.has_agents, policy)
        >>> outcome.attempts <= policy.max_attempts
        True
    """
    attempts = 0
    retry = max(start_attempt, 0)

    while True:
        attempts += 1
        logger.info("Attempt %d of %d", retry + 1, policy.max_attempts)
        try:
            await operation()
        except Exception as e:
            logger.error("Attempt %d failed: %s", retry + 1, e)

        if is_done():
            return RetryOutcome(attempts=attempts, succeeded=True)

        if retry >= policy.max_retries:
            logger.warning("Max retries reached, giving up")
            return RetryOutcome(attempts=attempts, succeeded=False)

        logger.info("Will retry in %.1fs", policy.retry_delay)
        await sleep(policy.retry_delay)
        retry += 1
