"""
Module: delivery/backoff.py
Description: Backoff delay computation for webhook retries.

Builds the wait between attempts from tenacity wait strategies. Retries
are not run in-process here: the computed delay is handed to the job
queue together with the retry continuation, so the strategies are only
evaluated, never slept on.
"""

from tenacity import (
    RetryCallState,
    wait_exponential,
    wait_fixed,
    wait_incrementing,
    wait_random,
)
from tenacity.wait import wait_base

from webhook_dispatch.models.policy import BackoffKind, RetryPolicy


def backoff_strategy(policy: RetryPolicy) -> wait_base:
    """
    Build the tenacity wait strategy for a policy's backoff term.

    fixed: base_delay
    linear: base_delay * attempt
    exponential: base_delay * 2 ** (attempt - 1)

    Args:
        policy: Retry policy to build the strategy for

    Returns:
        tenacity wait strategy, without jitter
    """
    base = policy.base_delay

    if policy.backoff == BackoffKind.EXPONENTIAL:
        strategy = wait_exponential(multiplier=base, exp_base=2, min=0)
    elif policy.backoff == BackoffKind.LINEAR:
        strategy = wait_incrementing(start=base, increment=base)
    else:
        strategy = wait_fixed(base)

    return strategy


def jitter_strategy(policy: RetryPolicy) -> wait_base:
    """Uniform random wait in [0, jitter]."""
    return wait_random(min=0, max=policy.jitter)


def _call_state(attempt: int) -> RetryCallState:
    state = RetryCallState(retry_object=None, fn=None, args=(), kwargs={})
    state.attempt_number = attempt
    return state


def compute_delay(attempt: int, policy: RetryPolicy) -> float:
    """
    Compute the delay before retrying after a completed attempt.

    The backoff term is capped by policy.max_delay when set; jitter is
    then added on top, so the result is never below the backoff term.

    Args:
        attempt: 1-indexed number of the attempt that just completed
        policy: Retry policy

    Returns:
        Delay in seconds, always >= 0

    Raises:
        ValueError: If attempt is less than 1

    Example:
        >>> policy = RetryPolicy(base_delay=2, backoff="exponential", jitter=0)
        >>> [compute_delay(n, policy) for n in (1, 2, 3)]
        [2.0, 4.0, 8.0]
    """
    if attempt < 1:
        raise ValueError("attempt must be >= 1")

    state = _call_state(attempt)
    delay = float(backoff_strategy(policy)(state))
    if policy.max_delay is not None:
        delay = min(delay, policy.max_delay)

    return max(0.0, delay) + float(jitter_strategy(policy)(state))
