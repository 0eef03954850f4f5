"""
Ordered fallback chains.

Every multi-level fallback in the pipeline (extraction selectors,
browser-to-static fetching, search-to-synthetic results) is expressed as a
list of named strategies tried in order until one succeeds.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Iterable

from .types import StrategyOutcome


Strategy = Callable[[], StrategyOutcome]
AsyncStrategy = Callable[[], Awaitable[StrategyOutcome]]


def success(strategy: str, result, **details) -> StrategyOutcome:
    return StrategyOutcome(strategy=strategy, success=True, result=result, details=details)


def failure(strategy: str, reason: str, **details) -> StrategyOutcome:
    return StrategyOutcome(strategy=strategy, success=False, reason=reason, details=details)


def run_strategies(strategies: Iterable[Strategy]) -> tuple[StrategyOutcome | None, list[StrategyOutcome]]:
    """Run strategies in order, stopping at the first success.

    Returns:
        The winning outcome (or None when every strategy failed) and the
        list of all attempted outcomes in order.
    """
    attempts: list[StrategyOutcome] = []
    for strategy in strategies:
        outcome = strategy()
        attempts.append(outcome)
        if outcome.success:
            return outcome, attempts
    return None, attempts


async def run_async_strategies(
    strategies: Iterable[AsyncStrategy],
) -> tuple[StrategyOutcome | None, list[StrategyOutcome]]:
    """Async counterpart of :func:`run_strategies`."""
    attempts: list[StrategyOutcome] = []
    for strategy in strategies:
        outcome = await strategy()
        attempts.append(outcome)
        if outcome.success:
            return outcome, attempts
    return None, attempts
