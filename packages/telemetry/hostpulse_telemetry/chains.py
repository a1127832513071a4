"""Ordered fallback chains for platform-dependent readings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Sequence, TypeVar

from .errors import ProviderUnavailable


T = TypeVar("T")

logger = logging.getLogger("hostpulse.chains")


@dataclass(frozen=True)
class Strategy(Generic[T]):
    name: str
    fetch: Callable[[], T | None]
    accept: Callable[[T], bool]


@dataclass(frozen=True)
class Resolution(Generic[T]):
    value: T
    source: str | None


class StrategyChain(Generic[T]):
    """Try strategies in order; the first accepted value wins.

    A strategy that raises ``ProviderUnavailable`` counts as a miss. New
    platforms append strategies instead of editing existing ones.
    """

    def __init__(self, name: str, strategies: Sequence[Strategy[T]] = ()) -> None:
        self.name = name
        self._strategies: list[Strategy[T]] = list(strategies)

    def append(self, strategy: Strategy[T]) -> "StrategyChain[T]":
        self._strategies.append(strategy)
        return self

    @property
    def names(self) -> list[str]:
        return [s.name for s in self._strategies]

    def resolve(self, default: T) -> Resolution[T]:
        for strategy in self._strategies:
            try:
                value = strategy.fetch()
            except ProviderUnavailable as exc:
                logger.debug(f"{self.name}: {strategy.name} failed: {exc}")
                continue
            if value is not None and strategy.accept(value):
                logger.debug(f"{self.name}: resolved by {strategy.name}")
                return Resolution(value=value, source=strategy.name)
        logger.debug(f"{self.name}: no strategy succeeded")
        return Resolution(value=default, source=None)
