"""Failure taxonomy for a sampling pass."""

from __future__ import annotations


class SampleError(RuntimeError):
    """Base class for errors that end a single sampling call."""


class ProviderUnavailable(SampleError):
    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"{operation} unavailable: {reason}")
        self.operation = operation
        self.reason = reason


class SampleShapeMismatch(SampleError):
    def __init__(self, baseline: tuple[str, ...], current: tuple[str, ...]) -> None:
        super().__init__(
            f"tick categories changed between captures: {len(baseline)} -> {len(current)}"
        )
        self.baseline = baseline
        self.current = current


class SampleCancelled(SampleError):
    """The delta window was interrupted before the second capture."""
