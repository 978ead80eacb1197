"""Exceptions raised by the lottery SDK."""

from __future__ import annotations

from typing import Optional


class LotteryError(Exception):
    """Base class for every error raised by the SDK."""


class InvalidCombination(LotteryError, ValueError):
    """A combination has the wrong size or a number outside ``[1, selection_max]``."""


class InvalidTierRequest(LotteryError, ValueError):
    """A win tier outside ``[min_winning_tier, selection_size]`` was requested."""

    def __init__(self, win_tier: int, min_winning_tier: int, selection_size: int):
        super().__init__(f"Win tier must be between {min_winning_tier} and {selection_size}, got {win_tier}")
        self.win_tier = win_tier
        self.min_winning_tier = min_winning_tier
        self.selection_size = selection_size


class InvalidConfiguration(LotteryError, ValueError):
    """Lottery configuration is missing a value or breaks an invariant."""


class CollaboratorUnavailable(LotteryError):
    """The contract RPC or the indexer failed or answered with something unusable."""

    def __init__(self, source: str, message: str, *, operation: Optional[str] = None):
        detail = f"{source}: {message}" if operation is None else f"{source}.{operation}: {message}"
        super().__init__(detail)
        self.source = source
        self.operation = operation
