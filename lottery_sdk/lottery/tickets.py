"""Ticket lifecycle: status classification and the ticket history value type."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Generic, TypeVar, Union

T = TypeVar("T")

DRAWS_PER_YEAR = 52


@dataclass(frozen=True)
class Unresolved:
    """A value that only becomes known once the ticket's draw is finalized."""


@dataclass(frozen=True)
class Resolved(Generic[T]):
    value: T


UNRESOLVED = Unresolved()

Outcome = Union[Unresolved, Resolved[T]]


def _as_outcome(win_tier) -> Outcome:
    if win_tier is None:
        return UNRESOLVED
    if isinstance(win_tier, (Resolved, Unresolved)):
        return win_tier
    if isinstance(win_tier, int) and not isinstance(win_tier, bool):
        return Resolved(win_tier)
    raise TypeError(f"win_tier must be an int, None or an Outcome, not {type(win_tier).__name__}")


class TicketStatus(str, Enum):
    ACTIVE = "active"              # draw not finalized
    UNCLAIMABLE = "unclaimable"    # finalized, below the minimum winning tier
    UNCLAIMED = "unclaimed"        # winning, not claimed yet
    CLAIMED = "claimed"
    EXPIRED = "expired"            # winning, claim window passed


def ticket_status(
    draw: int,
    current_draw: int,
    is_claimed: bool,
    win_tier: Union[Outcome, int, None],
    min_winning_tier: int,
    expiry_draws: int = DRAWS_PER_YEAR,
) -> TicketStatus:
    """Classify a ticket from read-only facts; first matching rule wins.

    ``win_tier`` may also be a plain ``int`` (a known tier) or ``None``
    (not known yet).
    """
    win_tier = _as_outcome(win_tier)
    if draw >= current_draw or not isinstance(win_tier, Resolved):
        return TicketStatus.ACTIVE

    if is_claimed:
        return TicketStatus.CLAIMED

    if win_tier.value < min_winning_tier:
        return TicketStatus.UNCLAIMABLE

    # counted in draws, not calendar time
    if draw + expiry_draws < current_draw:
        return TicketStatus.EXPIRED

    return TicketStatus.UNCLAIMED


RewardLookup = Callable[[int], Awaitable[int]]


@dataclass(frozen=True)
class TicketHistory:
    """Snapshot of one ticket combined with its draw's outcome.

    ``winning_combination`` is :data:`UNRESOLVED` until the draw is finalized,
    and so are the derived ``matched_numbers`` and ``win_tier``.
    ``reward_lookup`` is asked for the reward of a tier only when
    :meth:`reward` is awaited.
    """

    ticket_id: int
    draw: int
    combination: Outcome
    is_claimed: bool
    winning_combination: Outcome
    min_winning_tier: int
    reward_lookup: RewardLookup = field(repr=False, compare=False)
    expiry_draws: int = DRAWS_PER_YEAR

    @property
    def matched_numbers(self) -> Outcome:
        if isinstance(self.combination, Resolved) and isinstance(self.winning_combination, Resolved):
            return Resolved(frozenset(self.combination.value & self.winning_combination.value))
        return UNRESOLVED

    @property
    def win_tier(self) -> Outcome:
        matched = self.matched_numbers
        if isinstance(matched, Resolved):
            return Resolved(len(matched.value))
        return UNRESOLVED

    @property
    def is_jackpot_winning_ticket(self) -> bool:
        win_tier = self.win_tier
        return (
            isinstance(win_tier, Resolved)
            and isinstance(self.combination, Resolved)
            and win_tier.value == len(self.combination.value)
        )

    def status(self, current_draw: int) -> TicketStatus:
        return ticket_status(
            self.draw,
            current_draw,
            self.is_claimed,
            self.win_tier,
            self.min_winning_tier,
            self.expiry_draws,
        )

    async def reward(self) -> int:
        """Reward for the ticket's tier; zero until the draw is finalized or when nothing matched."""
        win_tier = self.win_tier
        if not isinstance(win_tier, Resolved) or win_tier.value == 0:
            return 0
        return await self.reward_lookup(win_tier.value)


def combination_outcome(numbers) -> Outcome:
    """Resolved combination from an indexer list, or UNRESOLVED when absent."""
    if numbers is None:
        return UNRESOLVED
    return Resolved(frozenset(int(n) for n in numbers))

