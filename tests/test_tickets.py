import asyncio
import itertools

import pytest

from lottery_sdk.lottery.tickets import (
    DRAWS_PER_YEAR,
    UNRESOLVED,
    Resolved,
    TicketHistory,
    TicketStatus,
    combination_outcome,
    ticket_status,
)


def _expected(draw, current_draw, is_claimed, win_tier, min_winning_tier):
    if draw >= current_draw or win_tier is None:
        return TicketStatus.ACTIVE
    if is_claimed:
        return TicketStatus.CLAIMED
    if win_tier < min_winning_tier:
        return TicketStatus.UNCLAIMABLE
    if draw + DRAWS_PER_YEAR < current_draw:
        return TicketStatus.EXPIRED
    return TicketStatus.UNCLAIMED


def test_unclaimable_scenario():
    assert ticket_status(10, 15, False, Resolved(2), 3) is TicketStatus.UNCLAIMABLE


def test_expired_scenario():
    assert ticket_status(10, 65, False, Resolved(4), 3) is TicketStatus.EXPIRED


def test_expiry_boundary():
    assert ticket_status(10, 62, False, Resolved(4), 3) is TicketStatus.UNCLAIMED
    assert ticket_status(10, 63, False, Resolved(4), 3) is TicketStatus.EXPIRED


def test_unresolved_tier_is_active_even_for_past_draws():
    assert ticket_status(10, 100, True, UNRESOLVED, 3) is TicketStatus.ACTIVE


def test_plain_int_and_none_tiers():
    assert ticket_status(10, 15, False, 2, 3) is TicketStatus.UNCLAIMABLE
    assert ticket_status(10, 65, False, 4, 3) is TicketStatus.EXPIRED
    assert ticket_status(10, 15, False, 4, 3) is TicketStatus.UNCLAIMED
    assert ticket_status(10, 15, True, 4, 3) is TicketStatus.CLAIMED
    assert ticket_status(10, 100, False, None, 3) is TicketStatus.ACTIVE


def test_unsupported_tier_type_is_rejected():
    with pytest.raises(TypeError):
        ticket_status(10, 15, False, "2", 3)
    with pytest.raises(TypeError):
        ticket_status(10, 15, False, True, 3)


def test_claimed_wins_over_expiry_and_tier():
    assert ticket_status(10, 100, True, Resolved(0), 3) is TicketStatus.CLAIMED


def test_custom_expiry_horizon():
    assert ticket_status(10, 15, False, Resolved(4), 3, expiry_draws=4) is TicketStatus.EXPIRED


def test_every_combination_yields_the_ordered_status():
    draws = [(10, 10), (10, 11), (10, 9), (10, 62), (10, 63), (10, 200)]
    tiers = [None, 0, 2, 3, 5]
    for (draw, current_draw), is_claimed, win_tier in itertools.product(draws, [False, True], tiers):
        outcome = UNRESOLVED if win_tier is None else Resolved(win_tier)
        status = ticket_status(draw, current_draw, is_claimed, outcome, 3)
        assert status is _expected(draw, current_draw, is_claimed, win_tier, 3)


def _history(combination, winning, *, draw=10, is_claimed=False, rewards=None):
    calls = []

    async def _lookup(win_tier):
        calls.append(win_tier)
        return (rewards or {}).get(win_tier, 0)

    ticket = TicketHistory(
        ticket_id=1,
        draw=draw,
        combination=combination_outcome(combination),
        is_claimed=is_claimed,
        winning_combination=combination_outcome(winning),
        min_winning_tier=3,
        reward_lookup=_lookup,
    )
    return ticket, calls


def test_matched_numbers_and_win_tier():
    ticket, _ = _history([1, 2, 3, 4, 5], [3, 4, 5, 6, 7])
    assert ticket.matched_numbers == Resolved(frozenset({3, 4, 5}))
    assert ticket.win_tier == Resolved(3)
    assert ticket.is_jackpot_winning_ticket is False
    assert ticket.status(11) is TicketStatus.UNCLAIMED


def test_unfinalized_ticket():
    ticket, calls = _history([1, 2, 3, 4, 5], None)
    assert ticket.matched_numbers == UNRESOLVED
    assert ticket.win_tier == UNRESOLVED
    assert ticket.status(50) is TicketStatus.ACTIVE
    assert asyncio.run(ticket.reward()) == 0
    assert calls == []


def test_jackpot_ticket():
    ticket, _ = _history([1, 2, 3, 4, 5], [5, 4, 3, 2, 1])
    assert ticket.is_jackpot_winning_ticket is True


def test_reward_is_looked_up_lazily_for_the_win_tier():
    ticket, calls = _history([1, 2, 3, 4, 5], [1, 2, 3, 4, 9], rewards={4: 700})
    assert calls == []
    assert asyncio.run(ticket.reward()) == 700
    assert calls == [4]


def test_reward_is_zero_without_matches():
    ticket, calls = _history([1, 2, 3, 4, 5], [6, 7, 8, 9, 10])
    assert ticket.win_tier == Resolved(0)
    assert asyncio.run(ticket.reward()) == 0
    assert calls == []


@pytest.mark.parametrize("is_claimed, expected", [(True, TicketStatus.CLAIMED), (False, TicketStatus.UNCLAIMABLE)])
def test_history_status_after_finalization(is_claimed, expected):
    ticket, _ = _history([1, 2, 3, 4, 5], [1, 9, 10, 11, 12], is_claimed=is_claimed)
    assert ticket.status(12) is expected


def test_status_values_match_wire_names():
    assert [status.value for status in TicketStatus] == ["active", "unclaimable", "unclaimed", "claimed", "expired"]
