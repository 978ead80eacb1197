"""Prize sizing, reproducing the contract's reward formula off chain.

All arithmetic is integer arithmetic with percentage bases, truncating like
the contract's unsigned division. The result is a prediction of what the
contract pays; it must stay bit-for-bit identical to the on-chain math.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RewardParameters:
    """Constants of the reward formula, in percent of ``percentage_base``."""

    percentage_base: int = 100
    excess_bonus_allocation: int = 50
    safety_margin: int = 33

    def __post_init__(self) -> None:
        if self.percentage_base <= 0:
            raise ValueError("percentage_base must be positive")
        if not 0 <= self.safety_margin <= self.percentage_base:
            raise ValueError("safety_margin must lie within [0, percentage_base]")
        if self.excess_bonus_allocation < 0:
            raise ValueError("excess_bonus_allocation must not be negative")

    @property
    def excess_pot_safe_percentage(self) -> int:
        return self.percentage_base - self.safety_margin


DEFAULT_REWARD_PARAMETERS = RewardParameters()


@dataclass(frozen=True)
class RewardInputs:
    """Point-in-time contract reads needed to size a reward.

    :param net_profit: accumulated profit available for bonuses; signed on chain,
        a loss yields no excess pot
    :param fixed_reward: fixed payout of the requested tier
    :param fixed_jackpot: fixed payout of the top tier
    :param tickets_sold: tickets sold for the draw
    :param is_jackpot_tier: requested tier equals the selection size
    :param expected_payout: expected payout ratio used to spread the bonus
    """

    net_profit: int
    fixed_reward: int
    fixed_jackpot: int
    tickets_sold: int
    is_jackpot_tier: bool
    expected_payout: int

    def __post_init__(self) -> None:
        for name in ("fixed_reward", "fixed_jackpot", "tickets_sold", "expected_payout"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")


def calculate_excess_pot(
    net_profit: int,
    fixed_jackpot: int,
    params: RewardParameters = DEFAULT_REWARD_PARAMETERS,
) -> int:
    """Profit above the safety margin and the fixed jackpot reserve, floored at zero."""
    safe_net_profit = net_profit * params.excess_pot_safe_percentage // params.percentage_base
    return max(0, safe_net_profit - fixed_jackpot)


def calculate_bonus_multiplier(
    excess_pot: int,
    tickets_sold: int,
    expected_payout: int,
    params: RewardParameters = DEFAULT_REWARD_PARAMETERS,
) -> int:
    """Multiplier (in ``percentage_base`` units) applied to a non-jackpot fixed reward."""
    multiplier = params.percentage_base
    if excess_pot > 0 and tickets_sold > 0:
        # expected_payout is non-zero for every deployed lottery
        multiplier += excess_pot * params.excess_bonus_allocation // (tickets_sold * expected_payout)
    return multiplier


def calculate_reward(inputs: RewardInputs, params: RewardParameters = DEFAULT_REWARD_PARAMETERS) -> int:
    """Reward for one winning ticket of the requested tier."""
    excess_pot = calculate_excess_pot(inputs.net_profit, inputs.fixed_jackpot, params)

    if inputs.is_jackpot_tier:
        return inputs.fixed_reward + excess_pot * params.excess_bonus_allocation // params.percentage_base

    multiplier = calculate_bonus_multiplier(excess_pot, inputs.tickets_sold, inputs.expected_payout, params)
    return inputs.fixed_reward * multiplier // params.percentage_base
