import pytest

from lottery_sdk.lottery.rewards import (
    DEFAULT_REWARD_PARAMETERS,
    RewardInputs,
    RewardParameters,
    calculate_bonus_multiplier,
    calculate_excess_pot,
    calculate_reward,
)


def _inputs(**overrides):
    values = dict(
        net_profit=1000,
        fixed_reward=200,
        fixed_jackpot=100,
        tickets_sold=10,
        is_jackpot_tier=False,
        expected_payout=38,
    )
    values.update(overrides)
    return RewardInputs(**values)


def test_default_parameters():
    assert DEFAULT_REWARD_PARAMETERS.percentage_base == 100
    assert DEFAULT_REWARD_PARAMETERS.excess_bonus_allocation == 50
    assert DEFAULT_REWARD_PARAMETERS.safety_margin == 33
    assert DEFAULT_REWARD_PARAMETERS.excess_pot_safe_percentage == 67


def test_excess_pot():
    # 1000 * 67 / 100 = 670, minus the fixed jackpot
    assert calculate_excess_pot(1000, 100) == 570


def test_excess_pot_is_floored_at_zero():
    assert calculate_excess_pot(100, 100) == 0
    assert calculate_excess_pot(0, 0) == 0
    assert calculate_excess_pot(-5000, 0) == 0


def test_excess_pot_truncates():
    assert calculate_excess_pot(1, 0) == 0
    assert calculate_excess_pot(149, 0) == 99


def test_jackpot_reward():
    assert calculate_reward(_inputs(is_jackpot_tier=True)) == 200 + 570 * 50 // 100 == 485


def test_non_jackpot_reward_gets_bonus_multiplier():
    # 570 * 50 / (10 * 38) = 75
    assert calculate_bonus_multiplier(570, 10, 38) == 175
    assert calculate_reward(_inputs()) == 350


@pytest.mark.parametrize("overrides", [{"tickets_sold": 0}, {"net_profit": 100}, {"net_profit": -10}])
def test_non_jackpot_reward_without_bonus_is_fixed(overrides):
    assert calculate_reward(_inputs(**overrides)) == 200


def test_jackpot_reward_is_never_below_fixed_reward():
    for net_profit in range(-1000, 5000, 123):
        assert calculate_reward(_inputs(is_jackpot_tier=True, net_profit=net_profit)) >= 200


@pytest.mark.parametrize("is_jackpot_tier", [True, False])
def test_reward_never_decreases_with_net_profit(is_jackpot_tier):
    previous = None
    for net_profit in range(0, 20000, 37):
        reward = calculate_reward(_inputs(net_profit=net_profit, is_jackpot_tier=is_jackpot_tier))
        if previous is not None:
            assert reward >= previous
        previous = reward


def test_custom_parameters_are_used():
    params = RewardParameters(safety_margin=0, excess_bonus_allocation=100)
    assert calculate_reward(_inputs(is_jackpot_tier=True), params) == 200 + 900


def test_large_token_amounts_stay_exact():
    wei = 10 ** 18
    inputs = _inputs(
        net_profit=1_000_000 * wei,
        fixed_reward=10 * wei,
        fixed_jackpot=100_000 * wei,
        tickets_sold=12345,
        expected_payout=38 * wei // 100,
    )
    excess = (1_000_000 * wei * 67 // 100) - 100_000 * wei
    multiplier = 100 + excess * 50 // (12345 * (38 * wei // 100))
    assert calculate_reward(inputs) == 10 * wei * multiplier // 100


def test_negative_operands_are_rejected():
    with pytest.raises(ValueError):
        _inputs(tickets_sold=-1)
    with pytest.raises(ValueError):
        _inputs(fixed_reward=-1)


def test_invalid_parameters_are_rejected():
    with pytest.raises(ValueError):
        RewardParameters(percentage_base=0)
    with pytest.raises(ValueError):
        RewardParameters(safety_margin=101)
