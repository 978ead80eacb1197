"""Core data models for the lottery SDK."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from lottery_sdk.constants import LOTTERY_7_35_ADDRESS, LOTTERY_7_35_GRAPH_URI
from lottery_sdk.errors import InvalidConfiguration
from lottery_sdk.lottery.combination import Combination, as_combination
from lottery_sdk.utils.config import get_config_value


@dataclass(frozen=True)
class LotteryConfig:
    """Immutable parameters of one deployed lottery."""

    selection_size: int
    selection_max: int
    min_winning_tier: int
    contract_address: str
    subgraph_uri: str
    reward_token_address: str
    reward_token_symbol: str
    reward_token_decimals: int
    ticket_price: int
    first_draw_timestamp: int
    draw_period: int
    draw_cool_down_period: int

    def __post_init__(self) -> None:
        if self.selection_size < 1 or self.selection_max < self.selection_size:
            raise InvalidConfiguration(
                f"selection_size must be within [1, selection_max], got {self.selection_size}/{self.selection_max}"
            )
        if not 1 <= self.min_winning_tier <= self.selection_size:
            raise InvalidConfiguration(
                f"min_winning_tier must be within [1, {self.selection_size}], got {self.min_winning_tier}"
            )
        if self.ticket_price < 0 or self.draw_period <= 0 or self.draw_cool_down_period < 0:
            raise InvalidConfiguration("ticket_price, draw_period and draw_cool_down_period must not be negative")
        if not self.contract_address or not self.subgraph_uri:
            raise InvalidConfiguration("contract_address and subgraph_uri are required")

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "LotteryConfig":
        """Build from the nested dict returned by :func:`lottery_sdk.utils.config.load_config`.

        Values are read from the ``lottery`` section, falling back to
        ``blockchain.contract_address`` and ``indexer.subgraph_uri``.
        """
        section = config.get("lottery", {})

        def _value(key: str, fallback_path: Optional[str] = None):
            value = section.get(key)
            if value is None and fallback_path:
                value = get_config_value(config, fallback_path)
            if value is None:
                raise InvalidConfiguration(f"Missing lottery configuration value '{key}'")
            return value

        try:
            return cls(
                selection_size=int(_value("selection_size")),
                selection_max=int(_value("selection_max")),
                min_winning_tier=int(_value("min_winning_tier")),
                contract_address=str(_value("contract_address", "blockchain.contract_address")),
                subgraph_uri=str(_value("subgraph_uri", "indexer.subgraph_uri")),
                reward_token_address=str(_value("reward_token_address")),
                reward_token_symbol=str(_value("reward_token_symbol")),
                reward_token_decimals=int(_value("reward_token_decimals")),
                ticket_price=int(_value("ticket_price")),
                first_draw_timestamp=int(_value("first_draw_timestamp")),
                draw_period=int(_value("draw_period")),
                draw_cool_down_period=int(_value("draw_cool_down_period")),
            )
        except InvalidConfiguration:
            raise
        except (TypeError, ValueError) as exc:
            raise InvalidConfiguration(f"Malformed lottery configuration: {exc}") from exc

    @classmethod
    def lottery_7_35(cls, **values: Any) -> "LotteryConfig":
        """Configuration of the deployed 7/35 lottery.

        Token and schedule values are not fixed by the deployment constants and
        must be passed in.
        """
        defaults: Dict[str, Any] = {
            "selection_size": 7,
            "selection_max": 35,
            "min_winning_tier": 4,
            "contract_address": LOTTERY_7_35_ADDRESS,
            "subgraph_uri": LOTTERY_7_35_GRAPH_URI,
        }
        defaults.update(values)
        return cls(**defaults)

    @property
    def jackpot_tier(self) -> int:
        return self.selection_size


@dataclass(frozen=True)
class DrawInfo:
    """Indexed draw. Finalization fields are None before the draw is executed."""

    draw_id: int
    scheduled_date: datetime
    winning_combination: Optional[Combination]
    winners_per_tier: Optional[Dict[int, int]]
    prizes_per_tier: Optional[Dict[int, int]]

    @property
    def is_finalized(self) -> bool:
        return self.winning_combination is not None


@dataclass(frozen=True)
class DrawStats:
    """Per-draw aggregates for one player."""

    draw_id: int
    number_of_tickets: int
    number_of_winning_tickets: int
    number_of_claimed_tickets: int


@dataclass
class Player:
    wallet_address: str
    draw_stats: List[DrawStats] = field(default_factory=list)


@dataclass(frozen=True)
class ClaimableAmount:
    """Result of the contract's ``claimable(ticketId)``."""

    claimable_amount: int
    win_tier: int


@dataclass(frozen=True)
class TicketForDraw:
    """A combination to buy for a specific draw."""

    draw_id: int
    numbers: Combination

    @classmethod
    def of(cls, draw_id: int, numbers: Iterable[int]) -> "TicketForDraw":
        return cls(draw_id=int(draw_id), numbers=as_combination(numbers))
