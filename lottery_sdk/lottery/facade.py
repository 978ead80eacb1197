"""
Lottery facade - combines contract reads, indexed history and the local
ticket math into one async API.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from lottery_sdk.blockchain.client import LotteryContractClient
from lottery_sdk.blockchain.progress import TransactionProgress
from lottery_sdk.errors import CollaboratorUnavailable, InvalidTierRequest
from lottery_sdk.indexer.client import IndexerClient
from lottery_sdk.indexer.schemas import DrawResponse, TicketResponse
from lottery_sdk.lottery.combination import Combination, encode, generate_random_tickets
from lottery_sdk.lottery.models import (
    ClaimableAmount,
    DrawInfo,
    DrawStats,
    LotteryConfig,
    Player,
    TicketForDraw,
)
from lottery_sdk.lottery.rewards import (
    DEFAULT_REWARD_PARAMETERS,
    RewardInputs,
    RewardParameters,
    calculate_reward,
)
from lottery_sdk.lottery.tickets import (
    DRAWS_PER_YEAR,
    TicketHistory,
    TicketStatus,
    combination_outcome,
)
from lottery_sdk.lottery.tiers import map_tiers
from lottery_sdk.utils.common import shorten_eth_address
from lottery_sdk.utils.config import get_config_value, load_config
from lottery_sdk.utils.logger import get_logger

logger = get_logger(__name__)


class Lottery:
    """A lottery where ``selection_size`` numbers are picked from ``[1, selection_max]``."""

    def __init__(
        self,
        config: LotteryConfig,
        contract: LotteryContractClient,
        indexer: IndexerClient,
        *,
        reward_parameters: RewardParameters = DEFAULT_REWARD_PARAMETERS,
        expiry_draws: int = DRAWS_PER_YEAR,
    ):
        self.config = config
        self.contract = contract
        self.indexer = indexer
        self.reward_parameters = reward_parameters
        self.expiry_draws = expiry_draws

        logger.info(
            "Lottery %s/%s bound to %s",
            config.selection_size,
            config.selection_max,
            shorten_eth_address(config.contract_address),
        )

    @classmethod
    async def connect(cls, config: LotteryConfig, settings: Optional[Dict[str, Any]] = None, **kwargs) -> "Lottery":
        """Build the collaborators from ``settings`` and connect to the RPC."""
        settings = settings or {}
        contract = LotteryContractClient(
            settings,
            contract_address=config.contract_address,
            reward_token_address=config.reward_token_address,
        )
        await contract.initialize()
        indexer = IndexerClient(
            config.subgraph_uri,
            config.contract_address,
            timeout=float(get_config_value(settings, "indexer.timeout", 10.0)),
        )
        return cls(config, contract, indexer, **kwargs)

    @classmethod
    async def from_environment(cls, config_file=None, **kwargs) -> "Lottery":
        """Load settings with :func:`load_config` and connect."""
        settings = load_config(config_file)
        return await cls.connect(LotteryConfig.from_dict(settings), settings, **kwargs)

    async def close(self) -> None:
        await self.contract.close()
        self.indexer.close()

    @property
    def selection_size(self) -> int:
        return self.config.selection_size

    @property
    def selection_max(self) -> int:
        return self.config.selection_max

    @property
    def min_winning_tier(self) -> int:
        return self.config.min_winning_tier

    @property
    def ticket_price(self) -> int:
        return self.config.ticket_price

    # ------------------------------------------------------------------
    # Draws
    # ------------------------------------------------------------------
    async def get_current_draw(self) -> int:
        try:
            return await self.contract.current_draw()
        except CollaboratorUnavailable as exc:
            logger.error("Failed to read the current draw: %s", exc)
            raise

    async def get_draw_infos(
        self,
        draw_ids: Union[int, Iterable[int]],
        order_direction: str = "asc",
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[DrawInfo]:
        """Indexed information for the given draws.

        Draws the indexer does not know are left out; the result follows
        ``order_direction`` on the draw id.
        """
        ids = [draw_ids] if isinstance(draw_ids, int) else list(draw_ids)
        try:
            draws = await self.indexer.get_draws(ids, order_direction, skip, limit)
        except CollaboratorUnavailable as exc:
            logger.error("Failed to fetch draws %s: %s", ids, exc)
            raise
        return [self._draw_info(draw) for draw in draws]

    async def get_win_amount(self, draw_id: int, win_tier: int) -> Optional[int]:
        """Indexed prize for ``win_tier`` in a draw; None when the draw has no prizes yet."""
        self._check_tier(win_tier)
        draw = await self._fetch_draw(draw_id)
        if draw is None or draw.prizes_per_tier is None:
            return None
        return self._tier_map(draw.prizes_per_tier).get(win_tier)

    async def get_jackpot_size(self, draw_id: int) -> Optional[int]:
        return await self.get_win_amount(draw_id, self.selection_size)

    async def get_winning_ticket(self, draw_id: int) -> Optional[Combination]:
        draw = await self._fetch_draw(draw_id)
        if draw is None or draw.winning_combination is None:
            return None
        return frozenset(draw.winning_combination)

    async def get_number_of_winners_per_tier(self, draw_id: int) -> Optional[Dict[int, int]]:
        draw = await self._fetch_draw(draw_id)
        if draw is None or draw.number_of_winners_per_tier is None:
            return None
        return self._tier_map(draw.number_of_winners_per_tier)

    async def get_number_of_players(self, draw_id: int) -> Optional[int]:
        draw = await self._fetch_draw(draw_id)
        return draw.number_of_players if draw else None

    async def get_sold_tickets(self, draw_id: int) -> Optional[int]:
        draw = await self._fetch_draw(draw_id)
        return draw.number_of_sold_tickets if draw else None

    def get_draw_scheduled_date(self, draw_id: int) -> datetime:
        """Execution time of a draw, derived from the first draw and the draw period."""
        timestamp = self.config.first_draw_timestamp + int(draw_id) * self.config.draw_period
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)

    def get_ticket_registration_deadline(self, draw_id: int) -> datetime:
        """Last moment tickets can be bought for a draw."""
        return self.get_draw_scheduled_date(draw_id) - timedelta(seconds=self.config.draw_cool_down_period)

    # ------------------------------------------------------------------
    # Rewards
    # ------------------------------------------------------------------
    async def get_draw_reward_size(self, draw_id: int, win_tier: int) -> int:
        """Predict the reward of ``win_tier`` from the contract's current economics."""
        self._check_tier(win_tier)
        results = await asyncio.gather(
            self.contract.current_net_profit(),
            self.contract.fixed_reward(win_tier),
            self.contract.fixed_reward(self.selection_size),
            self.contract.tickets_sold(draw_id),
            self.contract.expected_payout(),
            return_exceptions=True,
        )
        # every read settles before the first failure is raised
        for result in results:
            if isinstance(result, BaseException):
                logger.error("Failed to read reward inputs for draw %s tier %s: %s", draw_id, win_tier, result)
                raise result
        net_profit, fixed_reward, fixed_jackpot, tickets_sold, expected_payout = results

        return calculate_reward(
            RewardInputs(
                net_profit=net_profit,
                fixed_reward=fixed_reward,
                fixed_jackpot=fixed_jackpot,
                tickets_sold=tickets_sold,
                is_jackpot_tier=win_tier == self.selection_size,
                expected_payout=expected_payout,
            ),
            self.reward_parameters,
        )

    async def get_claimable_amount_and_win_tier(self, ticket_id: int) -> ClaimableAmount:
        try:
            return await self.contract.claimable(ticket_id)
        except CollaboratorUnavailable as exc:
            logger.error("Failed to read claimable amount for ticket %s: %s", ticket_id, exc)
            raise

    # ------------------------------------------------------------------
    # Tickets and players
    # ------------------------------------------------------------------
    async def get_tickets(self, player: str, skip: int = 0, limit: Optional[int] = None) -> List[TicketHistory]:
        """Ticket history of a player, oldest ticket id first."""
        try:
            tickets = await self.indexer.get_tickets(player, skip, limit)
        except CollaboratorUnavailable as exc:
            logger.error("Failed to fetch tickets of %s: %s", shorten_eth_address(player), exc)
            raise
        return [self._ticket_history(ticket) for ticket in tickets]

    async def get_ticket_status(self, ticket: TicketHistory, current_draw: Optional[int] = None) -> TicketStatus:
        if current_draw is None:
            current_draw = await self.get_current_draw()
        return ticket.status(current_draw)

    async def get_player_stats(self, player: str) -> Optional[Player]:
        try:
            response = await self.indexer.get_player(player)
        except CollaboratorUnavailable as exc:
            logger.error("Failed to fetch player %s: %s", shorten_eth_address(player), exc)
            raise
        if response is None:
            return None

        return Player(
            wallet_address=response.id,
            draw_stats=[
                DrawStats(
                    draw_id=stats.draw_id,
                    number_of_tickets=stats.number_of_tickets,
                    number_of_winning_tickets=stats.number_of_winning_tickets,
                    number_of_claimed_tickets=stats.number_of_claimed_tickets,
                )
                for stats in response.draw_stats
            ],
        )

    def generate_random_tickets(self, count: int) -> List[Combination]:
        return generate_random_tickets(count, self.selection_size, self.selection_max)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    async def buy_tickets(
        self,
        tickets_for_draws: Union[TicketForDraw, Sequence[TicketForDraw]],
        frontend: str,
        referrer: str,
        progress: Optional[TransactionProgress] = None,
    ) -> Dict[str, Any]:
        """Buy tickets for upcoming draws.

        Every combination is validated and packed before anything is sent.
        Subscribe to ``progress`` to follow the approval and purchase phases.
        """
        if isinstance(tickets_for_draws, TicketForDraw):
            tickets_for_draws = [tickets_for_draws]

        draw_ids = [ticket.draw_id for ticket in tickets_for_draws]
        packed = [encode(ticket.numbers, self.selection_size, self.selection_max) for ticket in tickets_for_draws]
        total_price = self.ticket_price * len(packed)

        logger.info("Buying %d tickets for draws %s", len(packed), sorted(set(draw_ids)))
        return await self.contract.buy_tickets(
            draw_ids,
            packed,
            frontend,
            referrer,
            total_price=total_price,
            progress=progress,
        )

    async def claim_winning_tickets(
        self,
        ticket_ids: Union[int, Sequence[int]],
        progress: Optional[TransactionProgress] = None,
    ) -> Dict[str, Any]:
        """Claim winning tickets; the signer must own them."""
        ids = [ticket_ids] if isinstance(ticket_ids, int) else list(ticket_ids)
        logger.info("Claiming %d tickets", len(ids))
        return await self.contract.claim_winning_tickets(ids, progress=progress)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _check_tier(self, win_tier: int) -> None:
        if not self.min_winning_tier <= win_tier <= self.selection_size:
            raise InvalidTierRequest(win_tier, self.min_winning_tier, self.selection_size)

    def _tier_map(self, values: Sequence[int]) -> Dict[int, int]:
        return map_tiers(values, self.min_winning_tier, self.selection_size, int)

    async def _fetch_draw(self, draw_id: int) -> Optional[DrawResponse]:
        try:
            return await self.indexer.get_draw(draw_id)
        except CollaboratorUnavailable as exc:
            logger.error("Failed to fetch draw %s: %s", draw_id, exc)
            raise

    def _draw_info(self, draw: DrawResponse) -> DrawInfo:
        if draw.scheduled_timestamp is not None:
            scheduled_date = datetime.fromtimestamp(draw.scheduled_timestamp, tz=timezone.utc)
        else:
            scheduled_date = self.get_draw_scheduled_date(draw.draw_id)

        return DrawInfo(
            draw_id=draw.draw_id,
            scheduled_date=scheduled_date,
            winning_combination=(
                frozenset(draw.winning_combination) if draw.winning_combination is not None else None
            ),
            winners_per_tier=(
                self._tier_map(draw.number_of_winners_per_tier)
                if draw.number_of_winners_per_tier is not None
                else None
            ),
            prizes_per_tier=self._tier_map(draw.prizes_per_tier) if draw.prizes_per_tier is not None else None,
        )

    def _ticket_history(self, ticket: TicketResponse) -> TicketHistory:
        draw_id = ticket.draw.draw_id

        async def _reward(win_tier: int) -> int:
            return await self.contract.win_amount(draw_id, win_tier)

        return TicketHistory(
            ticket_id=ticket.ticket_id,
            draw=draw_id,
            combination=combination_outcome(ticket.combination),
            is_claimed=ticket.is_claimed,
            winning_combination=combination_outcome(ticket.draw.winning_combination),
            min_winning_tier=self.min_winning_tier,
            reward_lookup=_reward,
            expiry_draws=self.expiry_draws,
        )
