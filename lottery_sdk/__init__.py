"""Client library for the on-chain number-selection lottery."""

from lottery_sdk.blockchain.progress import TransactionPhase, TransactionProgress
from lottery_sdk.errors import (
    CollaboratorUnavailable,
    InvalidCombination,
    InvalidConfiguration,
    InvalidTierRequest,
    LotteryError,
)
from lottery_sdk.lottery.combination import (
    decode,
    encode,
    encode_unchecked,
    generate_random_ticket,
    generate_random_tickets,
    is_valid_combination,
)
from lottery_sdk.lottery.facade import Lottery
from lottery_sdk.lottery.models import (
    ClaimableAmount,
    DrawInfo,
    DrawStats,
    LotteryConfig,
    Player,
    TicketForDraw,
)
from lottery_sdk.lottery.rewards import RewardInputs, RewardParameters, calculate_reward
from lottery_sdk.lottery.tickets import (
    UNRESOLVED,
    Resolved,
    TicketHistory,
    TicketStatus,
    Unresolved,
    ticket_status,
)
from lottery_sdk.lottery.tiers import map_tiers

__version__ = "1.0.0"
__all__ = [
    "ClaimableAmount", "CollaboratorUnavailable", "DrawInfo", "DrawStats",
    "InvalidCombination", "InvalidConfiguration", "InvalidTierRequest", "Lottery",
    "LotteryConfig", "LotteryError", "Player", "Resolved", "RewardInputs",
    "RewardParameters", "TicketForDraw", "TicketHistory", "TicketStatus",
    "TransactionPhase", "TransactionProgress", "UNRESOLVED", "Unresolved",
    "calculate_reward", "decode", "encode", "encode_unchecked",
    "generate_random_ticket", "generate_random_tickets", "is_valid_combination",
    "map_tiers", "ticket_status",
]
