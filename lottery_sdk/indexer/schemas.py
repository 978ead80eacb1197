"""Pydantic models for subgraph responses.

The subgraph serializes BigInt fields as strings; pydantic's lax mode turns
them into ints. Finalization fields are null until the draw is executed.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class IndexerModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class DrawResponse(IndexerModel):
    draw_id: int = Field(alias="drawId")
    scheduled_timestamp: Optional[int] = Field(default=None, alias="scheduledTimestamp")
    winning_combination: Optional[List[int]] = Field(default=None, alias="winningCombination")
    number_of_winners_per_tier: Optional[List[int]] = Field(default=None, alias="numberOfWinnersPerTier")
    prizes_per_tier: Optional[List[int]] = Field(default=None, alias="prizesPerTier")
    number_of_players: Optional[int] = Field(default=None, alias="numberOfPlayers")
    number_of_sold_tickets: Optional[int] = Field(default=None, alias="numberOfSoldTickets")


class TicketDrawResponse(IndexerModel):
    draw_id: int = Field(alias="drawId")
    winning_combination: Optional[List[int]] = Field(default=None, alias="winningCombination")


class TicketResponse(IndexerModel):
    ticket_id: int = Field(alias="ticketId")
    owner: str
    draw: TicketDrawResponse
    combination: Optional[List[int]] = None
    is_claimed: bool = Field(default=False, alias="isClaimed")


class DrawStatsResponse(IndexerModel):
    draw_id: int = Field(alias="drawId")
    number_of_tickets: int = Field(alias="numberOfTickets")
    number_of_winning_tickets: int = Field(alias="numberOfWinningTickets")
    number_of_claimed_tickets: int = Field(alias="numberOfClaimedTickets")


class PlayerResponse(IndexerModel):
    id: str
    draw_stats: List[DrawStatsResponse] = Field(default_factory=list, alias="drawStats")
