"""GraphQL client for the lottery subgraph."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence

import requests
from pydantic import ValidationError

from lottery_sdk.errors import CollaboratorUnavailable
from lottery_sdk.indexer.schemas import DrawResponse, PlayerResponse, TicketResponse
from lottery_sdk.utils.common import draw_entity_id, normalize_address, shorten_eth_address
from lottery_sdk.utils.logger import get_logger

logger = get_logger(__name__)

DRAW_FIELDS = """
    drawId
    scheduledTimestamp
    winningCombination
    numberOfWinnersPerTier
    prizesPerTier
    numberOfPlayers
    numberOfSoldTickets
"""

DRAWS_QUERY = """
query getDrawInfos($drawIds: [ID!]!, $orderDirection: String, $limit: Int, $skip: Int!) {
  draws(where: { id_in: $drawIds }, orderBy: "drawId", orderDirection: $orderDirection, first: $limit, skip: $skip) {
    %s
  }
}
""" % DRAW_FIELDS

DRAW_QUERY = """
query getDraw($drawId: ID!) {
  draw(id: $drawId) {
    %s
  }
}
""" % DRAW_FIELDS

TICKETS_QUERY = """
query getTickets($player: ID!, $skip: Int!, $limit: Int) {
  tickets(orderBy: "ticketId", first: $limit, skip: $skip, where: { owner: $player }) {
    ticketId
    owner
    draw {
      drawId
      winningCombination
    }
    combination
    isClaimed
  }
}
"""

PLAYER_QUERY = """
query getPlayer($player: ID!) {
  player(id: $player) {
    id
    drawStats {
      numberOfTickets
      numberOfWinningTickets
      numberOfClaimedTickets
      drawId
    }
  }
}
"""


class IndexerClient:
    """Read-only access to draws, tickets and player statistics.

    Transport, GraphQL and schema failures are raised as
    :class:`CollaboratorUnavailable`. Entities that do not exist come back as
    ``None`` or an empty list.
    """

    SOURCE = "indexer"

    def __init__(
        self,
        subgraph_uri: str,
        contract_address: str,
        *,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.subgraph_uri = subgraph_uri
        self.contract_address = normalize_address(contract_address)
        self.timeout = timeout
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def draw_key(self, draw_id: int) -> str:
        return draw_entity_id(self.contract_address, draw_id)

    def query(self, query: str, variables: Dict[str, Any], operation: str) -> Dict[str, Any]:
        """POST a GraphQL query and return its ``data`` object."""
        logger.debug("Indexer %s with %s", operation, variables)
        try:
            response = self._session.post(
                self.subgraph_uri,
                json={"query": query, "variables": variables},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.RequestException as exc:
            logger.error("Indexer request %s failed: %s", operation, exc)
            raise CollaboratorUnavailable(self.SOURCE, str(exc), operation=operation) from exc
        except ValueError as exc:
            logger.error("Indexer returned malformed JSON for %s: %s", operation, exc)
            raise CollaboratorUnavailable(self.SOURCE, "Malformed JSON response", operation=operation) from exc

        if not isinstance(body, dict):
            raise CollaboratorUnavailable(self.SOURCE, "Unexpected response shape", operation=operation)
        if body.get("errors"):
            messages = "; ".join(str(error.get("message", error)) for error in body["errors"])
            logger.error("Indexer %s answered with errors: %s", operation, messages)
            raise CollaboratorUnavailable(self.SOURCE, messages, operation=operation)

        data = body.get("data")
        if not isinstance(data, dict):
            raise CollaboratorUnavailable(self.SOURCE, "Response carries no data", operation=operation)
        return data

    def _parse(self, model, payload: Any, operation: str):
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            logger.error("Indexer %s returned an unexpected %s: %s", operation, model.__name__, exc)
            raise CollaboratorUnavailable(self.SOURCE, str(exc), operation=operation) from exc

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def fetch_draws(
        self,
        draw_ids: Sequence[int],
        order_direction: str = "asc",
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[DrawResponse]:
        if order_direction not in ("asc", "desc"):
            raise ValueError("order_direction must be 'asc' or 'desc'")
        data = self.query(
            DRAWS_QUERY,
            {
                "drawIds": [self.draw_key(draw_id) for draw_id in draw_ids],
                "orderDirection": order_direction,
                "limit": limit,
                "skip": skip,
            },
            "draws",
        )
        return [self._parse(DrawResponse, draw, "draws") for draw in data.get("draws") or []]

    def fetch_draw(self, draw_id: int) -> Optional[DrawResponse]:
        data = self.query(DRAW_QUERY, {"drawId": self.draw_key(draw_id)}, "draw")
        draw = data.get("draw")
        return self._parse(DrawResponse, draw, "draw") if draw else None

    def fetch_tickets(self, player: str, skip: int = 0, limit: Optional[int] = None) -> List[TicketResponse]:
        data = self.query(
            TICKETS_QUERY,
            {"player": normalize_address(player), "skip": skip, "limit": limit},
            "tickets",
        )
        tickets = [self._parse(TicketResponse, ticket, "tickets") for ticket in data.get("tickets") or []]
        logger.debug("Fetched %d tickets for %s", len(tickets), shorten_eth_address(player))
        return tickets

    def fetch_player(self, player: str) -> Optional[PlayerResponse]:
        data = self.query(PLAYER_QUERY, {"player": normalize_address(player)}, "player")
        payload = data.get("player")
        return self._parse(PlayerResponse, payload, "player") if payload else None

    # ------------------------------------------------------------------
    # Async wrappers
    # ------------------------------------------------------------------
    async def get_draws(self, draw_ids: Sequence[int], order_direction: str = "asc", skip: int = 0,
                        limit: Optional[int] = None) -> List[DrawResponse]:
        return await asyncio.to_thread(self.fetch_draws, draw_ids, order_direction, skip, limit)

    async def get_draw(self, draw_id: int) -> Optional[DrawResponse]:
        return await asyncio.to_thread(self.fetch_draw, draw_id)

    async def get_tickets(self, player: str, skip: int = 0, limit: Optional[int] = None) -> List[TicketResponse]:
        return await asyncio.to_thread(self.fetch_tickets, player, skip, limit)

    async def get_player(self, player: str) -> Optional[PlayerResponse]:
        return await asyncio.to_thread(self.fetch_player, player)
