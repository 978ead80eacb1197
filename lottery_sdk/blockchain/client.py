"""Blockchain client for the lottery contract and its reward token."""

from __future__ import annotations

import asyncio
import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from eth_account import Account
from web3 import Web3
from web3.contract import Contract

from lottery_sdk.blockchain.progress import TransactionPhase, TransactionProgress
from lottery_sdk.errors import CollaboratorUnavailable
from lottery_sdk.lottery.models import ClaimableAmount
from lottery_sdk.utils.common import shorten_eth_address
from lottery_sdk.utils.logger import get_logger

logger = get_logger(__name__)

ABI_DIR = Path(__file__).parent / "abi"


def load_abi(name: str) -> List[Dict[str, Any]]:
    abi_path = ABI_DIR / f"{name}.abi"
    with abi_path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


class LotteryContractClient:
    """Async-friendly wrapper around web3.py for lottery reads and transactions.

    Blocking web3 calls run in worker threads. Every failure of the RPC or the
    contract surfaces as :class:`CollaboratorUnavailable`; nothing is retried.
    """

    SOURCE = "contract"

    def __init__(
        self,
        config: Dict[str, Any],
        *,
        contract_address: Optional[str] = None,
        reward_token_address: Optional[str] = None,
        web3: Optional[Web3] = None,
    ):
        blockchain_cfg = config.get("blockchain", {})
        self.rpc_url: str = blockchain_cfg.get("rpc_url", "http://127.0.0.1:8545")
        try:
            self.rpc_timeout: float = float(blockchain_cfg.get("rpc_timeout", 10.0))
        except (TypeError, ValueError):
            self.rpc_timeout = 10.0
        chain_id = blockchain_cfg.get("chain_id")
        self.chain_id: Optional[int] = int(chain_id) if chain_id is not None else None
        self.tx_timeout: int = int(blockchain_cfg.get("tx_timeout_seconds", 180))

        address = contract_address or blockchain_cfg.get("contract_address")
        if not address:
            raise ValueError("A lottery contract address is required")
        self.contract_address: str = Web3.to_checksum_address(address)
        token = reward_token_address or blockchain_cfg.get("reward_token_address")
        self.reward_token_address: Optional[str] = Web3.to_checksum_address(token) if token else None

        self._w3: Optional[Web3] = web3
        self._contract: Optional[Contract] = None
        self._token: Optional[Contract] = None

        private_key = blockchain_cfg.get("private_key")
        self.account = Account.from_key(private_key) if private_key else None
        if self.account:
            logger.info("Signer account loaded: %s", shorten_eth_address(self.account.address))

        gas_price_setting = blockchain_cfg.get("gas_price")
        self._gas_price_override: Optional[int] = None
        if gas_price_setting:
            try:
                self._gas_price_override = Web3.to_wei(Decimal(str(gas_price_setting)), "gwei")
            except (ArithmeticError, ValueError) as exc:
                logger.warning("Unable to parse gas price '%s': %s", gas_price_setting, exc)

        self._gas_multiplier = float(blockchain_cfg.get("gas_multiplier", 1.15))

    async def initialize(self) -> None:
        """Establish the RPC connection and bind the lottery and token contracts."""
        if self._w3 is None:
            self._w3 = Web3(Web3.HTTPProvider(self.rpc_url, request_kwargs={"timeout": self.rpc_timeout}))

        connected = await asyncio.to_thread(self._w3.is_connected)
        if not connected:
            raise CollaboratorUnavailable(self.SOURCE, f"Failed to connect to RPC at {self.rpc_url}")
        logger.info("Connected to RPC %s", self.rpc_url)

        if self.chain_id is not None:
            try:
                actual_chain_id = await asyncio.to_thread(lambda: self._w3.eth.chain_id)
                if actual_chain_id != self.chain_id:
                    logger.warning("Chain ID mismatch: expected %s, got %s", self.chain_id, actual_chain_id)
            except Exception as exc:
                logger.warning("Could not verify chain ID: %s", exc)

        self._contract = self._w3.eth.contract(address=self.contract_address, abi=load_abi("Lottery"))
        logger.info("Lottery contract bound at %s", self.contract_address)

        if self.reward_token_address is None:
            self.reward_token_address = Web3.to_checksum_address(await self.reward_token())
        self._token = self._w3.eth.contract(address=self.reward_token_address, abi=load_abi("ERC20"))
        logger.info("Reward token bound at %s", self.reward_token_address)

    async def close(self) -> None:
        """Tear down references; HTTP provider closes automatically."""
        self._contract = None
        self._token = None
        self._w3 = None

    def _ensure_contract(self) -> Contract:
        if not self._contract:
            raise RuntimeError("Contract not initialised")
        return self._contract

    def _ensure_token(self) -> Contract:
        if not self._token:
            raise RuntimeError("Reward token not initialised")
        return self._token

    def _ensure_web3(self) -> Web3:
        if not self._w3:
            raise RuntimeError("Web3 provider not initialised")
        return self._w3

    async def _call_view(self, function_name: str, *args, token: bool = False) -> Any:
        def _call():
            target = self._ensure_token() if token else self._ensure_contract()
            return getattr(target.functions, function_name)(*args).call()

        try:
            return await asyncio.to_thread(_call)
        except Exception as exc:
            logger.error("View call %s%s failed: %s", function_name, args, exc)
            raise CollaboratorUnavailable(self.SOURCE, str(exc), operation=function_name) from exc

    async def _send_transaction(self, function_name: str, *args, token: bool = False) -> Dict[str, Any]:
        """Sign, send and wait for a transaction; returns a receipt summary."""
        if not self.account:
            raise CollaboratorUnavailable(self.SOURCE, "Signer account not configured", operation=function_name)

        account = self.account

        def _send() -> Dict[str, Any]:
            target = self._ensure_token() if token else self._ensure_contract()
            w3 = self._ensure_web3()
            tx_function = getattr(target.functions, function_name)(*args)
            gas_estimate = tx_function.estimate_gas({"from": account.address})
            params = {
                "from": account.address,
                "gas": int(gas_estimate * self._gas_multiplier),
                "gasPrice": self._gas_price_override or w3.eth.gas_price,
                "nonce": w3.eth.get_transaction_count(account.address),
            }
            if self.chain_id is not None:
                params["chainId"] = self.chain_id
            txn = tx_function.build_transaction(params)
            signed = account.sign_transaction(txn)
            raw = getattr(signed, "raw_transaction", None) or getattr(signed, "rawTransaction")
            tx_hash = w3.eth.send_raw_transaction(raw)
            receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.tx_timeout)
            return {
                "status": int(receipt["status"]),
                "blockNumber": int(receipt["blockNumber"]),
                "transactionHash": receipt["transactionHash"].hex(),
                "gasUsed": int(receipt["gasUsed"]),
            }

        try:
            receipt = await asyncio.to_thread(_send)
        except Exception as exc:
            logger.error("Transaction %s failed: %s", function_name, exc)
            raise CollaboratorUnavailable(self.SOURCE, str(exc), operation=function_name) from exc

        if receipt["status"] != 1:
            raise CollaboratorUnavailable(
                self.SOURCE, f"Transaction {receipt['transactionHash']} reverted", operation=function_name
            )
        logger.info("Transaction %s mined for %s", receipt["transactionHash"], function_name)
        return receipt

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def current_draw(self) -> int:
        return int(await self._call_view("currentDraw"))

    async def draw_scheduled_at(self, draw_id: int) -> int:
        return int(await self._call_view("drawScheduledAt", int(draw_id)))

    async def draw_period(self) -> int:
        return int(await self._call_view("drawPeriod"))

    async def draw_cool_down_period(self) -> int:
        return int(await self._call_view("drawCoolDownPeriod"))

    async def ticket_price(self) -> int:
        return int(await self._call_view("ticketPrice"))

    async def reward_token(self) -> str:
        return str(await self._call_view("rewardToken"))

    async def fixed_reward(self, win_tier: int) -> int:
        return int(await self._call_view("fixedReward", int(win_tier)))

    async def current_net_profit(self) -> int:
        return int(await self._call_view("currentNetProfit"))

    async def expected_payout(self) -> int:
        return int(await self._call_view("expectedPayout"))

    async def tickets_sold(self, draw_id: int) -> int:
        return int(await self._call_view("ticketsSold", int(draw_id)))

    async def claimable(self, ticket_id: int) -> ClaimableAmount:
        raw = await self._call_view("claimable", int(ticket_id))
        return ClaimableAmount(
            claimable_amount=int(self._select(raw, "claimableAmount", 0)),
            win_tier=int(self._select(raw, "winTier", 1)),
        )

    async def win_amount(self, draw_id: int, win_tier: int) -> int:
        return int(await self._call_view("winAmount", int(draw_id), int(win_tier)))

    async def allowance(self, owner: str, spender: Optional[str] = None) -> int:
        spender = spender or self.contract_address
        return int(
            await self._call_view(
                "allowance",
                Web3.to_checksum_address(owner),
                Web3.to_checksum_address(spender),
                token=True,
            )
        )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    async def approve(self, amount: int, spender: Optional[str] = None) -> Dict[str, Any]:
        spender = Web3.to_checksum_address(spender or self.contract_address)
        return await self._send_transaction("approve", spender, int(amount), token=True)

    async def buy_tickets(
        self,
        draw_ids: Sequence[int],
        packed_tickets: Sequence[int],
        frontend: str,
        referrer: str,
        *,
        total_price: int,
        progress: Optional[TransactionProgress] = None,
    ) -> Dict[str, Any]:
        """Approve the reward token if needed, then submit the purchase.

        The approval is mined before the purchase is sent, so both use the
        signer's nonces in order.
        """
        if len(draw_ids) != len(packed_tickets):
            raise ValueError("draw_ids and packed_tickets must have the same length")
        for role, address in (("frontend", frontend), ("referrer", referrer)):
            if not Web3.is_address(address):
                raise ValueError(f"Invalid {role} address: {address!r}")
        frontend = Web3.to_checksum_address(frontend)
        referrer = Web3.to_checksum_address(referrer)
        if not self.account:
            raise CollaboratorUnavailable(self.SOURCE, "Signer account not configured", operation="buyTickets")

        progress = progress or TransactionProgress()
        try:
            allowance = await self.allowance(self.account.address)
            if allowance < total_price:
                logger.info("Allowance %s below %s; approving reward token", allowance, total_price)
                progress.advance(TransactionPhase.APPROVE_STARTED, {"amount": total_price})
                approval = await self.approve(total_price)
                progress.advance(TransactionPhase.APPROVE_SUCCEEDED, approval)

            progress.advance(TransactionPhase.TRANSACTION_STARTED, {"tickets": len(packed_tickets)})
            receipt = await self._send_transaction(
                "buyTickets",
                [int(draw_id) for draw_id in draw_ids],
                [int(ticket) for ticket in packed_tickets],
                frontend,
                referrer,
            )
        except Exception as exc:
            progress.advance(TransactionPhase.FAILED, {"error": str(exc)})
            raise

        progress.advance(TransactionPhase.TRANSACTION_SUCCEEDED, receipt)
        return receipt

    async def claim_winning_tickets(
        self,
        ticket_ids: Sequence[int],
        *,
        progress: Optional[TransactionProgress] = None,
    ) -> Dict[str, Any]:
        progress = progress or TransactionProgress()
        progress.advance(TransactionPhase.TRANSACTION_STARTED, {"tickets": len(ticket_ids)})
        try:
            receipt = await self._send_transaction("claimWinningTickets", [int(ticket_id) for ticket_id in ticket_ids])
        except Exception as exc:
            progress.advance(TransactionPhase.FAILED, {"error": str(exc)})
            raise

        progress.advance(TransactionPhase.TRANSACTION_SUCCEEDED, receipt)
        return receipt

    def get_client_status(self) -> Dict[str, Any]:
        return {
            "rpcUrl": self.rpc_url,
            "chainId": self.chain_id,
            "contract": self.contract_address,
            "rewardToken": self.reward_token_address,
            "signer": self.account.address if self.account else None,
        }

    @staticmethod
    def _select(mapping_or_tuple: Any, key: str, index: int) -> Any:
        if isinstance(mapping_or_tuple, dict):
            if key in mapping_or_tuple:
                return mapping_or_tuple[key]
        return mapping_or_tuple[index]
