import asyncio

import pytest
from web3 import Web3

from lottery_sdk.blockchain.client import LotteryContractClient, load_abi
from lottery_sdk.blockchain.progress import TransactionPhase, TransactionProgress
from lottery_sdk.errors import CollaboratorUnavailable
from lottery_sdk.lottery.models import ClaimableAmount

from tests.fakes import CONTRACT_ADDRESS, TOKEN_ADDRESS, FakeAccount, FakeContract, FakeWeb3

LOTTERY = Web3.to_checksum_address(CONTRACT_ADDRESS)
TOKEN = Web3.to_checksum_address(TOKEN_ADDRESS)
HARDHAT_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"


def _setup(views=None, token_views=None, *, reward_token=TOKEN_ADDRESS, account=True, **web3_kwargs):
    lottery = FakeContract(LOTTERY, views)
    token = FakeContract(TOKEN, token_views)
    web3 = FakeWeb3({LOTTERY: lottery, TOKEN: token}, **web3_kwargs)
    client = LotteryContractClient(
        {"blockchain": {"chain_id": 5}},
        contract_address=CONTRACT_ADDRESS,
        reward_token_address=reward_token,
        web3=web3,
    )
    if account:
        client.account = FakeAccount()
    asyncio.run(client.initialize())
    return client, lottery, token, web3


def test_abi_files_cover_the_called_functions():
    names = {item["name"] for item in load_abi("Lottery")}
    assert {"currentDraw", "fixedReward", "claimable", "winAmount", "buyTickets", "claimWinningTickets"} <= names
    assert {"allowance", "approve"} <= {item["name"] for item in load_abi("ERC20")}


def test_private_key_loads_signer():
    client = LotteryContractClient({"blockchain": {"contract_address": CONTRACT_ADDRESS, "private_key": HARDHAT_KEY}})
    assert client.account.address == "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
    assert client.get_client_status()["signer"] == client.account.address


def test_contract_address_is_required():
    with pytest.raises(ValueError):
        LotteryContractClient({})


def test_view_reads():
    client, lottery, _, _ = _setup(
        {
            "currentDraw": 12,
            "fixedReward": lambda tier: tier * 100,
            "ticketsSold": lambda draw_id: 40 + draw_id,
            "claimable": lambda ticket_id: (500, 4),
            "winAmount": lambda draw_id, tier: draw_id * 1000 + tier,
        }
    )

    assert asyncio.run(client.current_draw()) == 12
    assert asyncio.run(client.fixed_reward(5)) == 500
    assert asyncio.run(client.tickets_sold(2)) == 42
    assert asyncio.run(client.claimable(9)) == ClaimableAmount(claimable_amount=500, win_tier=4)
    assert asyncio.run(client.win_amount(3, 6)) == 3006
    assert ("winAmount", (3, 6)) in lottery.calls


def test_reward_token_is_read_from_the_contract_when_not_configured():
    client, lottery, _, _ = _setup({"rewardToken": TOKEN_ADDRESS.lower()}, reward_token=None)
    assert client.reward_token_address == TOKEN
    assert ("rewardToken", ()) in lottery.calls


def test_view_failure_is_a_collaborator_error():
    client, _, _, _ = _setup({"currentNetProfit": RuntimeError("execution reverted")})
    with pytest.raises(CollaboratorUnavailable) as excinfo:
        asyncio.run(client.current_net_profit())
    assert excinfo.value.source == "contract"
    assert excinfo.value.operation == "currentNetProfit"


def test_unreachable_rpc():
    lottery = FakeContract(LOTTERY)
    client = LotteryContractClient(
        {}, contract_address=CONTRACT_ADDRESS, reward_token_address=TOKEN_ADDRESS,
        web3=FakeWeb3({LOTTERY: lottery}, connected=False),
    )
    with pytest.raises(CollaboratorUnavailable):
        asyncio.run(client.initialize())


def test_buy_tickets_approves_before_purchase_when_allowance_is_short():
    client, lottery, token, web3 = _setup(token_views={"allowance": 10})
    progress = TransactionProgress()
    seen = []
    progress.add_listener(lambda phase, details: seen.append(phase))

    receipt = asyncio.run(
        client.buy_tickets(
            [1, 2], [0x7F, 0xFE], CONTRACT_ADDRESS, TOKEN_ADDRESS, total_price=300, progress=progress
        )
    )

    assert seen == [
        TransactionPhase.APPROVE_STARTED,
        TransactionPhase.APPROVE_SUCCEEDED,
        TransactionPhase.TRANSACTION_STARTED,
        TransactionPhase.TRANSACTION_SUCCEEDED,
    ]
    assert progress.phase is TransactionPhase.TRANSACTION_SUCCEEDED
    assert [name for name, _, _ in token.sent] == ["approve"]
    assert token.sent[0][1] == (LOTTERY, 300)
    assert lottery.sent[0][0] == "buyTickets"
    assert lottery.sent[0][1][:2] == ([1, 2], [0x7F, 0xFE])
    assert [params["nonce"] for _, _, params in token.sent + lottery.sent] == [0, 1]
    assert web3.eth.raw_sent == [b"signed:approve", b"signed:buyTickets"]
    assert receipt["status"] == 1


def test_buy_tickets_skips_approval_with_enough_allowance():
    client, lottery, token, _ = _setup(token_views={"allowance": 300})
    progress = TransactionProgress()

    asyncio.run(client.buy_tickets([1], [0x7F], CONTRACT_ADDRESS, TOKEN_ADDRESS, total_price=300, progress=progress))

    assert token.sent == []
    assert progress.history == [TransactionPhase.TRANSACTION_STARTED, TransactionPhase.TRANSACTION_SUCCEEDED]


def test_reverted_purchase_reports_failure():
    client, _, _, _ = _setup(token_views={"allowance": 300}, receipt_status=0)
    progress = TransactionProgress()

    with pytest.raises(CollaboratorUnavailable, match="reverted"):
        asyncio.run(client.buy_tickets([1], [0x7F], CONTRACT_ADDRESS, TOKEN_ADDRESS, total_price=300, progress=progress))

    assert progress.phase is TransactionPhase.FAILED


def test_transactions_need_a_signer():
    client, _, _, _ = _setup(account=False)
    with pytest.raises(CollaboratorUnavailable):
        asyncio.run(client.claim_winning_tickets([1]))


def test_claim_winning_tickets():
    client, lottery, _, _ = _setup()
    receipt = asyncio.run(client.claim_winning_tickets([4, 5]))
    assert lottery.sent[0][:2] == ("claimWinningTickets", ([4, 5],))
    assert lottery.sent[0][2]["chainId"] == 5
    assert receipt["blockNumber"] == 101


def test_mismatched_purchase_arguments():
    client, _, _, _ = _setup()
    with pytest.raises(ValueError):
        asyncio.run(client.buy_tickets([1, 2], [0x7F], CONTRACT_ADDRESS, TOKEN_ADDRESS, total_price=1))


def test_bad_frontend_address_is_rejected_before_approval():
    client, lottery, token, web3 = _setup(token_views={"allowance": 0})
    progress = TransactionProgress()

    with pytest.raises(ValueError, match="frontend"):
        asyncio.run(client.buy_tickets([1], [0x7F], "0x123", TOKEN_ADDRESS, total_price=300, progress=progress))

    assert token.calls == []
    assert token.sent == []
    assert lottery.sent == []
    assert web3.eth.raw_sent == []
    assert progress.history == []


def test_bad_referrer_address_is_rejected_before_approval():
    client, _, token, _ = _setup(token_views={"allowance": 0})
    with pytest.raises(ValueError, match="referrer"):
        asyncio.run(client.buy_tickets([1], [0x7F], CONTRACT_ADDRESS, "not-an-address", total_price=300))
    assert token.sent == []


def test_failure_after_approval_reports_failed_phase():
    client, lottery, token, _ = _setup(token_views={"allowance": 0})
    progress = TransactionProgress()

    with pytest.raises(ValueError):
        asyncio.run(
            client.buy_tickets([1], ["not-a-ticket"], CONTRACT_ADDRESS, TOKEN_ADDRESS, total_price=300, progress=progress)
        )

    assert [name for name, _, _ in token.sent] == ["approve"]
    assert lottery.sent == []
    assert progress.history == [
        TransactionPhase.APPROVE_STARTED,
        TransactionPhase.APPROVE_SUCCEEDED,
        TransactionPhase.TRANSACTION_STARTED,
        TransactionPhase.FAILED,
    ]


def test_uninitialised_client_raises_collaborator_error():
    client = LotteryContractClient({}, contract_address=CONTRACT_ADDRESS, reward_token_address=TOKEN_ADDRESS)
    client.account = FakeAccount()

    with pytest.raises(CollaboratorUnavailable) as excinfo:
        asyncio.run(client.current_draw())
    assert excinfo.value.operation == "currentDraw"

    with pytest.raises(CollaboratorUnavailable):
        asyncio.run(client.allowance(LOTTERY))

    with pytest.raises(CollaboratorUnavailable):
        asyncio.run(client.claim_winning_tickets([1]))
