"""Tests for the swap state machine and swap creation."""

import asyncio
import uuid
from dataclasses import replace

import pytest

from conftest import SOV_ADDRESS, FakeChainClient, make_swap
from presaleswap.swap.models import InvalidTransitionError, Swap, SwapStatus
from presaleswap.utils.locks import LockTimeoutError, asset_lock, get_asset_lock

APPROVE_HASH = FakeChainClient.hash_for(1)


class TestPerformNextSwapAction:
    """Tests for SwapStateMachine.perform_next_swap_action."""

    @pytest.mark.asyncio
    async def test_waiting_for_approval_polls(self, provider, chain_client):
        swap = make_swap(SwapStatus.WAITING_FOR_APPROVE_CONFIRMATIONS, approve_tx_hash=APPROVE_HASH)

        assert await provider.perform_next_swap_action("mainnet", "w1", swap) is None

        chain_client.confirm(APPROVE_HASH, 1)
        updates = await provider.perform_next_swap_action("mainnet", "w1", swap)

        assert updates == {"status": SwapStatus.APPROVE_CONFIRMED}
        assert chain_client.sent == []

    @pytest.mark.asyncio
    async def test_approve_confirmed_sends_swap(self, provider, chain_client):
        swap = make_swap(SwapStatus.APPROVE_CONFIRMED)

        updates = await provider.perform_next_swap_action("mainnet", "w1", swap)

        assert updates["status"] == SwapStatus.WAITING_FOR_SWAP_CONFIRMATIONS
        assert updates["swap_tx_hash"] == chain_client.hash_for(1)
        assert len(chain_client.sent) == 1

    @pytest.mark.asyncio
    async def test_existing_swap_hash_is_not_resent(self, provider, chain_client):
        """Test a persisted hash with a lost status update does not broadcast twice."""
        swap = make_swap(SwapStatus.APPROVE_CONFIRMED, swap_tx_hash="0xabc")

        updates = await provider.perform_next_swap_action("mainnet", "w1", swap)

        assert updates == {"status": SwapStatus.WAITING_FOR_SWAP_CONFIRMATIONS}
        assert chain_client.sent == []

    @pytest.mark.asyncio
    async def test_waiting_for_swap_polls_receipt(self, provider, chain_client):
        swap_hash = chain_client.hash_for(1)
        swap = make_swap(SwapStatus.WAITING_FOR_SWAP_CONFIRMATIONS, swap_tx_hash=swap_hash)
        chain_client.confirm(swap_hash, 1, status=1)

        updates = await provider.perform_next_swap_action("mainnet", "w1", swap)

        assert updates["status"] == SwapStatus.SUCCESS

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [SwapStatus.SUCCESS, SwapStatus.FAILED])
    async def test_terminal_states_do_nothing(self, provider, chain_client, client_factory, status):
        swap = make_swap(status, swap_tx_hash="0xabc")

        assert await provider.perform_next_swap_action("mainnet", "w1", swap) is None
        client_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_leaves_state_for_retry(self, provider, chain_client):
        async def fail(tx):
            raise ConnectionError("rpc down")

        chain_client.send_transaction = fail
        swap = make_swap(SwapStatus.APPROVE_CONFIRMED)

        with pytest.raises(ConnectionError):
            await provider.perform_next_swap_action("mainnet", "w1", swap)

        # Lock is released on the error path
        lock = await get_asset_lock("mainnet", "SOV")
        assert not lock.locked()

    @pytest.mark.asyncio
    async def test_status_never_regresses(self, provider, chain_client):
        """Test a full run only ever moves forward."""
        swap = make_swap(SwapStatus.APPROVE_CONFIRMED)
        seen = [swap.status]

        swap = swap.apply(await provider.perform_next_swap_action("mainnet", "w1", swap))
        seen.append(swap.status)
        chain_client.confirm(swap.swap_tx_hash, 1, status=1)
        swap = swap.apply(await provider.perform_next_swap_action("mainnet", "w1", swap))
        seen.append(swap.status)

        assert seen == [
            SwapStatus.APPROVE_CONFIRMED,
            SwapStatus.WAITING_FOR_SWAP_CONFIRMATIONS,
            SwapStatus.SUCCESS,
        ]
        assert [s.rank for s in seen] == sorted(s.rank for s in seen)

        with pytest.raises(InvalidTransitionError):
            swap.apply({"status": SwapStatus.APPROVE_CONFIRMED})


class TestSubmissionLocking:
    """Tests for per-asset serialization of submissions."""

    @pytest.mark.asyncio
    async def test_concurrent_submissions_do_not_interleave(self, provider, chain_client):
        events = []
        real_send = chain_client.send_transaction

        async def slow_send(tx):
            events.append("start")
            await asyncio.sleep(0.05)
            result = await real_send(tx)
            events.append("end")
            return result

        chain_client.send_transaction = slow_send
        first = make_swap(SwapStatus.APPROVE_CONFIRMED, id="swap-a")
        second = make_swap(SwapStatus.APPROVE_CONFIRMED, id="swap-b")

        results = await asyncio.gather(
            provider.perform_next_swap_action("mainnet", "w1", first),
            provider.perform_next_swap_action("mainnet", "w1", second),
        )

        assert events == ["start", "end", "start", "end"]
        assert {r["swap_tx_hash"] for r in results} == {
            chain_client.hash_for(1),
            chain_client.hash_for(2),
        }

    @pytest.mark.asyncio
    async def test_second_submission_waits_for_lock(self, provider, chain_client):
        swap = make_swap(SwapStatus.APPROVE_CONFIRMED)

        async with asset_lock("mainnet", "SOV"):
            task = asyncio.create_task(provider.perform_next_swap_action("mainnet", "w1", swap))
            await asyncio.sleep(0.05)
            assert not task.done()
            assert chain_client.sent == []

        updates = await task
        assert updates["status"] == SwapStatus.WAITING_FOR_SWAP_CONFIRMATIONS

    @pytest.mark.asyncio
    async def test_other_assets_are_not_blocked(self, provider, chain_client):
        swap = make_swap(SwapStatus.APPROVE_CONFIRMED)

        async with asset_lock("mainnet", "RBTC"):
            updates = await asyncio.wait_for(
                provider.perform_next_swap_action("mainnet", "w1", swap), timeout=1.0
            )

        assert updates["status"] == SwapStatus.WAITING_FOR_SWAP_CONFIRMATIONS

    @pytest.mark.asyncio
    async def test_lock_timeout_raises(self, provider):
        provider.machine.lock_timeout = 0.05
        swap = make_swap(SwapStatus.APPROVE_CONFIRMED)

        async with asset_lock("mainnet", "SOV"):
            with pytest.raises(LockTimeoutError):
                await provider.perform_next_swap_action("mainnet", "w1", swap)


class TestNewSwap:
    """Tests for PresaleSwapProvider.new_swap."""

    @pytest.mark.asyncio
    async def test_token_swap_starts_with_approval(self, provider, sov_quote, chain_client):
        record = await provider.new_swap("mainnet", "w1", sov_quote)

        assert record["status"] == SwapStatus.WAITING_FOR_APPROVE_CONFIRMATIONS
        assert record["approve_tx_hash"] == chain_client.hash_for(1)
        assert record["slippage"] == 50
        assert record["fee"] == sov_quote.fee
        assert record["from_amount"] == "1000"
        uuid.UUID(record["id"])

    @pytest.mark.asyncio
    async def test_existing_allowance_skips_approval_leg(self, provider, sov_quote, fake_web3, chain_client):
        fake_web3.set_contract(SOV_ADDRESS, allowance=1000)

        record = await provider.new_swap("mainnet", "w1", sov_quote)

        assert record["status"] == SwapStatus.APPROVE_CONFIRMED
        assert chain_client.sent == []

    @pytest.mark.asyncio
    async def test_native_swap_sends_deposit_directly(self, provider, sov_quote, chain_client):
        quote = replace(sov_quote, from_asset="RBTC")

        record = await provider.new_swap("mainnet", "w1", quote)

        assert record["status"] == SwapStatus.WAITING_FOR_SWAP_CONFIRMATIONS
        assert chain_client.sent[0]["value"] == 1000

    @pytest.mark.asyncio
    async def test_record_loads_as_swap(self, provider, sov_quote):
        record = await provider.new_swap("mainnet", "w1", sov_quote)

        swap = Swap.from_dict(record)

        assert swap.status == SwapStatus.WAITING_FOR_APPROVE_CONFIRMATIONS
        assert swap.from_account_id == "acc-1"
        assert swap.minimum_to_amount == "498"

    @pytest.mark.asyncio
    async def test_new_ids_are_unique(self, provider, sov_quote):
        first = await provider.new_swap("mainnet", "w1", sov_quote)
        second = await provider.new_swap("mainnet", "w1", sov_quote)

        assert first["id"] != second["id"]

    @pytest.mark.asyncio
    async def test_provider_metadata(self, provider):
        assert provider.from_tx_type == "SWAP"
        assert provider.to_tx_type is None
        assert provider.total_steps == 3
        assert provider.timeline_diagram_steps == ("APPROVE", "SWAP")
        assert await provider.get_supported_pairs() == []


def test_provider_keeps_injected_registry(provider, registry, fake_web3):
    """Test an empty injected registry is shared, not replaced."""
    assert provider.registry is registry
    assert provider.quotes.registry is registry
    assert provider.approvals.registry is registry
    assert provider.registry.get_for_asset("mainnet", "SOV") is fake_web3
