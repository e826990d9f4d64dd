"""
Tests for the ad rotation controller.
"""

import pytest

from adslots.core.orchestration import AdRotationController, SlotCategory
from adslots.exceptions import ChainCallError


@pytest.fixture
def minted_contract(fake_contract):
    fake_contract.tokens[1] = {"token_type": 0}
    fake_contract.tokens[2] = {"token_type": 1}
    return fake_contract


class TestAdRotationController:
    @pytest.mark.asyncio
    async def test_current_ad_after_rotate_and_refresh(self, minted_contract):
        controller = AdRotationController(minted_contract)

        claim_events = await controller.rotate(1, "tezos")
        update_events = await controller.refresh()

        assert claim_events[0]["event"] == "AdClaimed"
        assert update_events[0]["event"] == "AdsUpdated"
        assert await controller.current_ad(0) == 1
        assert await controller.current_ad(SlotCategory.PROVIDER) == 0

    @pytest.mark.asyncio
    async def test_claim_alone_does_not_change_current_ad(self, minted_contract):
        controller = AdRotationController(minted_contract)
        await controller.rotate(2, "cosmos")
        assert await controller.current_ad(SlotCategory.PROVIDER) == 0

    @pytest.mark.asyncio
    async def test_rotate_and_report(self, minted_contract):
        result = await AdRotationController(minted_contract).rotate_and_report(2, "cosmos")

        assert [m for m, _ in minted_contract.sent] == ["claimAd", "updateAds"]
        assert minted_contract.sent[0][1] == (2, "cosmos")
        assert result.current_provider_ad == 2
        assert result.current_asset_ad == 0
        assert [c[1] for c in minted_contract.calls] == [(0,), (1,)]

    @pytest.mark.asyncio
    async def test_claim_failure_skips_remaining_steps(self, minted_contract):
        minted_contract.fail_on["claimAd"] = 0

        with pytest.raises(ChainCallError) as exc_info:
            await AdRotationController(minted_contract).rotate_and_report(1, "tezos")

        assert exc_info.value.method == "claimAd"
        assert [m for m, _ in minted_contract.sent] == ["claimAd"]
        assert minted_contract.calls == []

    @pytest.mark.asyncio
    async def test_update_failure_skips_reads(self, minted_contract):
        minted_contract.fail_on["updateAds"] = 0

        with pytest.raises(ChainCallError):
            await AdRotationController(minted_contract).rotate_and_report(1, "tezos")

        assert minted_contract.calls == []

    @pytest.mark.asyncio
    async def test_read_failure_propagates(self, minted_contract):
        minted_contract.fail_on["getCurrentAd"] = 1

        with pytest.raises(ChainCallError):
            await AdRotationController(minted_contract).rotate_and_report(1, "tezos")

        assert len(minted_contract.calls) == 2
