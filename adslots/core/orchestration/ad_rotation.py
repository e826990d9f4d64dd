"""
Ad Rotation Controller

Claims an ad slot for a token, triggers the contract's rotation and reads
the active ad pointers back. Steps run in order and the first failure
propagates, skipping whatever is left.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Union

logger = logging.getLogger(__name__)


class SlotCategory(IntEnum):
    ASSET = 0
    PROVIDER = 1


@dataclass
class RotationResult:
    claim_events: List[Dict[str, Any]] = field(default_factory=list)
    update_events: List[Dict[str, Any]] = field(default_factory=list)
    current_asset_ad: int = 0
    current_provider_ad: int = 0


class AdRotationController:
    def __init__(self, contract: Any):
        self.contract = contract

    async def rotate(self, slot_token_id: int, slug: str) -> List[Dict[str, Any]]:
        """Claim the ad slot of ``slot_token_id`` for ``slug``."""
        logger.info(f"Claiming ad for token {slot_token_id} ({slug})...")
        receipt = await self.contract.send("claimAd", slot_token_id, slug)
        logger.info(f"Claim events: {receipt.events}")
        return receipt.events

    async def refresh(self) -> List[Dict[str, Any]]:
        logger.info("Updating ads...")
        receipt = await self.contract.send("updateAds")
        logger.info(f"Update events: {receipt.events}")
        return receipt.events

    async def current_ad(self, category: Union[SlotCategory, int]) -> int:
        return int(await self.contract.call("getCurrentAd", int(category)))

    async def rotate_and_report(self, slot_token_id: int, slug: str) -> RotationResult:
        result = RotationResult()
        result.claim_events = await self.rotate(slot_token_id, slug)
        result.update_events = await self.refresh()
        result.current_asset_ad = await self.current_ad(SlotCategory.ASSET)
        result.current_provider_ad = await self.current_ad(SlotCategory.PROVIDER)
        logger.info(f"Current Asset Ad: {result.current_asset_ad}")
        logger.info(f"Current Provider Ad: {result.current_provider_ad}")
        return result
