"""
Mint Orchestrator

Mints a batch of ad slot tokens one after another. For every token it
computes the promotion window, builds and pins the metadata, sends
``mintTo`` and reads ``tokenURI`` back before moving to the next token.

The first failure stops the batch. Every token whose ``mintTo`` receipt was
confirmed is reported in ``BatchResult.minted``, including one whose
``tokenURI`` read-back failed; that one carries ``verified=False``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from adslots.config import is_mainnet_network
from adslots.core.metadata import MetadataBranding, TokenType, build_metadata
from adslots.core.windows import (
    PromotionWindow,
    days_to_seconds,
    parse_start_time,
    window_sequence,
)
from adslots.exceptions import AdSlotsError, ConfigError, VerificationError

logger = logging.getLogger(__name__)


@dataclass
class BatchConfig:
    """Parameters of one minting batch."""

    owner_address: str
    terms_hash: str
    token_type: Union[TokenType, str] = TokenType.PROVIDER
    terms_version: int = 1
    validity_days: int = 5
    gap_days: int = 2
    start_time: Union[str, int] = "2020-04-27T00:00:00Z"
    branding: MetadataBranding = field(default_factory=MetadataBranding)
    network: Optional[str] = None
    contract_address: Optional[str] = None

    @property
    def validity_seconds(self) -> int:
        return days_to_seconds(self.validity_days)

    @property
    def gap_seconds(self) -> int:
        return days_to_seconds(self.gap_days)


@dataclass
class MintResult:
    token_id: int
    transaction_id: str
    window: PromotionWindow
    content_hash: str
    token_uri: str = ""
    # False until tokenURI has been read back and matched
    verified: bool = False


@dataclass
class BatchResult:
    minted: List[MintResult] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def unverified(self) -> List[MintResult]:
        return [m for m in self.minted if not m.verified]


def marketplace_asset_url(network: Optional[str], contract_address: str, token_id: int) -> str:
    """OpenSea asset page for a token on the given network."""
    if network is None or is_mainnet_network(network):
        return f"https://opensea.io/assets/{contract_address}/{token_id}"
    return f"https://{network}.opensea.io/assets/{contract_address}/{token_id}"


class MintOrchestrator:
    """Sequential mint pipeline over a contract gateway and a metadata publisher."""

    def __init__(self, contract: Any, publisher: Any, config: BatchConfig):
        self.contract = contract
        self.publisher = publisher
        self.config = config
        self.token_type = TokenType.parse(config.token_type)
        if config.validity_days <= 0:
            raise ConfigError(f"Validity must be at least one day, got {config.validity_days}")
        try:
            self.base_start_time = parse_start_time(config.start_time)
        except ValueError as e:
            raise ConfigError(str(e)) from e

    async def run_batch(self, count: int) -> BatchResult:
        """
        Mint ``count`` tokens.

        Only AdSlotsError subclasses are captured into the result; anything
        else is a programming error and propagates.
        """
        if count < 0:
            raise ValueError(f"Token count must not be negative, got {count}")

        result = BatchResult()
        if count == 0:
            return result

        try:
            current_token_id = int(await self.contract.call("currentTokenId"))
        except AdSlotsError as e:
            logger.error(f"Could not read current token id: {e}")
            result.error = e
            return result

        if current_token_id > 0:
            logger.warning(
                f"Contract already holds {current_token_id} tokens; windows are computed from "
                f"the configured start time and may overlap earlier batches"
            )

        windows = window_sequence(
            self.base_start_time, self.config.validity_seconds, self.config.gap_seconds, count
        )
        for i, window in enumerate(windows):
            logger.info(f"Minting token {i + 1}/{count} ({self.token_type.label})...")
            try:
                minted = await self._mint_one(current_token_id + 1, window)
                current_token_id = minted.token_id
                result.minted.append(minted)
                await self._verify(minted)
            except AdSlotsError as e:
                logger.error(
                    f"Batch aborted at token {i + 1}/{count} after {len(result.minted)} minted: {e}"
                )
                result.error = e
                return result

        logger.info(f"Batch complete: minted {len(result.minted)} tokens")
        return result

    async def _mint_one(self, expected_token_id: int, window: PromotionWindow) -> MintResult:
        """Publish metadata and send ``mintTo``; the returned token is not yet verified."""
        cfg = self.config
        metadata = build_metadata(
            expected_token_id,
            window,
            self.token_type,
            cfg.terms_version,
            cfg.terms_hash,
            validity_days=cfg.validity_days,
            branding=cfg.branding,
        )

        published = await self.publisher.publish(metadata)
        logger.info(f"Token metadata successfully created: {published.content_hash}")

        receipt = await self.contract.send(
            "mintTo",
            cfg.owner_address,
            window.start_time,
            window.end_time,
            cfg.terms_hash,
            cfg.terms_version,
            published.content_hash,
            self.token_type.value,
        )
        logger.info(
            f"Minted NFT transaction: {receipt.transaction_hash}",
            extra={
                "network": cfg.network,
                "token_id": expected_token_id,
                "tx_hash": receipt.transaction_hash,
            },
        )

        return MintResult(
            token_id=expected_token_id,
            transaction_id=receipt.transaction_hash,
            window=window,
            content_hash=published.content_hash,
        )

    async def _verify(self, minted: MintResult) -> None:
        """Read ``tokenURI`` back; it must reference the pinned metadata."""
        cfg = self.config
        token_uri = await self.contract.call("tokenURI", minted.token_id)
        if not token_uri or minted.content_hash not in token_uri:
            raise VerificationError(
                f"tokenURI({minted.token_id}) returned {token_uri!r}, "
                f"expected a reference to {minted.content_hash}"
            )
        minted.token_uri = token_uri
        minted.verified = True
        logger.info(
            f"Token metadata URL: {token_uri}",
            extra={"network": cfg.network, "token_id": minted.token_id},
        )

        if cfg.contract_address:
            logger.info(
                f"View on OpenSea: {marketplace_asset_url(cfg.network, cfg.contract_address, minted.token_id)}"
            )
