"""
Main entry point for the ad slot tools.

Commands:
    mint        mint a batch of ad slot tokens
    rotate      claim an ad slot, rotate ads and report the active ads
    current-ad  print the active ad of a slot category
    sell        create marketplace sell orders for minted tokens

Every error ends up in ``run``, which logs it and returns exit code 1.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from adslots.config import CHAIN_FIELDS, MINT_FIELDS, AppConfig, create_settings
from adslots.core.metadata import MetadataBranding, TokenType
from adslots.core.orchestration import (
    AdRotationController,
    BatchConfig,
    MintOrchestrator,
    SlotCategory,
)
from adslots.exceptions import AdSlotsError
from adslots.integrations.chain_client import ContractGateway
from adslots.integrations.ipfs_client import IPFSClient, MetadataPublisher
from adslots.integrations.marketplace_client import (
    ListingService,
    MarketplaceClient,
    PriceSchedule,
)
from adslots.utils.logging_config import get_logger, setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="adslots",
        description="Mint, rotate and list time-boxed ad slot NFTs",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    mint = subparsers.add_parser("mint", help="Mint a batch of ad slot tokens")
    mint.add_argument("--count", type=int, help="Number of tokens to mint")
    mint.add_argument(
        "--type",
        dest="token_type",
        choices=[t.label for t in TokenType],
        help="Slot category of the tokens",
    )
    mint.add_argument("--start", dest="start_time", help="Start of the first window (ISO-8601)")
    mint.add_argument("--validity-days", type=int, help="Length of each window in days")
    mint.add_argument("--gap-days", type=int, help="Days between consecutive windows")

    rotate = subparsers.add_parser("rotate", help="Claim an ad slot and rotate ads")
    rotate.add_argument("--token-id", type=int, required=True)
    rotate.add_argument("--slug", required=True, help="Slug of the featured asset or provider")

    current = subparsers.add_parser("current-ad", help="Show the active ad of a category")
    current.add_argument(
        "--category", type=int, choices=[c.value for c in SlotCategory], default=0
    )

    sell = subparsers.add_parser("sell", help="Create sell orders for minted tokens")
    sell.add_argument("--token-id", type=int, action="append", required=True, dest="token_ids")
    sell.add_argument("--start-amount", type=float, required=True)
    sell.add_argument("--end-amount", type=float)
    sell.add_argument("--expiration-time", type=int, default=0)

    return parser


def batch_config_from(settings: AppConfig, args: argparse.Namespace) -> BatchConfig:
    """Merge command line overrides over the MINT_* settings."""
    mint = settings.mint
    branding = settings.branding
    return BatchConfig(
        owner_address=settings.owner_address,
        terms_hash=settings.terms_hash,
        token_type=TokenType.parse(args.token_type or mint.token_type),
        terms_version=settings.terms_version,
        validity_days=args.validity_days if args.validity_days is not None else mint.validity_days,
        gap_days=args.gap_days if args.gap_days is not None else mint.gap_days,
        start_time=args.start_time or mint.first_token_start_time,
        branding=MetadataBranding(
            collection_name=branding.collection_name,
            site_url=branding.site_url,
            redeem_url=branding.redeem_url,
            blog_url=branding.blog_url,
            discord_url=branding.discord_url,
            ipfs_gateway_url=settings.storage.ipfs_gateway_url,
            storage_base_url=settings.storage.metadata_base_url,
            image_filename=branding.image_filename,
        ),
        network=settings.network,
        contract_address=settings.nft_contract_address,
    )


async def run_mint(settings: AppConfig, args: argparse.Namespace) -> int:
    settings.require(*MINT_FIELDS)
    config = batch_config_from(settings, args)
    count = args.count if args.count is not None else settings.mint.num_ads

    contract = ContractGateway.from_settings(settings)
    publisher = MetadataPublisher(
        IPFSClient(
            settings.storage.ipfs_api_url,
            project_id=settings.storage.ipfs_project_id,
            project_secret=settings.storage.ipfs_project_secret,
            timeout=settings.storage.timeout,
        ),
        max_retries=settings.storage.max_retries,
    )

    result = await MintOrchestrator(contract, publisher, config).run_batch(count)

    for minted in result.minted:
        if minted.verified:
            print(f"token {minted.token_id}: {minted.token_uri} (tx {minted.transaction_id})")
        else:
            print(f"token {minted.token_id}: minted but NOT verified (tx {minted.transaction_id})")
    get_logger(__name__).info(
        "batch_finished",
        minted=[m.token_id for m in result.minted],
        unverified=[m.token_id for m in result.unverified],
        requested=count,
        succeeded=result.succeeded,
    )
    if result.error is not None:
        raise result.error
    return EXIT_OK


async def run_rotate(settings: AppConfig, args: argparse.Namespace) -> int:
    settings.require(*CHAIN_FIELDS)
    controller = AdRotationController(ContractGateway.from_settings(settings))
    result = await controller.rotate_and_report(args.token_id, args.slug)
    print(f"Current Asset Ad: {result.current_asset_ad}")
    print(f"Current Provider Ad: {result.current_provider_ad}")
    return EXIT_OK


async def run_current_ad(settings: AppConfig, args: argparse.Namespace) -> int:
    settings.require(*CHAIN_FIELDS)
    controller = AdRotationController(ContractGateway.from_settings(settings))
    print(await controller.current_ad(args.category))
    return EXIT_OK


async def run_sell(settings: AppConfig, args: argparse.Namespace) -> int:
    settings.require("network", "nft_contract_address", "owner_address")
    marketplace = settings.marketplace
    service = ListingService(
        MarketplaceClient(marketplace.api_url, api_key=marketplace.api_key, timeout=marketplace.timeout),
        token_address=settings.nft_contract_address,
        seller_address=marketplace.seller_address or settings.owner_address,
        network=settings.network,
    )
    await service.list_tokens(
        args.token_ids,
        PriceSchedule(start_amount=args.start_amount, end_amount=args.end_amount),
        expiration_time=args.expiration_time,
    )
    return EXIT_OK


COMMANDS = {
    "mint": run_mint,
    "rotate": run_rotate,
    "current-ad": run_current_ad,
    "sell": run_sell,
}


async def run(argv: Optional[List[str]] = None, settings: Optional[AppConfig] = None) -> int:
    """Parse arguments, run one command and map the outcome to an exit code."""
    try:
        args = build_parser().parse_args(argv)
    except SystemExit as e:
        # argparse exits 0 for --help and 2 for usage errors
        return EXIT_OK if e.code in (0, None) else EXIT_FAILURE
    if settings is None:
        try:
            settings = create_settings()
        except ValidationError as e:
            print(f"Invalid configuration: {e}", file=sys.stderr)
            return EXIT_FAILURE
    setup_logging(settings.log_level, settings.log_format, settings.log_file)

    try:
        return await COMMANDS[args.command](settings, args)
    except AdSlotsError as e:
        logger.error(f"{args.command} failed: {e}")
        return EXIT_FAILURE
    except Exception as e:
        logger.error(f"{args.command} failed unexpectedly: {e}", exc_info=True)
        return EXIT_FAILURE


def main() -> None:
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
