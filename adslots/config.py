"""
Centralized Configuration Management

Loads and validates configuration for the minting, rotation and listing
commands from environment variables and .env files. The settings object is
built once at startup (see ``create_settings``) and handed to each component;
nothing below ``adslots.core`` reads the environment directly.
"""

from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from adslots.exceptions import ConfigError

MAINNET_NETWORKS = ("mainnet", "live")


def is_mainnet_network(network: Optional[str]) -> bool:
    return network in MAINNET_NETWORKS


class MintConfig(BaseSettings):
    """Per-batch minting parameters."""

    model_config = SettingsConfigDict(env_prefix="MINT_")

    token_type: str = "Provider"
    num_ads: int = 2
    validity_days: int = 5
    gap_days: int = 2
    first_token_start_time: str = "2020-04-27T00:00:00+0000"


class StorageConfig(BaseSettings):
    """IPFS pinning and metadata hosting configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    ipfs_api_url: str = "https://ipfs.infura.io:5001"
    ipfs_project_id: Optional[str] = None
    ipfs_project_secret: Optional[str] = None
    ipfs_gateway_url: str = "https://ipfs.io"
    metadata_base_url: str = "https://storage.googleapis.com/stakingrewards-token/meta/"
    timeout: float = 60.0
    max_retries: int = 0


class ChainConfig(BaseSettings):
    """Transaction parameters. Gas is fixed; there is no fee estimation."""

    model_config = SettingsConfigDict(env_prefix="CHAIN_")

    gas_limit: int = 2_000_000
    gas_price_wei: int = 7_000_000_000
    receipt_timeout: float = 240.0
    request_timeout: float = 30.0


class MarketplaceConfig(BaseSettings):
    """Marketplace order API configuration."""

    model_config = SettingsConfigDict(env_prefix="MARKETPLACE_")

    api_url: str = "https://api.opensea.io/wyvern/v1"
    api_key: Optional[str] = None
    seller_address: Optional[str] = None
    timeout: float = 30.0


class BrandingConfig(BaseSettings):
    """Strings rendered into token metadata."""

    model_config = SettingsConfigDict(env_prefix="BRANDING_")

    collection_name: str = "Staking Rewards Token"
    site_url: str = "https://www.stakingrewards.com"
    redeem_url: str = "https://www.stakingrewards.com/redeem"
    blog_url: str = "https://www.stakingrewards.com/journal/news/decentralized-advertising-with-staking-rewards"
    discord_url: str = "https://www.stakingrewards.com/discord"
    image_filename: str = "image.gif"


class AppConfig(BaseSettings):
    """
    Application configuration with nested sections.

    Top-level fields keep the environment names the deployment already uses
    (PRIVATE_KEY, INFURA_KEY, NFT_CONTRACT_ADDRESS, ...).
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Chain access
    private_key: Optional[str] = None
    infura_key: Optional[str] = None
    rpc_url: Optional[str] = None
    nft_contract_address: Optional[str] = None
    owner_address: Optional[str] = None
    network: Optional[str] = None
    contract_abi_path: str = "build/contracts/StakingRewardsToken.json"

    # Terms of the promotion
    terms_hash: Optional[str] = None
    terms_version: int = 1

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"
    log_file: Optional[str] = None

    # Nested configuration sections
    mint: MintConfig = Field(default_factory=MintConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    chain: ChainConfig = Field(default_factory=ChainConfig)
    marketplace: MarketplaceConfig = Field(default_factory=MarketplaceConfig)
    branding: BrandingConfig = Field(default_factory=BrandingConfig)

    def require(self, *names: str) -> None:
        """Raise ConfigError naming every listed field that is unset."""
        missing = [name.upper() for name in names if not getattr(self, name, None)]
        if missing:
            raise ConfigError(
                f"Missing required configuration: {', '.join(missing)}",
                missing=missing,
            )

    def resolved_rpc_url(self) -> str:
        """RPC endpoint: explicit RPC_URL wins over the Infura URL."""
        if self.rpc_url:
            return self.rpc_url
        self.require("network", "infura_key")
        return f"https://{self.network}.infura.io/v3/{self.infura_key}"


CHAIN_FIELDS: List[str] = [
    "private_key",
    "owner_address",
    "network",
    "nft_contract_address",
]

MINT_FIELDS: List[str] = CHAIN_FIELDS + ["terms_hash"]


def create_settings() -> AppConfig:
    """Create settings instance from environment variables and .env files only."""
    # Nested sections only read os.environ, so .env is loaded into it first.
    # Variables already set in the environment win.
    load_dotenv(".env")
    return AppConfig()
