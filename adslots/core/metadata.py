"""
Token Metadata Builder

Builds the ERC-721 style metadata document pinned for every ad slot token.
Output depends only on the arguments, so the same token always serializes to
the same bytes and therefore the same content hash.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from adslots.core.windows import PromotionWindow
from adslots.exceptions import ConfigError


class TokenType(Enum):
    """Slot category of a token. Values are the on-chain ``tokenType`` enum."""

    ASSET = 0
    PROVIDER = 1
    JOURNAL = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value: Union["TokenType", str, int]) -> "TokenType":
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        elif isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        supported = ", ".join(t.label for t in cls)
        raise ConfigError(f"Unsupported token type {value!r} (expected one of: {supported})")


@dataclass(frozen=True)
class MetadataAttribute:
    trait_type: str
    value: Union[str, int]
    display_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"trait_type": self.trait_type}
        if self.display_type is not None:
            data["display_type"] = self.display_type
        data["value"] = self.value
        return data


@dataclass(frozen=True)
class MetadataBranding:
    """Site and collection strings rendered into every token."""

    collection_name: str = "Staking Rewards Token"
    site_url: str = "https://www.stakingrewards.com"
    redeem_url: str = "https://www.stakingrewards.com/redeem"
    blog_url: str = "https://www.stakingrewards.com/journal/news/decentralized-advertising-with-staking-rewards"
    discord_url: str = "https://www.stakingrewards.com/discord"
    ipfs_gateway_url: str = "https://ipfs.io"
    storage_base_url: str = "https://storage.googleapis.com/stakingrewards-token/meta/"
    image_filename: str = "image.gif"


@dataclass(frozen=True)
class TokenMetadata:
    name: str
    description: str
    image: str
    external_url: str
    attributes: Tuple[MetadataAttribute, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "external_url": self.external_url,
            "image": self.image,
            "attributes": [attr.to_dict() for attr in self.attributes],
        }


def _month_day(moment: datetime) -> str:
    # %b is locale dependent, so render the abbreviation explicitly
    months = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
    return f"{months[moment.month - 1]} {moment.day}"


def format_window(window: PromotionWindow) -> str:
    """
    Render a window as e.g. ``Apr 27 - May 1, 2020`` in UTC.

    The end date shown is the last second inside the window, so a window
    ending exactly at midnight reads as the day before.
    """
    start = window.start_datetime
    end = datetime.fromtimestamp(window.end_time - 1, tz=timezone.utc)
    return f"{_month_day(start)} - {_month_day(end)}, {end.year}"


def image_url(base_url: str, token_id: int, filename: str) -> str:
    return f"{base_url.rstrip('/')}/{token_id}/{filename}"


def build_metadata(
    token_id: int,
    window: PromotionWindow,
    token_type: Union[TokenType, str, int],
    terms_version: int,
    terms_hash: str,
    *,
    validity_days: int,
    branding: Optional[MetadataBranding] = None,
) -> TokenMetadata:
    """
    Build the metadata record for one token.

    Args:
        token_id: Id the contract will assign to the token
        window: Promotion window of the token
        token_type: Slot category; unknown names raise ConfigError
        terms_version: Version of the advertising terms
        terms_hash: IPFS hash of the advertising terms document
        validity_days: Validity length shown in the ``valid_for`` trait
        branding: Site strings; defaults to MetadataBranding()

    Returns:
        Immutable TokenMetadata
    """
    token_type = TokenType.parse(token_type)
    branding = branding or MetadataBranding()
    label = token_type.label
    article = "an" if token_type is TokenType.ASSET else "a"
    terms_url = f"{branding.ipfs_gateway_url.rstrip('/')}/ipfs/{terms_hash}"

    description = (
        f"Use this token to feature {article} {label} on the {branding.site_url} frontpage "
        f"between {format_window(window)}.\n"
        f"\n"
        f"Redeem the token at {branding.redeem_url}?id={token_id}\n"
        f"\n"
        f"Blog: {branding.blog_url}\n"
        f"\n"
        f"Terms: {terms_url}\n"
        f"\n"
        f"Discord: {branding.discord_url}"
    )

    attributes: List[MetadataAttribute] = [
        MetadataAttribute("token_id", str(token_id)),
        MetadataAttribute("valid_for", f"{validity_days} days"),
        MetadataAttribute("terms_version", str(terms_version)),
        MetadataAttribute("type", f"Featured {label}"),
        MetadataAttribute("promotion_begins", window.start_time, display_type="date"),
        MetadataAttribute("promotion_ends", window.end_time, display_type="date"),
    ]

    return TokenMetadata(
        name=f"{branding.collection_name} #{token_id} - Featured {label}",
        description=description,
        image=image_url(branding.storage_base_url, token_id, branding.image_filename),
        external_url=branding.site_url,
        attributes=tuple(attributes),
    )


def serialize_metadata(metadata: TokenMetadata) -> bytes:
    """Canonical UTF-8 JSON bytes of a metadata record."""
    return json.dumps(
        metadata.to_dict(), ensure_ascii=False, separators=(",", ":")
    ).encode("utf-8")
