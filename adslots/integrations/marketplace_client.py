"""
Marketplace Listing Client

Creates sell orders for minted ad slot tokens through the marketplace's
order API. The remote API signs and posts the order; listing strategies
(dutch / english auctions) are not modelled here, a listing is a single
price schedule.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import httpx

from adslots.config import is_mainnet_network
from adslots.exceptions import MarketplaceError

logger = logging.getLogger(__name__)

DAI_ADDRESS = "0x6b175474e89094c44da98b954eedeac495271d0f"
RINKEBY_WETH_ADDRESS = "0xc778417e063141139fce010982780140aa0cd5ab"


def payment_token_for(network: Optional[str]) -> str:
    """Payment token used for listings: DAI on mainnet, WETH on test networks."""
    if is_mainnet_network(network):
        return DAI_ADDRESS
    return RINKEBY_WETH_ADDRESS


@dataclass(frozen=True)
class PriceSchedule:
    start_amount: float
    end_amount: Optional[float] = None


@dataclass(frozen=True)
class SellOrder:
    token_id: int
    token_address: str
    price_schedule: PriceSchedule
    expiration_time: int
    payment_token_address: str
    seller_address: str

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "asset": {
                "tokenId": str(self.token_id),
                "tokenAddress": self.token_address,
            },
            "startAmount": self.price_schedule.start_amount,
            "expirationTime": self.expiration_time,
            "paymentTokenAddress": self.payment_token_address,
            "accountAddress": self.seller_address,
        }
        if self.price_schedule.end_amount is not None:
            payload["endAmount"] = self.price_schedule.end_amount
        return payload


class MarketplaceClient:
    """HTTP client for the marketplace order endpoint."""

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-API-KEY"] = self.api_key
        return headers

    async def create_sell_order(self, order: SellOrder) -> Dict[str, Any]:
        """
        Post a sell order.

        Returns:
            The order document returned by the marketplace

        Raises:
            MarketplaceError: on transport failure or a non-2xx response
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.api_url}/orders",
                    json=order.to_payload(),
                    headers=self._get_headers(),
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise MarketplaceError(
                f"Sell order for token {order.token_id} rejected: "
                f"{e.response.status_code} - {e.response.text}",
                token_id=order.token_id,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise MarketplaceError(
                f"Sell order for token {order.token_id} failed: {e}", token_id=order.token_id
            ) from e


class ListingService:
    """Lists a set of tokens one after another; the first failure aborts."""

    def __init__(
        self,
        client: MarketplaceClient,
        token_address: str,
        seller_address: str,
        network: Optional[str] = None,
    ):
        self.client = client
        self.token_address = token_address
        self.seller_address = seller_address
        self.payment_token_address = payment_token_for(network)

    async def list_tokens(
        self,
        token_ids: Iterable[int],
        price_schedule: PriceSchedule,
        expiration_time: int = 0,
    ) -> List[Dict[str, Any]]:
        orders = []
        for token_id in token_ids:
            order = SellOrder(
                token_id=token_id,
                token_address=self.token_address,
                price_schedule=price_schedule,
                expiration_time=expiration_time,
                payment_token_address=self.payment_token_address,
                seller_address=self.seller_address,
            )
            logger.info(f"Creating sell order for token {token_id}...")
            orders.append(await self.client.create_sell_order(order))
            logger.info(f"Successfully created sell order for token {token_id}")
        return orders
