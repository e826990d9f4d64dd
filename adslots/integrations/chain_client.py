"""
Ad Slot Contract Gateway

Thin async wrapper around the ad slot NFT contract exposing the two
capabilities the orchestrators need: ``call`` for reads and ``send`` for
signed, confirmed writes. Every failure surfaces as ChainCallError.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiohttp
from eth_account import Account
from web3 import AsyncWeb3
from web3.logs import DISCARD

from adslots.config import AppConfig
from adslots.exceptions import ChainCallError, ConfigError

logger = logging.getLogger(__name__)


@dataclass
class TransactionReceipt:
    transaction_hash: str
    status: int
    block_number: Optional[int] = None
    events: List[Dict[str, Any]] = field(default_factory=list)


def load_contract_abi(path: str) -> List[Dict[str, Any]]:
    """
    Load a contract ABI from a Truffle build artifact or a bare ABI file.

    Raises:
        ConfigError: if the file is missing or holds no ABI list
    """
    abi_path = Path(path)
    try:
        data = json.loads(abi_path.read_text())
    except FileNotFoundError:
        raise ConfigError(f"Contract ABI file not found: {abi_path}") from None
    except json.JSONDecodeError as e:
        raise ConfigError(f"Contract ABI file is not valid JSON: {abi_path} ({e})") from e

    abi = data.get("abi") if isinstance(data, dict) else data
    if not isinstance(abi, list):
        raise ConfigError(f"No ABI list found in {abi_path}")
    return abi


class ContractGateway:
    """Reads from and sends signed transactions to the ad slot contract."""

    def __init__(
        self,
        web3: AsyncWeb3,
        contract: Any,
        account: Any,
        gas_limit: int = 2_000_000,
        gas_price_wei: int = 7_000_000_000,
        receipt_timeout: float = 240.0,
    ):
        self.web3 = web3
        self.contract = contract
        self.account = account
        self.owner_address = account.address
        self.gas_limit = gas_limit
        self.gas_price_wei = gas_price_wei
        self.receipt_timeout = receipt_timeout

    @classmethod
    def from_settings(cls, settings: AppConfig) -> "ContractGateway":
        """Build a gateway from the application settings."""
        settings.require("private_key", "nft_contract_address")
        abi = load_contract_abi(settings.contract_abi_path)

        provider = AsyncWeb3.AsyncHTTPProvider(
            settings.resolved_rpc_url(),
            request_kwargs={"timeout": aiohttp.ClientTimeout(total=settings.chain.request_timeout)},
        )
        web3 = AsyncWeb3(provider)
        contract = web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(settings.nft_contract_address),
            abi=abi,
        )
        account = Account.from_key(settings.private_key)

        if settings.owner_address and settings.owner_address.lower() != account.address.lower():
            logger.warning(
                f"OWNER_ADDRESS {settings.owner_address} differs from the signing key address "
                f"{account.address}; transactions are sent from the signing key"
            )

        return cls(
            web3,
            contract,
            account,
            gas_limit=settings.chain.gas_limit,
            gas_price_wei=settings.chain.gas_price_wei,
            receipt_timeout=settings.chain.receipt_timeout,
        )

    def _function(self, method: str, args: tuple) -> Any:
        try:
            return getattr(self.contract.functions, method)(*args)
        except Exception as e:
            raise ChainCallError(method, e, "Could not encode contract call") from e

    async def call(self, method: str, *args: Any) -> Any:
        """Run a read-only contract method and return its decoded result."""
        fn = self._function(method, args)
        try:
            result = await fn.call({"from": self.owner_address})
        except Exception as e:
            raise ChainCallError(method, e) from e
        logger.debug(f"{method}{args} -> {result}")
        return result

    async def send(self, method: str, *args: Any) -> TransactionReceipt:
        """
        Sign and send a contract transaction, then wait for its receipt.

        Raises:
            ChainCallError: if building, sending or confirming fails, or the
                transaction reverted (receipt status 0)
        """
        fn = self._function(method, args)
        try:
            nonce = await self.web3.eth.get_transaction_count(self.owner_address)
            chain_id = await self.web3.eth.chain_id
            tx = await fn.build_transaction({
                "from": self.owner_address,
                "nonce": nonce,
                "gas": self.gas_limit,
                "gasPrice": self.gas_price_wei,
                "chainId": chain_id,
            })
            signed = self.account.sign_transaction(tx)
            tx_hash = await self.web3.eth.send_raw_transaction(signed.raw_transaction)
            logger.info(
                f"Sent {method} transaction {AsyncWeb3.to_hex(tx_hash)}",
                extra={"tx_hash": AsyncWeb3.to_hex(tx_hash)},
            )
            receipt = await self.web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout
            )
        except Exception as e:
            raise ChainCallError(method, e) from e

        result = TransactionReceipt(
            transaction_hash=AsyncWeb3.to_hex(tx_hash),
            status=int(receipt["status"]),
            block_number=receipt.get("blockNumber"),
            events=self._decode_events(receipt),
        )
        if result.status != 1:
            raise ChainCallError(
                method, message=f"Transaction {result.transaction_hash} reverted"
            )
        return result

    def _decode_events(self, receipt: Any) -> List[Dict[str, Any]]:
        """
        Decode the contract's events from a receipt.

        The receipt status already decides success, so an event that cannot
        be decoded is logged and left out rather than failing a confirmed
        transaction.
        """
        events: List[Dict[str, Any]] = []
        for entry in self.contract.abi:
            if entry.get("type") != "event":
                continue
            try:
                event = getattr(self.contract.events, entry["name"])()
                for log in event.process_receipt(receipt, errors=DISCARD):
                    events.append({"event": log["event"], "args": dict(log["args"])})
            except Exception as e:
                logger.warning(f"Could not decode {entry.get('name')} events: {e}")
        return events
