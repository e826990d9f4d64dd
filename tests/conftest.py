"""
Global test configuration and fixtures.
"""

import hashlib
from typing import Any, Dict, List, Optional, Tuple

import pytest

from adslots.config import AppConfig
from adslots.core.orchestration import BatchConfig
from adslots.exceptions import ChainCallError, PublishError
from adslots.integrations.chain_client import TransactionReceipt


class FakeContract:
    """In-memory stand-in for the ad slot contract gateway."""

    def __init__(self, current_token_id: int = 0, uri_prefix: str = "https://ipfs.io/ipfs/"):
        self.current_token_id = current_token_id
        self.uri_prefix = uri_prefix
        self.tokens: Dict[int, Dict[str, Any]] = {}
        self.current_ads: Dict[int, int] = {0: 0, 1: 0}
        self.claims: Dict[int, Tuple[int, str]] = {}
        self.sent: List[Tuple[str, tuple]] = []
        self.calls: List[Tuple[str, tuple]] = []
        self.fail_on: Dict[str, int] = {}
        self.uri_override: Optional[str] = None

    def _maybe_fail(self, method: str) -> None:
        remaining = self.fail_on.get(method)
        if remaining is None:
            return
        if remaining <= 0:
            raise ChainCallError(method, RuntimeError("execution reverted"))
        self.fail_on[method] = remaining - 1

    async def call(self, method: str, *args: Any) -> Any:
        self.calls.append((method, args))
        self._maybe_fail(method)
        if method == "currentTokenId":
            return self.current_token_id
        if method == "tokenURI":
            if self.uri_override is not None:
                return self.uri_override
            token = self.tokens.get(args[0])
            return f"{self.uri_prefix}{token['metadata_hash']}" if token else ""
        if method == "getCurrentAd":
            return self.current_ads[args[0]]
        raise AssertionError(f"unexpected call {method}")

    async def send(self, method: str, *args: Any) -> TransactionReceipt:
        self.sent.append((method, args))
        self._maybe_fail(method)
        tx_hash = "0x" + hashlib.sha256(f"{method}{args}{len(self.sent)}".encode()).hexdigest()
        events: List[Dict[str, Any]] = []
        if method == "mintTo":
            owner, start, end, terms_hash, terms_version, metadata_hash, token_type = args
            self.current_token_id += 1
            self.tokens[self.current_token_id] = {
                "owner": owner,
                "start_time": start,
                "end_time": end,
                "terms_hash": terms_hash,
                "terms_version": terms_version,
                "metadata_hash": metadata_hash,
                "token_type": token_type,
            }
            events.append({"event": "Transfer", "args": {"to": owner, "tokenId": self.current_token_id}})
        elif method == "claimAd":
            token_id, slug = args
            category = self.tokens.get(token_id, {}).get("token_type", 0)
            self.claims[category] = (token_id, slug)
            events.append({"event": "AdClaimed", "args": {"tokenId": token_id, "slug": slug}})
        elif method == "updateAds":
            for category, (token_id, _slug) in self.claims.items():
                self.current_ads[category] = token_id
            events.append({"event": "AdsUpdated", "args": {}})
        else:
            raise AssertionError(f"unexpected send {method}")
        return TransactionReceipt(transaction_hash=tx_hash, status=1, block_number=1, events=events)


class FakeStore:
    """Content-addressed store keyed by a sha256 of the pinned bytes."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.fail_after: Optional[int] = None

    async def pin(self, data: bytes) -> str:
        if self.fail_after is not None and len(self.objects) >= self.fail_after:
            raise PublishError("IPFS add returned status 500: internal error", status_code=500)
        content_hash = "Qm" + hashlib.sha256(data).hexdigest()[:44]
        self.objects[content_hash] = data
        return content_hash

    async def cat(self, content_hash: str) -> bytes:
        return self.objects[content_hash]


@pytest.fixture
def fake_contract() -> FakeContract:
    return FakeContract(current_token_id=10)


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def batch_config() -> BatchConfig:
    return BatchConfig(
        owner_address="0x00000000000000000000000000000000000000aa",
        terms_hash="QmTermsHash",
        token_type="Provider",
        terms_version=1,
        validity_days=5,
        gap_days=2,
        start_time="2020-04-27T00:00:00Z",
    )


@pytest.fixture
def app_settings() -> AppConfig:
    return AppConfig(
        _env_file=None,
        private_key="0x" + "11" * 32,
        infura_key="infura-key",
        nft_contract_address="0x00000000000000000000000000000000000000bb",
        owner_address="0x00000000000000000000000000000000000000aa",
        network="rinkeby",
        terms_hash="QmTermsHash",
    )
