"""
Custom Exception Classes

This module defines the error taxonomy for the ad slot minting tools.
None of these are recovered inside the core; they abort the current
batch or rotation and are turned into an exit code by ``adslots.main``.
"""

from typing import Iterable, Optional


class AdSlotsError(Exception):
    """Base exception for the adslots application."""

    pass


class ConfigError(AdSlotsError):
    """Raised for missing or invalid configuration."""

    def __init__(self, message: str, missing: Optional[Iterable[str]] = None):
        self.missing = list(missing or [])
        super().__init__(message)


class PublishError(AdSlotsError):
    """Raised when metadata could not be pinned to the content store."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ChainCallError(AdSlotsError):
    """Raised when a contract read or write fails or reverts."""

    def __init__(
        self,
        method: str,
        original_error: Optional[Exception] = None,
        message: Optional[str] = None,
    ):
        self.method = method
        self.original_error = original_error
        details = f"Contract call '{method}' failed"
        if original_error is not None:
            details = f"{details}: {original_error}"
        if message:
            super().__init__(f"{message} - Details: {details}")
        else:
            super().__init__(details)


class VerificationError(AdSlotsError):
    """Raised when on-chain or pinned state does not match what was sent."""

    pass


class MarketplaceError(AdSlotsError):
    """Raised when a marketplace sell order could not be created."""

    def __init__(self, message: str, token_id: Optional[int] = None):
        self.token_id = token_id
        super().__init__(message)
