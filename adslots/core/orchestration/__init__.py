"""
Orchestration Package

- MintOrchestrator: sequential mint pipeline for a batch of ad slot tokens
- AdRotationController: claim / update / read of the active ad pointers
"""

from .ad_rotation import AdRotationController, RotationResult, SlotCategory
from .mint_orchestrator import BatchConfig, BatchResult, MintOrchestrator, MintResult

__all__ = [
    "AdRotationController",
    "RotationResult",
    "SlotCategory",
    "BatchConfig",
    "BatchResult",
    "MintOrchestrator",
    "MintResult",
]
