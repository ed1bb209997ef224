"""
Fare-check services for FareWatch.

- fare_evaluator.py: minimum fare across a search result
- recipients.py: push token normalization and per-trip dispatch batching
- dispatch.py: DispatchOrchestrator, one fare-check run end to end
"""

from core.services.dispatch import DispatchOrchestrator
from core.services.fare_evaluator import lowest_fare
from core.services.recipients import build_dispatch_batch, is_push_token, normalize_token

__all__ = ["DispatchOrchestrator", "build_dispatch_batch", "is_push_token", "lowest_fare", "normalize_token"]
