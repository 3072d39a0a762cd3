"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityEngine, BusyTimeSource

__all__ = ["AvailabilityEngine", "BusyTimeSource"]
