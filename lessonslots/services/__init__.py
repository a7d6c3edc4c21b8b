"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import BookingHorizon, DataSourceProtocol, SlotAvailabilityService
from .handlers import handle_available_slots_request

__all__ = [
    "BookingHorizon",
    "DataSourceProtocol",
    "SlotAvailabilityService",
    "handle_available_slots_request",
]
