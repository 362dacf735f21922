"""
Trip planner module.

Public API:
- TripPlannerStore: Per-user saved trips and current trip
- Trip / TripBudget / ChecklistItem: Models
"""

from .models import (
    CURRENT_TRIP_KEY,
    SAVED_TRIPS_KEY,
    ChecklistItem,
    Trip,
    TripBudget,
)
from .service import TripPlannerStore

__all__ = [
    "CURRENT_TRIP_KEY",
    "SAVED_TRIPS_KEY",
    "ChecklistItem",
    "Trip",
    "TripBudget",
    "TripPlannerStore",
]
