"""
Trip planner data models.

Field aliases keep the stored JSON in the camelCase shape the web client
writes, so trips saved by either side read back on the other.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from pydantic import BaseModel, Field


SAVED_TRIPS_KEY = "savedTrips"
CURRENT_TRIP_KEY = "currentTrip"


class TripBudget(BaseModel):
    """Planned spend per category."""

    transport: Decimal = Field(default=Decimal("0"), ge=0)
    stay: Decimal = Field(default=Decimal("0"), ge=0)
    food: Decimal = Field(default=Decimal("0"), ge=0)
    activities: Decimal = Field(default=Decimal("0"), ge=0)
    currency: str = Field(default="INR", min_length=3, max_length=3)

    @property
    def total(self) -> Decimal:
        return self.transport + self.stay + self.food + self.activities


class ChecklistItem(BaseModel):
    id: int
    text: str
    completed: bool = False


def default_checklist() -> list[ChecklistItem]:
    return [
        ChecklistItem(id=1, text="Book accommodation"),
        ChecklistItem(id=2, text="Book transport"),
        ChecklistItem(id=3, text="Check visa requirements"),
        ChecklistItem(id=4, text="Pack essentials"),
    ]


class Trip(BaseModel):
    """
    A planned trip.

    Dates are kept as the ISO strings the planner form produces; an empty
    string means not chosen yet.
    """

    id: Optional[str] = Field(None, description="Millisecond timestamp id")
    destination: str = Field(default="", description="Where the trip goes")
    start_date: str = Field(default="", alias="startDate")
    end_date: str = Field(default="", alias="endDate")
    itinerary: list[dict[str, Any]] = Field(default_factory=list)
    accommodation: dict[str, Any] = Field(default_factory=dict)
    transport: dict[str, Any] = Field(default_factory=dict)
    budget: TripBudget = Field(default_factory=TripBudget)
    checklist: list[ChecklistItem] = Field(default_factory=default_checklist)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "extra": "allow",
        "populate_by_name": True,
    }
