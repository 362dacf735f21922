"""
Local trip planner store.

Keeps a user's saved trips and the trip currently being edited in the
user's namespace of the local store.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from modules.storage.interfaces import IUserStorage
from modules.storage.service import get_user_storage

from .models import CURRENT_TRIP_KEY, SAVED_TRIPS_KEY, Trip

logger = logging.getLogger(__name__)


def _dump(trip: Trip) -> dict:
    return trip.model_dump(mode="json", by_alias=True)


class TripPlannerStore:
    """
    Saved trips for one user at a time.

    All methods accept a missing user id: reads come back empty and writes
    are dropped by the storage layer.
    """

    def __init__(
        self,
        storage: Optional[IUserStorage] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._storage = storage if storage is not None else get_user_storage()
        self._clock = clock

    def list_trips(self, user_id: Optional[str]) -> list[Trip]:
        raw = self._storage.get(SAVED_TRIPS_KEY, user_id, [])
        if not isinstance(raw, list):
            logger.warning(f"Ignoring {SAVED_TRIPS_KEY} for user {user_id}: not a list")
            return []

        trips = []
        for item in raw:
            try:
                trips.append(Trip.model_validate(item))
            except PydanticValidationError as e:
                logger.warning(f"Skipping unreadable saved trip: {e.error_count()} errors")
        return trips

    def save_trip(self, user_id: Optional[str], trip: Trip) -> Trip:
        """
        Insert or replace a trip by id.

        New trips get an id and created_at; updated_at is always refreshed.
        The saved trip also becomes the current trip.
        """
        now = datetime.now(timezone.utc)
        update = {"updated_at": now}
        if not trip.id:
            update["id"] = str(int(self._clock() * 1000))
        if trip.created_at is None:
            update["created_at"] = now
        saved = trip.model_copy(update=update)

        trips = self.list_trips(user_id)
        for i, existing in enumerate(trips):
            if existing.id == saved.id:
                trips[i] = saved
                break
        else:
            trips.append(saved)

        self._storage.set(SAVED_TRIPS_KEY, [_dump(t) for t in trips], user_id)
        self.set_current_trip(user_id, saved)
        return saved

    def delete_trip(self, user_id: Optional[str], trip_id: str) -> bool:
        trips = self.list_trips(user_id)
        remaining = [t for t in trips if t.id != trip_id]
        if len(remaining) == len(trips):
            return False

        self._storage.set(SAVED_TRIPS_KEY, [_dump(t) for t in remaining], user_id)
        current = self.get_current_trip(user_id)
        if current is not None and current.id == trip_id:
            self.clear_current_trip(user_id)
        return True

    def get_current_trip(self, user_id: Optional[str]) -> Optional[Trip]:
        raw = self._storage.get(CURRENT_TRIP_KEY, user_id, None)
        if raw is None:
            return None
        try:
            return Trip.model_validate(raw)
        except PydanticValidationError as e:
            logger.warning(f"Ignoring unreadable current trip: {e.error_count()} errors")
            return None

    def set_current_trip(self, user_id: Optional[str], trip: Trip) -> None:
        self._storage.set(CURRENT_TRIP_KEY, _dump(trip), user_id)

    def clear_current_trip(self, user_id: Optional[str]) -> None:
        self._storage.remove(CURRENT_TRIP_KEY, user_id)
