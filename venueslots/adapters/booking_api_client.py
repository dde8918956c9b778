"""
Booking backend REST client for venue configuration and reservations.
"""

import logging
import time
from typing import Any, Dict, List, Sequence

import requests

from ..domain.exceptions import BookingStoreError, NotificationError
from ..domain.models import ExistingReservation, OperatingWindow
from .records import (
    is_active_booking,
    matches_place_and_date,
    reservation_from_record,
    window_from_record,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class BookingApiClient:
    """
    Client for the booking backend.

    Reads places, their configuration and bookings, writes bookings, and
    asks the backend to email booking details to participants. Transient
    failures (connection errors, timeouts, 429/5xx) are retried with
    exponential backoff.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30,
        max_retries: int = 3,
        backoff_seconds: float = 1.0,
        timezone: str = "Europe/Berlin",
        session: requests.Session | None = None
    ):
        """
        Initialize the backend client.

        Args:
            base_url: API root, e.g. ``https://bookings.example.com/api``
            token: Optional bearer token
            timeout: Per-request timeout in seconds
            max_retries: Retries after the first attempt for transient errors
            backoff_seconds: Initial delay between retries, doubled each time
            timezone: Timezone used to normalise stored booking dates
            session: Optional preconfigured requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self.timezone = timezone
        self.session = session or requests.Session()
        self.headers = {"Content-Type": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, retry: bool = True, **kwargs) -> Any:
        """
        Send a request and return the decoded JSON body.

        Transient failures are retried with exponential backoff unless
        ``retry`` is False. Non-idempotent writes (POST) are sent only once.

        Raises:
            BookingStoreError: If the request keeps failing or the body is not JSON
        """
        url = f"{self.base_url}{path}"
        delay = self.backoff_seconds
        max_retries = self.max_retries if retry else 0

        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(
                    method,
                    url,
                    headers=self.headers,
                    timeout=self.timeout,
                    **kwargs
                )
                if response.status_code in RETRYABLE_STATUS_CODES and attempt < max_retries:
                    logger.warning(
                        "%s %s returned %s, retrying (%d/%d)",
                        method, url, response.status_code, attempt + 1, max_retries,
                    )
                    time.sleep(delay)
                    delay *= 2
                    continue
                response.raise_for_status()
                return response.json() if response.content else {}

            except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
                if attempt >= max_retries:
                    raise BookingStoreError(f"{method} {url} failed: {e}") from e
                logger.warning(
                    "%s %s failed (%s), retrying (%d/%d)",
                    method, url, e, attempt + 1, max_retries,
                )
                time.sleep(delay)
                delay *= 2

            except requests.exceptions.RequestException as e:
                raise BookingStoreError(f"{method} {url} failed: {e}") from e

            except ValueError as e:
                raise BookingStoreError(f"{method} {url} returned invalid JSON: {e}") from e

        raise BookingStoreError(f"{method} {url} failed after {max_retries} retries")

    @staticmethod
    def _rows(data: Any) -> List[Dict[str, Any]]:
        """Accept both a bare list and a ``{"data": [...]}`` envelope."""
        if isinstance(data, dict):
            data = data.get("data", [])
        if not isinstance(data, list):
            raise BookingStoreError("Expected a list of records from the booking backend")
        return data

    def get_places(self, active_only: bool = True) -> List[Dict[str, Any]]:
        """Return place records (id, name, capacity, ...)."""
        params = {"is_active": "true"} if active_only else {}
        return self._rows(self._request("GET", "/places", params=params))

    def get_windows(self) -> Dict[str, OperatingWindow]:
        """
        Return operating windows keyed by place id.

        Unparsable configuration records are skipped with a warning.
        """
        windows: Dict[str, OperatingWindow] = {}

        for record in self._rows(self._request("GET", "/place-configurations")):
            place_id = str(record.get("place_id", ""))
            try:
                windows[place_id] = window_from_record(record)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("Could not parse configuration of place %s: %s", place_id, e)

        return windows

    def get_window(self, place_id: str) -> OperatingWindow | None:
        """Return the operating window of one place, or None if unconfigured."""
        return self.get_windows().get(str(place_id))

    def get_reservations(self, place_id: str, booking_date: str) -> List[ExistingReservation]:
        """
        Return active reservations for one place on one date.

        Cancelled and soft-deleted bookings are excluded here, so callers
        can hand the result straight to the availability engine.
        """
        params = {"place_id": place_id, "booking_date": booking_date}
        reservations: List[ExistingReservation] = []

        for record in self._rows(self._request("GET", "/bookings", params=params)):
            # The backend may ignore filters; re-check locally
            if not is_active_booking(record):
                continue
            if not matches_place_and_date(record, place_id, booking_date, self.timezone):
                continue
            try:
                reservations.append(reservation_from_record(record))
            except (KeyError, ValueError) as e:
                logger.warning("Could not parse booking %s: %s", record.get("id"), e)

        return reservations

    def create_reservation(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Persist a new booking and return the stored record."""
        return self._request("POST", "/bookings", retry=False, json=payload)

    def update_reservation(self, booking_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Update an existing booking and return the stored record."""
        return self._request("PUT", f"/bookings/{booking_id}", json=payload)

    def send_booking_details(self, booking_id: str, emails: Sequence[str]) -> Dict[str, Any]:
        """
        Ask the backend to email booking details to participants.

        Raises:
            NotificationError: If the backend rejects the request
        """
        try:
            return self._request(
                "POST",
                f"/booking-email/{booking_id}/send-details",
                retry=False,
                json={"emails": list(emails)},
            )
        except BookingStoreError as e:
            raise NotificationError(str(e)) from e
