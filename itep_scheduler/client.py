import logging
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any, List, Optional
from urllib.parse import urlencode

import cloudscraper
import requests
from pydantic import TypeAdapter, ValidationError

from itep_scheduler import config
from itep_scheduler.errors import DecodeError, RemoteRejection, SemanticFailure, TransportError
from itep_scheduler.models import BookingRequest, BookingResponse, Order

logger = logging.getLogger(__name__)

_ORDERS = TypeAdapter(List[Order])
# A JSON null is read as an empty list
_STRINGS = TypeAdapter(Optional[List[str]])
_BOOKING = TypeAdapter(BookingResponse)


def format_times_query_date(date_iso: str) -> str:
    """Formats a YYYY-MM-DD date the way the times endpoint expects it.

    e.g. "2024-06-10" -> "Mon, 10 Jun 2024 03:00:00 GMT"
    """
    day = datetime.strptime(date_iso, "%Y-%m-%d").replace(hour=3, tzinfo=timezone.utc)
    return format_datetime(day, usegmt=True)


def build_orders_url(base_url: str, date_iso: str) -> str:
    qs = {"data_inicial": date_iso, "data_final": date_iso}
    return f"{base_url}/ordens/public?{urlencode(qs)}"


def build_dates_url(base_url: str, order_id: int) -> str:
    return f"{base_url}/ordens/public/datas?{urlencode({'ordem': order_id})}"


def build_times_url(base_url: str, order_id: int, date_iso: str) -> str:
    qs = {"ordem": order_id, "data": format_times_query_date(date_iso)}
    return f"{base_url}/vagas/horas?{urlencode(qs)}"


def build_booking_url(base_url: str) -> str:
    return f"{base_url}/vagas"


class SchedulingClient:
    """Blocking client for the public scheduling API.

    Every call logs the request URL and the raw response body. The API is
    undocumented, so the payloads are the only record of what it answered.
    """

    def __init__(self, base_url: str, timeout: float = config.DEFAULT_REQUEST_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        if session is None:
            session = cloudscraper.create_scraper()
            session.headers.update(config.COMMON_HEADERS)
        self.session = session

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        logger.info(f"{method} {url}")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise TransportError(f"HTTP request failed: {e}") from e
        logger.info(f"Response {response.status_code} from {url}: {response.text}")
        return response

    @staticmethod
    def _check_status(response: requests.Response):
        if not 200 <= response.status_code < 300:
            raise RemoteRejection(response.status_code, response.text)

    @staticmethod
    def _decode(response: requests.Response, adapter: TypeAdapter) -> Any:
        try:
            return adapter.validate_json(response.text)
        except ValidationError as e:
            raise DecodeError(f"failed to parse JSON response: {e}") from e

    def list_orders(self, date_iso: str) -> List[Order]:
        """Lists the orders open on a single date."""
        response = self._send("GET", build_orders_url(self.base_url, date_iso))
        return self._decode(response, _ORDERS)

    def list_available_dates(self, order_id: int) -> List[str]:
        response = self._send("GET", build_dates_url(self.base_url, order_id))
        return self._decode(response, _STRINGS) or []

    def list_available_times(self, order_id: int, date_iso: str) -> List[str]:
        response = self._send("GET", build_times_url(self.base_url, order_id, date_iso))
        self._check_status(response)
        return self._decode(response, _STRINGS) or []

    def submit_booking(self, request: BookingRequest) -> BookingResponse:
        """Books one slot.

        Raises SemanticFailure when the API answers 2xx but ``agendou`` is not 1.
        """
        body = request.model_dump(by_alias=True)
        logger.info(f"Booking request body: {request.model_dump_json(by_alias=True)}")

        response = self._send("POST", build_booking_url(self.base_url), json=body)
        self._check_status(response)

        booking = self._decode(response, _BOOKING)
        if booking.booked != 1:
            raise SemanticFailure(booking)
        return booking
