import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import List, Optional

from itep_scheduler import config
from itep_scheduler.client import SchedulingClient
from itep_scheduler.models import BookingRequest, BookingResult, TimeSlot

logger = logging.getLogger(__name__)


def build_booking_request(slot: TimeSlot) -> BookingRequest:
    """Builds the wire request for a slot.

    The API wants the day at 03:00 UTC (midnight in Natal) whatever the slot
    time, and the time as HH:MM without seconds.
    """
    day = datetime.strptime(slot.date, "%Y-%m-%d")
    return BookingRequest(
        order_id=slot.order_id,
        date=day.strftime("%Y-%m-%dT03:00:00.000Z"),
        time=slot.time[:5],
    )


def _book_one(client: SchedulingClient, index: int, slot: TimeSlot, gate: threading.Semaphore) -> BookingResult:
    with gate:
        logger.info(f"Attempting booking {index + 1}: Order {slot.order_id}, Date {slot.date}, Time {slot.time}")
        try:
            response = client.submit_booking(build_booking_request(slot))
        except Exception as e:
            logger.debug(f"Booking {index + 1} raised {type(e).__name__}: {e}")
            return BookingResult(index=index, slot=slot, error=e)
    return BookingResult(index=index, slot=slot, response=response)


def book_all(
    client: SchedulingClient,
    slots: List[TimeSlot],
    max_concurrency: int = config.DEFAULT_MAX_CONCURRENCY,
    gate: Optional[threading.Semaphore] = None,
) -> List[BookingResult]:
    """Books every slot once, in parallel, and returns one result per slot.

    One thread is started per slot but at most ``max_concurrency`` of them are
    inside a booking call at any time. Results are written by input index, so
    ``results[i]`` always belongs to ``slots[i]``. Failures are recorded in the
    result and never stop the other bookings.
    """
    if max_concurrency < 1:
        raise ValueError("max_concurrency must be >= 1")
    if not slots:
        return []

    if gate is None:
        gate = threading.BoundedSemaphore(max_concurrency)

    results: List[Optional[BookingResult]] = [None] * len(slots)

    def task(index: int, slot: TimeSlot):
        results[index] = _book_one(client, index, slot, gate)

    with ThreadPoolExecutor(max_workers=len(slots), thread_name_prefix="booking") as pool:
        futures = [pool.submit(task, i, slot) for i, slot in enumerate(slots)]
    # Leaving the executor waits for every task
    for future in futures:
        future.result()

    return results
