import logging
from typing import List

from itep_scheduler.client import SchedulingClient
from itep_scheduler.errors import RemoteSchedulingError
from itep_scheduler.models import Order, TimeSlot

logger = logging.getLogger(__name__)


def orders_for_location(orders: List[Order], location: str) -> List[Order]:
    """Keeps the orders whose location name matches exactly."""
    return [order for order in orders if order.location.name == location]


def _times_for_order(client: SchedulingClient, order: Order, target_date: str) -> List[str]:
    """Returns the time strings an order offers on the target date.

    Lookup failures are logged and yield no times so that one bad order
    does not hide the slots of the others.
    """
    try:
        dates = client.list_available_dates(order.id)
    except RemoteSchedulingError as e:
        logger.warning(f"Failed to get dates for order {order.id}: {e}")
        return []

    if target_date not in dates:
        logger.info(f"Target date {target_date} not available for order {order.id}")
        return []

    try:
        return client.list_available_times(order.id, target_date)
    except RemoteSchedulingError as e:
        logger.warning(f"Failed to get times for order {order.id}, date {target_date}: {e}")
        return []


def collect_time_slots(client: SchedulingClient, orders: List[Order], target_date: str) -> List[TimeSlot]:
    """Collects every bookable slot of the given orders on the target date.

    The result is sorted by the time string as returned by the API. That is a
    plain string comparison, so it is chronological only while the API keeps
    returning zero-padded, fixed-width times such as "09:00:00".
    """
    slots: List[TimeSlot] = []

    for order in orders:
        for time_str in _times_for_order(client, order, target_date):
            slots.append(TimeSlot(order_id=order.id, date=target_date, time=time_str))

    # sorted() is stable: equal times keep the order they were collected in
    return sorted(slots, key=lambda s: s.time)


def select_unique_slots(slots: List[TimeSlot], limit: int) -> List[TimeSlot]:
    """Picks at most ``limit`` slots, one per time of day, earliest first."""
    used_times = set()
    selected: List[TimeSlot] = []

    for slot in slots:
        if len(selected) >= limit:
            break
        if slot.time in used_times:
            continue
        used_times.add(slot.time)
        selected.append(slot)

    logger.info(f"Selected {len(selected)} unique time slots for booking")
    for i, slot in enumerate(selected, start=1):
        logger.info(f"Slot {i}: Order {slot.order_id}, Date {slot.date}, Time {slot.time}")

    return selected
