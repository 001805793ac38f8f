import logging
from typing import List

from itep_scheduler import booking, slots, telegram_notifier
from itep_scheduler.client import SchedulingClient
from itep_scheduler.config import Settings
from itep_scheduler.errors import SchedulingFailed
from itep_scheduler.models import BookingResult, RunSummary

logger = logging.getLogger(__name__)


def _log_results(results: List[BookingResult]):
    for result in results:
        if result.ok:
            logger.info(f"Booking {result.index + 1} successful: Code {result.response.slot_code}")
        else:
            logger.error(f"Booking {result.index + 1} failed: {result.error}")


def print_booking_links(links: List[str]):
    """Prints the confirmation links to stdout, one per line."""
    logger.info("Booking links:")
    for link in links:
        print(link)


def notify_bookings(settings: Settings, summary: RunSummary):
    """Sends the Telegram notification if credentials are configured."""
    if not settings.telegram_bot_token or not settings.telegram_chat_id:
        logger.debug("Telegram not configured. Skipping notification.")
        return

    message = telegram_notifier.format_booking_message(
        summary.target_date, settings.location, summary.links, len(summary.selected_slots)
    )
    telegram_notifier.send_telegram_message(message, settings.telegram_bot_token, settings.telegram_chat_id)


def run(settings: Settings, target_date: str, client: SchedulingClient | None = None) -> RunSummary:
    """Core orchestration: discover the open slots for the target date at the
    configured location, book up to ``appointment_count`` of them in parallel
    and report the outcome.

    Raises SchedulingFailed when nothing can be booked.
    """
    if client is None:
        client = SchedulingClient(settings.base_url, timeout=settings.request_timeout)

    logger.info(f"Starting scheduling process for location: {settings.location}")
    logger.info(f"Target appointments: {settings.appointment_count}")
    logger.info(f"Fetching orders for {target_date} only")

    orders = client.list_orders(target_date)
    target_orders = slots.orders_for_location(orders, settings.location)
    if not target_orders:
        raise SchedulingFailed(
            f"No orders found for location '{settings.location}' on {target_date}"
        )
    logger.info(f"Found {len(target_orders)} orders for location '{settings.location}'")

    all_slots = slots.collect_time_slots(client, target_orders, target_date)
    if not all_slots:
        raise SchedulingFailed(
            f"No available time slots found for location '{settings.location}' on {target_date}"
        )
    logger.info(f"Found {len(all_slots)} total time slots")

    slots_to_book = slots.select_unique_slots(all_slots, settings.appointment_count)
    if not slots_to_book:
        raise SchedulingFailed("No unique time slots available for booking")

    if len(slots_to_book) < settings.appointment_count:
        logger.warning(
            f"Only {len(slots_to_book)} slots available, booking fewer than requested {settings.appointment_count}"
        )

    results = booking.book_all(client, slots_to_book, max_concurrency=settings.max_concurrency)
    _log_results(results)

    summary = RunSummary(target_date=target_date, selected_slots=slots_to_book, results=results)
    if summary.success_count == 0:
        raise SchedulingFailed(f"All {len(results)} booking attempts failed")

    summary.links = [
        settings.booking_link_template.format(code=response.slot_code) for response in summary.successful
    ]

    logger.info("=== SCHEDULING COMPLETED SUCCESSFULLY ===")
    logger.info(f"Successfully booked {summary.success_count} out of {len(slots_to_book)} attempted appointments")
    print_booking_links(summary.links)
    notify_bookings(settings, summary)

    return summary
