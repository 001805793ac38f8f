import logging
from typing import List

import requests

logger = logging.getLogger(__name__)


def format_booking_message(target_date: str, location: str, links: List[str], attempted: int) -> str:
    """Builds the Markdown message announcing the booked appointments."""
    lines = [f"📅 *{len(links)} of {attempted} appointments booked* ({location}, {target_date})", ""]
    lines.extend(f"[Vaga {i}]({link})" for i, link in enumerate(links, start=1))
    return "\n".join(lines)


def send_telegram_message(message: str, bot_token: str | None, chat_id: str | None):
    """Sends a message to the given Telegram chat.

    Delivery is best effort: missing credentials and request failures are
    logged, never raised.
    """
    if not bot_token or not chat_id:
        logger.warning("Telegram configuration missing. Skipping notification.")
        return

    url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
    payload = {"chat_id": chat_id, "text": message, "parse_mode": "Markdown"}

    try:
        response = requests.post(url, json=payload, timeout=10)
        response.raise_for_status()
        logger.info("Telegram notification sent successfully.")
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to send Telegram message: {e}")
