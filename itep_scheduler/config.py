import logging
import os
from typing import Any, Dict

import yaml
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError

logger = logging.getLogger(__name__)

# --- File Paths ---
DEFAULT_CONFIG_FILE = "config.yaml"

# --- Defaults ---
DEFAULT_LOCATION = "SÃO MIGUEL"
DEFAULT_APPOINTMENT_COUNT = 5
DEFAULT_SCHEDULE_TIME = "08:00"
DEFAULT_BASE_URL = "https://agendamento.itep.rn.gov.br/api"
DEFAULT_MAX_CONCURRENCY = 5
DEFAULT_REQUEST_TIMEOUT = 30.0
BOOKING_LINK_TEMPLATE = "https://agendamento.itep.rn.gov.br/public/agendamento/{code}/agendar"

# Keys written to a freshly created config file
FILE_KEYS = ("location", "appointment_count", "schedule_time", "base_url")

COMMON_HEADERS: Dict[str, str] = {
    "User-Agent": os.environ.get(
        "SCHEDULER_USER_AGENT",
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/129.0.0.0 Safari/537.36"
        ),
    ),
    "Accept": "application/json, text/plain, */*",
}


class ConfigError(RuntimeError):
    pass


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    location: str = DEFAULT_LOCATION
    appointment_count: PositiveInt = DEFAULT_APPOINTMENT_COUNT
    schedule_time: str = DEFAULT_SCHEDULE_TIME  # HH:MM, local time
    base_url: str = DEFAULT_BASE_URL
    max_concurrency: PositiveInt = DEFAULT_MAX_CONCURRENCY
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    booking_link_template: str = BOOKING_LINK_TEMPLATE

    telegram_bot_token: str | None = None
    telegram_chat_id: str | None = None


def _telegram_from_env() -> Dict[str, str]:
    """Returns the Telegram credentials that are set in the environment."""
    values = {
        "telegram_bot_token": os.environ.get("TELEGRAM_BOT_TOKEN"),
        "telegram_chat_id": os.environ.get("TELEGRAM_CHAT_ID"),
    }
    return {key: value for key, value in values.items() if value}


def write_default_config(path: str, settings: Settings):
    """Writes the user-facing subset of the settings as a YAML file."""
    data = settings.model_dump(include=set(FILE_KEYS))
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)


def load_config(path: str = DEFAULT_CONFIG_FILE) -> Settings:
    """Loads settings from a YAML file on top of the defaults.

    A missing file is not an error: the defaults are used and written to
    ``path`` so they can be edited for the next run.
    """
    file_values: Dict[str, Any] = {}

    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except (yaml.YAMLError, OSError) as e:
            raise ConfigError(f"Failed to parse config file {path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {path} must contain a mapping, got {type(loaded).__name__}")
        file_values = loaded
        logger.info(f"Loaded configuration from {path}")
    else:
        logger.info("Config file not found, using defaults")

    try:
        settings = Settings(**{**file_values, **_telegram_from_env()})
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    if not settings.telegram_bot_token or not settings.telegram_chat_id:
        logger.debug("Telegram configuration incomplete. Notifications disabled.")

    if not os.path.exists(path):
        try:
            write_default_config(path, settings)
        except OSError as e:
            logger.warning(f"Could not create default config file: {e}")

    return settings
