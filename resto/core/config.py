"""Environment-driven configuration objects."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .constants import CART_STORAGE_KEY, MERCHANT_NAME
from .exceptions import ConfigurationException

SUPPORTED_LANGUAGES = ("ms", "en")


@dataclass(slots=True)
class OneSignalConfig:
    app_id: str | None
    rest_api_key: str | None

    @property
    def enabled(self) -> bool:
        return bool(self.app_id and self.rest_api_key)


@dataclass(slots=True)
class Settings:
    redis_url: str | None
    cart_storage_key: str
    notification_lang: str
    merchant_name: str
    onesignal: OneSignalConfig
    log_level: str
    sentry_dsn: str | None
    environment: str


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    lang = os.getenv("NOTIFICATION_LANG", "ms").strip().lower()
    if lang not in SUPPORTED_LANGUAGES:
        raise ConfigurationException(
            f"NOTIFICATION_LANG must be one of {', '.join(SUPPORTED_LANGUAGES)}, got '{lang}'"
        )

    onesignal = OneSignalConfig(
        app_id=os.getenv("ONESIGNAL_APP_ID") or None,
        rest_api_key=os.getenv("ONESIGNAL_REST_API_KEY") or None,
    )

    return Settings(
        redis_url=os.getenv("REDIS_URL") or None,
        cart_storage_key=os.getenv("CART_STORAGE_KEY", CART_STORAGE_KEY),
        notification_lang=lang,
        merchant_name=os.getenv("MERCHANT_NAME", MERCHANT_NAME),
        onesignal=onesignal,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        sentry_dsn=os.getenv("SENTRY_DSN") or None,
        environment=os.getenv("ENVIRONMENT", "production"),
    )
