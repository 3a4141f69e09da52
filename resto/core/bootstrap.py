"""Application bootstrap wiring store, storage, notifications and services."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from resto.integrations.document_store import DocumentStore, InMemoryDocumentStore
from resto.integrations.onesignal_push import OneSignalPushClient
from resto.integrations.redis_storage import RedisKeyValueStorage
from resto.services.admin_service import AdminService
from resto.services.cart_service import CartAggregator
from resto.services.notification_builder import NotificationTemplates
from resto.services.notification_service import NotificationDispatcher
from resto.services.order_service import OrderLifecycleManager

from .config import Settings, load_settings
from .logging_config import setup_logging
from .notifications import LocalNotificationChannel
from .realtime import RealtimeSyncBroker
from .sentry_integration import init_sentry

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AppServices:
    store: DocumentStore
    storage: RedisKeyValueStorage
    channel: LocalNotificationChannel
    push_client: OneSignalPushClient | None
    admin: AdminService
    dispatcher: NotificationDispatcher
    broker: RealtimeSyncBroker
    orders: OrderLifecycleManager
    cart: CartAggregator

    async def start(self) -> None:
        await self.cart.load()

    async def close(self) -> None:
        await self.broker.close()
        if self.push_client is not None:
            await self.push_client.close()
        await self.storage.close()


def build_application(settings: Settings, store: DocumentStore | None = None) -> AppServices:
    """Create the service graph from configuration.

    Without an explicit ``store`` an in-memory one is used (local dev, tests).
    """
    if store is None:
        store = InMemoryDocumentStore()
        logger.info("Using in-memory document store")

    storage = RedisKeyValueStorage(settings.redis_url)
    channel = LocalNotificationChannel()

    push_client = None
    if settings.onesignal.enabled:
        push_client = OneSignalPushClient(
            settings.onesignal.app_id, settings.onesignal.rest_api_key
        )
        logger.info("OneSignal push enabled")
    else:
        logger.info("OneSignal not configured; local notifications only")

    admin = AdminService(store)
    dispatcher = NotificationDispatcher(
        channel,
        NotificationTemplates(settings.notification_lang),
        push_client=push_client,
        admin_ids_provider=admin.get_admin_ids,
    )

    return AppServices(
        store=store,
        storage=storage,
        channel=channel,
        push_client=push_client,
        admin=admin,
        dispatcher=dispatcher,
        broker=RealtimeSyncBroker(store),
        orders=OrderLifecycleManager(store, dispatcher),
        cart=CartAggregator(storage, settings.cart_storage_key),
    )


async def create_app(settings: Settings | None = None, store: DocumentStore | None = None) -> AppServices:
    """Load config, set up logging and error tracking, and start services."""
    settings = settings or load_settings()
    setup_logging(settings.log_level)
    init_sentry(settings.sentry_dsn, environment=settings.environment)

    services = build_application(settings, store)
    await services.start()
    logger.info(f"Ordering core started ({settings.environment}, lang={settings.notification_lang})")
    return services
