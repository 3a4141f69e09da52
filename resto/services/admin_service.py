"""Staff directory lookups used for new-order alerts."""
from __future__ import annotations

import logging

from resto.core.constants import USERS_COLLECTION
from resto.core.exceptions import StoreUnavailableError
from resto.domain.value_objects import UserRole
from resto.integrations.document_store import DocumentStore

logger = logging.getLogger(__name__)


class AdminService:
    """Answer "who is staff" from the users collection."""

    def __init__(self, store: DocumentStore, collection: str = USERS_COLLECTION):
        self._store = store
        self._collection = collection

    async def get_admin_ids(self) -> list[str]:
        try:
            documents = await self._store.query(
                self._collection, where=(("role", UserRole.ADMIN.value),)
            )
        except StoreUnavailableError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Could not load staff list: {e}") from e
        admin_ids = [doc.id for doc in documents]
        logger.debug(f"Found {len(admin_ids)} admin users")
        return admin_ids

    async def is_admin(self, user_id: str) -> bool:
        if not user_id:
            return False
        try:
            data = await self._store.get(self._collection, user_id)
        except StoreUnavailableError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Could not load user {user_id}: {e}") from e
        return bool(data) and data.get("role") == UserRole.ADMIN.value
