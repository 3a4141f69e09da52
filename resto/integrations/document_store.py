"""
Document store contract and an in-memory implementation.

The ordering core only needs: insert with generated id, get by id,
equality-filtered / ordered queries, field updates and change streams
that deliver a full snapshot followed by one snapshot per committed change.
"""
from __future__ import annotations

import copy
import itertools
import logging
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

Where = Sequence[tuple[str, Any]]


class DocumentNotFoundError(KeyError):
    """Update addressed a document that does not exist."""


@dataclass(frozen=True, slots=True)
class StoredDocument:
    id: str
    data: dict[str, Any]


@dataclass(frozen=True, slots=True)
class DocumentChange:
    type: str  # added / modified / removed
    doc_id: str


@dataclass(frozen=True, slots=True)
class QuerySnapshot:
    """Matching documents after a commit, plus what changed in it.

    ``version`` is the store's commit sequence number at the time the
    snapshot was taken; it only grows.
    """

    documents: list[StoredDocument]
    changes: list[DocumentChange] = field(default_factory=list)
    version: int = 0


SnapshotListener = Callable[[QuerySnapshot], None]
ErrorListener = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class DocumentStore(Protocol):
    """Minimal document store used by the ordering core.

    Implementations raise ``StoreUnavailableError`` on backend failure and
    report stream failures through ``on_error`` without closing the stream.
    """

    async def insert(self, collection: str, data: dict[str, Any]) -> str:
        ...

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        ...

    async def query(
        self,
        collection: str,
        *,
        where: Where = (),
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[StoredDocument]:
        ...

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        ...

    def watch(
        self,
        collection: str,
        on_snapshot: SnapshotListener,
        *,
        where: Where = (),
        order_by: str | None = None,
        descending: bool = False,
        on_error: ErrorListener | None = None,
    ) -> Unsubscribe:
        ...


@dataclass
class _Watch:
    collection: str
    where: Where
    order_by: str | None
    descending: bool
    on_snapshot: SnapshotListener
    on_error: ErrorListener | None


def _matches(data: dict[str, Any] | None, where: Where) -> bool:
    if data is None:
        return False
    return all(data.get(key) == value for key, value in where)


def _sorted(
    docs: list[StoredDocument], order_by: str | None, descending: bool
) -> list[StoredDocument]:
    if not order_by:
        return docs
    present = [doc for doc in docs if doc.data.get(order_by) is not None]
    missing = [doc for doc in docs if doc.data.get(order_by) is None]
    present.sort(key=lambda doc: doc.data[order_by], reverse=descending)
    return present + missing


class InMemoryDocumentStore:
    """Single-process document store with synchronous change delivery.

    Listeners run inside the committing call, in commit order, so every
    stream sees changes in the order they were written.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._watches: dict[int, _Watch] = {}
        self._watch_ids = itertools.count(1)
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    @staticmethod
    def _new_id() -> str:
        return uuid.uuid4().hex[:20]

    def _docs(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    def _select(
        self, collection: str, where: Where, order_by: str | None, descending: bool
    ) -> list[StoredDocument]:
        docs = [
            StoredDocument(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._docs(collection).items()
            if _matches(data, where)
        ]
        return _sorted(docs, order_by, descending)

    async def insert(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = self._new_id()
        self._docs(collection)[doc_id] = copy.deepcopy(data)
        self._commit(collection, doc_id, before=None)
        return doc_id

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        data = self._docs(collection).get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    async def query(
        self,
        collection: str,
        *,
        where: Where = (),
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[StoredDocument]:
        return self._select(collection, where, order_by, descending)

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        docs = self._docs(collection)
        if doc_id not in docs:
            raise DocumentNotFoundError(f"{collection}/{doc_id}")
        before = copy.deepcopy(docs[doc_id])
        docs[doc_id].update(copy.deepcopy(fields))
        self._commit(collection, doc_id, before=before)

    def watch(
        self,
        collection: str,
        on_snapshot: SnapshotListener,
        *,
        where: Where = (),
        order_by: str | None = None,
        descending: bool = False,
        on_error: ErrorListener | None = None,
    ) -> Unsubscribe:
        watch_id = next(self._watch_ids)
        watch = _Watch(collection, tuple(where), order_by, descending, on_snapshot, on_error)
        self._watches[watch_id] = watch
        logger.debug("Watch %s opened on %s where=%s", watch_id, collection, watch.where)

        initial = self._select(collection, watch.where, order_by, descending)
        self._deliver(
            watch_id,
            watch,
            QuerySnapshot(
                documents=initial,
                changes=[DocumentChange("added", doc.id) for doc in initial],
                version=self._version,
            ),
        )

        def unsubscribe() -> None:
            if self._watches.pop(watch_id, None) is not None:
                logger.debug("Watch %s closed", watch_id)

        return unsubscribe

    def _commit(self, collection: str, doc_id: str, *, before: dict[str, Any] | None) -> None:
        self._version += 1
        after = self._docs(collection).get(doc_id)
        for watch_id, watch in list(self._watches.items()):
            if watch.collection != collection:
                continue
            was_in = _matches(before, watch.where)
            is_in = _matches(after, watch.where)
            if not (was_in or is_in):
                continue
            if is_in and not was_in:
                change_type = "added"
            elif was_in and not is_in:
                change_type = "removed"
            else:
                change_type = "modified"
            snapshot = QuerySnapshot(
                documents=self._select(collection, watch.where, watch.order_by, watch.descending),
                changes=[DocumentChange(change_type, doc_id)],
                version=self._version,
            )
            self._deliver(watch_id, watch, snapshot)

    def _deliver(self, watch_id: int, watch: _Watch, snapshot: QuerySnapshot) -> None:
        if watch_id not in self._watches:
            return
        try:
            watch.on_snapshot(snapshot)
        except Exception as e:
            logger.error(f"Snapshot listener {watch_id} failed: {e}")

    def close(self) -> None:
        """Detach every open stream."""
        self._watches.clear()
