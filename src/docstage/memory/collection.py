from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence
from uuid import uuid4

from docstage import path as paths
from docstage.base.interface import BaseCollection
from docstage.snapshot import (
    DocumentChange,
    DocumentData,
    QueryDocumentSnapshot,
    QuerySnapshot,
)

if TYPE_CHECKING:
    from .document import MemoryDocument
    from .store import MemoryStore

logger = logging.getLogger(__name__)

QueryListener = Callable[[QuerySnapshot], None]


class MemoryCollection(BaseCollection):
    """An ordered set of documents sharing a path prefix.

    The collection owns the data of its documents. Insertion order defines
    each document's index, which is what change events report as
    `old_index` and `new_index`.
    """

    def __init__(self, store: MemoryStore, path: str):
        self.store = store
        self.path = path
        self.id = path.rsplit(paths.SEPARATOR, 1)[-1]
        self._documents: Dict[str, DocumentData] = {}
        self._listeners: List[QueryListener] = []

    @property
    def parent(self) -> Optional[MemoryDocument]:
        parent_path = paths.parent(self.path)
        return self.store.doc(parent_path) if parent_path else None

    def doc(self, document_id: Optional[str] = None) -> MemoryDocument:
        if document_id is None:
            document_id = uuid4().hex[:20]
        return self.store.doc(paths.join(self.path, document_id))

    async def add(self, data: DocumentData) -> MemoryDocument:
        document = self.doc()
        await document.set(data)
        return document

    async def get(self) -> QuerySnapshot:
        return QuerySnapshot(docs=self._snapshot_documents())

    def seed(self, document_id: str, data: DocumentData) -> None:
        """Store a document without firing any change events"""
        self._documents[document_id] = dict(data)

    def index_of(self, document_id: str) -> int:
        for index, key in enumerate(self._documents):
            if key == document_id:
                return index
        return -1

    def on_snapshot(self, callback: QueryListener) -> Callable[[], None]:
        """Subscribe to batched change events.

        Returns a callable that removes the subscription.
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def fire_batch_document_change(
        self, changes: Sequence[DocumentChange]
    ) -> None:
        snapshot = QuerySnapshot(
            docs=self._snapshot_documents(), doc_changes=list(changes)
        )
        logger.debug(
            "Firing %d changes to %d listeners of collection %s",
            len(snapshot.doc_changes),
            len(self._listeners),
            self.path,
        )
        for listener in list(self._listeners):
            listener(snapshot)

    def _snapshot_documents(self) -> List[QueryDocumentSnapshot]:
        return [
            QueryDocumentSnapshot(self.doc(document_id), data)
            for document_id, data in self._documents.items()
        ]

    def __repr__(self) -> str:
        return f"<MemoryCollection {self.path} ({len(self._documents)} docs)>"
