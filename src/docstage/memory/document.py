from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence

from docstage import path as paths
from docstage.base.interface import BaseDocument
from docstage.exception import DocumentNotFoundError, NotImplementedYet
from docstage.snapshot import (
    ChangeType,
    DocumentChange,
    DocumentData,
    DocumentSnapshot,
    QueryDocumentSnapshot,
    SetOptions,
)

if TYPE_CHECKING:
    from .collection import MemoryCollection
    from .store import MemoryStore

logger = logging.getLogger(__name__)

DocumentListener = Callable[[DocumentSnapshot], None]


class MemoryDocument(BaseDocument):
    """Reference to a single document in a `MemoryStore`.

    References are cheap handles: the data lives in the parent collection,
    and the store hands out one reference per path so listeners registered
    on it keep receiving events.
    """

    def __init__(self, store: MemoryStore, path: str):
        self.store = store
        self.path = path
        self.id = path.rsplit(paths.SEPARATOR, 1)[-1]
        self.parent: MemoryCollection = store.collection(paths.parent(path))
        self._listeners: List[DocumentListener] = []

    @property
    def data(self) -> Optional[DocumentData]:
        return self.parent._documents.get(self.id)

    def collection(self, collection_id: str) -> MemoryCollection:
        return self.store.collection(paths.join(self.path, collection_id))

    async def get(self) -> DocumentSnapshot:
        return DocumentSnapshot(self, self.data)

    async def set(self, data: DocumentData, merge: bool = False) -> None:
        current = self.data
        data = self.set_in_transaction(
            current or {}, data, SetOptions(merge=merge)
        )
        change_type = (
            ChangeType.MODIFIED if current is not None else ChangeType.ADDED
        )
        self._notify(await self.commit_change(change_type, data))

    async def update(self, data: DocumentData, *more_fields_and_values: Any):
        if not isinstance(data, Mapping) or more_fields_and_values:
            raise NotImplementedYet("MemoryDocument.update with field paths")
        current = self.data
        if current is None:
            raise DocumentNotFoundError(f"No document to update: {self.path}")
        self._notify(
            await self.commit_change(ChangeType.MODIFIED, {**current, **data})
        )

    async def delete(self) -> None:
        self._notify(await self.commit_change(ChangeType.REMOVED, None))

    def set_in_transaction(
        self,
        base: DocumentData,
        payload: DocumentData,
        options: Optional[SetOptions] = None,
    ) -> DocumentData:
        if options is not None and options.merge:
            return {**base, **payload}
        return dict(payload)

    def update_in_transaction(
        self,
        base: DocumentData,
        payload: DocumentData,
        more_fields_and_values: Sequence[Any] = (),
    ) -> DocumentData:
        if more_fields_and_values:
            raise NotImplementedYet(
                "MemoryDocument.update_in_transaction with field paths"
            )
        return {**base, **payload}

    async def commit_change(
        self, change_type: ChangeType, data: Optional[DocumentData]
    ) -> DocumentChange:
        """Apply a write to the store and describe what happened.

        The reported change type reflects the store at the time of the
        write, so an `added` change that lands on an existing document is
        reported as `modified`.

        Raises:
            DocumentNotFoundError: If a `modified` change targets a missing
                document while the store is strict
        """
        documents = self.parent._documents
        previous = documents.get(self.id)
        old_index = self.parent.index_of(self.id)

        if change_type is ChangeType.REMOVED or data is None:
            documents.pop(self.id, None)
            change = DocumentChange(
                ChangeType.REMOVED,
                QueryDocumentSnapshot(self, previous),
                old_index,
                -1,
            )
        else:
            if (
                change_type is ChangeType.MODIFIED
                and previous is None
                and self.store.strict
            ):
                raise DocumentNotFoundError(
                    f"No document to update: {self.path}"
                )
            documents[self.id] = dict(data)
            effective = (
                ChangeType.ADDED if previous is None else ChangeType.MODIFIED
            )
            change = DocumentChange(
                effective,
                QueryDocumentSnapshot(self, data),
                old_index,
                self.parent.index_of(self.id),
            )

        logger.debug(
            "Committed %s change to %s", change.type.value, self.path
        )
        return change

    def on_snapshot(self, callback: DocumentListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def fire_document_change_event(
        self, change_type: ChangeType, old_index: int, from_cache: bool
    ) -> None:
        snapshot = DocumentSnapshot(self, self.data)
        logger.debug(
            "Firing %s event for %s (old index %d, from cache %s)",
            change_type.value,
            self.path,
            old_index,
            from_cache,
        )
        for listener in list(self._listeners):
            listener(snapshot)

    def _notify(self, change: DocumentChange) -> None:
        self.fire_document_change_event(change.type, change.old_index, False)
        self.parent.fire_batch_document_change([change])

    def __repr__(self) -> str:
        return f"<MemoryDocument {self.path}>"
