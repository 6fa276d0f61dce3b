from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Awaitable, Dict, List, Optional
from uuid import uuid4

from docstage import path as paths
from docstage.base.interface import BaseDocument, BaseStore
from docstage.exception import NotImplementedYet, ValidationError
from docstage.snapshot import (
    ChangeType,
    DocumentChange,
    DocumentData,
    DocumentSnapshot,
    SetOptions,
)

from .interfaces import TransactionError, TransactionState

logger = logging.getLogger(__name__)


class Transaction:
    """Reads and writes against a store that are applied all at once.

    All reads must happen before the first write. Writes are staged per
    document path, a later write to the same path replacing the earlier one,
    and nothing touches the store until `commit`. On commit the staged
    writes are applied in the order their paths were first staged, then
    each document and each affected collection is notified.

    Example:

    ```python
    async with store.transaction() as txn:
        snapshot = await txn.get(store.doc("accounts/alice"))
        balance = snapshot.get("balance")
        txn.update(snapshot.ref, {"balance": balance - 10})
        txn.set(store.doc("ledger/1"), {"amount": 10})
    ```
    """

    def __init__(self, store: BaseStore):
        self.transaction_id = f"txn_{uuid4().hex[:8]}"
        self.store = store
        self._staged_data: Dict[str, Optional[DocumentData]] = {}
        self._staged_operation: Dict[str, ChangeType] = {}
        self._state = TransactionState.READING
        self._committed = False
        self._rolled_back = False

        logger.debug("Transaction %s created", self.transaction_id)

    def get(self, document: BaseDocument) -> Awaitable[DocumentSnapshot]:
        """Read a document as it is in the store

        The ordering check happens on the call, before anything is awaited.
        Writes staged in this transaction are not visible.

        Raises:
            ValidationError: If any write has already been staged
        """
        if self._state is TransactionState.WRITING:
            raise ValidationError(
                "Read operations can only be done before write operations."
            )
        return document.get()

    def set(
        self,
        document: BaseDocument,
        data: DocumentData,
        merge: bool = False,
    ) -> Transaction:
        """Stage a write of the whole document

        Args:
            document (BaseDocument): The document to write
            data (DocumentData): The new fields
            merge (bool, optional): Whether to merge the top-level fields
                over the current data instead of replacing it.
                Defaults to `False`.

        The change kind comes from the stored document, not from a write
        already staged for the same path. Setting a document twice keeps the
        kind of the first set, so a new document stays `added`. This differs
        from deriving the kind from the staged value, which would report a
        set after an update of a missing document as `modified`.

        Returns:
            Transaction: This transaction, for chaining
        """
        self._begin_writing()
        if document.data is not None:
            change_type = ChangeType.MODIFIED
        else:
            change_type = ChangeType.ADDED

        if merge:
            staged = document.update_in_transaction(
                self._current_data(document), data
            )
        else:
            staged = document.set_in_transaction(
                dict(data), data, SetOptions(merge=False)
            )
        self._stage(document.path, staged, change_type)
        return self

    def update(
        self,
        document: BaseDocument,
        data_or_field: Any,
        *more_fields_and_values: Any,
    ) -> Transaction:
        """Stage an update of some fields of an existing document

        Only the mapping form is supported. Whether the document exists is
        checked by the document itself when the transaction commits.

        Raises:
            NotImplementedYet: If called with a field path and value
        """
        if not isinstance(data_or_field, Mapping):
            raise NotImplementedYet("Transaction.update with field paths")
        if more_fields_and_values:
            raise NotImplementedYet(
                "Transaction.update with additional fields and values"
            )

        self._begin_writing()
        staged = document.update_in_transaction(
            self._current_data(document),
            dict(data_or_field),
        )
        self._stage(document.path, staged, ChangeType.MODIFIED)
        return self

    def delete(self, document: BaseDocument) -> Transaction:
        self._begin_writing()
        self._stage(document.path, None, ChangeType.REMOVED)
        return self

    async def commit(self) -> None:
        """Apply every staged write and fire change events

        Documents are committed one at a time in staging order. Events are
        only fired once every document has been committed: first one event
        per document, then one batch per collection, with each collection's
        changes in staging order.

        Raises:
            TransactionError: If the transaction was already finalized
            Exception: Whatever a document raised while committing, after
                the transaction has been rolled back
        """
        self._ensure_not_finalized()
        logger.debug(
            "Committing transaction %s with %d staged writes",
            self.transaction_id,
            len(self._staged_operation),
        )

        collection_changes: Dict[str, List[DocumentChange]] = {}
        try:
            for path, change_type in list(self._staged_operation.items()):
                document = self.store.doc(path)
                change = await document.commit_change(
                    change_type, self._staged_data[path]
                )
                collection_changes.setdefault(paths.parent(path), []).append(
                    change
                )

            for collection_path, changes in collection_changes.items():
                for change in changes:
                    change.doc.ref.fire_document_change_event(
                        change.type, change.old_index, False
                    )
                collection = self.store.collection(collection_path)
                collection.fire_batch_document_change(changes)

        except Exception as e:
            logger.error(
                "Commit failed for %s, rolling back: %s",
                self.transaction_id,
                e,
            )
            self.rollback()
            raise

        self._committed = True
        logger.info(
            "Transaction %s committed %d writes across %d collections",
            self.transaction_id,
            len(self._staged_operation),
            len(collection_changes),
        )

    def rollback(self) -> None:
        """Mark the transaction as failed

        Nothing is undone: documents that a failed commit already applied
        stay applied. Calling it again after the first time does nothing.

        Raises:
            TransactionError: If the transaction was committed
        """
        if self._committed:
            raise TransactionError(
                f"Transaction {self.transaction_id} already committed"
            )
        if self._rolled_back:
            return

        self._rolled_back = True
        logger.info("Transaction %s rolled back", self.transaction_id)

    def _begin_writing(self) -> None:
        if self._state is TransactionState.READING:
            logger.debug(
                "Transaction %s switched to writing", self.transaction_id
            )
        self._state = TransactionState.WRITING

    def _current_data(self, document: BaseDocument) -> DocumentData:
        if document.path in self._staged_data:
            data = self._staged_data[document.path]
        else:
            data = document.data
        return dict(data) if data is not None else {}

    def _stage(
        self,
        path: str,
        data: Optional[DocumentData],
        change_type: ChangeType,
    ) -> None:
        self._staged_data[path] = data
        self._staged_operation[path] = change_type
        logger.debug(
            "Transaction %s staged %s of %s",
            self.transaction_id,
            change_type.value,
            path,
        )

    def _ensure_not_finalized(self) -> None:
        if self._committed or self._rolled_back:
            raise TransactionError(
                f"Transaction {self.transaction_id} already finalized"
            )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if not self._committed and not self._rolled_back:
            if exc_type is None:
                await self.commit()
            else:
                self.rollback()
        return False

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def staged_paths(self) -> List[str]:
        """Paths with a staged write, in staging order"""
        return list(self._staged_operation)

    def staged(self, path: str) -> Optional[DocumentData]:
        return self._staged_data.get(path)

    def staged_operation(self, path: str) -> Optional[ChangeType]:
        return self._staged_operation.get(path)

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back
