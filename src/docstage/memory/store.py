from __future__ import annotations

import logging
from inspect import isawaitable
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from docstage import path as paths
from docstage.base.interface import BaseStore
from docstage.snapshot import DocumentData
from docstage.transaction import Transaction

from .collection import MemoryCollection
from .document import MemoryDocument

logger = logging.getLogger(__name__)

UpdateFunction = Callable[[Transaction], Union[Awaitable[Any], Any]]


class MemoryStore(BaseStore):
    """Main entryway to an in-memory document store.

    Example:

    ```python
    store = MemoryStore(data={"users/alice": {"name": "Alice"}})

    async def rename(txn):
        snapshot = await txn.get(store.doc("users/alice"))
        txn.update(snapshot.ref, {"name": snapshot.get("name").upper()})

    await store.run_transaction(rename)
    ```
    """

    def __init__(
        self,
        *,
        data: Optional[Mapping[str, DocumentData]] = None,
        strict: bool = True,
    ):
        """Initializer for MemoryStore instance

        Args:
            data (Mapping[str, DocumentData], optional): Documents to seed
                the store with, keyed by document path. Seeding fires no
                change events. Defaults to `None`.
            strict (bool, optional): Whether committing a `modified` change
                to a missing document raises `DocumentNotFoundError`. When
                `False` the document is created instead. Defaults to `True`.

        Raises:
            ValidationError: If a seeded path is not a document path
        """
        self.strict = strict
        self._documents: Dict[str, MemoryDocument] = {}
        self._collections: Dict[str, MemoryCollection] = {}

        for document_path, document_data in (data or {}).items():
            document = self.doc(document_path)
            document.parent.seed(document.id, document_data)

        logger.debug(
            "Store created with %d documents (strict=%s)",
            len(self._documents),
            strict,
        )

    def doc(self, path: str) -> MemoryDocument:
        path = paths.document_path(path)
        if path not in self._documents:
            self._documents[path] = MemoryDocument(self, path)
        return self._documents[path]

    def collection(self, path: str) -> MemoryCollection:
        path = paths.collection_path(path)
        if path not in self._collections:
            self._collections[path] = MemoryCollection(self, path)
        return self._collections[path]

    def transaction(self) -> Transaction:
        return Transaction(self)

    async def run_transaction(self, update_function: UpdateFunction) -> Any:
        """Run a function inside a fresh transaction and commit it

        The function receives the transaction and may be a coroutine
        function. Its return value is returned once the commit succeeds.

        Args:
            update_function (UpdateFunction): Reads and stages writes

        Raises:
            Exception: Whatever the function or the commit raised, after the
                transaction has been rolled back
        """
        transaction = self.transaction()
        try:
            result = update_function(transaction)
            if isawaitable(result):
                result = await result
        except Exception:
            transaction.rollback()
            raise
        await transaction.commit()
        return result
