from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from docstage.snapshot import (
    ChangeType,
    DocumentChange,
    DocumentData,
    DocumentSnapshot,
    SetOptions,
)


class BaseDocument(ABC):
    """What a transaction needs from a document reference"""

    path: str

    @property
    @abstractmethod
    def data(self) -> Optional[DocumentData]: ...

    @abstractmethod
    async def get(self) -> DocumentSnapshot: ...

    @abstractmethod
    async def commit_change(
        self, change_type: ChangeType, data: Optional[DocumentData]
    ) -> DocumentChange: ...

    @abstractmethod
    def update_in_transaction(
        self,
        base: DocumentData,
        payload: DocumentData,
        more_fields_and_values: Sequence[Any] = (),
    ) -> DocumentData: ...

    @abstractmethod
    def set_in_transaction(
        self,
        base: DocumentData,
        payload: DocumentData,
        options: Optional[SetOptions] = None,
    ) -> DocumentData: ...

    @abstractmethod
    def fire_document_change_event(
        self, change_type: ChangeType, old_index: int, from_cache: bool
    ) -> None: ...


class BaseCollection(ABC):
    path: str

    @abstractmethod
    def fire_batch_document_change(
        self, changes: Sequence[DocumentChange]
    ) -> None: ...


class BaseStore(ABC):
    @abstractmethod
    def doc(self, path: str) -> BaseDocument: ...

    @abstractmethod
    def collection(self, path: str) -> BaseCollection: ...
