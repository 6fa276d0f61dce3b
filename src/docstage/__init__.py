from importlib.metadata import version

from .base import BaseCollection, BaseDocument, BaseStore
from .exception import (
    DocstageError,
    DocumentNotFoundError,
    NotImplementedYet,
    ValidationError,
)
from .memory import MemoryCollection, MemoryDocument, MemoryStore
from .snapshot import (
    ChangeType,
    DocumentChange,
    DocumentSnapshot,
    QueryDocumentSnapshot,
    QuerySnapshot,
    SetOptions,
)
from .transaction import Transaction, TransactionError, TransactionState

__version__ = version("docstage")

__all__ = (
    "BaseCollection",
    "BaseDocument",
    "BaseStore",
    "ChangeType",
    "DocstageError",
    "DocumentChange",
    "DocumentNotFoundError",
    "DocumentSnapshot",
    "MemoryCollection",
    "MemoryDocument",
    "MemoryStore",
    "NotImplementedYet",
    "QueryDocumentSnapshot",
    "QuerySnapshot",
    "SetOptions",
    "Transaction",
    "TransactionError",
    "TransactionState",
    "ValidationError",
)
