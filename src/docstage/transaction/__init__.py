"""
Staged transactions against a document store.
Writes are buffered per document path and applied in order on commit.
"""

from .interfaces import TransactionError, TransactionState
from .transaction import Transaction

__all__ = [
    "Transaction",
    "TransactionError",
    "TransactionState",
]
