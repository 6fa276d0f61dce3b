from enum import Enum

from docstage.exception import DocstageError


class TransactionState(Enum):
    """Transactions read first, then write. There is no way back."""

    READING = "reading"
    WRITING = "writing"


class TransactionError(DocstageError):
    """Raised when a finalized transaction is used again"""

    pass
