from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from docstage.base.interface import BaseDocument

DocumentData = Dict[str, Any]


class ChangeType(Enum):
    """Kind of change a write makes to a document"""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True)
class SetOptions:
    merge: bool = False


class DocumentSnapshot:
    """Point-in-time copy of a document's data.

    The snapshot owns its own shallow copy of the data, so later writes to
    the document do not show through.
    """

    def __init__(self, ref: BaseDocument, data: Optional[DocumentData]):
        self.ref = ref
        self._data = dict(data) if data is not None else None

    @property
    def id(self) -> str:
        return self.ref.path.rsplit("/", 1)[-1]

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[DocumentData]:
        if self._data is None:
            return None
        return dict(self._data)

    def get(self, key: str, default: Any = None) -> Any:
        if self._data is None:
            return default
        return self._data.get(key, default)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.ref.path} {self._data!r}>"


class QueryDocumentSnapshot(DocumentSnapshot):
    """Snapshot of a document as seen through its collection"""

    def to_dict(self) -> DocumentData:
        return dict(self._data or {})


@dataclass
class DocumentChange:
    """Result of applying one write to a document"""

    type: ChangeType
    doc: QueryDocumentSnapshot
    old_index: int
    new_index: int


@dataclass
class QuerySnapshot:
    docs: List[QueryDocumentSnapshot] = field(default_factory=list)
    doc_changes: List[DocumentChange] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.docs)

    @property
    def empty(self) -> bool:
        return not self.docs

    def __iter__(self):
        return iter(self.docs)
