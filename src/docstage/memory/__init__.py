from .collection import MemoryCollection
from .document import MemoryDocument
from .store import MemoryStore

__all__ = ("MemoryCollection", "MemoryDocument", "MemoryStore")
