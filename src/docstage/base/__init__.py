from .interface import BaseCollection, BaseDocument, BaseStore

__all__ = ("BaseCollection", "BaseDocument", "BaseStore")
