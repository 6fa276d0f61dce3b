from unittest.mock import AsyncMock, MagicMock

import pytest

from docstage import MemoryStore


@pytest.fixture
def store():
    return MemoryStore(
        data={
            "users/alice": {"name": "Alice", "age": 30},
            "users/bob": {"name": "Bob", "age": 25},
            "rooms/lobby": {"topic": "welcome"},
        }
    )


class EventLog(list):
    """Every document and collection event fired by a store, in order"""

    def __init__(self, store):
        super().__init__()
        self.store = store

    def watch_collection(self, path):
        def record(snapshot):
            changes = [
                (change.type, change.doc.id) for change in snapshot.doc_changes
            ]
            self.append((path, changes))

        return self.store.collection(path).on_snapshot(record)

    def watch_document(self, path):
        return self.store.doc(path).on_snapshot(
            lambda snapshot: self.append((path, snapshot.to_dict()))
        )


@pytest.fixture
def events(store):
    return EventLog(store)


@pytest.fixture
def mock_store():
    """A store whose documents and collections are mocks.

    `documents` and `collections` map paths to the mocks handed out, and
    `log` records commits and events in the order they happened.
    """
    log = []
    documents = {}
    collections = {}

    def make_document(path):
        document = MagicMock()
        document.path = path
        document.data = None

        async def commit_change(change_type, data):
            log.append(("commit", path))
            change = MagicMock()
            change.type = change_type
            change.old_index = -1
            change.new_index = 0
            change.doc.ref = document
            change.path = path
            return change

        document.commit_change = AsyncMock(side_effect=commit_change)
        document.fire_document_change_event = MagicMock(
            side_effect=lambda *args: log.append(("document", path))
        )
        document.update_in_transaction = MagicMock(
            side_effect=lambda base, payload, *more: {**base, **payload}
        )
        document.set_in_transaction = MagicMock(
            side_effect=lambda base, payload, options=None: dict(payload)
        )
        return document

    def make_collection(path):
        collection = MagicMock()
        collection.path = path
        collection.fire_batch_document_change = MagicMock(
            side_effect=lambda changes: log.append(
                ("collection", path, [change.path for change in changes])
            )
        )
        return collection

    def doc(path):
        if path not in documents:
            documents[path] = make_document(path)
        return documents[path]

    def collection(path):
        if path not in collections:
            collections[path] = make_collection(path)
        return collections[path]

    mock = MagicMock()
    mock.doc = MagicMock(side_effect=doc)
    mock.collection = MagicMock(side_effect=collection)
    mock.documents = documents
    mock.collections = collections
    mock.log = log
    return mock
