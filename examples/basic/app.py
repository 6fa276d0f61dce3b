import asyncio
import logging

from docstage import MemoryStore


async def run():
    store = MemoryStore(
        data={
            "accounts/alice": {"balance": 100},
            "accounts/bob": {"balance": 20},
        }
    )

    def show(snapshot):
        for change in snapshot.doc_changes:
            print(change.type.value, change.doc.id, change.doc.to_dict())

    store.collection("accounts").on_snapshot(show)

    async def transfer(txn):
        alice = await txn.get(store.doc("accounts/alice"))
        bob = await txn.get(store.doc("accounts/bob"))
        txn.update(alice.ref, {"balance": alice.get("balance") - 30})
        txn.update(bob.ref, {"balance": bob.get("balance") + 30})

    await store.run_transaction(transfer)
    print(store.doc("accounts/alice").data, store.doc("accounts/bob").data)


logging.basicConfig(level=logging.DEBUG)
asyncio.run(run())
