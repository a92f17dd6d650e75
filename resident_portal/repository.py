"""Base repository - record-level helpers over a JSON collection"""

import uuid
from typing import Any, Callable, Optional

from .json_store import JsonStore

Record = dict[str, Any]


class CollectionRepository:
    """Repository for one JSON collection

    Mutating helpers hold the collection lock for the whole read-modify-write
    cycle so concurrent requests in one process cannot overwrite each other.
    """

    collection: str = ""

    def __init__(self, store: JsonStore, collection: Optional[str] = None):
        self.store = store
        if collection:
            self.collection = collection
        if not self.collection:
            raise ValueError("Repository needs a collection name")

    @staticmethod
    def new_id() -> str:
        return str(uuid.uuid4())

    def all(self) -> list[Record]:
        return self.store.read(self.collection)

    def get(self, record_id: str) -> Optional[Record]:
        return self.first(lambda r: r.get("id") == record_id)

    def find(self, predicate: Callable[[Record], bool]) -> list[Record]:
        return [r for r in self.all() if predicate(r)]

    def first(self, predicate: Callable[[Record], bool]) -> Optional[Record]:
        return next((r for r in self.all() if predicate(r)), None)

    def add(self, record: Record) -> Record:
        with self.store.lock(self.collection):
            items = self.store.read(self.collection)
            items.append(record)
            self.store.write(self.collection, items)
        return record

    def update(self, record_id: str, changes: Record, drop: tuple[str, ...] = ()) -> Optional[Record]:
        """Shallow-merge changes into a record and remove the keys in drop, returns None when it does not exist"""
        with self.store.lock(self.collection):
            items = self.store.read(self.collection)
            for index, item in enumerate(items):
                if item.get("id") == record_id:
                    merged = {key: value for key, value in {**item, **changes}.items() if key not in drop}
                    items[index] = merged
                    self.store.write(self.collection, items)
                    return merged
        return None

    def update_where(self, predicate: Callable[[Record], bool], changes: Record) -> int:
        """Apply the same changes to every matching record, returns the count"""
        with self.store.lock(self.collection):
            items = self.store.read(self.collection)
            updated = 0
            for index, item in enumerate(items):
                if predicate(item):
                    items[index] = {**item, **changes}
                    updated += 1
            if updated:
                self.store.write(self.collection, items)
        return updated

    def upsert(self, predicate: Callable[[Record], bool], record: Record) -> tuple[Record, bool]:
        """Replace the first matching record (keeping its id) or append a new one

        Returns (record, created)
        """
        with self.store.lock(self.collection):
            items = self.store.read(self.collection)
            for index, item in enumerate(items):
                if predicate(item):
                    replaced = {**record, "id": item.get("id", record.get("id"))}
                    items[index] = replaced
                    self.store.write(self.collection, items)
                    return replaced, False
            items.append(record)
            self.store.write(self.collection, items)
        return record, True

    def delete(self, record_id: str) -> bool:
        with self.store.lock(self.collection):
            items = self.store.read(self.collection)
            remaining = [item for item in items if item.get("id") != record_id]
            if len(remaining) == len(items):
                return False
            self.store.write(self.collection, remaining)
        return True

    def save_all(self, items: list[Record]) -> None:
        self.store.write(self.collection, items)
