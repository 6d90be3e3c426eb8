"""Record store contract shared by all persistence backends.

The store is the only gateway to persisted state. It knows nothing about
accounts or products: it keeps named collections of JSON-serializable
records and always rewrites a whole collection on save. Callers enforce
invariants and serialize their read-modify-write sequences with ``lock``.
"""

import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence, Type, TypeVar

from pydantic import BaseModel

from swiftpay.utils.errors import StoreError
from swiftpay.utils.logging import get_logger
from swiftpay.utils.metrics import store_write_latency, store_write_failures

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
Record = Dict[str, Any]


class RecordStore(ABC):
    """Key-value persistence of whole record collections"""

    backend = "abstract"

    def __init__(self):
        self.lock = threading.RLock()

    @abstractmethod
    def list(self, collection: str) -> List[Record]:
        """Return a copy of every record in the collection, in stored order"""

    @abstractmethod
    def _write(self, collection: str, records: List[Record]) -> None:
        """Overwrite one collection's snapshot"""

    def put(self, collection: str, records: Sequence[Record]) -> None:
        """
        Overwrite the entire collection with the given records.

        Raises:
            StoreError: If the snapshot cannot be written
        """
        start = time.time()
        self._write(collection, list(records))
        store_write_latency.labels(backend=self.backend).observe(time.time() - start)

    def put_many(self, snapshots: Dict[str, Sequence[Record]]) -> None:
        """
        Overwrite several collections as one logical unit.

        Collections already written are restored to their previous snapshot
        if a later write fails.

        Raises:
            StoreError: If any write fails (after rollback)
        """
        with self.lock:
            previous = {collection: self.list(collection) for collection in snapshots}
            written = []
            try:
                for collection, records in snapshots.items():
                    self.put(collection, records)
                    written.append(collection)
            except StoreError as e:
                store_write_failures.labels(backend=self.backend).inc()
                logger.error("Snapshot write failed, rolling back", collections=written, error=str(e))
                for collection in written:
                    self.put(collection, previous[collection])
                raise

    def health_check(self) -> bool:
        """Whether the backend is reachable"""
        return True


def load_models(store: RecordStore, collection: str, model: Type[ModelT]) -> List[ModelT]:
    """Read a collection and validate every record into ``model``"""
    try:
        return [model.model_validate(record) for record in store.list(collection)]
    except ValueError as e:
        raise StoreError(f"Corrupt record in '{collection}': {e}") from e


def dump_models(models: Sequence[BaseModel]) -> List[Record]:
    """Serialize models into JSON-ready records using their persisted field names"""
    return [m.model_dump(mode="json", by_alias=True, exclude_none=True) for m in models]
