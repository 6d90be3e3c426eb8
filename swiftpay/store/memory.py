"""In-memory record store for tests and demo mode"""

import copy
from typing import Dict, List

from swiftpay.store.base import RecordStore, Record


class MemoryRecordStore(RecordStore):
    """Collections held in a process-local dict"""

    backend = "memory"

    def __init__(self, initial: Dict[str, List[Record]] = None):
        super().__init__()
        self._collections: Dict[str, List[Record]] = copy.deepcopy(initial or {})

    def list(self, collection: str) -> List[Record]:
        return copy.deepcopy(self._collections.get(collection, []))

    def _write(self, collection: str, records: List[Record]) -> None:
        self._collections[collection] = copy.deepcopy(records)
