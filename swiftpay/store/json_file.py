"""JSON file record store: one file per collection"""

import json
import os
import tempfile
from pathlib import Path
from typing import List

from swiftpay.store.base import RecordStore, Record
from swiftpay.utils.errors import StoreError
from swiftpay.utils.logging import get_logger

logger = get_logger(__name__)


class JsonFileRecordStore(RecordStore):
    """
    Persists each collection as ``<data_dir>/<prefix><collection>.json``.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace`` so a crash never leaves a half-written snapshot.
    """

    backend = "json"

    def __init__(self, data_dir: str, prefix: str = "swift-pay-"):
        super().__init__()
        self.data_dir = Path(data_dir)
        self.prefix = prefix
        self.data_dir.mkdir(parents=True, exist_ok=True)
        logger.info("JSON record store initialized", data_dir=str(self.data_dir))

    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{self.prefix}{collection}.json"

    def list(self, collection: str) -> List[Record]:
        path = self._path(collection)
        if not path.exists():
            return []

        try:
            with open(path, "r", encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Failed to read collection '{collection}': {e}") from e

        if not isinstance(records, list):
            raise StoreError(f"Collection '{collection}' is not a JSON array")
        return records

    def _write(self, collection: str, records: List[Record]) -> None:
        path = self._path(collection)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{collection}.", suffix=".tmp")
        except OSError as e:
            raise StoreError(f"Failed to write collection '{collection}': {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StoreError(f"Failed to write collection '{collection}': {e}") from e

    def health_check(self) -> bool:
        return self.data_dir.is_dir() and os.access(self.data_dir, os.W_OK)
