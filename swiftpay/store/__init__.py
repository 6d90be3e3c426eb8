"""Record store backends and factory"""

import os
from typing import Any, Dict, Optional

from .base import RecordStore, load_models, dump_models
from .memory import MemoryRecordStore
from .json_file import JsonFileRecordStore
from .redis_store import RedisRecordStore
from swiftpay.utils.errors import ConfigurationError
from swiftpay.utils.logging import get_logger

logger = get_logger(__name__)


def create_record_store(store_config: Optional[Dict[str, Any]] = None) -> RecordStore:
    """
    Build the record store named by ``STORE_BACKEND`` or ``store_config["backend"]``.

    Args:
        store_config: The ``store`` section of the configuration

    Returns:
        A memory, json or redis record store

    Raises:
        ConfigurationError: If the backend name is unknown
    """
    store_config = store_config or {}
    backend = os.getenv("STORE_BACKEND", store_config.get("backend", "memory"))

    if backend == "memory":
        logger.info("Using in-memory record store")
        return MemoryRecordStore()
    if backend == "json":
        json_config = store_config.get("json") or {}
        return JsonFileRecordStore(
            os.getenv("STORE_DATA_DIR", json_config.get("data_dir", "data")),
            prefix=json_config.get("prefix", "swift-pay-")
        )
    if backend == "redis":
        return RedisRecordStore.from_config(store_config)

    raise ConfigurationError(f"Unknown store backend: {backend}")


__all__ = [
    "RecordStore",
    "MemoryRecordStore",
    "JsonFileRecordStore",
    "RedisRecordStore",
    "create_record_store",
    "load_models",
    "dump_models"
]
