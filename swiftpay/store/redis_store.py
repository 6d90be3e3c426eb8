"""Redis-backed record store: one key per collection"""

import json
import os
import time
from typing import Any, Dict, List, Sequence

import redis
from redis.exceptions import RedisError

from swiftpay.store.base import RecordStore, Record
from swiftpay.utils.errors import StoreError, WalletError
from swiftpay.utils.logging import get_logger
from swiftpay.utils.metrics import redis_connection_healthy, store_write_failures, store_write_latency
from swiftpay.utils.retry import retry_with_exponential_backoff

logger = get_logger(__name__)


class RedisRecordStore(RecordStore):
    """
    Stores each collection as a JSON array under ``<key_prefix>:<collection>``.

    ``put_many`` writes all snapshots in one MULTI/EXEC pipeline, so a
    multi-collection commit is applied by Redis atomically. Transient
    connection errors are retried with exponential backoff.
    """

    backend = "redis"

    def __init__(self, client: Any, key_prefix: str = "swiftpay", max_retries: int = 3,
                 retry_base_delay: float = 0.1):
        super().__init__()
        self.client = client
        self.key_prefix = key_prefix
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay

    @classmethod
    def from_config(cls, store_config: Dict[str, Any]) -> "RedisRecordStore":
        """
        Connect using ``REDIS_HOST`` ("host:port") and ``REDIS_DB`` when set,
        falling back to the ``redis`` section of the store config.
        """
        redis_config = store_config.get("redis") or {}
        host_port = os.getenv("REDIS_HOST", redis_config.get("host", "localhost:6379"))
        redis_host, _, redis_port = host_port.partition(":")

        client = redis.Redis(
            host=redis_host,
            port=int(redis_port or 6379),
            db=int(os.getenv("REDIS_DB", redis_config.get("db", 0))),
            decode_responses=True,
            socket_keepalive=True,
            socket_connect_timeout=5
        )
        logger.info("Redis record store configured", host=redis_host, port=redis_port)
        return cls(
            client,
            key_prefix=redis_config.get("key_prefix", "swiftpay"),
            max_retries=int(redis_config.get("max_retries", 3)),
            retry_base_delay=float(redis_config.get("retry_base_delay", 0.1))
        )

    def _key(self, collection: str) -> str:
        return f"{self.key_prefix}:{collection}"

    def _call(self, func, *args):
        try:
            return retry_with_exponential_backoff(
                func,
                *args,
                max_retries=self.max_retries,
                base_delay=self.retry_base_delay,
                retry_on=(RedisError,)
            )
        except WalletError as e:
            raise StoreError(f"Redis operation failed: {e}") from e

    @staticmethod
    def _encode(collection: str, records: Sequence[Record]) -> str:
        try:
            return json.dumps(list(records))
        except (TypeError, ValueError) as e:
            raise StoreError(f"Collection '{collection}' is not JSON-serializable: {e}") from e

    def list(self, collection: str) -> List[Record]:
        raw = self._call(self.client.get, self._key(collection))
        if not raw:
            return []

        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreError(f"Failed to decode collection '{collection}': {e}") from e

        if not isinstance(records, list):
            raise StoreError(f"Collection '{collection}' is not a JSON array")
        return records

    def _write(self, collection: str, records: List[Record]) -> None:
        self._call(self.client.set, self._key(collection), self._encode(collection, records))

    def put_many(self, snapshots: Dict[str, Sequence[Record]]) -> None:
        encoded = {self._key(c): self._encode(c, records) for c, records in snapshots.items()}

        def _execute():
            pipe = self.client.pipeline(transaction=True)
            for key, value in encoded.items():
                pipe.set(key, value)
            return pipe.execute()

        with self.lock:
            start = time.time()
            try:
                self._call(_execute)
            except StoreError:
                store_write_failures.labels(backend=self.backend).inc()
                raise
            store_write_latency.labels(backend=self.backend).observe(time.time() - start)

    def health_check(self) -> bool:
        """
        Check if Redis connection is healthy.

        Returns:
            True if Redis is reachable, False otherwise
        """
        try:
            self.client.ping()
        except RedisError as e:
            logger.warning(f"Redis health check failed: {e}")
            redis_connection_healthy.set(0)
            return False

        redis_connection_healthy.set(1)
        return True
