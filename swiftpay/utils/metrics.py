"""Prometheus metrics definitions"""

from prometheus_client import Counter, Histogram, Gauge


# Ledger metrics
ledger_operations = Counter(
    'ledger_operations_total',
    'Balance-affecting ledger operations',
    labelnames=['operation', 'outcome']  # outcome: success or an error code
)

ledger_volume = Counter(
    'ledger_volume_total',
    'Currency amount recorded per transaction type',
    labelnames=['transaction_type']
)

ledger_operation_latency = Histogram(
    'ledger_operation_latency_seconds',
    'Time spent inside the atomic read-modify-write of a ledger operation',
    labelnames=['operation'],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1]
)

# Record store metrics
store_write_latency = Histogram(
    'record_store_write_latency_seconds',
    'Latency of full-collection snapshot writes',
    labelnames=['backend'],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1]
)

store_write_failures = Counter(
    'record_store_write_failures_total',
    'Snapshot writes that failed and were rolled back',
    labelnames=['backend']
)

redis_connection_healthy = Gauge(
    'redis_connection_healthy',
    'Whether Redis (record store) is alive (0/1)'
)

# Catalog metrics
catalog_changes = Counter(
    'catalog_changes_total',
    'Vendor product changes',
    labelnames=['action']  # created, updated, activated, deactivated, deleted
)

# Identity metrics
account_registrations = Counter(
    'account_registrations_total',
    'Accounts registered',
    labelnames=['role']
)

authentication_attempts = Counter(
    'authentication_attempts_total',
    'Sign-in attempts',
    labelnames=['outcome']  # success, failure
)

# Admin metrics
admin_actions = Counter(
    'admin_actions_total',
    'Directory mutations performed by admins',
    labelnames=['action']  # verify_vendor, suspend, reinstate
)

vendors_pending_verification = Gauge(
    'vendors_pending_verification',
    'Vendor accounts awaiting verification'
)
