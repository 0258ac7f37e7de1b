from prometheus_client import Counter, Gauge

# Business Metrics
shop_cart_operations_total = Counter(
    "shop_cart_operations_total",
    "Cart operations processed",
    ["operation", "outcome"]  # Labels: operation='add'|'remove'|'clear', outcome='success'|'rejected'
)

shop_cart_rejections_total = Counter(
    "shop_cart_rejections_total",
    "Cart mutations rejected by validation",
    ["reason"]  # Labels: 'MISSING_OR_WRONG_TYPE', 'INSUFFICIENT_STOCK', etc.
)

shop_cart_persist_failures_total = Counter(
    "shop_cart_persist_failures_total",
    "Cart writes that failed to reach the persistent store"
)

shop_active_sessions = Gauge(
    "shop_active_sessions",
    "Number of live sessions held in memory"
)
