from prometheus_client import Counter, Histogram, Gauge

# Business Metrics
ecomm_checkout_total = Counter(
    "ecomm_checkout_total",
    "Total checkouts processed",
    ["status"]  # Labels: 'success', 'failed', 'rejected'
)

ecomm_checkout_duration_seconds = Histogram(
    "ecomm_checkout_duration_seconds",
    "Checkout duration in seconds"
)

ecomm_saga_compensation_total = Counter(
    "ecomm_saga_compensation_total",
    "Total saga compensations triggered",
    ["step_name"]  # Labels: 'create_order', 'create_order_items'
)

ecomm_order_status_updates_total = Counter(
    "ecomm_order_status_updates_total",
    "Order status changes applied by admins",
    ["status"]
)

ecomm_active_carts = Gauge(
    "ecomm_active_carts",
    "Carts currently holding at least one item"
)
