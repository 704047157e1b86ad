from .setup import setup_observability
from .metrics import (
    ecomm_checkout_total,
    ecomm_checkout_duration_seconds,
    ecomm_saga_compensation_total,
    ecomm_order_status_updates_total,
    ecomm_active_carts
)
