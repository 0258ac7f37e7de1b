from .setup import setup_observability
from .metrics import (
    shop_cart_operations_total,
    shop_cart_rejections_total,
    shop_cart_persist_failures_total,
    shop_active_sessions
)
