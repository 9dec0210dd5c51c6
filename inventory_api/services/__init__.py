from inventory_api.services.auth_service import authenticate_user, register_user
from inventory_api.services.product_service import category_stats, list_low_stock
from inventory_api.services.sales_service import daily_stats, record_sale
from inventory_api.services.upload_service import parse_upload, process_upload

__all__ = [
    "authenticate_user",
    "category_stats",
    "daily_stats",
    "list_low_stock",
    "parse_upload",
    "process_upload",
    "record_sale",
    "register_user",
]
