import importlib

from inventory_api.models.product import Product
from inventory_api.models.sales import Sales
from inventory_api.models.upload_history import UploadHistory
from inventory_api.models.user import User


def import_all_models() -> None:
    for module_name in (
        "inventory_api.models.product",
        "inventory_api.models.sales",
        "inventory_api.models.upload_history",
        "inventory_api.models.user",
    ):
        importlib.import_module(module_name)


__all__ = [
    "Product",
    "Sales",
    "UploadHistory",
    "User",
    "import_all_models",
]
