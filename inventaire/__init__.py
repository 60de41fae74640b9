"""Single-user inventory tracker package."""
from __future__ import annotations

from .controller import InventoryController
from .models import InventoryStats, Notification, Product, ProductDraft, ProductUpdate
from .storage import StorageService

__all__ = [
    "create_app",
    "InventoryController",
    "InventoryStats",
    "Notification",
    "Product",
    "ProductDraft",
    "ProductUpdate",
    "StorageService",
]


def create_app(*args, **kwargs):
    from .app import create_app as _create_app

    return _create_app(*args, **kwargs)
