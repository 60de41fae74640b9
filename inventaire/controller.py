"""In-memory owner of the product collection."""
from __future__ import annotations

from collections import deque
from datetime import datetime
from threading import RLock
from typing import Any, Callable, Deque, List, Mapping, Optional, Tuple, Union
import logging

from . import csv_codec
from .errors import BackupCreationError, ImportParseError, StorageReadError, StorageWriteError
from .models import (
    DEFAULT_DATE_FORMAT,
    ExportFile,
    IdentifierAllocator,
    InventoryStats,
    Notification,
    Product,
    ProductDraft,
    ProductId,
    ProductUpdate,
    coerce_identifier,
    today_string,
)
from .storage import BACKUP_MIMETYPE, StorageService, backup_filename

logger = logging.getLogger(__name__)

MSG_LOAD_ERROR = "Erreur lors du chargement des données"
MSG_SAVE_ERROR = "Erreur lors de la sauvegarde"
MSG_ADDED = "Produit ajouté avec succès"
MSG_UPDATED = "Produit mis à jour avec succès"
MSG_DELETED = "Produit supprimé avec succès"
MSG_IMPORTED = "Importation réussie"
MSG_IMPORT_ERROR = "Erreur lors de l'importation du fichier"
MSG_EXPORTED = "Exportation réussie"
MSG_EXPORT_ERROR = "Erreur lors de l'exportation"
MSG_BACKUP_CREATED = "Sauvegarde créée avec succès"
MSG_BACKUP_ERROR = "Erreur lors de la création de la sauvegarde"
CONFIRM_DELETE_PROMPT = "Êtes-vous sûr de vouloir supprimer ce produit ?"

# Oldest notifications are dropped once this many are pending.
MAX_PENDING_NOTIFICATIONS = 50

DraftInput = Union[ProductDraft, Mapping[str, Any]]
UpdateInput = Union[ProductUpdate, Mapping[str, Any]]


class InventoryController:
    """Owns the product list and saves it after every mutation.

    Storage, import and backup failures never escape an operation: they are
    logged and queued as error notifications. Invalid drafts raise
    ``pydantic.ValidationError`` before anything changes.
    """

    def __init__(
        self,
        storage: StorageService,
        *,
        date_format: str = DEFAULT_DATE_FORMAT,
        today: Optional[Callable[[], str]] = None,
        allocate_id: Optional[IdentifierAllocator] = None,
    ) -> None:
        self.storage = storage
        self.date_format = date_format
        self._today = today or (lambda: today_string(self.date_format))
        self._allocate_id = allocate_id or IdentifierAllocator()
        self._products: List[Product] = []
        self._notifications: Deque[Notification] = deque(maxlen=MAX_PENDING_NOTIFICATIONS)
        self._loaded = False
        self._lock = RLock()

    @classmethod
    def from_settings(cls, settings: Any) -> "InventoryController":
        controller = cls(
            StorageService.from_settings(settings),
            date_format=settings.date_format,
        )
        controller.load()
        return controller

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def products(self) -> Tuple[Product, ...]:
        with self._lock:
            return tuple(self._products)

    @property
    def stats(self) -> InventoryStats:
        with self._lock:
            return InventoryStats.from_products(self._products)

    def load(self) -> List[Product]:
        with self._lock:
            try:
                products = self.storage.load()
            except StorageReadError as exc:
                logger.error("Stored inventory unreadable, starting empty: %s", exc)
                self._notify(MSG_LOAD_ERROR, "error")
                products = []
            self._products = list(products)
            self._allocate_id.seed(product.id for product in self._products)
            self._loaded = True
            logger.info("Loaded %d products", len(self._products))
            return list(self._products)

    def get(self, product_id: ProductId) -> Optional[Product]:
        with self._lock:
            index = self._index_of(product_id)
            return None if index is None else self._products[index]

    def search(self, term: str = "") -> List[Product]:
        needle = (term or "").lower()
        with self._lock:
            if not needle:
                return list(self._products)
            return [
                product
                for product in self._products
                if needle in product.name.lower() or needle in product.category.lower()
            ]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add(self, draft: DraftInput) -> Product:
        fields = draft if isinstance(draft, ProductDraft) else ProductDraft.model_validate(draft)
        with self._lock:
            product = Product(
                id=self._allocate_id(),
                name=fields.name,
                category=fields.category,
                quantity=fields.quantity,
                price=fields.price,
                last_updated=self._today(),
            )
            self._products.append(product)
            logger.info("Added product %s (%s)", product.id, product.name)
            self._notify(MSG_ADDED)
            self._persist()
            return product

    def update(self, product_id: ProductId, draft: UpdateInput) -> Optional[Product]:
        fields = draft if isinstance(draft, ProductUpdate) else ProductUpdate.model_validate(draft)
        with self._lock:
            index = self._index_of(product_id)
            if index is None:
                logger.debug("Update ignored, product %s not found", product_id)
                return None
            current = self._products[index]
            changes = fields.changes()
            updated = Product(
                id=current.id,
                name=changes.get("name", current.name),
                category=changes.get("category", current.category),
                quantity=changes.get("quantity", current.quantity),
                price=changes.get("price", current.price),
                last_updated=self._today(),
            )
            self._products[index] = updated
            logger.info("Updated product %s", updated.id)
            self._notify(MSG_UPDATED)
            self._persist()
            return updated

    def delete(
        self,
        product_id: ProductId,
        *,
        confirm: Optional[Callable[[Product], bool]] = None,
    ) -> Optional[Product]:
        with self._lock:
            index = self._index_of(product_id)
            if index is None:
                logger.debug("Delete ignored, product %s not found", product_id)
                return None
            product = self._products[index]
            if confirm is not None and not confirm(product):
                return None
            del self._products[index]
            logger.info("Deleted product %s", product.id)
            self._notify(MSG_DELETED)
            self._persist()
            return product

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------
    def import_csv(self, text: Union[str, bytes]) -> Optional[List[Product]]:
        with self._lock:
            try:
                imported = csv_codec.parse(text, allocate_id=self._allocate_id, today=self._today)
            except ImportParseError as exc:
                logger.warning("CSV import failed: %s", exc)
                self._notify(MSG_IMPORT_ERROR, "error")
                return None
            self._products.extend(imported)
            logger.info("Imported %d products", len(imported))
            self._notify(MSG_IMPORTED)
            self._persist()
            return imported

    def export_csv(self) -> Optional[ExportFile]:
        with self._lock:
            try:
                content = csv_codec.to_csv(self._products).encode("utf-8")
            except (TypeError, ValueError) as exc:
                logger.error("CSV export failed: %s", exc)
                self._notify(MSG_EXPORT_ERROR, "error")
                return None
            self._notify(MSG_EXPORTED)
            return ExportFile(
                filename=csv_codec.EXPORT_FILENAME,
                content=content,
                mimetype=csv_codec.EXPORT_MIMETYPE,
            )

    def backup(self, *, now: Optional[datetime] = None) -> Optional[ExportFile]:
        with self._lock:
            try:
                content = self.storage.create_backup_blob(self._products, now=now)
            except BackupCreationError as exc:
                logger.error("Backup failed: %s", exc)
                self._notify(MSG_BACKUP_ERROR, "error")
                return None
            self._notify(MSG_BACKUP_CREATED)
            return ExportFile(
                filename=backup_filename(now),
                content=content,
                mimetype=BACKUP_MIMETYPE,
            )

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    @property
    def notifications(self) -> Tuple[Notification, ...]:
        with self._lock:
            return tuple(self._notifications)

    def drain_notifications(self) -> List[Notification]:
        with self._lock:
            pending = list(self._notifications)
            self._notifications.clear()
            return pending

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _notify(self, message: str, severity: str = "success") -> None:
        self._notifications.append(Notification(message=message, severity=severity))

    def _persist(self) -> bool:
        try:
            self.storage.save(self._products)
        except StorageWriteError as exc:
            logger.error("Inventory kept in memory but not saved: %s", exc)
            self._notify(MSG_SAVE_ERROR, "error")
            return False
        return True

    def _index_of(self, product_id: ProductId) -> Optional[int]:
        try:
            wanted = coerce_identifier(product_id)
        except ValueError:
            return None
        for index, product in enumerate(self._products):
            if product.id == wanted:
                return index
        return None


__all__ = [
    "CONFIRM_DELETE_PROMPT",
    "InventoryController",
    "MAX_PENDING_NOTIFICATIONS",
]
