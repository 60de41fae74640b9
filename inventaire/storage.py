"""Local persistence for the product collection and JSON backups."""
from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
import json
import logging

from .errors import BackupCreationError, StorageCorruptError, StorageReadError, StorageWriteError
from .models import Product

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"
BACKUP_MIMETYPE = "application/json"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def backup_filename(now: Optional[datetime] = None) -> str:
    moment = now or _now()
    return f"inventaire_backup_{moment.date().isoformat()}.json"


@dataclass
class StorageService:
    """Reads and overwrites a single named JSON slot inside ``data_dir``.

    The slot holds the whole collection as a JSON array; every save replaces
    it. In lenient mode (the default) a corrupt slot loads as an empty list.
    """

    data_dir: Path
    key: str = "inventory_v1"
    strict: bool = False

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir)

    @classmethod
    def from_settings(cls, settings: Any) -> "StorageService":
        return cls(
            data_dir=settings.data_dir,
            key=settings.storage_key,
            strict=settings.strict_load,
        )

    @property
    def path(self) -> Path:
        return self.data_dir / f"{self.key}.json"

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> List[Product]:
        try:
            return self._read_slot()
        except StorageReadError as exc:
            if self.strict:
                raise
            logger.error("Erreur lors du chargement: %s", exc)
            return []

    def save(self, products: Sequence[Product]) -> None:
        try:
            payload = json.dumps(
                [product.to_dict() for product in products],
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError) as exc:
            logger.error("Erreur lors de la sauvegarde: %s", exc)
            raise StorageWriteError("Impossible de sauvegarder les données") from exc
        temp_path = self.path.with_suffix(".tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(payload, encoding="utf-8")
            temp_path.replace(self.path)
        except OSError as exc:
            with suppress(OSError):
                temp_path.unlink()
            logger.error("Erreur lors de la sauvegarde: %s", exc)
            raise StorageWriteError("Impossible de sauvegarder les données") from exc
        logger.debug("Saved %d products to %s", len(products), self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

    def create_backup_blob(
        self,
        products: Sequence[Product],
        *,
        now: Optional[datetime] = None,
    ) -> bytes:
        envelope: Dict[str, Any] = {
            "version": BACKUP_VERSION,
            "timestamp": (now or _now()).isoformat(),
            "data": [product.to_dict() for product in products],
        }
        try:
            text = json.dumps(envelope, indent=2, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as exc:
            logger.error("Erreur lors de la création de la sauvegarde: %s", exc)
            raise BackupCreationError("Impossible de créer la sauvegarde") from exc
        return text.encode("utf-8")

    def _read_slot(self) -> List[Product]:
        if not self.path.exists():
            return []
        try:
            raw = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageReadError(f"Cannot read {self.path}") from exc
        if not raw.strip():
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageCorruptError(f"Invalid JSON in {self.path}") from exc
        if not isinstance(records, list):
            raise StorageCorruptError(f"Expected a product array in {self.path}")
        try:
            return [Product.from_record(record) for record in records]
        except ValueError as exc:
            raise StorageCorruptError(f"Invalid product record in {self.path}: {exc}") from exc


__all__ = ["BACKUP_MIMETYPE", "BACKUP_VERSION", "StorageService", "backup_filename"]
