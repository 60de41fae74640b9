"""Product records, draft schemas and small value objects."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from threading import Lock
from typing import Any, Callable, Dict, Iterable, Literal, Optional, Sequence, Union
import math
import time

from pydantic import BaseModel, Field, field_validator

ProductId = Union[int, float]

DEFAULT_DATE_FORMAT = "%d/%m/%Y"


def today_string(date_format: str = DEFAULT_DATE_FORMAT, today: Optional[date] = None) -> str:
    """Return the display date stored in ``lastUpdated``."""

    return (today or date.today()).strftime(date_format)


def coerce_identifier(value: Any) -> ProductId:
    """Convert a stored or routed identifier to ``int`` when it is whole."""

    if isinstance(value, bool):
        raise ValueError("Product id must be numeric")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError as exc:
            raise ValueError(f"Invalid product id: {value!r}") from exc
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError("Product id must be finite")
        return int(value) if value.is_integer() else value
    raise ValueError(f"Invalid product id: {value!r}")


def _coerce_quantity(value: Any) -> int:
    try:
        quantity = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(quantity, 0)


def _coerce_price(value: Any) -> float:
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(price) or price < 0:
        return 0.0
    return price


@dataclass(frozen=True)
class Product:
    """A single inventory line item."""

    id: ProductId
    name: str
    category: str
    quantity: int = 0
    price: float = 0.0
    last_updated: str = ""

    @property
    def value(self) -> float:
        return self.quantity * self.price

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "quantity": self.quantity,
            "price": self.price,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_record(cls, record: Any) -> "Product":
        if not isinstance(record, dict):
            raise ValueError("Product record must be an object")
        if "id" not in record:
            raise ValueError("Product record has no id")
        return cls(
            id=coerce_identifier(record["id"]),
            name=str(record.get("name") or "").strip(),
            category=str(record.get("category") or "").strip(),
            quantity=_coerce_quantity(record.get("quantity")),
            price=_coerce_price(record.get("price")),
            last_updated=str(record.get("lastUpdated") or "").strip(),
        )


class ProductDraft(BaseModel):
    """Fields submitted by the product form when adding a record."""

    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    quantity: int = Field(0, ge=0)
    price: float = Field(0, ge=0, allow_inf_nan=False)

    @field_validator("name", "category", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value


class ProductUpdate(BaseModel):
    """Partial draft for edits; only provided fields are applied."""

    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    quantity: Optional[int] = Field(default=None, ge=0)
    price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)

    @field_validator("name", "category", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


@dataclass(frozen=True)
class InventoryStats:
    total_products: int = 0
    total_items: int = 0
    total_value: float = 0.0

    @classmethod
    def from_products(cls, products: Sequence[Product]) -> "InventoryStats":
        return cls(
            total_products=len(products),
            total_items=sum(product.quantity for product in products),
            total_value=sum(product.value for product in products),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalProducts": self.total_products,
            "totalItems": self.total_items,
            "totalValue": self.total_value,
        }


Severity = Literal["success", "error"]


@dataclass(frozen=True)
class Notification:
    """Transient message shown to the user after an operation."""

    message: str
    severity: Severity = "success"

    def to_dict(self) -> Dict[str, str]:
        return {"message": self.message, "type": self.severity}


@dataclass(frozen=True)
class ExportFile:
    """Downloadable payload handed to the presentation layer."""

    filename: str
    content: bytes
    mimetype: str


@dataclass
class IdentifierAllocator:
    """Hands out strictly increasing millisecond-based product ids."""

    clock: Callable[[], float] = time.time
    _last: int = field(default=0, init=False)
    _lock: Lock = field(default_factory=Lock, init=False, repr=False)

    def seed(self, existing: Iterable[ProductId]) -> None:
        with self._lock:
            for identifier in existing:
                self._last = max(self._last, math.ceil(identifier))

    def __call__(self) -> int:
        with self._lock:
            candidate = int(self.clock() * 1000)
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return candidate


__all__ = [
    "DEFAULT_DATE_FORMAT",
    "ExportFile",
    "IdentifierAllocator",
    "InventoryStats",
    "Notification",
    "Product",
    "ProductDraft",
    "ProductId",
    "ProductUpdate",
    "coerce_identifier",
    "today_string",
]
