"""Plain comma-separated import and export of the product list.

Fields are split and joined on bare commas: there is no quoting, so values
containing a comma do not survive a round trip. The column order is fixed:
name, category, quantity, price, lastUpdated.
"""
from __future__ import annotations

from typing import Callable, List, Sequence, Union
import logging
import math

from .errors import ImportParseError
from .models import Product, ProductId

logger = logging.getLogger(__name__)

EXPORT_HEADERS = ["NOM", "CATÉGORIE", "QUANTITÉ", "PRIX", "DERNIÈRE MAJ"]
EXPORT_FILENAME = "inventaire.csv"
EXPORT_MIMETYPE = "text/csv;charset=utf-8"

DEFAULT_NAME = "Sans nom"
DEFAULT_CATEGORY = "Non catégorisé"


def _parse_number(value: str) -> float:
    text = value.strip()
    if not text:
        return 0.0
    if "_" in text:
        return 0.0
    try:
        number = float(text)
    except ValueError:
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _column(values: List[str], index: int) -> str:
    if index < len(values):
        return values[index].strip()
    return ""


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_line(
    line: str,
    *,
    allocate_id: Callable[[], ProductId],
    today: Callable[[], str],
) -> Product:
    values = line.split(",")
    return Product(
        id=allocate_id(),
        name=_column(values, 0) or DEFAULT_NAME,
        category=_column(values, 1) or DEFAULT_CATEGORY,
        quantity=int(_parse_number(_column(values, 2))),
        price=_parse_number(_column(values, 3)),
        last_updated=_column(values, 4) or today(),
    )


def parse(
    text: Union[str, bytes],
    *,
    allocate_id: Callable[[], ProductId],
    today: Callable[[], str],
) -> List[Product]:
    """Turn uploaded CSV text into new products; the first line is a header."""

    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ImportParseError("File must be UTF-8 encoded") from exc
    if not isinstance(text, str):
        raise ImportParseError("CSV content must be text")
    lines = [line for line in text.lstrip("\ufeff").split("\n") if line.strip()]
    if not lines:
        raise ImportParseError("Empty file")
    header, rows = lines[0], lines[1:]
    logger.debug("Ignoring CSV header %r", header.strip())
    try:
        return [parse_line(row, allocate_id=allocate_id, today=today) for row in rows]
    except Exception as exc:
        raise ImportParseError(f"Cannot parse CSV: {exc}") from exc


def to_csv(products: Sequence[Product]) -> str:
    lines = [",".join(EXPORT_HEADERS)]
    for product in products:
        lines.append(
            ",".join(
                [
                    product.name,
                    product.category,
                    _format_number(product.quantity),
                    _format_number(product.price),
                    product.last_updated,
                ]
            )
        )
    return "\n".join(lines)


__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_NAME",
    "EXPORT_FILENAME",
    "EXPORT_HEADERS",
    "EXPORT_MIMETYPE",
    "parse",
    "parse_line",
    "to_csv",
]
