"""
Item validation — collects every field problem before raising once.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from cartsync._errors import Messages, ValidationError
from cartsync._types import LineItem, ProductType

VALID_TYPES = [t.value for t in ProductType]


def _as_mapping(item: LineItem | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(item, LineItem):
        return {
            "product_id": item.product_id,
            "name": item.name,
            "product_type": item.product_type,
            "quantity": item.quantity,
            "unit_price": item.unit_price,
        }
    return item


def _product_type(raw: Any) -> ProductType | None:
    if isinstance(raw, ProductType):
        return raw
    try:
        return ProductType(raw)
    except ValueError:
        return None


def _quantity(raw: Any) -> int | None:
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        return None
    return raw


def _price(raw: Any) -> Decimal | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        price = raw if isinstance(raw, Decimal) else Decimal(str(raw))
    except InvalidOperation:
        return None
    if not price.is_finite() or price < 0:
        return None
    return price


def validate_item(item: LineItem | Mapping[str, Any]) -> LineItem:
    """
    Build a LineItem from raw input or re-check an existing one.

    Accepted keys: product_id, name, product_type (or type), quantity,
    unit_price (or price).

    Raises ValidationError with details={"fields": {field: message}}.
    """
    data = _as_mapping(item)
    problems: dict[str, str] = {}

    product_id = data.get("product_id")
    if not isinstance(product_id, str) or not product_id.strip():
        problems["product_id"] = Messages.PRODUCT_ID_REQUIRED

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        problems["name"] = Messages.PRODUCT_NAME_REQUIRED

    product_type = _product_type(data.get("product_type", data.get("type")))
    if product_type is None:
        problems["product_type"] = Messages.type_must_be_one_of(VALID_TYPES)

    quantity = _quantity(data.get("quantity"))
    if quantity is None:
        problems["quantity"] = Messages.QUANTITY_MUST_BE_INTEGER

    price = _price(data.get("unit_price", data.get("price")))
    if price is None:
        problems["unit_price"] = Messages.PRICE_MUST_BE_NON_NEGATIVE

    if problems:
        raise ValidationError(Messages.INVALID_ITEM_DATA, details={"fields": problems})

    return LineItem(
        product_id=product_id,  # type: ignore[arg-type]
        name=name,  # type: ignore[arg-type]
        product_type=product_type,  # type: ignore[arg-type]
        quantity=quantity,  # type: ignore[arg-type]
        unit_price=price,  # type: ignore[arg-type]
    )


def validate_quantity(quantity: Any) -> int:
    checked = _quantity(quantity)
    if checked is None:
        raise ValidationError(
            Messages.QUANTITY_MUST_BE_INTEGER,
            details={"fields": {"quantity": Messages.QUANTITY_MUST_BE_INTEGER}},
        )
    return checked


__all__ = ("validate_item", "validate_quantity", "VALID_TYPES")
