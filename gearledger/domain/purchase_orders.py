"""Purchase-order item editing.

Item totals and the order total are derived values: every function here
returns a new order with both recomputed from quantity x unit price.
"""
from __future__ import annotations

import uuid
from dataclasses import replace
from decimal import Decimal
from typing import Any, Optional

from gearledger.domain.models import PurchaseOrder, PurchaseOrderItem, to_decimal
from gearledger.errors import RecordNotFoundError


def recompute_item(item: PurchaseOrderItem) -> PurchaseOrderItem:
    return replace(item, total_price=item.unit_price * item.quantity)


def recompute_totals(order: PurchaseOrder) -> PurchaseOrder:
    items = tuple(recompute_item(item) for item in order.items)
    total = sum((item.total_price for item in items), Decimal("0"))
    return replace(order, items=items, total_amount=total)


def add_item(order: PurchaseOrder, product_name: str, quantity: int, unit_price: Any,
             item_id: Optional[str] = None) -> PurchaseOrder:
    item = PurchaseOrderItem(
        id=item_id or uuid.uuid4().hex,
        product_name=product_name,
        quantity=int(quantity),
        unit_price=to_decimal(unit_price),
    )
    return recompute_totals(replace(order, items=order.items + (item,)))


def update_item(order: PurchaseOrder, item_id: str, **changes: Any) -> PurchaseOrder:
    """Change fields of one item; `total_price` cannot be set directly."""
    changes.pop("total_price", None)
    if "unit_price" in changes:
        changes["unit_price"] = to_decimal(changes["unit_price"])
    if "quantity" in changes:
        changes["quantity"] = int(changes["quantity"])

    found = False
    items = []
    for item in order.items:
        if item.id == item_id:
            found = True
            item = replace(item, **changes)
        items.append(item)
    if not found:
        raise RecordNotFoundError("purchase order items", item_id)
    return recompute_totals(replace(order, items=tuple(items)))


def remove_item(order: PurchaseOrder, item_id: str) -> PurchaseOrder:
    items = tuple(item for item in order.items if item.id != item_id)
    if len(items) == len(order.items):
        raise RecordNotFoundError("purchase order items", item_id)
    return recompute_totals(replace(order, items=items))
