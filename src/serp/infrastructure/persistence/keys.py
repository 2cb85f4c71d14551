"""Key scheme for the single-table layout.

Primary records use ``pk == sk``.  Index partitions hold one small
pointer record per member so a category or customer can be enumerated
without scanning every item or order.
"""

from __future__ import annotations

from serp.domain.repository.record_store import Key

ITEM_PREFIX = "ITEM#"
ORDER_PREFIX = "ORDER#"
CATEGORY_INDEX_PREFIX = "METADATA#CATEGORY#"
CUSTOMER_INDEX_PREFIX = "CUSTOMER#"


def item_key(item_id: str) -> Key:
    return Key(f"{ITEM_PREFIX}{item_id}", f"{ITEM_PREFIX}{item_id}")


def order_key(order_id: str) -> Key:
    return Key(f"{ORDER_PREFIX}{order_id}", f"{ORDER_PREFIX}{order_id}")


def category_index_key(category: str, item_id: str) -> Key:
    return Key(f"{CATEGORY_INDEX_PREFIX}{category}", f"{ITEM_PREFIX}{item_id}")


def customer_index_key(customer_id: str, order_id: str) -> Key:
    return Key(f"{CUSTOMER_INDEX_PREFIX}{customer_id}", f"{ORDER_PREFIX}{order_id}")


def is_primary(key: Key) -> bool:
    return key.pk == key.sk
