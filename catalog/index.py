"""
Category index for the catalog.

Keeps, for every category value, the ids of the live products carrying that
category. Entries are sorted ascending by id, which is the order pages are
cut from. Because ids are issued monotonically, a new product's id almost
always lands at the end of its entry.

The index never stores product records, only ids; the record store remains
the single owner of record contents.
"""

from bisect import bisect_left, insort
from typing import Dict, Iterable, List

from .errors import InvariantViolation
from .models import Product


class CategoryIndex:
    def __init__(self) -> None:
        self._entries: Dict[str, List[int]] = {}
        self._size = 0

    # ---------------------------
    # Maintenance
    # ---------------------------
    def on_insert(self, product_id: int, category: str) -> None:
        ids = self._entries.setdefault(category, [])
        pos = bisect_left(ids, product_id)
        if pos < len(ids) and ids[pos] == product_id:
            raise InvariantViolation(
                f"id {product_id} already indexed under {category!r}",
                product_id=product_id,
                category=category,
            )
        if pos == len(ids):
            ids.append(product_id)
        else:
            ids.insert(pos, product_id)
        self._size += 1

    def on_update(self, product_id: int, old_category: str, new_category: str) -> None:
        if old_category == new_category:
            return
        self._discard(product_id, old_category)
        # _discard already validated membership, so this cannot collide
        insort(self._entries.setdefault(new_category, []), product_id)

    def on_remove(self, product_id: int, category: str) -> None:
        self._discard(product_id, category)
        self._size -= 1

    def _discard(self, product_id: int, category: str) -> None:
        ids = self._entries.get(category)
        pos = bisect_left(ids, product_id) if ids else 0
        if not ids or pos == len(ids) or ids[pos] != product_id:
            raise InvariantViolation(
                f"id {product_id} is not indexed under {category!r}",
                product_id=product_id,
                category=category,
            )
        del ids[pos]
        if not ids:
            del self._entries[category]

    def rebuild(self, products: Iterable[Product]) -> None:
        self.clear()
        for p in products:
            self.on_insert(p.id, p.category)

    def clear(self) -> None:
        self._entries.clear()
        self._size = 0

    # ---------------------------
    # Lookups
    # ---------------------------
    def ids_for_category(self, category: str) -> List[int]:
        return list(self._entries.get(category, ()))

    def count(self, category: str) -> int:
        return len(self._entries.get(category, ()))

    def slice(self, category: str, offset: int, limit: int) -> List[int]:
        ids = self._entries.get(category)
        if not ids or offset >= len(ids):
            return []
        return ids[offset:offset + limit]

    def distinct_categories(self) -> List[str]:
        return sorted(self._entries)

    def __len__(self) -> int:
        return self._size

    def __contains__(self, category: object) -> bool:
        return category in self._entries
