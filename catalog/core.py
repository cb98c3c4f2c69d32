"""
Query engine for the catalog.

Every read and write the service exposes goes through ``QueryEngine``. It
composes the record store and the category index and is the only code that
mutates either of them, so the index always matches the store.

Writes that touch both structures run under keyed asyncio locks: the
product lock first, then the affected category locks in sorted order.
Category-filtered page reads hold the category lock while they cut and
resolve the page.
"""

from typing import List, Optional

from .config import Config
from .database import LockTable, RecordStore, category_key, product_key
from .errors import InvariantViolation
from .index import CategoryIndex
from .logging import get_logger
from .models import Product, ProductPage, SortKey

log = get_logger(__name__)


def total_pages(total_elements: int, page_size: int) -> int:
    # ceiling division; an exact multiple gets no trailing empty page
    return -(-total_elements // page_size)


def _check_page(page_number: int, page_size: int) -> None:
    if page_number < 0:
        raise ValueError("page_number must be >= 0")
    if page_size <= 0:
        raise ValueError("page_size must be > 0")


class QueryEngine:
    sort_key = SortKey.CATEGORY

    def __init__(self, store: Optional[RecordStore] = None, index: Optional[CategoryIndex] = None):
        self.store = store if store is not None else RecordStore()
        self.index = index if index is not None else CategoryIndex()
        self._locks = LockTable()
        if len(self.store) and not len(self.index):
            self.index.rebuild(self.store.items())

    @classmethod
    def from_config(cls, config: Config) -> "QueryEngine":
        return cls(store=RecordStore(config.storage.data_file))

    # ---------------------------
    # Reads
    # ---------------------------
    async def get_by_id(self, product_id: int) -> Product:
        return self.store.get(product_id)

    async def list_by_category(self, category: str, page_number: int, page_size: int) -> ProductPage:
        _check_page(page_number, page_size)
        async with self._locks.hold(category_key(category)):
            total = self.index.count(category)
            ids = self.index.slice(category, page_number * page_size, page_size)
            items = self._resolve(ids, category)
        return self._page(items, page_number, page_size, total)

    async def list_products(self, page_number: int, page_size: int) -> ProductPage:
        """Page through every product, ordered by category then id.

        Whole index entries that end before the requested offset are skipped
        by their length, so only the entries the page overlaps are sliced.
        Nothing is awaited between reading the index and resolving the ids.
        """
        _check_page(page_number, page_size)
        offset = page_number * page_size
        total = len(self.index)
        items: List[Product] = []
        for category in self.index.distinct_categories():
            if len(items) >= page_size:
                break
            n = self.index.count(category)
            if offset >= n:
                offset -= n
                continue
            ids = self.index.slice(category, offset, page_size - len(items))
            items.extend(self._resolve(ids, category))
            offset = 0
        return self._page(items, page_number, page_size, total)

    async def list_categories(self) -> List[str]:
        return self.index.distinct_categories()

    # ---------------------------
    # Writes
    # ---------------------------
    async def create(self, category: str, name: str) -> Product:
        async with self._locks.hold(category_key(category)):
            product = self.store.insert(category, name)
            self.index.on_insert(product.id, product.category)
        log.info("product_created", product_id=product.id, category=category)
        return product

    async def update(self, product_id: int, category: str, name: str) -> Product:
        async with self._locks.hold(product_key(product_id)):
            current = self.store.get(product_id)
            async with self._locks.hold(category_key(current.category), category_key(category)):
                product = self.store.replace(product_id, category, name)
                self.index.on_update(product_id, current.category, category)
        log.info(
            "product_updated",
            product_id=product_id,
            old_category=current.category,
            new_category=category,
        )
        return product

    async def delete(self, product_id: int) -> None:
        async with self._locks.hold(product_key(product_id)):
            current = self.store.get(product_id)
            async with self._locks.hold(category_key(current.category)):
                self.store.remove(product_id)
                self.index.on_remove(product_id, current.category)
        log.info("product_deleted", product_id=product_id, category=current.category)

    async def reset(self) -> None:
        self.store.clear()
        self.index.clear()
        log.warning("store_reset")

    # ---------------------------
    # Helpers
    # ---------------------------
    def _resolve(self, ids: List[int], category: str) -> List[Product]:
        out = []
        for pid in ids:
            if pid not in self.store:
                log.error("invariant_violation", product_id=pid, category=category, reason="missing_record")
                raise InvariantViolation(
                    f"index lists id {pid} under {category!r} but the store has no such record",
                    product_id=pid,
                    category=category,
                )
            p = self.store.get(pid)
            if p.category != category:
                log.error("invariant_violation", product_id=pid, category=category, reason="stale_entry")
                raise InvariantViolation(
                    f"index lists id {pid} under {category!r} but its record is in {p.category!r}",
                    product_id=pid,
                    category=category,
                )
            out.append(p)
        return out

    def _page(self, items: List[Product], page_number: int, page_size: int, total: int) -> ProductPage:
        return ProductPage(
            items=sorted(items, key=self.sort_key.key),
            page_number=page_number,
            page_size=page_size,
            total_elements=total,
            total_pages=total_pages(total, page_size),
        )
