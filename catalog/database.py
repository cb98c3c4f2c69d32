import asyncio
import json
import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, List, Optional, Union

from .errors import ProductNotFound
from .logging import get_logger
from .models import Product

# This file holds the record store and the keyed concurrency locks.

log = get_logger(__name__)


# ---------------------------
# Keyed locks
# ---------------------------
class LockTable:
    """Per-key asyncio locks that exist only while someone holds or waits on them."""

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._holders: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, *keys: str):
        """Acquire the locks for ``keys`` in sorted order, release in reverse."""
        keys = sorted(set(keys))
        # registered before the first await so waiters share one lock object
        locks = [self._enter(k) for k in keys]
        acquired: List[asyncio.Lock] = []
        try:
            for l in locks:
                await l.acquire()
                acquired.append(l)
            yield
        finally:
            for l in reversed(acquired):
                l.release()
            for k in keys:
                self._leave(k)

    def _enter(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        self._holders[key] = self._holders.get(key, 0) + 1
        return self._locks[key]

    def _leave(self, key: str) -> None:
        remaining = self._holders[key] - 1
        if remaining:
            self._holders[key] = remaining
        else:
            del self._holders[key]
            del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


def product_key(product_id: int) -> str:
    return f"product:{product_id}"


def category_key(category: str) -> str:
    return f"category:{category}"


# ---------------------------
# Record store
# ---------------------------
class RecordStore:
    """Keyed storage of product records.

    The store owns id issuance: ids start at 1 and only grow, so an id is
    never reused even after its record is removed. When ``data_file`` is set
    the whole store is rewritten to it after every mutation.
    """

    def __init__(self, data_file: Optional[Union[str, Path]] = None):
        self._records: Dict[int, Product] = {}
        self._next_id = 1
        self.data_file = Path(data_file) if data_file is not None else None
        if self.data_file is not None and self.data_file.exists():
            self._load()

    @property
    def next_id(self) -> int:
        return self._next_id

    def insert(self, category: str, name: str) -> Product:
        product = Product(id=self._next_id, category=category, name=name)
        self._records[product.id] = product
        self._next_id += 1
        try:
            self._flush()
        except OSError:
            del self._records[product.id]
            self._next_id -= 1
            raise
        return product

    def get(self, product_id: int) -> Product:
        p = self._records.get(product_id)
        if p is None:
            raise ProductNotFound(product_id)
        return p

    def replace(self, product_id: int, category: str, name: str) -> Product:
        previous = self.get(product_id)
        product = Product(id=product_id, category=category, name=name)
        self._records[product_id] = product
        try:
            self._flush()
        except OSError:
            self._records[product_id] = previous
            raise
        return product

    def remove(self, product_id: int) -> Product:
        p = self._records.pop(product_id, None)
        if p is None:
            raise ProductNotFound(product_id)
        try:
            self._flush()
        except OSError:
            self._records[product_id] = p
            raise
        return p

    def items(self) -> List[Product]:
        return list(self._records.values())

    def clear(self) -> None:
        self._records.clear()
        self._next_id = 1
        self._flush()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._records

    # ---------------------------
    # Snapshot persistence
    # ---------------------------
    def _load(self) -> None:
        try:
            with self.data_file.open("r", encoding="utf-8") as f:
                raw = json.load(f)
            records = [Product(**entry) for entry in raw["products"]]
            next_id = int(raw["next_id"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"corrupt snapshot file {self.data_file}: {e}") from e

        for p in records:
            if p.id in self._records:
                raise ValueError(f"corrupt snapshot file {self.data_file}: duplicate id {p.id}")
            self._records[p.id] = p
        # never issue an id at or below one already on disk
        self._next_id = max([next_id] + [p.id + 1 for p in records])
        log.info("snapshot_loaded", path=str(self.data_file), products=len(self._records))

    def _flush(self) -> None:
        if self.data_file is None:
            return
        payload = {
            "next_id": self._next_id,
            "products": [p.model_dump() for p in self._records.values()],
        }
        fd, tmp = tempfile.mkstemp(prefix=".catalog-", suffix=".json", dir=self.data_file.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f)
            os.replace(tmp, self.data_file)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
