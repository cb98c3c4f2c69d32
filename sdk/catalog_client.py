# sdk/catalog_client.py
from typing import Any, Dict, Iterator, Optional
from urllib.parse import quote

import httpx
import requests
from rich import print


class CatalogNotFound(Exception):
    def __init__(self, product_id: Any):
        self.product_id = product_id
        super().__init__(f"product not found: {product_id}")


class CatalogClient:
    def __init__(self, base_url: str = "http://localhost:8085", api_key: Optional[str] = None,
                 timeout: int = 10, session=None):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.headers: Dict[str, str] = {}
        if api_key:
            self.headers["Authorization"] = f"Bearer {api_key}"

    def _check(self, r, product_id: Any = None):
        if r.status_code == 404:
            raise CatalogNotFound(product_id)
        r.raise_for_status()
        return r

    def health(self):
        r = self.session.get(f"{self.base_url}/health", headers=self.headers, timeout=self.timeout)
        return self._check(r).json()

    def reset(self):
        r = self.session.post(f"{self.base_url}/reset", headers=self.headers, timeout=self.timeout)
        return self._check(r).json()

    # Products
    def create_product(self, category: str, name: str):
        r = self.session.post(f"{self.base_url}/products", json={"category": category, "name": name},
                              headers=self.headers, timeout=self.timeout)
        return self._check(r).json()

    def get_product(self, product_id: int):
        r = self.session.get(f"{self.base_url}/products/{product_id}", headers=self.headers, timeout=self.timeout)
        return self._check(r, product_id).json()

    def update_product(self, product_id: int, category: str, name: str):
        r = self.session.put(f"{self.base_url}/products/{product_id}", json={"category": category, "name": name},
                             headers=self.headers, timeout=self.timeout)
        return self._check(r, product_id).json()

    def delete_product(self, product_id: int) -> None:
        r = self.session.delete(f"{self.base_url}/products/{product_id}", headers=self.headers, timeout=self.timeout)
        self._check(r, product_id)

    def list_products(self, page: int = 0, size: Optional[int] = None):
        params: Dict[str, Any] = {"page": page}
        if size is not None:
            params["size"] = size
        r = self.session.get(f"{self.base_url}/products", params=params, headers=self.headers, timeout=self.timeout)
        return self._check(r).json()

    # Categories
    def list_categories(self):
        r = self.session.get(f"{self.base_url}/categories", headers=self.headers, timeout=self.timeout)
        return self._check(r).json()["categories"]

    def list_by_category(self, category: str, page: int = 0, size: Optional[int] = None):
        params: Dict[str, Any] = {"page": page}
        if size is not None:
            params["size"] = size
        r = self.session.get(f"{self.base_url}/categories/{quote(category, safe='')}/products", params=params,
                             headers=self.headers, timeout=self.timeout)
        return self._check(r).json()

    def iter_category(self, category: str, size: Optional[int] = None) -> Iterator[Dict[str, Any]]:
        """Yield every product in ``category``, fetching one page at a time."""
        page = 0
        while True:
            body = self.list_by_category(category, page, size)
            yield from body["items"]
            page += 1
            if page >= body["total_pages"]:
                return

    # Async create (used by the concurrent demo)
    async def create_product_async(self, category: str, name: str):
        async with httpx.AsyncClient(timeout=self.timeout, headers=self.headers) as client:
            r = await client.post(f"{self.base_url}/products", json={"category": category, "name": name})
            r.raise_for_status()
            return r.json()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Catalog CLI")
    parser.add_argument("--base-url", default="http://127.0.0.1:8085", help="Catalog service URL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---------------------------
    # Product commands
    # ---------------------------
    lp = subparsers.add_parser("list-products", help="List all products, ordered by category")
    lp.add_argument("--page", type=int, default=0, help="Page number (0-based)")
    lp.add_argument("--size", type=int, help="Page size")

    gp = subparsers.add_parser("get-product", help="Get a product by its ID")
    gp.add_argument("--product-id", type=int, required=True, help="ID of the product")

    cp = subparsers.add_parser("create-product", help="Create a new product")
    cp.add_argument("--category", required=True, help="Product category")
    cp.add_argument("--name", required=True, help="Product name")

    up = subparsers.add_parser("update-product", help="Replace a product's category and name")
    up.add_argument("--product-id", type=int, required=True, help="ID of the product")
    up.add_argument("--category", required=True, help="New category")
    up.add_argument("--name", required=True, help="New name")

    dp = subparsers.add_parser("delete-product", help="Delete a product")
    dp.add_argument("--product-id", type=int, required=True, help="ID of the product")

    # ---------------------------
    # Category commands
    # ---------------------------
    subparsers.add_parser("list-categories", help="List distinct categories")

    lc = subparsers.add_parser("list-by-category", help="List one page of a category")
    lc.add_argument("--category", required=True, help="Category to list")
    lc.add_argument("--page", type=int, default=0, help="Page number (0-based)")
    lc.add_argument("--size", type=int, help="Page size")

    subparsers.add_parser("health", help="Service health")
    subparsers.add_parser("reset", help="Drop every product")

    args = parser.parse_args()
    c = CatalogClient(base_url=args.base_url)

    try:
        if args.command == "list-products":
            print(c.list_products(args.page, args.size))
        elif args.command == "get-product":
            print(c.get_product(args.product_id))
        elif args.command == "create-product":
            print(c.create_product(args.category, args.name))
        elif args.command == "update-product":
            print(c.update_product(args.product_id, args.category, args.name))
        elif args.command == "delete-product":
            c.delete_product(args.product_id)
            print(f"[green]deleted {args.product_id}[/green]")
        elif args.command == "list-categories":
            print(c.list_categories())
        elif args.command == "list-by-category":
            print(c.list_by_category(args.category, args.page, args.size))
        elif args.command == "health":
            print(c.health())
        elif args.command == "reset":
            print(c.reset())
    except CatalogNotFound as e:
        print(f"[red]{e}[/red]")
        raise SystemExit(1)
