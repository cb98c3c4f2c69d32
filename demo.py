#!/usr/bin/env python
from sdk.catalog_client import CatalogClient, CatalogNotFound


def main():
    c = CatalogClient(base_url="http://127.0.0.1:8085")

    # -----------------------------
    # Reset everything for demo
    # -----------------------------
    print("Resetting catalog...")
    c.reset()

    # -----------------------------
    # Create products
    # -----------------------------
    print("\nCreating products...")
    laptop = c.create_product("electronics", "Laptop")
    mouse = c.create_product("electronics", "Mouse")
    mug = c.create_product("kitchen", "Mug")
    print(laptop)
    print(mouse)
    print(mug)

    # -----------------------------
    # Categories and pages
    # -----------------------------
    print("\nCategories:", c.list_categories())

    print("\nElectronics, one per page...")
    first = c.list_by_category("electronics", page=0, size=1)
    print(first)
    print(c.list_by_category("electronics", page=1, size=1))

    # -----------------------------
    # Move a product to another category
    # -----------------------------
    print("\nMoving the mouse to 'accessories'...")
    print(c.update_product(mouse["id"], "accessories", "Wireless Mouse"))
    print("Categories:", c.list_categories())
    print("Electronics now:", [p["name"] for p in c.iter_category("electronics")])

    # -----------------------------
    # Delete
    # -----------------------------
    print("\nDeleting the mug...")
    c.delete_product(mug["id"])
    try:
        c.get_product(mug["id"])
    except CatalogNotFound as e:
        print("Lookup after delete:", e)

    print("\nEverything, ordered by category:")
    print(c.list_products())


if __name__ == "__main__":
    main()
