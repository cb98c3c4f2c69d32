import asyncio

from sdk.catalog_client import CatalogClient

CATEGORIES = ["books", "garden", "toys"]


async def create_many(client, category, n):
    created = await asyncio.gather(*[
        client.create_product_async(category, f"{category}-{i}") for i in range(n)
    ])
    print(f"✅ {category}: created {len(created)} products")
    return created


async def main():
    c = CatalogClient(base_url="http://127.0.0.1:8085")

    # Reset store if available
    try:
        c.reset()
    except Exception as e:
        print(f"⚠️  reset failed: {e}")

    print("\n⚡ Creating products concurrently across categories...")
    await asyncio.gather(*[create_many(c, cat, 25) for cat in CATEGORIES])

    # Every page of every category, checked against the reported totals
    print("\n📦 Verifying pages...")
    for cat in CATEGORIES:
        first = c.list_by_category(cat, page=0, size=7)
        ids = [p["id"] for p in c.iter_category(cat, size=7)]
        ok = len(ids) == first["total_elements"] == len(set(ids))
        mark = "✅" if ok else "❌"
        print(f"{mark} {cat}: {first['total_elements']} products over {first['total_pages']} pages")

    print("\n🏷️ Categories:", c.list_categories())


if __name__ == "__main__":
    asyncio.run(main())
