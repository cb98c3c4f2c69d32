# tests/test_sdk.py
import pytest

from sdk.catalog_client import CatalogClient, CatalogNotFound

pytestmark = pytest.mark.integration


@pytest.fixture
def sdk(client):
    # TestClient speaks the same get/post/put/delete surface as requests.Session
    return CatalogClient(base_url="http://testserver", session=client)


def test_crud_round_trip(sdk):
    p = sdk.create_product("x", "Widget")
    assert sdk.get_product(p["id"]) == p
    assert sdk.update_product(p["id"], "y", "Gadget")["category"] == "y"
    sdk.delete_product(p["id"])
    with pytest.raises(CatalogNotFound) as exc:
        sdk.get_product(p["id"])
    assert exc.value.product_id == p["id"]


def test_iter_category_walks_every_page(sdk):
    made = [sdk.create_product("x", f"p{i}")["id"] for i in range(7)]
    sdk.create_product("y", "other")
    assert [p["id"] for p in sdk.iter_category("x", size=3)] == made
    assert list(sdk.iter_category("missing", size=3)) == []


def test_listing_helpers(sdk):
    sdk.create_product("b", "1")
    sdk.create_product("a", "2")
    assert sdk.list_categories() == ["a", "b"]
    assert sdk.list_by_category("a")["total_elements"] == 1
    assert [p["category"] for p in sdk.list_products(size=5)["items"]] == ["a", "b"]
    assert sdk.health()["products"] == 2
    assert sdk.reset() == {"status": "reset"}


def test_category_names_are_path_quoted(sdk):
    odd = "home/garden?x#y"
    made = [sdk.create_product(odd, f"p{i}")["id"] for i in range(3)]
    sdk.create_product("home", "decoy")
    assert sdk.list_by_category(odd)["total_elements"] == 3
    assert [p["id"] for p in sdk.iter_category(odd, size=2)] == made
