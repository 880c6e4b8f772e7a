from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.main import app
from storefront.schemas.product_schema import ProductCreate, ProductUpdate
from storefront.services.catalogue_query import CatalogueQueryService, FilterSpec, PaginationSpec
from storefront.services.product_service import (
    DuplicateValueError,
    ProductNotFound,
    ProductService,
    normalize_media,
)

client = TestClient(app)


def _payload(**overrides):
    body = {"name": "Pruning Shears", "slug": "pruning-shears", "price": "24.90", "stock": 7}
    body.update(overrides)
    return body


def test_create_applies_write_time_defaults():
    res = client.post("/api/admin/products", json=_payload(original_price=0))
    assert res.status_code == 201
    body = res.json()
    assert body["is_active"] is True
    assert body["specs"] == {}
    assert body["original_price"] is None
    assert body["images"] is None
    assert body["image_url"] is None
    assert Decimal(body["price"]) == Decimal("24.90")


@pytest.mark.parametrize(
    "images,image_url,expected_images,expected_url",
    [
        (["a.jpg", "", None, "b.jpg"], "ignored.jpg", ["a.jpg", "b.jpg"], "a.jpg"),
        (None, "only.jpg", ["only.jpg"], "only.jpg"),
        ([], "dangling.jpg", None, None),
        (None, None, None, None),
    ],
)
def test_image_url_always_mirrors_first_image(images, image_url, expected_images, expected_url):
    res = client.post("/api/admin/products", json=_payload(images=images, image_url=image_url))
    assert res.status_code == 201
    body = res.json()
    assert body["images"] == expected_images
    assert body["image_url"] == expected_url


def test_normalize_media_drops_non_strings():
    assert normalize_media(["x", 3, "", "y"], None) == (["x", "y"], "x")


def test_original_price_only_kept_when_positive():
    res = client.post("/api/admin/products", json=_payload(original_price="-5"))
    assert res.json()["original_price"] is None
    res = client.post("/api/admin/products", json=_payload(slug="other", original_price="29.90"))
    assert Decimal(res.json()["original_price"]) == Decimal("29.90")


def test_negative_price_or_stock_is_rejected():
    assert client.post("/api/admin/products", json=_payload(price="-1")).status_code == 422
    assert client.post("/api/admin/products", json=_payload(stock=-3)).status_code == 422


def test_duplicate_slug_is_reported_by_field():
    assert client.post("/api/admin/products", json=_payload()).status_code == 201
    res = client.post("/api/admin/products", json=_payload(sku="NEW-1"))
    assert res.status_code == 409
    assert res.json()["detail"]["field"] == "slug"


def test_duplicate_sku_is_reported_by_field():
    assert client.post("/api/admin/products", json=_payload(sku="PS-1")).status_code == 201
    res = client.post("/api/admin/products", json=_payload(slug="shears-2", sku="PS-1"))
    assert res.status_code == 409
    assert res.json()["detail"]["field"] == "sku"


def test_blank_skus_do_not_collide():
    assert client.post("/api/admin/products", json=_payload(sku="")).status_code == 201
    res = client.post("/api/admin/products", json=_payload(slug="shears-2", sku="  "))
    assert res.status_code == 201
    assert res.json()["sku"] is None


def test_update_is_partial_and_returns_the_stored_row():
    created = client.post(
        "/api/admin/products", json=_payload(images=["a.jpg", "b.jpg"], specs={"blade": "steel"})
    ).json()
    pid = created["product_id"]

    res = client.put(f"/api/admin/products/{pid}", json={"name": "Bypass Shears", "is_active": False})
    assert res.status_code == 200
    body = res.json()
    assert body["name"] == "Bypass Shears"
    assert body["is_active"] is False
    assert body["images"] == ["a.jpg", "b.jpg"]
    assert body["image_url"] == "a.jpg"
    assert body["specs"] == {"blade": "steel"}
    assert body["updated_at"] >= created["updated_at"]

    res = client.put(f"/api/admin/products/{pid}", json={"images": ["c.jpg"]})
    assert res.json()["image_url"] == "c.jpg"
    res = client.put(f"/api/admin/products/{pid}", json={"images": []})
    assert res.json()["images"] is None
    assert res.json()["image_url"] is None


def test_update_conflicts_and_missing_products():
    client.post("/api/admin/products", json=_payload())
    other = client.post("/api/admin/products", json=_payload(slug="loppers", name="Loppers")).json()

    res = client.put(f"/api/admin/products/{other['product_id']}", json={"slug": "pruning-shears"})
    assert res.status_code == 409
    assert res.json()["detail"]["field"] == "slug"
    assert client.get(f"/api/admin/products/{other['product_id']}").json()["slug"] == "loppers"

    assert client.put("/api/admin/products/999", json={"name": "x"}).status_code == 404


def test_admin_sees_inactive_products_public_does_not():
    pid = client.post("/api/admin/products", json=_payload(is_active=False)).json()["product_id"]
    assert client.get(f"/api/admin/products/{pid}").status_code == 200
    assert client.get(f"/api/products/{pid}").status_code == 404


def test_delete_product():
    pid = client.post("/api/admin/products", json=_payload()).json()["product_id"]
    res = client.delete(f"/api/admin/products/{pid}")
    assert res.status_code == 200
    assert res.json() == {"product_id": pid, "deleted": True}
    assert client.get(f"/api/admin/products/{pid}").status_code == 404
    assert client.delete(f"/api/admin/products/{pid}").status_code == 404


def test_written_products_satisfy_image_invariant_on_read(db):
    svc = ProductService(db)
    svc.create(ProductCreate(name="A", slug="a", price=Decimal("1"), stock=1, images=["1.jpg", "2.jpg"]))
    svc.create(ProductCreate(name="B", slug="b", price=Decimal("1"), stock=1, image_url="b.jpg"))
    svc.create(ProductCreate(name="C", slug="c", price=Decimal("1"), stock=1, images=[""]))
    d = svc.create(ProductCreate(name="D", slug="d", price=Decimal("1"), stock=1, images=["d.jpg"]))
    svc.update(d.product_id, ProductUpdate(image_url="replacement.jpg"))

    page = CatalogueQueryService(db).query(FilterSpec(), PaginationSpec(page=1, page_size=50))
    assert page.total == 4
    for p in page.items:
        if p.images:
            assert p.image_url == p.images[0]
        else:
            assert p.images is None
            assert p.image_url is None


def test_service_errors(db):
    svc = ProductService(db)
    svc.create(ProductCreate(name="A", slug="a", price=Decimal("1"), stock=1, sku="A-1"))
    with pytest.raises(DuplicateValueError) as exc_info:
        svc.create(ProductCreate(name="A2", slug="a2", price=Decimal("1"), stock=1, sku="A-1"))
    assert exc_info.value.field == "sku"
    with pytest.raises(ProductNotFound):
        svc.get_admin(12345)
    with pytest.raises(ProductNotFound):
        svc.delete(12345)
    # session still usable after the rolled back insert
    assert svc.get_admin(1).slug == "a"
