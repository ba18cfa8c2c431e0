"""
Test MarketplaceService: listing, detail, creation and local filtering.
"""
import asyncio

import pytest

from fakes import fail, ok, stored_session
from greenhero.application.services.marketplace import MarketplaceService
from greenhero.application.services.session import SessionManager
from greenhero.domain.entities import Product
from greenhero.domain.exceptions import ApiError, InvalidRequestError, SessionExpiredError
from greenhero.infrastructure.storage.credential_store import InMemoryCredentialStore

DRAFT = {
    "name": "Heirloom Tomato Seeds",
    "description": "Open-pollinated",
    "price": "4.50",
    "category": "organic-seeds",
    "stock_quantity": "20",
    "unit": "packet",
}


@pytest.fixture
def market(api):
    session = SessionManager(api, InMemoryCredentialStore(stored_session("t1")))
    asyncio.run(session.bootstrap())
    return MarketplaceService(session)


def test_list_products_wrapped_payload(market, api):
    api.queue(ok({"products": [
        {"_id": "p1", "name": "Compost Bin", "price": 30, "category": "recycled-tools",
         "product_images": ["http://img/1.jpg"], "seller": {"first_name": "Amina"}},
        {"_id": "p2", "name": "Solar Lamp", "price": "12.5"},
    ]}))

    products = asyncio.run(market.list_products())

    assert [p.id for p in products] == ["p1", "p2"]
    assert products[0].cover_image == "http://img/1.jpg"
    assert products[0].seller_name == "Amina"
    assert products[1].price == 12.5
    assert api.calls[0].token == "t1"


def test_list_products_bare_array_skips_bad_records(market, api):
    api.queue(ok([{"_id": "p1", "name": "Seeds"}, "garbage", {"_id": "p3", "price": "n/a"}]))

    products = asyncio.run(market.list_products())

    assert [p.id for p in products] == ["p1"]


def test_list_products_failure(market, api):
    api.queue(fail(500, {"message": "db down"}))

    with pytest.raises(ApiError, match="db down"):
        asyncio.run(market.list_products())


def test_list_products_expired_token_ends_session(market, api):
    api.queue(fail(401))

    with pytest.raises(SessionExpiredError):
        asyncio.run(market.list_products())


def test_get_product(market, api):
    api.queue(ok({"product": {"_id": "p9", "name": "Rain Barrel", "stock_quantity": 3}}))

    product = asyncio.run(market.get_product("p9"))

    assert product.name == "Rain Barrel"
    assert product.stock_quantity == 3
    assert api.calls[0].path == "/products/p9"


def test_create_product_uploads_multipart(market, api, tmp_path):
    first = tmp_path / "front.PNG"
    first.write_bytes(b"png-bytes")
    second = tmp_path / "back.jpg"
    second.write_bytes(b"jpg-bytes")
    api.queue(ok({"product": {"_id": "new"}}, status=201))

    notice = asyncio.run(market.create_product(DRAFT, [first, second]))

    assert notice.message == "Product added to GreenHero!"
    call = api.calls[0]
    assert (call.method, call.path, call.token) == ("POST", "/products/new-product", "t1")
    assert call.data["price"] == "4.5"
    assert call.data["stock_quantity"] == "20"
    assert call.files == [
        ("images", ("photo_0.png", b"png-bytes", "image/png")),
        ("images", ("photo_1.jpg", b"jpg-bytes", "image/jpg")),
    ]


def test_create_product_requires_images(market, api):
    with pytest.raises(InvalidRequestError, match="at least one image"):
        asyncio.run(market.create_product(DRAFT, []))
    assert api.calls == []


@pytest.mark.parametrize("field, value", [("name", ""), ("price", "0"), ("unit", " ")])
def test_create_product_rejects_incomplete_draft(market, api, tmp_path, field, value):
    image = tmp_path / "a.jpg"
    image.write_bytes(b"x")

    with pytest.raises(InvalidRequestError, match=field):
        asyncio.run(market.create_product(dict(DRAFT, **{field: value}), [image]))
    assert api.calls == []


def test_create_product_unreadable_image(market, api, tmp_path):
    with pytest.raises(InvalidRequestError, match="Cannot read image"):
        asyncio.run(market.create_product(DRAFT, [tmp_path / "missing.jpg"]))
    assert api.calls == []


def test_create_product_rejected(market, api, tmp_path):
    image = tmp_path / "a.jpg"
    image.write_bytes(b"x")
    api.queue(fail(400))

    with pytest.raises(ApiError, match="Failed to add product"):
        asyncio.run(market.create_product(DRAFT, [image]))


def test_filter_products():
    products = [
        Product(id="1", name="Compost Bin", category="recycled-tools"),
        Product(id="2", name="Solar Panel", category="solar-energy"),
        Product(id="3", name="Solar Lamp", category="solar-energy"),
    ]

    assert [p.id for p in MarketplaceService.filter_products(products)] == ["1", "2", "3"]
    assert [p.id for p in MarketplaceService.filter_products(products, "solar-energy")] == ["2", "3"]
    assert [p.id for p in MarketplaceService.filter_products(products, query="LAMP")] == ["3"]
    assert MarketplaceService.filter_products(products, "recycled-tools", "solar") == []
