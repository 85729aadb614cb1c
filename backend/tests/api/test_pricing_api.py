import pytest
from httpx import AsyncClient

from pricebook.storage.service import CatalogStoreService

PRICING_API_PREFIX = "/api/v1/pricing"

@pytest.mark.asyncio
async def test_price_line_item(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.post(f"{PRICING_API_PREFIX}/line-items", json={
        "productId": "prod_dh", "width": 30, "height": 20, "selectedAddonIds": ["lowe"],
    })
    assert response.status_code == 200
    data = response.json()
    assert data["ui"] == 50
    assert data["basePrice"] == 500
    assert data["lineItemParTotal"] == 675
    assert [a["id"] for a in data["appliedAddons"]] == ["install_std", "lowe"]
    assert data["appliedAddons"][0]["hidden"] is True

@pytest.mark.asyncio
async def test_price_line_item_exclusive_conflict(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.post(f"{PRICING_API_PREFIX}/line-items", json={
        "productId": "prod_dh", "width": 30, "height": 20, "selectedAddonIds": ["grids", "grids_prairie"],
    })
    assert response.status_code == 409

@pytest.mark.asyncio
async def test_price_line_item_unknown_product(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.post(f"{PRICING_API_PREFIX}/line-items", json={
        "productId": "ghost", "width": 30, "height": 20,
    })
    assert response.status_code == 404

@pytest.mark.asyncio
async def test_price_line_item_invalid_configuration(test_client: AsyncClient, sql_store: CatalogStoreService):
    await sql_store.save_entity("products", {"id": "prod_bad", "pricingModel": "PER_PANE", "flatPrice": 10})
    response = await test_client.post(f"{PRICING_API_PREFIX}/line-items", json={
        "productId": "prod_bad", "width": 30, "height": 20,
    })
    assert response.status_code == 422
    assert "prod_bad" in response.json()["detail"]

@pytest.mark.asyncio
async def test_price_line_item_rejects_non_positive_dimensions(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.post(f"{PRICING_API_PREFIX}/line-items", json={
        "productId": "prod_dh", "width": 0, "height": 20,
    })
    assert response.status_code == 422

@pytest.mark.asyncio
async def test_available_addons(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.get(f"{PRICING_API_PREFIX}/products/prod_door/addons",
                                     params={"width": 36, "height": 80})
    assert response.status_code == 200
    data = response.json()
    assert data["ui"] == 116
    assert "hardware" in data["addonIds"]
    assert "lowe" not in data["addonIds"]
    assert "big_only" in data["addonIds"]

    response = await test_client.get(f"{PRICING_API_PREFIX}/products/ghost/addons",
                                     params={"width": 36, "height": 80})
    assert response.status_code == 404
