import pytest
from httpx import AsyncClient

from pricebook.storage.service import CatalogStoreService

CATALOG_API_PREFIX = "/api/v1/catalog" # Préfixe de l'API tel que défini dans main.py

@pytest.mark.asyncio
async def test_read_catalog(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.get(CATALOG_API_PREFIX)
    assert response.status_code == 200
    data = response.json()
    assert set(data["products"]) == {"prod_dh", "prod_min", "prod_door"}
    assert data["products"]["prod_dh"]["minimumUI"] == 0
    assert data["productLines"]["line1"]["manufacturerId"] == "mfg1"

@pytest.mark.asyncio
async def test_upsert_and_delete_entity(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.put(f"{CATALOG_API_PREFIX}/manufacturers/mfg9", json={"name": "Nordik"})
    assert response.status_code == 200
    assert response.json() == {"id": "mfg9", "name": "Nordik"}

    response = await test_client.delete(f"{CATALOG_API_PREFIX}/manufacturers/mfg9")
    assert response.status_code == 204

    response = await test_client.delete(f"{CATALOG_API_PREFIX}/manufacturers/mfg9")
    assert response.status_code == 404

@pytest.mark.asyncio
async def test_upsert_entity_errors(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.put(f"{CATALOG_API_PREFIX}/widgets/w1", json={"name": "?"})
    assert response.status_code == 400

    response = await test_client.put(f"{CATALOG_API_PREFIX}/products/p1", json={"minimumUI": -1})
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_settings(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.get(f"{CATALOG_API_PREFIX}/settings")
    assert response.status_code == 200
    assert response.json()["minimumUI"] == 65

    response = await test_client.patch(f"{CATALOG_API_PREFIX}/settings", json={"alertsEnabled": False})
    assert response.status_code == 200
    assert response.json() == {"minimumUI": 65, "alertsEnabled": False, "rules": []}

@pytest.mark.asyncio
async def test_backup_round_trip(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.get(f"{CATALOG_API_PREFIX}/backup")
    assert response.status_code == 200
    backup = response.json()
    assert set(backup["addons"]) >= {"grids", "disposal"}

    backup["products"]["prod_new"] = {"id": "prod_new", "lineId": "line2", "pricingModel": "FLAT", "flatPrice": 99}
    response = await test_client.post(f"{CATALOG_API_PREFIX}/backup", json=backup)
    assert response.status_code == 204

    catalog = (await test_client.get(CATALOG_API_PREFIX)).json()
    assert catalog["products"]["prod_new"]["productLineId"] == "line2"

@pytest.mark.asyncio
async def test_backup_with_invalid_entity(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.post(f"{CATALOG_API_PREFIX}/backup",
                                      json={"addons": {"bad": {"id": "bad", "mandatory": "peut-être"}}})
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_entity_form(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.get(f"{CATALOG_API_PREFIX}/forms/prod/prod_dh")
    assert response.status_code == 200
    fields = response.json()["fields"]
    assert fields[0]["resolvedValue"] == "Window"
    assert fields[1]["resolvedValue"] == "Premium"

    response = await test_client.get(f"{CATALOG_API_PREFIX}/forms/mfg")
    assert response.status_code == 200
    assert response.json()["collection"] == "manufacturers"

@pytest.mark.asyncio
async def test_entity_form_errors(test_client: AsyncClient, sql_store: CatalogStoreService):
    assert (await test_client.get(f"{CATALOG_API_PREFIX}/forms/widget")).status_code == 404
    assert (await test_client.get(f"{CATALOG_API_PREFIX}/forms/prod/ghost")).status_code == 404

@pytest.mark.asyncio
async def test_submit_entity_form(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.post(f"{CATALOG_API_PREFIX}/forms/addon/grids",
                                      json={"flatPrice": "60", "allowedProductTypes": "Window"})
    assert response.status_code == 200
    data = response.json()
    assert data["flatPrice"] == 60
    assert data["name"] == "Colonial Grids"
    assert data["exclusiveGroup"] == "glass"
    assert data["allowedProductTypes"] == ["Window"]

    response = await test_client.post(f"{CATALOG_API_PREFIX}/forms/prod/prod_dh", json={"uiRate": "dix"})
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_backup_with_empty_section_clears_it(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.post(f"{CATALOG_API_PREFIX}/backup", json={"addons": {}})
    assert response.status_code == 204

    catalog = (await test_client.get(CATALOG_API_PREFIX)).json()
    assert catalog["addons"] == {}
    assert "prod_dh" in catalog["products"]

@pytest.mark.asyncio
async def test_backup_with_array_section(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.post(f"{CATALOG_API_PREFIX}/backup",
                                      json={"products": [{"id": "p1"}]})
    assert response.status_code == 400
