import json

import pytest
from httpx import AsyncClient

from pricebook.storage.service import CatalogStoreService

VERSIONS_API_PREFIX = "/api/v1/pricing-versions"
CATALOG_API_PREFIX = "/api/v1/catalog"

@pytest.mark.asyncio
async def test_publish_and_list_versions(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.post(VERSIONS_API_PREFIX, json={"notes": "Base", "name": "2024"})
    assert response.status_code == 201
    first = response.json()
    assert first["name"] == "2024"
    assert set(first["products"]) == {"prod_dh", "prod_min", "prod_door"}

    response = await test_client.post(VERSIONS_API_PREFIX)
    assert response.status_code == 201
    second = response.json()

    response = await test_client.get(VERSIONS_API_PREFIX)
    assert response.status_code == 200
    summaries = response.json()
    assert [s["id"] for s in summaries] == [first["id"], second["id"]]
    assert [s["isCurrent"] for s in summaries] == [False, True]

    response = await test_client.get(f"{VERSIONS_API_PREFIX}/{first['id']}")
    assert response.status_code == 200
    assert response.json()["notes"] == "Base"

@pytest.mark.asyncio
async def test_unknown_version(test_client: AsyncClient, sql_store: CatalogStoreService):
    assert (await test_client.get(f"{VERSIONS_API_PREFIX}/pricing_v0")).status_code == 404
    assert (await test_client.get(f"{VERSIONS_API_PREFIX}/pricing_v0/export")).status_code == 404
    assert (await test_client.post(f"{VERSIONS_API_PREFIX}/pricing_v0/restore")).status_code == 404

@pytest.mark.asyncio
async def test_export_version(test_client: AsyncClient, sql_store: CatalogStoreService):
    version = (await test_client.post(VERSIONS_API_PREFIX, json={"name": "tarifs"})).json()

    response = await test_client.get(f"{VERSIONS_API_PREFIX}/{version['id']}/export")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert response.headers["content-disposition"] == 'attachment; filename="tarifs.json"'
    assert json.loads(response.text)["id"] == version["id"]

    response = await test_client.get(f"{VERSIONS_API_PREFIX}/{version['id']}/export", params={"format": "csv"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.text.startswith("MANUFACTURERS\nID,Name\n")

    response = await test_client.get(f"{VERSIONS_API_PREFIX}/{version['id']}/export", params={"format": "xml"})
    assert response.status_code == 422

@pytest.mark.asyncio
async def test_restore_version(test_client: AsyncClient, sql_store: CatalogStoreService):
    version = (await test_client.post(VERSIONS_API_PREFIX)).json()
    await test_client.delete(f"{CATALOG_API_PREFIX}/products/prod_door")

    response = await test_client.post(f"{VERSIONS_API_PREFIX}/{version['id']}/restore")
    assert response.status_code == 200

    catalog = (await test_client.get(CATALOG_API_PREFIX)).json()
    assert "prod_door" in catalog["products"]

@pytest.mark.asyncio
async def test_import_version_file(test_client: AsyncClient, sql_store: CatalogStoreService):
    version = (await test_client.post(VERSIONS_API_PREFIX)).json()
    csv_export = await test_client.get(f"{VERSIONS_API_PREFIX}/{version['id']}/export", params={"format": "csv"})

    await test_client.delete(f"{CATALOG_API_PREFIX}/addons/lowe")
    response = await test_client.post(f"{VERSIONS_API_PREFIX}/import",
                                      json={"filename": "tarifs.csv", "content": csv_export.text})
    assert response.status_code == 200
    assert "lowe" in response.json()["addons"]

    catalog = (await test_client.get(CATALOG_API_PREFIX)).json()
    assert catalog["addons"]["lowe"]["uiRate"] == 1.5

@pytest.mark.asyncio
async def test_import_invalid_version_file(test_client: AsyncClient, sql_store: CatalogStoreService):
    response = await test_client.post(f"{VERSIONS_API_PREFIX}/import",
                                      json={"filename": "tarifs.json", "content": "{\"manufacturers\": {}}"})
    assert response.status_code == 400

    response = await test_client.post(f"{VERSIONS_API_PREFIX}/import",
                                      json={"filename": "tarifs.txt", "content": ""})
    assert response.status_code == 400

    response = await test_client.post(f"{VERSIONS_API_PREFIX}/import", json={
        "filename": "tarifs.json",
        "content": json.dumps({"id": "v1", "manufacturers": [{"id": "m1"}]}),
    })
    assert response.status_code == 400
