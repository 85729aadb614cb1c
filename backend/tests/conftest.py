# Standard Library
import copy
from typing import Any, AsyncGenerator, Dict

# Third-Party Libraries
import pytest
import pytest_asyncio

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

# First-Party Libraries (Your project)
from pricebook.main import app
from pricebook.database import get_db_session
from pricebook.catalog.models import CatalogData
from pricebook.quotes.service import QuoteService
from pricebook.storage import models as storage_models  # noqa: F401 (enregistre la table kv_entries)
from pricebook.storage.repositories import InMemoryKeyValueRepository, SQLAlchemyKeyValueRepository
from pricebook.storage.service import CatalogStoreService

# URL de base pour la DB en mémoire
TEST_DATABASE_BASE_URL = "sqlite+aiosqlite:///:memory:"

# --- Fixtures de Base ---

@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Crée un engine, des tables, et fournit une session DB en mémoire pour chaque test."""
    # StaticPool : une seule connexion, donc une seule base en mémoire partagée
    engine: AsyncEngine = create_async_engine(TEST_DATABASE_BASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with TestingSessionLocal() as session:
        yield session

    await engine.dispose()

@pytest_asyncio.fixture(scope="function")
async def test_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Fournit un AsyncClient httpx qui utilise la session DB de test isolée."""
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    del app.dependency_overrides[get_db_session]

# --- Fixtures Catalogue ---

SAMPLE_CATALOG: Dict[str, Any] = {
    "manufacturers": {
        "mfg1": {"id": "mfg1", "name": "Acme Windows"},
    },
    "productLines": {
        "line1": {"id": "line1", "manufacturerId": "mfg1", "name": "Premium"},
        "line2": {"id": "line2", "manufacturerId": "mfg1", "name": "Standard"},
    },
    "products": {
        "prod_dh": {
            "id": "prod_dh",
            "productLineId": "line1",
            "productType": "Window",
            "productTypeCode": "DH",
            "name": "Double Hung",
            "pricingModel": "UI",
            "uiRate": 10,
            "minimumUI": 0,
            "maximumUI": 150,
            "sizeLimits": {"minWidth": 12, "maxWidth": 60, "minHeight": 12, "maxHeight": 96},
            "allowedAddons": ["install_std", "grids", "grids_prairie", "lowe", "big_only"],
        },
        "prod_min": {
            "id": "prod_min",
            "productLineId": "line1",
            "productType": "Window",
            "productTypeCode": "PW",
            "name": "Picture Window",
            "pricingModel": "UI",
            "uiRate": 10,
            "minimumUI": 60,
            "allowedAddons": ["big_only"],
        },
        "prod_door": {
            "id": "prod_door",
            "productLineId": "line2",
            "productType": "Door",
            "productTypeCode": "ED",
            "name": "Entry Door",
            "pricingModel": "FLAT",
            "flatPrice": 1200,
            "allowedAddons": ["hardware"],
        },
    },
    "addons": {
        "install_std": {"id": "install_std", "name": "Installation", "pricingModel": "FLAT",
                        "flatPrice": 100, "mandatory": True, "hiddenFromCustomer": True},
        "grids": {"id": "grids", "name": "Colonial Grids", "pricingModel": "FLAT",
                  "flatPrice": 50, "exclusiveGroup": "glass"},
        "grids_prairie": {"id": "grids_prairie", "name": "Prairie Grids", "pricingModel": "FLAT",
                          "flatPrice": 75, "exclusiveGroup": "glass"},
        "lowe": {"id": "lowe", "name": "Low-E", "pricingModel": "UI", "uiRate": 1.5,
                 "allowedProductTypes": ["Window"]},
        "big_only": {"id": "big_only", "name": "Reinforcement", "pricingModel": "FLAT",
                     "flatPrice": 30, "minSize": 55},
        "hardware": {"id": "hardware", "name": "Brass Hardware", "pricingModel": "FLAT",
                     "flatPrice": 80, "allowedProductTypes": ["Door"]},
        "disposal": {"id": "disposal", "name": "Disposal", "pricingModel": "FLAT",
                     "flatPrice": 150, "isJobBased": True},
        "permit": {"id": "permit", "name": "Permit", "pricingModel": "UI",
                   "uiRate": 2, "isJobBased": True},
    },
}

@pytest.fixture
def sample_catalog_data() -> Dict[str, Any]:
    """Catalogue brut (clés camelCase), copie indépendante pour chaque test."""
    return copy.deepcopy(SAMPLE_CATALOG)

@pytest.fixture
def catalog(sample_catalog_data: Dict[str, Any]) -> CatalogData:
    return CatalogData.model_validate(sample_catalog_data)

# --- Fixtures Store / Services ---

@pytest_asyncio.fixture(scope="function")
async def store(catalog: CatalogData) -> CatalogStoreService:
    """Catalog Store en mémoire, initialisé et chargé avec le catalogue d'exemple."""
    service = CatalogStoreService(InMemoryKeyValueRepository())
    await service.initialize()
    await service.replace_catalog(catalog)
    return service

@pytest_asyncio.fixture(scope="function")
async def sql_store(db_session: AsyncSession, catalog: CatalogData) -> CatalogStoreService:
    """Catalog Store SQL (même session que test_client), chargé avec le catalogue d'exemple."""
    service = CatalogStoreService(SQLAlchemyKeyValueRepository(db_session))
    await service.initialize()
    await service.replace_catalog(catalog)
    return service

@pytest.fixture
def quote_service(store: CatalogStoreService) -> QuoteService:
    return QuoteService(store)
