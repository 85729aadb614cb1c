"""
Module principal de l'application FastAPI Pricebook.

Ce module configure l'instance FastAPI, ajoute le middleware CORS, prépare le
Catalog Store au démarrage et inclut les routeurs de l'API (catalogue,
tarification, devis, versions de tarifs).
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pricebook.config import settings
from pricebook.database import AsyncSessionLocal, create_tables
from pricebook.storage.repositories import SQLAlchemyKeyValueRepository
from pricebook.storage.service import CatalogStoreService

# --- Importer les routeurs ---
from pricebook.catalog.router import router as catalog_router
from pricebook.pricing.router import router as pricing_router
from pricebook.quotes.router import router as quote_router
from pricebook.versions.router import router as pricing_version_router

# Configurer le logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Crée les tables et initialise un store vide au démarrage."""
    await create_tables()
    async with AsyncSessionLocal() as session:
        await CatalogStoreService(SQLAlchemyKeyValueRepository(session)).initialize()
    logger.info(f"{settings.APP_NAME} démarrée.")
    yield

app = FastAPI(
    title=settings.APP_NAME,
    description="API de tarification fenêtres et portes : catalogue, devis versionnés et versions de tarifs.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# ======================================================
# Inclure les routeurs
# ======================================================
app.include_router(catalog_router, prefix=settings.API_V1_PREFIX)
app.include_router(pricing_router, prefix=settings.API_V1_PREFIX)
app.include_router(quote_router, prefix=settings.API_V1_PREFIX)
app.include_router(pricing_version_router, prefix=settings.API_V1_PREFIX)
