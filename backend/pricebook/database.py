import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
# Importer SQLModel pour utiliser ses métadonnées
from sqlmodel import SQLModel

from pricebook.config import settings

logger = logging.getLogger(__name__)

# Créer le moteur de base de données asynchrone (aucune connexion n'est ouverte ici)
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO_LOG,
    future=True # Utilise l'API 2.0 de SQLAlchemy
)

# Créer une classe de session asynchrone
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False # Empêche les objets d'expirer après commit
)

logger.info("Moteur et Session Factory SQLAlchemy Async configurés.")

async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dépendance FastAPI fournissant une session de base de données asynchrone."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            # Les commits sont gérés par les repositories
        except Exception as e:
            logger.error(f"Erreur durant la session DB, rollback: {e}", exc_info=True)
            await session.rollback()
            raise
        finally:
            await session.close()
            logger.debug("Session DB fermée.")

async def create_tables():
    """Crée toutes les tables définies via SQLModel."""
    # Import nécessaire pour enregistrer la table dans les métadonnées
    from pricebook.storage import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

async def drop_tables():
    """Supprime toutes les tables définies via SQLModel."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
