import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pricebook.database import get_db_session
from pricebook.storage.interfaces.repositories import AbstractKeyValueRepository
from pricebook.storage.repositories import SQLAlchemyKeyValueRepository
from pricebook.storage.service import CatalogStoreService

logger = logging.getLogger(__name__)

# --- Dependency Getters --- #

SessionDep = Annotated[AsyncSession, Depends(get_db_session)]

def get_kv_repository(session: SessionDep) -> AbstractKeyValueRepository:
    """Fournit le store clé/valeur SQLAlchemy lié à la session de la requête."""
    logger.debug("Providing SQLAlchemyKeyValueRepository")
    return SQLAlchemyKeyValueRepository(db_session=session)

KeyValueRepositoryDep = Annotated[AbstractKeyValueRepository, Depends(get_kv_repository)]

def get_catalog_store(kv_repo: KeyValueRepositoryDep) -> CatalogStoreService:
    logger.debug("Providing CatalogStoreService")
    return CatalogStoreService(kv_repo=kv_repo)

CatalogStoreServiceDep = Annotated[CatalogStoreService, Depends(get_catalog_store)]
