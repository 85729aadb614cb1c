import copy
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from pricebook.storage.exceptions import StorageWriteException
from pricebook.storage.interfaces.repositories import AbstractKeyValueRepository
from pricebook.storage.models import KeyValueEntry

logger = logging.getLogger(__name__)

class SQLAlchemyKeyValueRepository(AbstractKeyValueRepository):
    """Implémentation SQLAlchemy du store clé/valeur (une ligne par clé logique)."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get(self, key: str, default: Optional[Any] = None) -> Any:
        entry = await self.db.get(KeyValueEntry, key)
        if entry is None:
            return default
        # Copie pour ne jamais exposer l'objet suivi par la session
        return copy.deepcopy(entry.value)

    async def set(self, key: str, value: Any) -> None:
        try:
            entry = await self.db.get(KeyValueEntry, key)
            now = datetime.now(timezone.utc)
            if entry is None:
                self.db.add(KeyValueEntry(key=key, value=copy.deepcopy(value), updated_at=now))
            else:
                entry.value = copy.deepcopy(value)
                entry.updated_at = now
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Erreur DB écriture clé '{key}': {e}", exc_info=True)
            raise StorageWriteException(key=key, detail=str(e))

    async def keys(self) -> List[str]:
        result = await self.db.execute(select(KeyValueEntry.key))
        return list(result.scalars().all())

class InMemoryKeyValueRepository(AbstractKeyValueRepository):
    """Store en mémoire (tests, scripts). Copie à la lecture et à l'écriture."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial or {})

    async def get(self, key: str, default: Optional[Any] = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def keys(self) -> List[str]:
        return list(self._data)
