from abc import ABC, abstractmethod
from typing import Any, List, Optional

class AbstractKeyValueRepository(ABC):
    """Interface abstraite du Catalog Store : des valeurs JSON indexées par clé logique."""

    @abstractmethod
    async def get(self, key: str, default: Optional[Any] = None) -> Any:
        """Retourne une copie de la valeur stockée, ou ``default`` si la clé est absente."""
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Remplace la valeur associée à la clé."""
        raise NotImplementedError

    @abstractmethod
    async def keys(self) -> List[str]:
        """Liste les clés présentes."""
        raise NotImplementedError
