from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field as PydanticField
from sqlalchemy import JSON # pour sa_type
from sqlmodel import SQLModel, Field

from pricebook.config import settings
from pricebook.core.schemas import CamelModel

# --- Table clé/valeur ---

class KeyValueEntry(SQLModel, table=True):
    """Modèle de table : une clé logique du store et sa valeur JSON."""
    key: str = Field(primary_key=True, max_length=100)
    value: Any = Field(default=None, sa_type=JSON)
    updated_at: Optional[datetime] = Field(default=None)

    __tablename__ = "kv_entries"

# --- Paramètres globaux ---

class GlobalSettings(CamelModel):
    minimum_ui: int = PydanticField(default_factory=lambda: settings.DEFAULT_MINIMUM_UI, alias="minimumUI")
    alerts_enabled: bool = PydanticField(default_factory=lambda: settings.DEFAULT_ALERTS_ENABLED)
    rules: List[Any] = PydanticField(default_factory=list)

class GlobalSettingsUpdate(CamelModel):
    """Schéma pour une mise à jour partielle des paramètres globaux."""
    minimum_ui: Optional[int] = PydanticField(None, alias="minimumUI")
    alerts_enabled: Optional[bool] = None
    rules: Optional[List[Any]] = None
