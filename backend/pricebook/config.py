import logging
from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Charger les variables d'environnement AVANT de définir la classe Settings
load_dotenv()

class Settings(BaseSettings):
    # --- Application ---
    APP_NAME: str = "Pricebook API"
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:4321", # Front Astro
        "http://127.0.0.1:4321",
    ]

    # --- Base de Données (Catalog Store) ---
    DATABASE_URL: str = "sqlite+aiosqlite:///./pricebook.db"
    DB_ECHO_LOG: bool = False

    # --- Paramètres globaux par défaut ---
    DEFAULT_MINIMUM_UI: int = 65
    DEFAULT_ALERTS_ENABLED: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = 'ignore' # Ignorer les variables d'env non définies dans le modèle

settings = Settings()

logger.info(f"Configuration chargée: DB={settings.DATABASE_URL}, préfixe API={settings.API_V1_PREFIX}")
