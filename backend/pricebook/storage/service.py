import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from pricebook.catalog.models import CATALOG_COLLECTIONS, CatalogData
from pricebook.core.schemas import dump_camel
from pricebook.pricing.models import QuoteVersion
from pricebook.quotes.models import Quote
from pricebook.storage import constants as keys
from pricebook.storage.exceptions import (
    EntityNotFoundException,
    InvalidBackupException,
    UnknownCollectionException,
)
from pricebook.storage.interfaces.repositories import AbstractKeyValueRepository
from pricebook.storage.models import GlobalSettings
from pricebook.versions.exceptions import PricingVersionNotFoundException
from pricebook.versions.models import PricingVersion

logger = logging.getLogger(__name__)

def repair_product_lines(products: Mapping[str, Any], product_lines: Mapping[str, Any]) -> Dict[str, Any]:
    """Rattache chaque produit à une gamme lors d'un import de sauvegarde.

    Un ancien champ ``lineId`` est repris en ``productLineId`` ; à défaut, la
    première gamme disponible est utilisée. Réparation au mieux, jamais un rejet.
    Retourne de nouveaux dicts, l'entrée n'est pas modifiée.
    """
    first_line_id = next(iter(product_lines), None)
    repaired = {}
    for key, product in products.items():
        if not isinstance(product, Mapping):
            repaired[key] = product
            continue
        product = dict(product)
        if not product.get("productLineId") and product.get("lineId"):
            product["productLineId"] = product["lineId"]
        if not product.get("productLineId") and first_line_id:
            logger.warning(f"[CatalogStore] Produit {key} sans gamme, rattaché à {first_line_id}.")
            product["productLineId"] = first_line_id
        repaired[key] = product
    return repaired

def _check_backup_sections(data: Mapping[str, Any]) -> None:
    for key, expected in keys.BACKUP_SECTION_TYPES.items():
        if key in data and not isinstance(data[key], expected):
            raise InvalidBackupException(
                f"Section '{key}' invalide: {expected.__name__} attendu, {type(data[key]).__name__} reçu."
            )

class CatalogStoreService:
    """Service applicatif du Catalog Store : catalogue, devis, versions et paramètres."""

    def __init__(self, kv_repo: AbstractKeyValueRepository):
        self.kv_repo = kv_repo

    # --- Initialisation et paramètres globaux ---

    async def initialize(self) -> None:
        """Crée les structures vides et les paramètres par défaut si le store est vide."""
        if await self.kv_repo.get(keys.MANUFACTURERS) is not None:
            return
        logger.info("[CatalogStore] Initialisation d'un store vide.")
        for key in (*keys.CATALOG_KEYS, keys.QUOTES, keys.QUOTE_VERSIONS):
            await self.kv_repo.set(key, {})
        await self.kv_repo.set(keys.GLOBAL_SETTINGS, dump_camel(GlobalSettings()))

    async def get_global_settings(self) -> GlobalSettings:
        raw = await self.kv_repo.get(keys.GLOBAL_SETTINGS)
        return GlobalSettings.model_validate(raw) if raw else GlobalSettings()

    async def update_global_settings(self, updates: Mapping[str, Any]) -> GlobalSettings:
        """Fusionne une mise à jour partielle (clés camelCase) dans les paramètres courants."""
        current = await self.get_global_settings()
        merged = GlobalSettings.model_validate({**dump_camel(current), **updates})
        await self.kv_repo.set(keys.GLOBAL_SETTINGS, dump_camel(merged))
        logger.info(f"[CatalogStore] Paramètres globaux mis à jour: {list(updates)}")
        return merged

    # --- Catalogue courant ---

    async def get_catalog(self) -> CatalogData:
        return CatalogData.model_validate({
            key: await self.kv_repo.get(key, {}) for key in keys.CATALOG_KEYS
        })

    async def replace_catalog(self, catalog: CatalogData) -> None:
        """Remplace les quatre collections du catalogue de travail."""
        raw = dump_camel(catalog)
        for key in keys.CATALOG_KEYS:
            await self.kv_repo.set(key, raw.get(key, {}))
        logger.info(
            f"[CatalogStore] Catalogue remplacé ({len(catalog.products)} produits, {len(catalog.addons)} options)."
        )

    def _model_for(self, collection: str) -> type:
        model = CATALOG_COLLECTIONS.get(collection)
        if model is None:
            raise UnknownCollectionException(collection)
        return model

    async def save_entity(self, collection: str, entity: Union[BaseModel, Mapping[str, Any]]) -> BaseModel:
        """Crée ou remplace une entité du catalogue (édition admin)."""
        model = self._model_for(collection)
        if isinstance(entity, BaseModel):
            entity = dump_camel(entity)
        validated = model.model_validate(entity)

        raw = await self.kv_repo.get(collection, {})
        raw[validated.id] = dump_camel(validated)
        await self.kv_repo.set(collection, raw)
        logger.info(f"[CatalogStore] {collection}/{validated.id} enregistré.")
        return validated

    async def delete_entity(self, collection: str, entity_id: str) -> None:
        self._model_for(collection)
        raw = await self.kv_repo.get(collection, {})
        if entity_id not in raw:
            raise EntityNotFoundException(collection, entity_id)
        del raw[entity_id]
        await self.kv_repo.set(collection, raw)
        logger.info(f"[CatalogStore] {collection}/{entity_id} supprimé.")

    # --- Devis de travail ---

    async def save_quote(self, quote: Quote) -> Quote:
        quote = quote.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        quotes = await self.kv_repo.get(keys.QUOTES, {})
        quotes[quote.id] = dump_camel(quote)
        await self.kv_repo.set(keys.QUOTES, quotes)
        logger.info(f"[CatalogStore] Devis {quote.id} enregistré ({len(quote.line_items)} lignes).")
        return quote

    async def get_quote(self, quote_id: str) -> Optional[Quote]:
        raw = (await self.kv_repo.get(keys.QUOTES, {})).get(quote_id)
        return Quote.model_validate(raw) if raw else None

    async def list_quotes(self) -> List[Quote]:
        return [Quote.model_validate(q) for q in (await self.kv_repo.get(keys.QUOTES, {})).values()]

    # --- Versions de devis (historique verrouillé) ---

    async def save_quote_version(self, version: QuoteVersion) -> None:
        """Ajoute une version à l'historique du devis. Les versions ne sont jamais supprimées ici."""
        versions = await self.kv_repo.get(keys.QUOTE_VERSIONS, {})
        versions.setdefault(version.quote_id, []).append(dump_camel(version))
        await self.kv_repo.set(keys.QUOTE_VERSIONS, versions)
        logger.info(f"[CatalogStore] Version {version.id} ajoutée au devis {version.quote_id}.")

    async def get_quote_versions(self, quote_id: str) -> List[QuoteVersion]:
        versions = await self.kv_repo.get(keys.QUOTE_VERSIONS, {})
        return [QuoteVersion.model_validate(v) for v in versions.get(quote_id, [])]

    # --- Versions de tarifs ---

    async def publish_pricing_version(self, notes: str = "", name: Optional[str] = None) -> PricingVersion:
        """Publie un instantané du catalogue courant et en fait la version courante."""
        catalog = await self.get_catalog()
        versions = await self.kv_repo.get(keys.PRICING_VERSIONS, [])
        existing_ids = {v.get("id") for v in versions}

        millis = int(time.time() * 1000)
        while f"pricing_v{millis}" in existing_ids:
            millis += 1

        version = PricingVersion(
            id=f"pricing_v{millis}",
            name=name,
            timestamp=datetime.now(timezone.utc),
            notes=notes,
            manufacturers=catalog.manufacturers,
            product_lines=catalog.product_lines,
            products=catalog.products,
            addons=catalog.addons,
        )
        versions.append(dump_camel(version))
        await self.kv_repo.set(keys.PRICING_VERSIONS, versions)
        await self.kv_repo.set(keys.CURRENT_VERSION_ID, version.id)
        logger.info(f"[CatalogStore] Version de tarifs {version.id} publiée.")
        return version

    async def get_pricing_versions(self) -> List[PricingVersion]:
        return [PricingVersion.model_validate(v) for v in await self.kv_repo.get(keys.PRICING_VERSIONS, [])]

    async def load_pricing_version(self, version_id: str) -> Optional[PricingVersion]:
        for raw in await self.kv_repo.get(keys.PRICING_VERSIONS, []):
            if raw.get("id") == version_id:
                return PricingVersion.model_validate(raw)
        return None

    async def get_current_version_id(self) -> Optional[str]:
        return await self.kv_repo.get(keys.CURRENT_VERSION_ID)

    async def restore_pricing_version(self, version_id: str) -> PricingVersion:
        """Recopie une version publiée dans le catalogue de travail (la version reste intacte)."""
        version = await self.load_pricing_version(version_id)
        if version is None:
            raise PricingVersionNotFoundException(version_id)
        await self.replace_catalog(CatalogData(
            manufacturers=version.manufacturers,
            product_lines=version.product_lines,
            products=version.products,
            addons=version.addons,
        ))
        await self.kv_repo.set(keys.CURRENT_VERSION_ID, version.id)
        logger.info(f"[CatalogStore] Catalogue restauré depuis {version_id}.")
        return version

    # --- Sauvegarde complète ---

    async def export_all(self) -> Dict[str, Any]:
        """Exporte toutes les données du store (sauvegarde / migration)."""
        backup = {key: await self.kv_repo.get(key, {}) for key in keys.CATALOG_KEYS}
        backup[keys.QUOTES] = await self.kv_repo.get(keys.QUOTES, {})
        backup[keys.QUOTE_VERSIONS] = await self.kv_repo.get(keys.QUOTE_VERSIONS, {})
        backup[keys.PRICING_VERSIONS] = await self.kv_repo.get(keys.PRICING_VERSIONS, [])
        backup[keys.CURRENT_VERSION_ID] = await self.kv_repo.get(keys.CURRENT_VERSION_ID)
        backup[keys.GLOBAL_SETTINGS] = dump_camel(await self.get_global_settings())
        return backup

    async def import_all(self, data: Mapping[str, Any]) -> None:
        """Restaure une sauvegarde. Chaque section présente est écrite, même vide.

        Raises:
            InvalidBackupException: section de mauvaise forme ou entité du catalogue invalide.
        """
        data = {key: value for key, value in dict(data).items() if value is not None}
        _check_backup_sections(data)

        if keys.PRODUCTS in data:
            if keys.PRODUCT_LINES in data:
                product_lines = data[keys.PRODUCT_LINES]
            else:
                product_lines = await self.kv_repo.get(keys.PRODUCT_LINES, {})
            data[keys.PRODUCTS] = repair_product_lines(data[keys.PRODUCTS], product_lines)

        try:
            catalog = CatalogData.model_validate({
                key: data.get(key, {}) for key in keys.CATALOG_KEYS
            })
        except ValidationError as e:
            raise InvalidBackupException(f"Entité de catalogue invalide: {e}")
        catalog_raw = dump_camel(catalog)

        written = [key for key in keys.BACKUP_KEYS if key in data]
        for key in written:
            value = catalog_raw[key] if key in keys.CATALOG_KEYS else data[key]
            await self.kv_repo.set(key, value)
        logger.info(f"[CatalogStore] Sauvegarde importée: {written}")
