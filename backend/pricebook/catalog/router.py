import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Path, Response, status

from pricebook.catalog.models import CatalogData
from pricebook.core.errors import handle_service_errors
from pricebook.core.schemas import dump_camel
from pricebook.forms.schemas import describe_form, get_form_schema, parse_form_values
from pricebook.storage.dependencies import CatalogStoreServiceDep
from pricebook.storage.exceptions import EntityNotFoundException
from pricebook.storage.models import GlobalSettings, GlobalSettingsUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/catalog",
    tags=["Catalog"]
)

# --- Catalogue de travail ---

@router.get("", response_model=CatalogData, summary="Catalogue de travail complet")
async def read_catalog(store: CatalogStoreServiceDep):
    logger.info("[Catalog API] Lecture du catalogue")
    try:
        return await store.get_catalog()
    except Exception as e:
        handle_service_errors(e, "Catalog")

# --- Paramètres globaux ---

@router.get("/settings", response_model=GlobalSettings)
async def read_settings(store: CatalogStoreServiceDep):
    try:
        return await store.get_global_settings()
    except Exception as e:
        handle_service_errors(e, "Catalog")

@router.patch("/settings", response_model=GlobalSettings)
async def update_settings(store: CatalogStoreServiceDep, updates: GlobalSettingsUpdate):
    """Mise à jour partielle des paramètres globaux (seuls les champs fournis sont fusionnés)."""
    logger.info("[Catalog API] Mise à jour des paramètres globaux")
    try:
        return await store.update_global_settings(updates.model_dump(by_alias=True, exclude_unset=True))
    except Exception as e:
        handle_service_errors(e, "Catalog")

# --- Sauvegarde complète ---

@router.get("/backup", summary="Exporter toutes les données du store")
async def export_backup(store: CatalogStoreServiceDep) -> Dict[str, Any]:
    logger.info("[Catalog API] Export de la sauvegarde complète")
    try:
        return await store.export_all()
    except Exception as e:
        handle_service_errors(e, "Catalog")

@router.post("/backup", status_code=status.HTTP_204_NO_CONTENT, summary="Importer une sauvegarde")
async def import_backup(store: CatalogStoreServiceDep, bundle: Dict[str, Any] = Body(...)):
    logger.info(f"[Catalog API] Import d'une sauvegarde: sections {sorted(bundle)}")
    try:
        await store.import_all(bundle)
    except Exception as e:
        handle_service_errors(e, "Catalog")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# --- Formulaires d'administration ---

async def _form_item(store, kind: str, entity_id: Optional[str]) -> tuple:
    """Retourne (item camelCase, contexte) pour un formulaire d'édition."""
    collection = get_form_schema(kind).collection
    if entity_id is None:
        return {}, {}
    catalog = dump_camel(await store.get_catalog())
    item = catalog.get(collection, {}).get(entity_id)
    if item is None:
        raise EntityNotFoundException(collection, entity_id)
    context = {}
    if kind == "prod":
        line = catalog.get("productLines", {}).get(item.get("productLineId"))
        context["productLineName"] = line.get("name") if line else None
    return item, context

@router.get("/forms/{kind}", summary="Descripteur d'un formulaire vide")
async def read_form(kind: str, store: CatalogStoreServiceDep) -> Dict[str, Any]:
    try:
        item, context = await _form_item(store, kind, None)
        return describe_form(kind, item, context)
    except Exception as e:
        handle_service_errors(e, "Catalog")

@router.get("/forms/{kind}/{entity_id}", summary="Descripteur d'un formulaire avec les valeurs d'une entité")
async def read_entity_form(kind: str, entity_id: str, store: CatalogStoreServiceDep) -> Dict[str, Any]:
    try:
        item, context = await _form_item(store, kind, entity_id)
        return describe_form(kind, item, context)
    except Exception as e:
        handle_service_errors(e, "Catalog")

@router.post("/forms/{kind}/{entity_id}", summary="Soumettre un formulaire d'édition")
async def submit_entity_form(kind: str, entity_id: str, store: CatalogStoreServiceDep,
                             form: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Convertit les valeurs saisies et les fusionne sur l'entité existante (ou en crée une)."""
    logger.info(f"[Catalog API] Soumission formulaire {kind}/{entity_id}")
    try:
        schema = get_form_schema(kind)
        catalog = dump_camel(await store.get_catalog())
        current = catalog.get(schema.collection, {}).get(entity_id, {})
        payload = {**current, **parse_form_values(kind, form), "id": entity_id}
        saved = await store.save_entity(schema.collection, payload)
        return dump_camel(saved)
    except Exception as e:
        handle_service_errors(e, "Catalog")

# --- Édition des entités ---

@router.put("/{collection}/{entity_id}", summary="Créer ou remplacer une entité du catalogue")
async def upsert_entity(
    store: CatalogStoreServiceDep,
    collection: str = Path(..., description="manufacturers, productLines, products ou addons"),
    entity_id: str = Path(...),
    entity: Dict[str, Any] = Body(...),
) -> Dict[str, Any]:
    logger.info(f"[Catalog API] Enregistrement {collection}/{entity_id}")
    try:
        saved = await store.save_entity(collection, {**entity, "id": entity_id})
        return dump_camel(saved)
    except Exception as e:
        handle_service_errors(e, "Catalog")

@router.delete("/{collection}/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entity(collection: str, entity_id: str, store: CatalogStoreServiceDep):
    logger.info(f"[Catalog API] Suppression {collection}/{entity_id}")
    try:
        await store.delete_entity(collection, entity_id)
    except Exception as e:
        handle_service_errors(e, "Catalog")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
