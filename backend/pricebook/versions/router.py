import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Body, Query, Response, status

from pricebook.catalog.models import CatalogData
from pricebook.core.errors import handle_service_errors
from pricebook.storage.dependencies import CatalogStoreServiceDep
from pricebook.versions import codec
from pricebook.versions.exceptions import PricingVersionNotFoundException
from pricebook.versions.models import (
    PricingVersion,
    PricingVersionSummary,
    PublishVersionRequest,
    VersionFileUpload,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/pricing-versions",
    tags=["Pricing Versions"]
)

@router.post("", response_model=PricingVersion, status_code=status.HTTP_201_CREATED,
             summary="Publier le catalogue courant comme nouvelle version de tarifs")
async def publish_version(store: CatalogStoreServiceDep,
                          request: Optional[PublishVersionRequest] = Body(None)):
    request = request or PublishVersionRequest()
    logger.info(f"[PricingVersion API] Publication (nom={request.name})")
    try:
        return await store.publish_pricing_version(notes=request.notes, name=request.name)
    except Exception as e:
        handle_service_errors(e, "PricingVersion")

@router.get("", response_model=List[PricingVersionSummary])
async def list_versions(store: CatalogStoreServiceDep):
    try:
        current_id = await store.get_current_version_id()
        return [
            PricingVersionSummary(
                id=v.id, name=v.name, timestamp=v.timestamp, notes=v.notes, is_current=v.id == current_id
            )
            for v in await store.get_pricing_versions()
        ]
    except Exception as e:
        handle_service_errors(e, "PricingVersion")

@router.post("/import", response_model=CatalogData, summary="Importer un fichier de version (JSON ou CSV)")
async def import_version(upload: VersionFileUpload, store: CatalogStoreServiceDep):
    """Décode le fichier et remplace le catalogue de travail par son contenu."""
    logger.info(f"[PricingVersion API] Import du fichier {upload.filename}")
    try:
        catalog = codec.import_version_file(upload.filename, upload.content)
        await store.replace_catalog(catalog)
        return catalog
    except Exception as e:
        handle_service_errors(e, "PricingVersion")

async def _load_or_404(store, version_id: str) -> PricingVersion:
    version = await store.load_pricing_version(version_id)
    if version is None:
        raise PricingVersionNotFoundException(version_id)
    return version

@router.get("/{version_id}", response_model=PricingVersion)
async def read_version(version_id: str, store: CatalogStoreServiceDep):
    try:
        return await _load_or_404(store, version_id)
    except Exception as e:
        handle_service_errors(e, "PricingVersion")

@router.get("/{version_id}/export", summary="Télécharger une version (JSON ou CSV)")
async def export_version(version_id: str, store: CatalogStoreServiceDep,
                         format: Literal["json", "csv"] = Query("json")):
    logger.info(f"[PricingVersion API] Export {version_id} au format {format}")
    try:
        version = await _load_or_404(store, version_id)
        exported = codec.export_as_csv(version) if format == "csv" else codec.export_as_json(version)
    except Exception as e:
        handle_service_errors(e, "PricingVersion")
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )

@router.post("/{version_id}/restore", response_model=PricingVersion,
             summary="Restaurer une version dans le catalogue de travail")
async def restore_version(version_id: str, store: CatalogStoreServiceDep):
    logger.info(f"[PricingVersion API] Restauration {version_id}")
    try:
        return await store.restore_pricing_version(version_id)
    except Exception as e:
        handle_service_errors(e, "PricingVersion")
