import logging

from fastapi import APIRouter, Query

from pricebook.core.errors import handle_service_errors
from pricebook.pricing import engine
from pricebook.pricing.models import AvailableAddons, LineItem, LineItemRequest
from pricebook.storage.dependencies import CatalogStoreServiceDep
from pricebook.storage.exceptions import EntityNotFoundException

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/pricing",
    tags=["Pricing"]
)

@router.post("/line-items", response_model=LineItem, summary="Calculer le prix plancher d'une ligne")
async def price_line_item(request: LineItemRequest, store: CatalogStoreServiceDep):
    logger.info(f"[Pricing API] Calcul ligne produit {request.product_id} ({request.width}x{request.height})")
    try:
        catalog = await store.get_catalog()
        product = catalog.products.get(request.product_id)
        if product is None:
            raise EntityNotFoundException("products", request.product_id)
        return engine.calculate_line_item(
            product, request.width, request.height, request.selected_addon_ids, catalog.addons
        )
    except Exception as e:
        handle_service_errors(e, "Pricing")

@router.get("/products/{product_id}/addons", response_model=AvailableAddons,
            summary="Options autorisées pour un produit à une taille donnée")
async def read_available_addons(
    product_id: str,
    store: CatalogStoreServiceDep,
    width: float = Query(..., gt=0),
    height: float = Query(..., gt=0),
):
    try:
        catalog = await store.get_catalog()
        product = catalog.products.get(product_id)
        if product is None:
            raise EntityNotFoundException("products", product_id)
        ui = engine.calculate_ui(width, height)
        return AvailableAddons(
            product_id=product_id,
            ui=ui,
            addon_ids=engine.get_available_addons_for_product(product, ui, catalog.addons),
        )
    except Exception as e:
        handle_service_errors(e, "Pricing")
