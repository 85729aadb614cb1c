import logging
from typing import List

from fastapi import APIRouter, Path, status

from pricebook.core.errors import handle_service_errors
from pricebook.pricing.models import QuoteVersion
from pricebook.quotes.dependencies import QuoteServiceDep
from pricebook.quotes.models import Quote, QuotePricing, QuoteUpsert

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/quotes",
    tags=["Quotes"]
)

# --- Endpoints pour les Devis ---

@router.put("/{quote_id}", response_model=Quote, summary="Enregistrer l'état de travail d'un devis")
async def upsert_quote(
    quote_service: QuoteServiceDep,
    payload: QuoteUpsert,
    quote_id: str = Path(..., title="ID du devis"),
):
    logger.info(f"API upsert_quote: ID={quote_id}")
    try:
        return await quote_service.save_quote(Quote(id=quote_id, **payload.model_dump()))
    except Exception as e:
        handle_service_errors(e, "Quote")

@router.get("/{quote_id}", response_model=Quote)
async def read_quote(quote_service: QuoteServiceDep, quote_id: str = Path(..., title="ID du devis")):
    logger.info(f"API read_quote: ID={quote_id}")
    try:
        return await quote_service.get_quote(quote_id)
    except Exception as e:
        handle_service_errors(e, "Quote")

@router.post("/{quote_id}/price", response_model=QuotePricing,
             summary="Tarifer le devis enregistré sur le catalogue courant")
async def price_quote(quote_service: QuoteServiceDep, quote_id: str = Path(..., title="ID du devis")):
    logger.info(f"API price_quote: ID={quote_id}")
    try:
        quote = await quote_service.get_quote(quote_id)
        return await quote_service.price_quote(quote)
    except Exception as e:
        handle_service_errors(e, "Quote")

# --- Versions verrouillées ---

@router.post("/{quote_id}/versions", response_model=QuoteVersion, status_code=status.HTTP_201_CREATED)
async def create_quote_version(quote_service: QuoteServiceDep, quote_id: str = Path(..., title="ID du devis")):
    """Fige le devis dans une version verrouillée (les versions existantes ne changent jamais)."""
    logger.info(f"API create_quote_version: ID={quote_id}")
    try:
        return await quote_service.create_version(quote_id)
    except Exception as e:
        handle_service_errors(e, "Quote")

@router.get("/{quote_id}/versions", response_model=List[QuoteVersion])
async def list_quote_versions(quote_service: QuoteServiceDep, quote_id: str = Path(..., title="ID du devis")):
    try:
        return await quote_service.list_versions(quote_id)
    except Exception as e:
        handle_service_errors(e, "Quote")
