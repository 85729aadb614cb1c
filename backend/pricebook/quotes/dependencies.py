import logging
from typing import Annotated

from fastapi import Depends

from pricebook.quotes.service import QuoteService
from pricebook.storage.dependencies import CatalogStoreServiceDep

logger = logging.getLogger(__name__)

def get_quote_service(store: CatalogStoreServiceDep) -> QuoteService:
    """Fournit une instance de QuoteService adossée au Catalog Store."""
    logger.debug("Providing QuoteService")
    return QuoteService(store=store)

QuoteServiceDep = Annotated[QuoteService, Depends(get_quote_service)]
