import logging
from typing import NoReturn

from fastapi import HTTPException, status
from pydantic import ValidationError

from pricebook.forms.exceptions import InvalidFormValueException, UnknownFormKindException
from pricebook.pricing.exceptions import (
    ExclusiveGroupConflictException,
    InvalidConfigurationException,
    NegativeUpliftException,
    PriceFloorViolationException,
)
from pricebook.quotes.exceptions import (
    AddonNotFoundException,
    InvalidQuoteLineException,
    ProductNotFoundException,
    QuoteNotFoundException,
)
from pricebook.storage.exceptions import (
    EntityNotFoundException,
    InvalidBackupException,
    UnknownCollectionException,
)
from pricebook.versions.exceptions import InvalidVersionFormatException, PricingVersionNotFoundException

logger = logging.getLogger(__name__)

NOT_FOUND_ERRORS = (
    QuoteNotFoundException,
    ProductNotFoundException,
    AddonNotFoundException,
    EntityNotFoundException,
    PricingVersionNotFoundException,
    UnknownFormKindException,
)
BAD_REQUEST_ERRORS = (
    InvalidQuoteLineException,
    NegativeUpliftException,
    PriceFloorViolationException,
    InvalidVersionFormatException,
    InvalidBackupException,
    UnknownCollectionException,
    InvalidFormValueException,
)

# --- Helper Function for Error Handling ---
def handle_service_errors(e: Exception, scope: str) -> NoReturn:
    """Traduit une exception domaine en HTTPException (404/409/400/422, sinon 500)."""
    if isinstance(e, HTTPException):
        raise e
    if isinstance(e, NOT_FOUND_ERRORS):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ExclusiveGroupConflictException):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if isinstance(e, InvalidQuoteLineException):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail={"message": e.message, "errors": e.errors})
    if isinstance(e, BAD_REQUEST_ERRORS):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.errors(include_url=False, include_context=False))
    if isinstance(e, InvalidConfigurationException):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    logger.error(f"[{scope} API] Unexpected error: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne du serveur.")
