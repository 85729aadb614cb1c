import logging
from typing import List

from pricebook.catalog.models import CatalogData
from pricebook.pricing import engine
from pricebook.pricing.models import QuoteVersion
from pricebook.quotes.exceptions import (
    AddonNotFoundException,
    InvalidQuoteLineException,
    ProductNotFoundException,
    QuoteNotFoundException,
)
from pricebook.quotes.models import PricedLine, Quote, QuotePricing
from pricebook.storage.service import CatalogStoreService

logger = logging.getLogger(__name__)

class QuoteService:
    """Service applicatif des devis : tarification sur le catalogue courant et versions verrouillées."""

    def __init__(self, store: CatalogStoreService):
        self.store = store

    async def save_quote(self, quote: Quote) -> Quote:
        logger.info(f"[QuoteService] Enregistrement devis {quote.id}")
        return await self.store.save_quote(quote)

    async def get_quote(self, quote_id: str) -> Quote:
        logger.debug(f"[QuoteService] Récupération devis ID: {quote_id}")
        quote = await self.store.get_quote(quote_id)
        if quote is None:
            logger.warning(f"[QuoteService] Devis ID {quote_id} non trouvé.")
            raise QuoteNotFoundException(quote_id)
        return quote

    def _price_with_catalog(self, quote: Quote, catalog: CatalogData) -> QuotePricing:
        lines: List[PricedLine] = []
        for index, line in enumerate(quote.line_items):
            product = catalog.products.get(line.product_id)
            if product is None:
                raise ProductNotFoundException(line.product_id)

            raw_ui = engine.calculate_ui(line.width, line.height)
            warnings: List[str] = []
            ui_errors = engine.validate_ui(product, raw_ui).errors
            if product.minimum_ui and raw_ui < product.minimum_ui:
                # Sous le minimum : la ligne est facturée au minimum
                warnings, ui_errors = ui_errors[:1], ui_errors[1:]

            errors = engine.validate_size(product, line.width, line.height).errors + ui_errors
            if errors:
                logger.warning(f"[QuoteService] Devis {quote.id}, ligne {index + 1} rejetée: {errors}")
                raise InvalidQuoteLineException(index, errors)

            line_item = engine.calculate_line_item(
                product, line.width, line.height, line.selected_addon_ids, catalog.addons
            )
            lines.append(PricedLine(
                product_id=product.id,
                product_name=product.name,
                location=line.location,
                width=line.width,
                height=line.height,
                square_footage=engine.calculate_square_footage(line.width, line.height),
                line_item=line_item,
                warnings=warnings,
            ))

        total_ui = sum(priced.line_item.ui for priced in lines)
        job_addons = []
        for addon_id in quote.job_addon_ids:
            addon = catalog.addons.get(addon_id)
            if addon is None or not addon.is_job_based:
                raise AddonNotFoundException(addon_id)
            job_addons.append(engine.calculate_job_based_addon(addon, total_ui))

        totals = engine.calculate_quote(
            [priced.line_item for priced in lines],
            job_based_addons=job_addons,
            sales_uplift=quote.sales_uplift,
        )
        return QuotePricing(quote_id=quote.id, lines=lines, totals=totals)

    async def price_quote(self, quote: Quote) -> QuotePricing:
        """Tarifie l'état de travail d'un devis sur le catalogue courant (sans rien enregistrer)."""
        logger.debug(f"[QuoteService] Tarification devis {quote.id} ({len(quote.line_items)} lignes)")
        catalog = await self.store.get_catalog()
        return self._price_with_catalog(quote, catalog)

    async def create_version(self, quote_id: str) -> QuoteVersion:
        """Fige le devis enregistré dans une nouvelle version verrouillée."""
        quote = await self.get_quote(quote_id)
        catalog = await self.store.get_catalog()
        pricing = self._price_with_catalog(quote, catalog)

        version = engine.create_quote_version(
            quote.id,
            [priced.line_item for priced in pricing.lines],
            sales_uplift=quote.sales_uplift,
            metadata={
                "pricingVersionId": await self.store.get_current_version_id(),
                "customerName": quote.customer_name,
                "notes": quote.notes,
            },
            job_based_addons=pricing.totals.job_based_addons,
        )
        await self.store.save_quote_version(version)
        logger.info(f"[QuoteService] Version {version.id} créée pour devis {quote_id} (prix final {version.final_price}).")
        return version

    async def list_versions(self, quote_id: str) -> List[QuoteVersion]:
        logger.debug(f"[QuoteService] Listage versions devis {quote_id}")
        return await self.store.get_quote_versions(quote_id)
