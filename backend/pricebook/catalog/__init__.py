"""
Module Catalog - Modèle du catalogue fabricant
"""

from pricebook.catalog.models import (
    Manufacturer, ProductLine, Product, Addon, SizeLimits, CatalogData,
    CATALOG_COLLECTIONS, PRICING_MODEL_UI, PRICING_MODEL_FLAT, PRICING_MODELS
)

__all__ = [
    "Manufacturer", "ProductLine", "Product", "Addon", "SizeLimits", "CatalogData",
    "CATALOG_COLLECTIONS", "PRICING_MODEL_UI", "PRICING_MODEL_FLAT", "PRICING_MODELS"
]
