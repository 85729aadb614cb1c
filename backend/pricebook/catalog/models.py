"""
Modèles du catalogue fabricant : fabricants, gammes, produits et options (addons).

Toutes les entités sont des données simples, détenues par le Catalog Store et
référencées entre elles par identifiant (jamais par objet).
"""
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from pricebook.core.schemas import CamelModel

# Modèles de tarification acceptés
PRICING_MODEL_UI = "UI"
PRICING_MODEL_FLAT = "FLAT"
PRICING_MODELS = (PRICING_MODEL_UI, PRICING_MODEL_FLAT)

class CatalogEntity(CamelModel):
    """Base des entités du catalogue. Les clés inconnues (champs hérités) sont conservées."""
    model_config = ConfigDict(extra="allow")

    id: str

class Manufacturer(CatalogEntity):
    name: str = ""

class ProductLine(CatalogEntity):
    manufacturer_id: Optional[str] = None
    name: str = ""

class SizeLimits(CamelModel):
    """Limites de dimensions (en pouces). Une limite absente ne contraint rien."""
    min_width: Optional[float] = None
    max_width: Optional[float] = None
    min_height: Optional[float] = None
    max_height: Optional[float] = None

class Product(CatalogEntity):
    """Produit tarifé soit à l'UI (``uiRate``), soit au forfait (``flatPrice``).

    ``productType`` et ``productLineId`` sont immuables après création, ce que
    l'interface d'administration garantit ; le moteur ne le revérifie pas.
    """
    product_line_id: Optional[str] = None
    product_type: Optional[str] = None
    product_type_code: Optional[str] = None
    name: str = ""
    pricing_model: str = PRICING_MODEL_UI
    ui_rate: Optional[float] = None
    flat_price: Optional[float] = None
    minimum_ui: int = Field(0, ge=0, alias="minimumUI")
    maximum_ui: Optional[int] = Field(None, alias="maximumUI") # None = illimité
    size_limits: Optional[SizeLimits] = None
    allowed_addons: List[str] = Field(default_factory=list)

    def legacy_field(self, key: str) -> Optional[Any]:
        """Lit un champ hérité conservé dans les extras (``type``, ``productLine``, ``lineId``)."""
        return (self.model_extra or {}).get(key)

class Addon(CatalogEntity):
    """Option applicable à une ligne de devis.

    ``minSize``/``maxSize`` sont comparés à l'UI de la ligne, pas à une surface.
    """
    name: str = ""
    pricing_model: str = PRICING_MODEL_FLAT
    ui_rate: Optional[float] = None
    flat_price: Optional[float] = None
    exclusive_group: Optional[str] = None
    mandatory: bool = False
    hidden_from_customer: bool = False
    is_job_based: bool = False
    allowed_product_types: Optional[List[str]] = None # vide/absent = sans restriction
    allowed_product_lines: Optional[List[str]] = None
    min_size: Optional[float] = None
    max_size: Optional[float] = None

class CatalogData(CamelModel):
    """Les quatre collections du catalogue, indexées par identifiant (ordre d'insertion)."""
    manufacturers: Dict[str, Manufacturer] = Field(default_factory=dict)
    product_lines: Dict[str, ProductLine] = Field(default_factory=dict)
    products: Dict[str, Product] = Field(default_factory=dict)
    addons: Dict[str, Addon] = Field(default_factory=dict)

# Collections éditables et leur modèle associé (clés logiques du store)
CATALOG_COLLECTIONS: Dict[str, type] = {
    "manufacturers": Manufacturer,
    "productLines": ProductLine,
    "products": Product,
    "addons": Addon,
}
