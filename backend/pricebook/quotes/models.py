from datetime import datetime
from typing import List, Optional

from pydantic import Field

from pricebook.core.schemas import CamelModel
from pricebook.pricing.models import LineItem, QuoteTotals

# --- Modèles pour les lignes saisies ---

class QuoteLineInput(CamelModel):
    """Ligne saisie par le commercial : un produit, ses dimensions (pouces) et ses options."""
    product_id: str
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    selected_addon_ids: List[str] = Field(default_factory=list)
    location: Optional[str] = None # Ex: 'Cuisine', 'Chambre 2'

# --- Modèles pour Quote (état de travail, modifiable) ---

class QuoteBase(CamelModel):
    customer_name: Optional[str] = None
    line_items: List[QuoteLineInput] = Field(default_factory=list)
    job_addon_ids: List[str] = Field(default_factory=list)
    sales_uplift: float = 0.0
    notes: str = ""

class Quote(QuoteBase):
    """Devis de travail. Modifiable librement jusqu'à la création d'une version."""
    id: str
    updated_at: Optional[datetime] = None

class QuoteUpsert(QuoteBase):
    """Schéma pour enregistrer l'état de travail d'un devis via l'API."""
    pass

# --- Résultats de tarification ---

class PricedLine(CamelModel):
    product_id: str
    product_name: str = ""
    location: Optional[str] = None
    width: float
    height: float
    square_footage: float # affichage uniquement
    line_item: LineItem
    warnings: List[str] = Field(default_factory=list)

class QuotePricing(CamelModel):
    quote_id: str
    lines: List[PricedLine] = Field(default_factory=list)
    totals: QuoteTotals
