from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from pricebook.core.schemas import CamelModel

# --- Ligne de devis calculée ---

class AppliedAddon(CamelModel):
    """Option effectivement appliquée à une ligne, avec son prix calculé."""
    id: str
    name: str = ""
    price: float = 0.0
    hidden: bool = False # masquée sur les documents client

class LineItem(CamelModel):
    """Résultat du calcul d'une ligne (jamais persisté seul)."""
    ui: int
    base_price: float
    addon_total: float = 0.0
    line_item_par_total: float
    applied_addons: List[AppliedAddon] = Field(default_factory=list)

# --- Totaux de devis ---

class JobBasedAddon(CamelModel):
    """Option facturée une fois par chantier. Un prix absent compte pour 0."""
    id: Optional[str] = None
    name: Optional[str] = None
    price: Optional[float] = None

class QuoteTotals(CamelModel):
    total_par_price: float
    job_addon_total: float = 0.0
    job_based_addons: List[JobBasedAddon] = Field(default_factory=list)
    sales_uplift: float = 0.0
    final_price: float

# --- Version de devis verrouillée ---

class QuoteVersion(CamelModel):
    """Instantané historique d'un devis. Figé : aucun champ n'est réaffecté après création."""
    model_config = ConfigDict(frozen=True)

    id: str
    quote_id: str
    timestamp: datetime
    line_items: List[LineItem] = Field(default_factory=list)
    total_par_price: float
    job_addon_total: float = 0.0
    sales_uplift: float = 0.0
    final_price: float
    locked: bool = True
    metadata: Dict[str, Any] = Field(default_factory=dict)

# --- Validation ---

class ValidationResult(CamelModel):
    valid: bool = True
    errors: List[str] = Field(default_factory=list)

# --- Requêtes / réponses API ---

class LineItemRequest(CamelModel):
    """Demande de calcul d'une ligne isolée contre le catalogue courant."""
    product_id: str
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    selected_addon_ids: List[str] = Field(default_factory=list)

class AvailableAddons(CamelModel):
    product_id: str
    ui: int # UI réelle utilisée pour l'éligibilité
    addon_ids: List[str] = Field(default_factory=list)
