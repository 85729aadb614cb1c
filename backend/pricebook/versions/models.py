from datetime import datetime
from typing import Optional

from pydantic import ConfigDict

from pricebook.catalog.models import CatalogData
from pricebook.core.schemas import CamelModel

class PricingVersion(CatalogData):
    """Instantané complet et horodaté du catalogue. Lecture seule une fois publié."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: Optional[str] = None
    timestamp: datetime
    notes: str = ""

class PricingVersionSummary(CamelModel):
    """Vue allégée d'une version pour les listes."""
    id: str
    name: Optional[str] = None
    timestamp: datetime
    notes: str = ""
    is_current: bool = False

class ExportedFile(CamelModel):
    """Fichier produit par un export (contenu texte prêt à télécharger)."""
    filename: str
    content: str
    media_type: str

class VersionFileUpload(CamelModel):
    """Fichier de version soumis à l'import."""
    filename: str
    content: str

class PublishVersionRequest(CamelModel):
    notes: str = ""
    name: Optional[str] = None
