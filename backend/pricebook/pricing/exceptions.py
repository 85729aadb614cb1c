"""Exceptions spécifiques au moteur de tarification."""

from typing import Optional

class PricingDomainException(Exception):
    """Classe de base pour les exceptions du moteur de tarification."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class InvalidConfigurationException(PricingDomainException):
    """Levée lorsqu'un produit ou une option a un modèle de tarification inconnu ou incomplet."""
    def __init__(self, entity_id: Optional[str], detail: str):
        super().__init__(f"Configuration invalide pour '{entity_id}': {detail}")
        self.entity_id = entity_id
        self.detail = detail

class ExclusiveGroupConflictException(PricingDomainException):
    """Levée lorsque deux options appliquées à une même ligne partagent un groupe exclusif."""
    def __init__(self, group: str):
        super().__init__(f"Conflit d'options exclusives dans le groupe: {group}")
        self.group = group

class NegativeUpliftException(PricingDomainException):
    """Levée lorsque la marge commerciale (uplift) est négative."""
    def __init__(self, sales_uplift: float):
        super().__init__(f"La marge commerciale ne peut pas être négative ({sales_uplift}).")
        self.sales_uplift = sales_uplift

class PriceFloorViolationException(PricingDomainException):
    """Levée si le prix final passe sous le prix plancher (par)."""
    def __init__(self, final_price: float, total_par_price: float):
        super().__init__(f"Le prix final ({final_price}) ne peut pas être inférieur au prix plancher ({total_par_price}).")
        self.final_price = final_price
        self.total_par_price = total_par_price
