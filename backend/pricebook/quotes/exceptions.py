"""Exceptions spécifiques au module Quote."""

from typing import List

class QuoteDomainException(Exception):
    """Classe de base pour les exceptions du module Quote."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class QuoteNotFoundException(QuoteDomainException):
    """Levée lorsqu'un devis spécifique n'est pas trouvé."""
    def __init__(self, quote_id: str):
        super().__init__(f"Devis avec ID {quote_id} non trouvé.")
        self.quote_id = quote_id

class ProductNotFoundException(QuoteDomainException):
    """Levée lorsqu'une ligne référence un produit absent du catalogue."""
    def __init__(self, product_id: str):
        super().__init__(f"Produit avec ID {product_id} non trouvé.")
        self.product_id = product_id

class AddonNotFoundException(QuoteDomainException):
    """Levée lorsqu'une option de chantier est inconnue ou n'est pas une option de chantier."""
    def __init__(self, addon_id: str):
        super().__init__(f"Option de chantier {addon_id} non trouvée.")
        self.addon_id = addon_id

class InvalidQuoteLineException(QuoteDomainException):
    """Levée lorsque les dimensions d'une ligne violent les limites du produit."""
    def __init__(self, line_index: int, errors: List[str]):
        super().__init__(f"Ligne {line_index + 1} invalide: {'; '.join(errors)}")
        self.line_index = line_index
        self.errors = errors
