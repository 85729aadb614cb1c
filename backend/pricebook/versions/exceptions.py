"""Exceptions spécifiques aux versions de tarifs (import/export)."""

class VersionDomainException(Exception):
    """Classe de base pour les exceptions du domaine Version."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class InvalidVersionFormatException(VersionDomainException):
    """Levée lorsqu'un fichier de version est malformé ou incomplet."""
    def __init__(self, detail: str = "Format de version invalide."):
        super().__init__(detail)
        self.detail = detail

class PricingVersionNotFoundException(VersionDomainException):
    """Levée lorsqu'une version de tarifs n'est pas trouvée."""
    def __init__(self, version_id: str):
        super().__init__(f"Version de tarifs {version_id} non trouvée.")
        self.version_id = version_id
