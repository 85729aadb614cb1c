"""Exceptions spécifiques au Catalog Store."""

from typing import Optional

class StorageDomainException(Exception):
    """Classe de base pour les exceptions du Catalog Store."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class UnknownCollectionException(StorageDomainException):
    """Levée lorsqu'une collection de catalogue inconnue est demandée."""
    def __init__(self, collection: str):
        super().__init__(f"Collection de catalogue inconnue: {collection}.")
        self.collection = collection

class EntityNotFoundException(StorageDomainException):
    """Levée lorsqu'une entité n'existe pas dans sa collection."""
    def __init__(self, collection: str, entity_id: str):
        super().__init__(f"Entité {entity_id} non trouvée dans {collection}.")
        self.collection = collection
        self.entity_id = entity_id

class InvalidBackupException(StorageDomainException):
    """Levée lorsqu'une sauvegarde importée contient des entités invalides."""
    def __init__(self, detail: str = "Sauvegarde invalide."):
        super().__init__(detail)
        self.detail = detail

class StorageWriteException(StorageDomainException):
    """Levée en cas d'erreur d'écriture dans le store."""
    def __init__(self, key: Optional[str] = None, detail: str = "Erreur d'écriture."):
        super().__init__(f"Erreur écriture store{f' clé {key}' if key else ''}: {detail}")
        self.key = key
        self.detail = detail
