"""Exceptions spécifiques aux formulaires d'administration."""

class FormDomainException(Exception):
    """Classe de base pour les exceptions du module Forms."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class UnknownFormKindException(FormDomainException):
    def __init__(self, kind: str):
        super().__init__(f"Type de formulaire inconnu: '{kind}'.")
        self.kind = kind

class InvalidFormValueException(FormDomainException):
    """Levée lorsqu'une valeur saisie ne peut pas être convertie (ex: nombre mal formé)."""
    def __init__(self, key: str, value: str):
        super().__init__(f"Valeur invalide pour le champ '{key}': '{value}'.")
        self.key = key
        self.value = value
