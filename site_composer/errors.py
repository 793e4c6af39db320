"""
Taxonomie d'erreurs du moteur de composition.

ValidationError  : préconditions de publication, import malformé → opération annulée
NotFoundError    : id de bloc inconnu → journalisé, traité comme no-op
PersistenceError : écriture distante en échec → cache local + statut "error"
"""


class ComposerError(Exception):
    """Erreur de base du moteur."""


class ValidationError(ComposerError):
    """Donnée ou précondition invalide — l'état n'est pas modifié."""


class UnknownBlockTypeError(ValidationError):
    def __init__(self, block_type: str):
        super().__init__(f"Type de bloc inconnu : {block_type!r}")
        self.block_type = block_type


class NotFoundError(ComposerError):
    def __init__(self, block_id: str):
        super().__init__(f"Bloc introuvable : {block_id!r}")
        self.block_id = block_id


class PersistenceError(ComposerError):
    """Écriture vers le store distant en échec."""
