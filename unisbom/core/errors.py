"""
Exceptions de l'outil d'inventaire

- MalformedSource : la sortie d'une source brute est inexploitable ;
  récupérable au niveau du collecteur (la catégorie ne contribue rien)
- CollectionFailed : aucune catégorie n'a pu être collectée ; fatal
"""

from typing import List, Optional


class InventoryError(Exception):
    """Classe de base des erreurs d'inventaire"""


class MalformedSource(InventoryError):
    """La sortie brute ne correspond pas au format attendu"""

    def __init__(self, source: str, message: str):
        self.source = source
        self.message = message
        super().__init__(f"{source}: {message}")


class CollectionFailed(InventoryError):
    """Le collecteur de la plateforme n'a produit aucun élément"""

    def __init__(self, message: str, diagnostics: Optional[List] = None):
        self.diagnostics = list(diagnostics or [])
        super().__init__(message)
