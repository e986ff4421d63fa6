"""
unisbom - Inventaire logiciel unifié multi-plateforme

Ce module principal collecte les applications, pilotes/extensions du noyau
et le système d'exploitation de l'hôte, et les normalise en une liste
d'éléments de forme fixe (nomenclature logicielle minimale).

Version: 1.0.0
"""

__version__ = "1.0.0"

# Imports principaux pour faciliter l'utilisation
from .core.collector import InventoryCollector, InventoryResult
from .core.config import InventoryConfig
from .core.errors import CollectionFailed, InventoryError, MalformedSource
from .core.logger import InventoryLogger
from .core.output import format_inventory, load_inventory
from .core.record import EPOCH, Kind, ParseDiagnostic, Record

__all__ = [
    'InventoryCollector', 'InventoryResult', 'InventoryConfig', 'InventoryLogger',
    'InventoryError', 'MalformedSource', 'CollectionFailed',
    'Record', 'Kind', 'ParseDiagnostic', 'EPOCH',
    'format_inventory', 'load_inventory',
]
