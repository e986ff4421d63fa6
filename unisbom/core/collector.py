"""
Module collecteur principal de l'outil d'inventaire

Ce module orchestre la collecte :
- Exécution du collecteur de la plateforme active
- Validation et déduplication des éléments
- Remontée des diagnostics
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .errors import CollectionFailed
from .logger import get_logger
from .record import ParseDiagnostic, Record


@dataclass
class InventoryResult:
    """
    Résultat d'une exécution d'inventaire

    Attributes:
        records: Éléments dédupliqués, dans l'ordre de collecte
        diagnostics: Diagnostics non bloquants remontés par les parseurs
    """

    records: List[Record] = field(default_factory=list)
    diagnostics: List[ParseDiagnostic] = field(default_factory=list)


class InventoryCollector:
    """
    Agrégateur qui exécute le collecteur de plateforme et assemble l'inventaire

    Args:
        logger: Instance de InventoryLogger ou logging.Logger
    """

    def __init__(self, logger=None):
        self.logger = logger or get_logger()
        self.last_collection_duration = 0.0

    def run(self, collector) -> InventoryResult:
        """
        Lance la collecte complète d'inventaire

        Args:
            collector: Collecteur de plateforme (contrat collect())

        Returns:
            InventoryResult: Éléments dédupliqués et diagnostics

        Raises:
            CollectionFailed: si le collecteur ne produit aucun élément
        """
        start_time = time.time()
        self.logger.info(f"Début de collecte d'inventaire ({collector.__class__.__name__})")

        records, diagnostics = collector.collect()
        records = self._validate(records)

        if not records:
            raise CollectionFailed(
                f"Aucun élément collecté ({len(diagnostics)} diagnostic(s))",
                diagnostics
            )

        unique = deduplicate(records)
        if len(unique) != len(records):
            self.logger.debug(f"{len(records) - len(unique)} doublon(s) écarté(s)")

        self.last_collection_duration = time.time() - start_time
        self.logger.info(
            f"Collecte terminée en {self.last_collection_duration:.2f} secondes: "
            f"{len(unique)} élément(s), {len(diagnostics)} diagnostic(s)"
        )

        return InventoryResult(records=unique, diagnostics=list(diagnostics))

    def _validate(self, records: List[Record]) -> List[Record]:
        valid = []
        for record in records:
            if isinstance(record, Record):
                valid.append(record)
            else:
                self.logger.warning(f"Élément non normalisé écarté: {record!r}")
        return valid


def deduplicate(records: List[Record]) -> List[Record]:
    """
    Déduplique les éléments selon leur identité (kind, id)

    L'élément le plus récemment modifié l'emporte ; à égalité, le premier
    rencontré est conservé. Le gagnant occupe la position de la première
    occurrence.

    Args:
        records: Éléments dans l'ordre de collecte

    Returns:
        list: Éléments uniques
    """
    positions: Dict[Tuple[str, str], int] = {}
    unique: List[Record] = []

    for record in records:
        position = positions.get(record.key)
        if position is None:
            positions[record.key] = len(unique)
            unique.append(record)
        elif record.modified > unique[position].modified:
            unique[position] = record

    return unique
