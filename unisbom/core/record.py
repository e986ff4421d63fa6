"""
Modèle de données unifié de l'inventaire

Chaque élément inventorié (système d'exploitation, application, pilote,
paquet) est normalisé dans un Record de forme fixe, quelle que soit la
plateforme d'origine.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Tuple


# Sentinelle utilisée quand la source ne fournit pas d'horodatage fiable
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class Kind:
    """
    Types d'éléments connus

    L'énumération est ouverte : toute chaîne non vide est un type valide,
    ce qui permet d'ajouter de nouvelles catégories sans casser les
    consommateurs de la sortie structurée.
    """

    OS = "OS"
    APPLICATION = "Application"
    DRIVER = "Driver"
    PACKAGE = "Package"


@dataclass(frozen=True)
class Record:
    """
    Élément d'inventaire normalisé

    Immuable une fois construit. Le couple (kind, id) détermine l'identité
    de l'élément pour la déduplication.
    """

    kind: str
    name: str
    id: str
    version: str = ""
    path: str = ""
    modified: datetime = EPOCH
    publishers: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.kind or not str(self.kind).strip():
            raise ValueError("Record sans type")
        if not self.id or not str(self.id).strip():
            raise ValueError(f"Record {self.kind} sans identifiant")
        if not isinstance(self.modified, datetime) or self.modified.tzinfo is None:
            raise ValueError(f"Horodatage invalide pour {self.kind}/{self.id}: {self.modified!r}")

        # frozen=True : on passe par object.__setattr__ pour normaliser.
        # La forme structurée est à la seconde près : les fractions sont tronquées.
        object.__setattr__(self, 'kind', str(self.kind))
        object.__setattr__(self, 'id', str(self.id))
        object.__setattr__(self, 'name', str(self.name) if self.name else str(self.id))
        object.__setattr__(self, 'version', str(self.version or ""))
        object.__setattr__(self, 'path', str(self.path or ""))
        object.__setattr__(self, 'modified', self.modified.astimezone(timezone.utc).replace(microsecond=0))
        object.__setattr__(self, 'publishers', tuple(str(p) for p in self.publishers))

    @property
    def key(self) -> Tuple[str, str]:
        """Identité de déduplication (kind, id)"""
        return (self.kind, self.id)

    def to_dict(self) -> Dict[str, Any]:
        """
        Sérialise le record avec tous ses champs, y compris les champs vides

        Returns:
            dict: Représentation structurée à forme fixe
        """
        return {
            'kind': self.kind,
            'name': self.name,
            'id': self.id,
            'version': self.version,
            'path': self.path,
            'modified': self.modified.strftime(TIMESTAMP_FORMAT),
            'publishers': list(self.publishers),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        """
        Reconstruit un record depuis sa forme structurée

        Args:
            data: Dictionnaire produit par to_dict()

        Returns:
            Record: Record équivalent
        """
        modified = datetime.strptime(data['modified'], TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
        return cls(
            kind=data['kind'],
            name=data.get('name', ''),
            id=data['id'],
            version=data.get('version', ''),
            path=data.get('path', ''),
            modified=modified,
            publishers=tuple(data.get('publishers') or ()),
        )


@dataclass(frozen=True)
class ParseDiagnostic:
    """
    Rapport non bloquant sur un fragment de source illisible

    Attributes:
        source: Source brute concernée (ex: "system_profiler", "driverquery")
        fragment: Fragment fautif (titre de bloc, numéro de ligne, clé)
        message: Description du problème
    """

    source: str
    fragment: str
    message: str

    def __str__(self) -> str:
        return f"[{self.source}] {self.fragment}: {self.message}"


def group_by_kind(records: Iterable[Record]) -> Dict[str, list]:
    """Regroupe les records par type, dans l'ordre de première apparition"""
    groups: Dict[str, list] = {}
    for record in records:
        groups.setdefault(record.kind, []).append(record)
    return groups
