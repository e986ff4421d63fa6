"""
Parseur de sorties tabulaires (driverquery, dpkg-query, rpm)

La première ligne non vide est l'en-tête : l'ordre des colonnes varie selon
les versions du système, il est donc relu à chaque exécution et les
colonnes sont retrouvées par leur nom.
"""

import csv
import io
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ..core.errors import MalformedSource
from ..core.logger import get_logger
from ..core.record import Kind, ParseDiagnostic, Record
from .base import ParseResult, RawSource, decode_source, parse_timestamp

logger = get_logger()


@dataclass(frozen=True)
class TableLayout:
    """
    Correspondance entre les colonnes d'une sortie tabulaire et un Record

    Attributes:
        source: Nom de la source (pour les diagnostics)
        kind: Type des éléments produits
        id_column: Colonne d'identifiant (obligatoire)
        name_column: Colonne du nom affiché
        version_column: Colonne de version
        path_column: Colonne du chemin
        modified_column: Colonne de date de modification
        publisher_column: Colonne de l'éditeur
        arch_column: Colonne d'architecture, ajoutée à l'identifiant quand elle
            est renseignée (paquets multilib)
        arch_separator: Séparateur entre le nom et l'architecture
        delimiter: Séparateur de colonnes
        date_formats: Formats strptime de la colonne de date
        row_filter: Prédicat sur la ligne (dict colonne -> valeur) ; les
            lignes rejetées sont ignorées sans diagnostic
        empty_values: Valeurs traitées comme absentes
    """

    source: str
    kind: str
    id_column: str
    name_column: Optional[str] = None
    version_column: Optional[str] = None
    path_column: Optional[str] = None
    modified_column: Optional[str] = None
    publisher_column: Optional[str] = None
    arch_column: Optional[str] = None
    arch_separator: str = '.'
    delimiter: str = ','
    date_formats: Tuple[str, ...] = ()
    row_filter: Optional[Callable[[Dict[str, str]], bool]] = None
    empty_values: Tuple[str, ...] = ('', 'N/A', '(none)')
    quoting: int = csv.QUOTE_MINIMAL


DRIVERQUERY_LAYOUT = TableLayout(
    source="driverquery",
    kind=Kind.DRIVER,
    id_column="Module Name",
    name_column="Display Name",
    path_column="Path",
    modified_column="Link Date",
    date_formats=('%m/%d/%Y %I:%M:%S %p', '%d/%m/%Y %H:%M:%S'),
)

DPKG_COLUMNS = ("Package", "Version", "Maintainer", "Status", "Modified")

DPKG_LAYOUT = TableLayout(
    source="dpkg",
    kind=Kind.PACKAGE,
    id_column="Package",
    version_column="Version",
    modified_column="Modified",
    publisher_column="Maintainer",
    delimiter='\t',
    quoting=csv.QUOTE_NONE,
    row_filter=lambda row: row.get("Status", "installed") == "installed",
)

RPM_COLUMNS = ("Name", "Arch", "Version", "Vendor", "InstallTime")

RPM_LAYOUT = TableLayout(
    source="rpm",
    kind=Kind.PACKAGE,
    id_column="Name",
    name_column="Name",
    arch_column="Arch",
    version_column="Version",
    modified_column="InstallTime",
    publisher_column="Vendor",
    delimiter='\t',
    quoting=csv.QUOTE_NONE,
)


def parse_table(raw: RawSource, layout: TableLayout) -> List[ParseResult]:
    """
    Parse une sortie tabulaire avec en-tête

    Args:
        raw: Sortie brute (CSV ou tabulée)
        layout: Correspondance colonnes -> champs du Record

    Returns:
        list: Records et diagnostics, dans l'ordre des lignes

    Raises:
        MalformedSource: si la sortie est vide, non décodable, ou si l'en-tête
            ne contient pas la colonne d'identifiant
    """
    text = decode_source(raw, layout.source)
    reader = csv.reader(io.StringIO(text), delimiter=layout.delimiter, quoting=layout.quoting)

    header: Optional[List[str]] = None
    results: List[ParseResult] = []

    for row in reader:
        if not any(cell.strip() for cell in row):
            continue

        if header is None:
            header = [cell.strip() for cell in row]
            if layout.id_column not in header:
                raise MalformedSource(
                    layout.source,
                    f"colonne '{layout.id_column}' absente de l'en-tête: {header}"
                )
            continue

        fragment = f"ligne {reader.line_num}"

        if len(row) < len(header):
            results.append(ParseDiagnostic(
                layout.source,
                fragment,
                f"{len(row)} colonne(s) au lieu de {len(header)}"
            ))
            continue

        values = {column: cell.strip() for column, cell in zip(header, row)}

        if layout.row_filter is not None and not layout.row_filter(values):
            logger.debug(f"{layout.source}: {fragment} ignorée par le filtre")
            continue

        record = _build(values, layout)
        if record is None:
            results.append(ParseDiagnostic(layout.source, fragment, f"'{layout.id_column}' vide"))
        else:
            results.append(record)

    if header is None:
        raise MalformedSource(layout.source, "en-tête introuvable")

    return results


def _build(values: Dict[str, str], layout: TableLayout) -> Optional[Record]:
    def get(column: Optional[str]) -> str:
        if column is None:
            return ''
        value = values.get(column, '')
        return '' if value in layout.empty_values else value

    identifier = get(layout.id_column)
    if not identifier:
        return None

    arch = get(layout.arch_column)
    if arch:
        identifier = f"{identifier}{layout.arch_separator}{arch}"

    publisher = get(layout.publisher_column)

    return Record(
        kind=layout.kind,
        name=get(layout.name_column),
        id=identifier,
        version=get(layout.version_column),
        path=get(layout.path_column),
        modified=parse_timestamp(get(layout.modified_column), layout.date_formats),
        publishers=(publisher,) if publisher else (),
    )
