"""
Parseur d'arborescence clé/valeur (sortie texte de `reg query ... /s`)

Format attendu :

    HKEY_LOCAL_MACHINE\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Uninstall\\7-Zip
        DisplayName    REG_SZ    7-Zip 22.01 (x64)
        DisplayVersion    REG_SZ    22.01
        Publisher    REG_SZ    Igor Pavlov

Chaque sous-clé est un élément candidat. Les sous-clés sans DisplayName
(restes de désinstallation) sont ignorées silencieusement.
"""

import re
from typing import Dict, List, Optional, Tuple

from ..core.logger import get_logger
from ..core.record import Kind, ParseDiagnostic, Record
from .base import ParseResult, RawSource, decode_source, parse_timestamp

logger = get_logger()

SOURCE_NAME = "registry"

_VALUE_LINE = re.compile(r'^\s+(?P<name>.+?)\s{2,}(?P<type>REG_[A-Z_]+)(?:\s{2,}(?P<data>.*))?$')

NAME_VALUE = 'DisplayName'
VERSION_VALUES = ('DisplayVersion', 'Version')
PATH_VALUES = ('InstallLocation', 'InstallSource', 'BundleCachePath')
PUBLISHER_VALUE = 'Publisher'
DATE_VALUE = 'InstallDate'
DATE_FORMATS = ('%Y%m%d', '%m/%d/%Y')


def parse_registry(raw: RawSource, context: str = Kind.APPLICATION) -> List[ParseResult]:
    """
    Parse une arborescence de clés de registre exportée en texte

    Args:
        raw: Sortie brute de `reg query <clé> /s`
        context: Type des éléments produits

    Returns:
        list: Records et diagnostics, dans l'ordre des clés

    Raises:
        MalformedSource: si la sortie est vide ou non décodable
    """
    text = decode_source(raw, SOURCE_NAME)

    results: List[ParseResult] = []
    for key_path, values in _walk(text, results):
        record = _build(key_path, values, context)
        if record is not None:
            results.append(record)

    return results


def _walk(text: str, results: List[ParseResult]) -> List[Tuple[str, Dict[str, str]]]:
    """
    Découpe la sortie en (chemin de clé, valeurs)

    Les lignes de valeur orphelines (avant toute clé) ajoutent un diagnostic
    à `results`.
    """
    keys: List[Tuple[str, Dict[str, str]]] = []
    current: Optional[Dict[str, str]] = None

    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue

        if line.startswith('HKEY_'):
            current = {}
            keys.append((line.strip(), current))
            continue

        match = _VALUE_LINE.match(line)
        if not match:
            # "End of search: ..." et autres lignes d'information
            logger.debug(f"Ligne de registre ignorée ({line_number}): {line.strip()}")
            continue

        if current is None:
            results.append(ParseDiagnostic(
                SOURCE_NAME,
                f"ligne {line_number}",
                f"valeur '{match.group('name')}' hors de toute clé"
            ))
            continue

        current[match.group('name')] = (match.group('data') or '').strip()

    return keys


def _first(values: Dict[str, str], names) -> str:
    for name in names:
        value = values.get(name, '')
        if value:
            return value
    return ''


def _build(key_path: str, values: Dict[str, str], kind: str) -> Optional[Record]:
    key_name = key_path.rstrip('\\').rsplit('\\', 1)[-1]

    display_name = values.get(NAME_VALUE, '')
    if not display_name:
        logger.debug(f"Clé de registre sans {NAME_VALUE} ignorée: {key_path}")
        return None

    publisher = values.get(PUBLISHER_VALUE, '')

    return Record(
        kind=kind,
        name=display_name,
        id=key_name,
        version=_first(values, VERSION_VALUES),
        path=_first(values, PATH_VALUES),
        modified=parse_timestamp(values.get(DATE_VALUE, ''), DATE_FORMATS),
        publishers=(publisher,) if publisher else (),
    )
