"""
Parseur de texte structuré en blocs (sortie texte de system_profiler)

Format attendu :

    Applications:

        Google Drive:

          Version: 62.0
          Last Modified: 2022-10-04T19:15:12Z
          Signed by: Developer ID Application: Google LLC (EQHXZ8M8AV), Apple Root CA
          Location: /Applications/Google Drive.app

Les en-têtes de section (colonne 0) déterminent le type des éléments, chaque
titre de bloc ouvre un nouvel élément, et les lignes plus indentées sans clé
prolongent la valeur de la clé précédente.
"""

import re
from typing import Dict, List, Optional

from ..core.logger import get_logger
from ..core.record import Kind, ParseDiagnostic, Record
from .base import ParseResult, RawSource, decode_source, parse_timestamp

logger = get_logger()

SOURCE_NAME = "system_profiler"

# Sections reconnues et type d'élément associé
SECTION_KINDS = {
    'Software': Kind.OS,
    'Applications': Kind.APPLICATION,
    'Extensions': Kind.DRIVER,
}

# Formats de date de la sortie texte (en plus de l'ISO-8601) ; les espaces
# insécables fines (U+202F) avant AM/PM sont ramenées à des espaces
DATE_FORMATS = (
    '%m/%d/%y, %I:%M %p',
    '%m/%d/%Y, %I:%M %p',
    '%d/%m/%Y %H:%M',
    '%d/%m/%y %H:%M',
)

PUBLISHERS_KEY = 'Signed by'

# Suffixe de raison sociale séparé du nom par ", " (ex: "Zoom Video Communications, Inc. (BJ4HAAB9B3)")
_COMPANY_SUFFIX = re.compile(
    r"^(?:Inc|LLC|L\.L\.C|Ltd|Limited|GmbH|Corp|Co|S\.A|SA|SAS|SARL|AG|AB|Oy|ApS|B\.V|N\.V|S\.r\.l|Pty Ltd)\.?"
    r"(?:\s*\([A-Z0-9]+\))?$"
)

OS_VERSION_KEY = 'System Version'
OS_NAME = 'macOS'

# Clés de champ par type ; None = titre du bloc
FIELD_TABLES = {
    Kind.APPLICATION: {
        'id': None,
        'name': None,
        'version': ('Version',),
        'path': ('Location',),
        'modified': ('Last Modified',),
    },
    Kind.DRIVER: {
        'id': ('Bundle ID',),
        'name': None,
        'version': ('Version', 'Kext Version'),
        'path': ('Location',),
        'modified': ('Last Modified',),
    },
}


class _Block:
    """Bloc en cours de lecture"""

    def __init__(self, title: str, indent: int, kind: str, line_number: int):
        self.title = title
        self.indent = indent
        self.kind = kind
        self.line_number = line_number
        self.fields: Dict[str, List[str]] = {}
        self.key_indent: Optional[int] = None
        self.last_key: Optional[str] = None

    def add(self, key: str, value: str):
        self.fields.setdefault(key, []).append(value)
        self.last_key = key

    def extend_last(self, value: str):
        if self.last_key is not None:
            self.fields[self.last_key].append(value)

    def first(self, keys) -> str:
        for key in keys or ():
            for value in self.fields.get(key, ()):
                if value:
                    return value
        return ""


def parse_blocks(raw: RawSource, context: str = Kind.APPLICATION) -> List[ParseResult]:
    """
    Parse une sortie texte structurée en blocs

    Args:
        raw: Sortie brute de system_profiler
        context: Type appliqué aux blocs si la sortie n'a pas d'en-tête de section

    Returns:
        list: Records et diagnostics, dans l'ordre des blocs

    Raises:
        MalformedSource: si la sortie est vide ou non décodable
    """
    text = decode_source(raw, SOURCE_NAME)

    results: List[ParseResult] = []
    current_kind: Optional[str] = context
    block: Optional[_Block] = None

    for line_number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped:
            continue

        indent = len(line) - len(line.lstrip())

        # En-tête de section
        if indent == 0 and stripped.endswith(':'):
            if block:
                results.append(_build(block))
                block = None
            section = stripped[:-1].strip()
            current_kind = SECTION_KINDS.get(section)
            if current_kind is None:
                logger.debug(f"Section ignorée: {section}")
            continue

        if current_kind is None:
            continue

        # Titre de bloc
        if stripped.endswith(':') and (block is None or indent <= block.indent):
            if block:
                results.append(_build(block))
            block = _Block(stripped[:-1].strip(), indent, current_kind, line_number)
            continue

        if block is None:
            logger.debug(f"Ligne hors bloc ignorée ({line_number}): {stripped}")
            continue

        if block.key_indent is None:
            block.key_indent = indent

        # Continuation de la valeur précédente
        if indent > block.key_indent:
            block.extend_last(stripped)
            continue

        key, separator, value = stripped.partition(':')
        if separator and (value == '' or value.startswith(' ')):
            block.add(key.strip(), value.strip())
        else:
            block.extend_last(stripped)

    if block:
        results.append(_build(block))

    return results


def _split_publishers(values: List[str]) -> List[str]:
    publishers = []
    for value in values:
        for name in value.split(", "):
            name = name.strip()
            if not name:
                continue
            if publishers and _COMPANY_SUFFIX.match(name):
                publishers[-1] = f"{publishers[-1]}, {name}"
            else:
                publishers.append(name)
    return publishers


def _build(block: _Block) -> ParseResult:
    """
    Convertit un bloc en Record, ou en diagnostic si son identité manque
    """
    fragment = block.title or f"bloc ligne {block.line_number}"

    if block.kind == Kind.OS:
        version = block.first((OS_VERSION_KEY,))
        if not version:
            return ParseDiagnostic(SOURCE_NAME, fragment, f"clé '{OS_VERSION_KEY}' absente")
        if version.startswith(OS_NAME + ' '):
            version = version[len(OS_NAME) + 1:]
        return Record(kind=Kind.OS, name=OS_NAME, id=OS_NAME, version=version, path='/')

    table = FIELD_TABLES.get(block.kind, FIELD_TABLES[Kind.APPLICATION])

    def field_value(name: str) -> str:
        keys = table[name]
        if keys is None:
            return block.title
        return block.first(keys)

    identifier = field_value('id')
    if not identifier:
        missing = "titre" if table['id'] is None else f"clé '{table['id'][0]}'"
        return ParseDiagnostic(SOURCE_NAME, fragment, f"identité manquante ({missing})")

    publishers = _split_publishers(block.fields.get(PUBLISHERS_KEY, []))

    return Record(
        kind=block.kind,
        name=field_value('name'),
        id=identifier,
        version=field_value('version'),
        path=field_value('path'),
        modified=parse_timestamp(field_value('modified').replace('\u202f', ' '), DATE_FORMATS),
        publishers=tuple(publishers),
    )
