"""
Utilitaires communs aux parseurs de sources brutes

- Décodage du texte brut (bytes ou str)
- Normalisation des horodatages en UTC
- Séparation des résultats en records et diagnostics
"""

import codecs
import re
from datetime import datetime, timezone
from typing import Iterable, List, Sequence, Tuple, Union

from ..core.errors import MalformedSource
from ..core.logger import get_logger
from ..core.record import EPOCH, ParseDiagnostic, Record

logger = get_logger()

RawSource = Union[bytes, str]
ParseResult = Union[Record, ParseDiagnostic]

_EPOCH_SECONDS = re.compile(r'^\d{9,11}$')


def decode_source(raw: RawSource, source: str) -> str:
    """
    Décode la sortie brute d'une source en texte

    Args:
        raw: Sortie brute (bytes ou str)
        source: Nom de la source, pour les messages d'erreur

    Returns:
        str: Texte décodé

    Raises:
        MalformedSource: si l'entrée est vide ou non décodable
    """
    if raw is None:
        raise MalformedSource(source, "sortie absente")

    if isinstance(raw, bytes):
        # reg.exe et certaines consoles Windows produisent de l'UTF-16
        if raw.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
            encoding = 'utf-16'
        else:
            encoding = 'utf-8-sig'
        try:
            text = raw.decode(encoding)
        except UnicodeDecodeError as e:
            raise MalformedSource(source, f"sortie non décodable ({encoding}): {e}") from e
    elif isinstance(raw, str):
        text = raw.lstrip('\ufeff')
    else:
        raise MalformedSource(source, f"type de sortie inattendu: {type(raw).__name__}")

    if not text.strip():
        raise MalformedSource(source, "sortie vide")

    return text


def parse_timestamp(value: str, formats: Sequence[str] = ()) -> datetime:
    """
    Normalise un horodatage en instant UTC

    Les valeurs naïves (sans fuseau) sont lues comme de l'UTC. Une valeur
    vide ou illisible donne la sentinelle EPOCH.

    Args:
        value: Horodatage brut
        formats: Formats strptime supplémentaires à essayer

    Returns:
        datetime: Instant UTC
    """
    if not value or not value.strip():
        return EPOCH

    value = value.strip()

    if _EPOCH_SECONDS.match(value):
        return datetime.fromtimestamp(int(value), tz=timezone.utc)

    candidates = [value]
    if value.endswith('Z'):
        candidates.append(value[:-1] + '+00:00')

    for candidate in candidates:
        try:
            parsed = datetime.fromisoformat(candidate)
            break
        except ValueError:
            continue
    else:
        parsed = None
        for fmt in formats:
            try:
                parsed = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        logger.debug(f"Horodatage illisible, sentinelle utilisée: {value!r}")
        return EPOCH

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)


def split_results(results: Iterable[ParseResult]) -> Tuple[List[Record], List[ParseDiagnostic]]:
    """
    Sépare les résultats d'un parseur en records et diagnostics

    L'ordre relatif de chaque catégorie est préservé.
    """
    records = []
    diagnostics = []
    for result in results:
        if isinstance(result, ParseDiagnostic):
            diagnostics.append(result)
        else:
            records.append(result)
    return records, diagnostics
