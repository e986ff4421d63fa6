"""
Package des parseurs de sources brutes

Un parseur par format brut :
- Texte structuré en blocs (system_profiler)
- Arborescence clé/valeur (registre Windows via reg query)
- Sortie tabulaire avec en-tête (driverquery, dpkg-query, rpm)
"""

from .base import decode_source, parse_timestamp, split_results
from .blocks import parse_blocks
from .registry import parse_registry
from .table import DPKG_LAYOUT, DRIVERQUERY_LAYOUT, RPM_LAYOUT, TableLayout, parse_table

__all__ = [
    'decode_source', 'parse_timestamp', 'split_results',
    'parse_blocks', 'parse_registry', 'parse_table',
    'TableLayout', 'DRIVERQUERY_LAYOUT', 'DPKG_LAYOUT', 'RPM_LAYOUT',
]
