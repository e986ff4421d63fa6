"""
Package des collecteurs de l'outil d'inventaire

Ce package contient :
- Le collecteur de base (classe abstraite)
- Les collecteurs spécifiques par plateforme
- La sélection du collecteur selon la plateforme hôte
"""

import sys
from typing import Optional

from .base import BaseCollector


def get_platform_collector(config=None, logger=None, source_file: Optional[str] = None) -> BaseCollector:
    """
    Sélectionne le collecteur de la plateforme hôte

    Le choix est fait une seule fois, au démarrage, à partir de sys.platform.
    Une sortie de system_profiler sauvegardée (source_file) est toujours
    relue par le collecteur macOS, quelle que soit la plateforme hôte.

    Args:
        config: Instance de InventoryConfig
        logger: Logger à utiliser
        source_file: Sortie brute sauvegardée à relire au lieu d'interroger le système

    Returns:
        BaseCollector: Collecteur de la plateforme
    """
    if source_file or sys.platform == "darwin":
        from .platform.macos import MacOSCollector
        return MacOSCollector(config, logger, source_file=source_file)

    if sys.platform == "win32":
        from .platform.windows import WindowsCollector
        return WindowsCollector(config, logger)

    from .platform.linux import LinuxCollector
    return LinuxCollector(config, logger)


__all__ = ['BaseCollector', 'get_platform_collector']
