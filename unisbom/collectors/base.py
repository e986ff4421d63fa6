"""
Classe de base pour tous les collecteurs de plateforme

Ce module définit l'interface commune que tous les collecteurs
doivent implémenter, ainsi que l'accès aux sources brutes (commandes
système, fichiers) et la conversion de leurs échecs en diagnostics.
"""

import subprocess
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence, Tuple

from ..core.errors import MalformedSource
from ..core.logger import get_logger
from ..core.record import ParseDiagnostic, Record
from ..parsers.base import ParseResult, split_results

# Source brute : callable sans argument, retourne le texte ou None en cas d'échec
RawSourceAdapter = Callable[[], Optional[str]]
CollectResult = Tuple[List[Record], List[ParseDiagnostic]]


class BaseCollector(ABC):
    """
    Classe de base abstraite pour tous les collecteurs de plateforme

    Cette classe définit le contrat collect() et fournit des méthodes
    utilitaires pour interroger les sources brutes et appliquer les parseurs.
    """

    # Nom de la plateforme, utilisé pour l'enregistrement du système
    platform_name = ""

    def __init__(self, config=None, logger=None):
        """
        Initialise le collecteur de base

        Args:
            config: Instance de InventoryConfig (valeurs par défaut si None)
            logger: Instance de InventoryLogger ou logging.Logger
        """
        if config is None:
            from ..core.config import InventoryConfig
            config = InventoryConfig()

        self.config = config
        self.logger = logger or get_logger()

        # Métadonnées du collecteur
        self.collector_name = self.__class__.__name__
        self.collection_start_time = None
        self.last_collection_duration = 0.0
        self.diagnostics: List[ParseDiagnostic] = []

    @abstractmethod
    def collect(self) -> CollectResult:
        """
        Méthode principale de collecte - doit être implémentée par chaque collecteur

        Returns:
            tuple: (records ordonnés, diagnostics)
        """
        pass

    def _start_collection(self):
        """
        Démarre une session de collecte

        Réinitialise les diagnostics et le chronomètre.
        """
        self.collection_start_time = time.time()
        self.diagnostics = []
        self.logger.debug(f"Début collecte {self.collector_name}")

    def _end_collection(self) -> float:
        """
        Termine une session de collecte

        Returns:
            float: Durée de collecte en secondes
        """
        if self.collection_start_time:
            duration = time.time() - self.collection_start_time
            self.logger.debug(f"Collecte {self.collector_name} terminée en {duration:.2f}s")

            if self.diagnostics:
                self.logger.warning(f"Collecte {self.collector_name} avec {len(self.diagnostics)} diagnostic(s)")

            self.last_collection_duration = duration
            return duration
        return 0.0

    def _fetch(self, source: str, adapter: RawSourceAdapter) -> Optional[str]:
        """
        Interroge une source brute

        Un échec de la source est rapporté une seule fois sous forme de
        diagnostic ; la catégorie correspondante ne contribue alors aucun élément.

        Args:
            source: Nom de la source (pour les diagnostics)
            adapter: Callable retournant la sortie brute ou None

        Returns:
            str: Sortie brute, ou None si la source est indisponible
        """
        raw = adapter()
        if raw is None:
            self._add_diagnostic(source, "source", "source indisponible")
        return raw

    def _parse(self, source: str, parse: Callable[[], Sequence[ParseResult]]) -> List[Record]:
        """
        Applique un parseur et conserve ses diagnostics

        Args:
            source: Nom de la source
            parse: Callable appliquant le parseur à la sortie brute

        Returns:
            list: Records produits (vide si la sortie est inexploitable)
        """
        try:
            results = parse()
        except MalformedSource as e:
            self._add_diagnostic(source, "source", e.message)
            return []

        records, diagnostics = split_results(results)
        for diagnostic in diagnostics:
            self.logger.warning(str(diagnostic))
        self.diagnostics.extend(diagnostics)

        self.logger.debug(f"{source}: {len(records)} élément(s), {len(diagnostics)} diagnostic(s)")
        return records

    def _add_diagnostic(self, source: str, fragment: str, message: str):
        diagnostic = ParseDiagnostic(source, fragment, message)
        self.logger.warning(str(diagnostic))
        self.diagnostics.append(diagnostic)

    def _execute_command(self, command: List[str], encoding: str = 'utf-8') -> Optional[str]:
        """
        Exécute une commande système et retourne le résultat

        Args:
            command: Commande à exécuter (liste d'arguments)
            encoding: Encodage de la sortie ("oem" pour les outils console Windows)

        Returns:
            str: Sortie de la commande ou None en cas d'erreur
        """
        timeout = self.config.getint('inventory', 'command_timeout', 120)
        command_line = ' '.join(command)

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                timeout=timeout
            )

            if result.returncode == 0:
                return result.stdout.decode(encoding, errors='replace')
            else:
                stderr = result.stderr.decode(encoding, errors='replace').strip()
                self.logger.warning(f"Commande échouée: {command_line} (code: {result.returncode}) {stderr}")
                return None

        except subprocess.TimeoutExpired:
            self.logger.warning(f"Timeout pour la commande: {command_line}")
            return None
        except OSError as e:
            self.logger.warning(f"Erreur lors de l'exécution de '{command_line}': {e}")
            return None

    def _read_file(self, file_path: str) -> Optional[str]:
        """
        Lit un fichier de manière sécurisée

        Args:
            file_path: Chemin vers le fichier

        Returns:
            str: Contenu du fichier ou None
        """
        try:
            with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
                return f.read()
        except FileNotFoundError:
            self.logger.debug(f"Fichier non trouvé: {file_path}")
            return None
        except OSError as e:
            self.logger.warning(f"Erreur lecture fichier {file_path}: {e}")
            return None

    def _file_source(self, file_path: str) -> RawSourceAdapter:
        """Source brute lue depuis un fichier sauvegardé"""
        return lambda: self._read_file(file_path)

    def get_collection_stats(self) -> dict:
        """
        Retourne les statistiques de la dernière collecte

        Returns:
            dict: Statistiques du collecteur
        """
        return {
            'collector_name': self.collector_name,
            'collection_duration': self.last_collection_duration,
            'diagnostics_count': len(self.diagnostics),
            'diagnostics': [str(d) for d in self.diagnostics]
        }
