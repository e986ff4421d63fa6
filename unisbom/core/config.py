"""
Module de configuration pour l'outil d'inventaire

Ce module gère la configuration, incluant :
- Lecture du fichier de configuration
- Validation des paramètres
- Valeurs par défaut
- Chemin par défaut selon la plateforme
"""

import os
import sys
import configparser
from typing import Dict, Any, Optional


VALID_FORMATS = ('text', 'json')
VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class InventoryConfig:
    """
    Gestionnaire de configuration de l'outil d'inventaire

    Cette classe centralise les paramètres de collecte, de sortie et de
    journalisation. La sortie standard étant réservée à l'inventaire, les
    messages de chargement sont écrits sur la sortie d'erreur.
    """

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialise la configuration

        Args:
            config_file: Chemin vers le fichier de configuration (optionnel)
        """
        self.config = configparser.ConfigParser()
        self.config_file = config_file or self._get_default_config_path()

        # Définir les valeurs par défaut
        self._set_defaults()

        # Charger la configuration depuis le fichier
        self._load_config()

    def _get_default_config_path(self) -> str:
        """
        Détermine le chemin par défaut du fichier de configuration selon la plateforme

        Returns:
            str: Chemin vers le fichier de configuration
        """
        if sys.platform == "win32":
            return os.path.join(
                os.environ.get("PROGRAMDATA", "C:\\ProgramData"),
                "unisbom",
                "config.ini"
            )
        else:
            # Linux, macOS et autres Unix
            return "/etc/unisbom/config.ini"

    def _set_defaults(self):
        """
        Définit les valeurs de configuration par défaut

        Ces valeurs sont utilisées si aucun fichier de configuration n'est trouvé
        ou si certaines sections/clés sont manquantes.
        """
        self.config.add_section('inventory')
        self.config.set('inventory', 'format', 'text')
        self.config.set('inventory', 'log_level', 'WARNING')
        self.config.set('inventory', 'command_timeout', '120')
        self.config.set('inventory', 'collect_applications', 'true')
        self.config.set('inventory', 'collect_drivers', 'true')

        # Pas de fichier de log par défaut : console uniquement
        self.config.add_section('logging')
        self.config.set('logging', 'log_file', '')
        self.config.set('logging', 'max_log_size', '10485760')  # 10MB
        self.config.set('logging', 'backup_count', '5')

    def _load_config(self):
        """
        Charge la configuration depuis le fichier

        Si le fichier n'existe pas, utilise les valeurs par défaut.
        Un fichier illisible est signalé et les valeurs par défaut sont conservées.
        """
        if not os.path.exists(self.config_file):
            return

        try:
            self.config.read(self.config_file, encoding='utf-8')
        except (configparser.Error, OSError, UnicodeDecodeError) as e:
            print(f"Erreur lors du chargement de la configuration {self.config_file}: {e}", file=sys.stderr)
            print("Utilisation des valeurs par défaut", file=sys.stderr)

    def get(self, section: str, option: str, fallback: Any = None) -> str:
        """
        Récupère une valeur de configuration

        Args:
            section: Nom de la section
            option: Nom de l'option
            fallback: Valeur par défaut si non trouvée

        Returns:
            str: Valeur de configuration
        """
        return self.config.get(section, option, fallback=fallback)

    def getboolean(self, section: str, option: str, fallback: bool = False) -> bool:
        """Récupère une valeur booléenne de configuration"""
        try:
            return self.config.getboolean(section, option, fallback=fallback)
        except ValueError:
            return fallback

    def getint(self, section: str, option: str, fallback: int = 0) -> int:
        """Récupère une valeur entière de configuration"""
        try:
            return self.config.getint(section, option, fallback=fallback)
        except ValueError:
            return fallback

    def set(self, section: str, option: str, value: Any):
        """
        Surcharge une valeur (ex: option de ligne de commande)

        Les booléens sont écrits "true"/"false" pour rester lisibles par
        getboolean().

        Args:
            section: Nom de la section
            option: Nom de l'option
            value: Nouvelle valeur
        """
        if isinstance(value, bool):
            value = "true" if value else "false"
        if not self.config.has_section(section):
            self.config.add_section(section)
        self.config.set(section, option, str(value))

    def get_inventory_config(self) -> Dict[str, Any]:
        """
        Récupère la configuration complète de la collecte

        Returns:
            dict: Configuration de collecte
        """
        return {
            'format': self.get('inventory', 'format', 'text'),
            'log_level': self.get('inventory', 'log_level', 'WARNING'),
            'command_timeout': self.getint('inventory', 'command_timeout', 120),
            'collect_applications': self.getboolean('inventory', 'collect_applications', True),
            'collect_drivers': self.getboolean('inventory', 'collect_drivers', True)
        }

    def validate(self) -> bool:
        """
        Valide la configuration courante

        Returns:
            bool: True si la configuration est valide, False sinon
        """
        errors = []

        output_format = self.get('inventory', 'format')
        if output_format not in VALID_FORMATS:
            errors.append(f"Format de sortie invalide (doit être: {', '.join(VALID_FORMATS)})")

        log_level = (self.get('inventory', 'log_level') or '').upper()
        if log_level not in VALID_LOG_LEVELS:
            errors.append("Niveau de log invalide")

        try:
            timeout = self.config.getint('inventory', 'command_timeout')
            if timeout <= 0:
                errors.append("Timeout des commandes invalide (doit être positif)")
        except ValueError:
            errors.append("Timeout des commandes invalide (doit être un entier)")

        if errors:
            for error in errors:
                print(f"Erreur de configuration: {error}", file=sys.stderr)
            return False

        return True
