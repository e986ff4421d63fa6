"""
Module de logging pour l'outil d'inventaire

Ce module fournit un système de logging centralisé avec :
- Sortie console sur stderr (stdout est réservé à l'inventaire)
- Fichier de log optionnel avec rotation automatique
- Formatage cohérent
"""

import os
import sys
import logging
import logging.handlers

LOGGER_NAME = 'unisbom'


class InventoryLogger:
    """
    Gestionnaire de logging pour l'outil d'inventaire

    Cette classe configure le logger 'unisbom' utilisé par l'ensemble des
    modules (collecteurs, parseurs, agrégateur).
    """

    def __init__(self, config=None):
        """
        Initialise le système de logging

        Args:
            config: Instance de InventoryConfig pour récupérer les paramètres de log
        """
        self.config = config
        self.logger = logging.getLogger(LOGGER_NAME)

        # Reconfiguration complète à chaque exécution
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        self._setup_logging()

    def _setup_logging(self):
        """
        Configure le système de logging avec les handlers appropriés

        Configure :
        - Le niveau de log basé sur la configuration
        - La sortie console (stderr)
        - Le fichier de log avec rotation, s'il est configuré
        """
        if self.config:
            log_level_str = self.config.get('inventory', 'log_level', 'WARNING')
            log_file = self.config.get('logging', 'log_file', '')
            max_size = self.config.getint('logging', 'max_log_size', 10485760)  # 10MB
            backup_count = self.config.getint('logging', 'backup_count', 5)
        else:
            log_level_str = 'WARNING'
            log_file = ''
            max_size = 10485760
            backup_count = 5

        log_level = getattr(logging, str(log_level_str).upper(), logging.WARNING)
        self.logger.setLevel(log_level)

        # Handler console : format simplifié
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter(fmt='%(levelname)s - %(message)s'))
        self.logger.addHandler(console_handler)

        if log_file:
            formatter = logging.Formatter(
                fmt='%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            try:
                log_dir = os.path.dirname(log_file)
                if log_dir and not os.path.exists(log_dir):
                    os.makedirs(log_dir, exist_ok=True)

                file_handler = logging.handlers.RotatingFileHandler(
                    filename=log_file,
                    maxBytes=max_size,
                    backupCount=backup_count,
                    encoding='utf-8'
                )
                file_handler.setLevel(log_level)
                file_handler.setFormatter(formatter)
                self.logger.addHandler(file_handler)

            except OSError as e:
                self.logger.warning(f"Erreur lors de la configuration du logging fichier: {e}")

        self.logger.debug(f"Logging initialisé (niveau: {logging.getLevelName(log_level)})")

    def get_logger(self) -> logging.Logger:
        """
        Retourne l'instance du logger

        Returns:
            logging.Logger: Instance du logger configuré
        """
        return self.logger

    def debug(self, message: str):
        """Log un message de niveau DEBUG"""
        self.logger.debug(message)

    def log_system_info(self):
        """
        Log les informations d'environnement au démarrage

        Utile pour le diagnostic et le debug
        """
        self.debug(f"Plateforme: {sys.platform}")
        self.debug(f"Version Python: {sys.version.split()[0]}")
        if self.config:
            self.debug(f"Fichier de configuration: {self.config.config_file}")


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Fonction utilitaire pour récupérer un logger nommé

    Args:
        name: Nom du logger

    Returns:
        logging.Logger: Instance du logger
    """
    return logging.getLogger(name)
