"""
Point d'entrée principal de unisbom

Collecte l'inventaire de l'hôte et l'écrit sur la sortie standard (ou dans
un fichier), en résumé texte ou en JSON. Les diagnostics sont écrits sur la
sortie d'erreur ; seul un échec complet de la collecte est fatal.
"""

import argparse
import sys

from unisbom import __version__
from unisbom.collectors import get_platform_collector
from unisbom.core.collector import InventoryCollector, InventoryResult
from unisbom.core.config import VALID_FORMATS, InventoryConfig
from unisbom.core.errors import CollectionFailed
from unisbom.core.logger import InventoryLogger
from unisbom.core.output import format_inventory


class UnisbomApp:
    """
    Application d'inventaire

    Cette classe assemble la configuration, le logging, le collecteur de
    la plateforme et l'agrégateur.
    """

    def __init__(self, config_path=None, overrides=None, source_file=None):
        """
        Initialise l'application

        Args:
            config_path: Chemin vers le fichier de configuration
            overrides: Valeurs imposées par la ligne de commande,
                {(section, option): valeur}
            source_file: Sortie brute sauvegardée à relire
        """
        self.config = InventoryConfig(config_path)
        for (section, option), value in (overrides or {}).items():
            self.config.set(section, option, value)

        self.logger = InventoryLogger(self.config)
        self.app_logger = self.logger.get_logger()

        self.collector = get_platform_collector(self.config, self.app_logger, source_file=source_file)
        self.aggregator = InventoryCollector(self.app_logger)

        self.logger.log_system_info()

    def collect(self) -> InventoryResult:
        """
        Effectue une collecte d'inventaire

        Returns:
            InventoryResult: Inventaire dédupliqué et diagnostics

        Raises:
            CollectionFailed: si aucune catégorie n'a pu être collectée
        """
        return self.aggregator.run(self.collector)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='unisbom',
        description="Construit une nomenclature logicielle (SBOM) du système courant."
    )

    parser.add_argument(
        '--format', '-f',
        choices=VALID_FORMATS,
        default=None,
        help="Format de sortie : text affiche un résumé de chaque élément, json toutes les informations"
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        help='Chemin vers le fichier de configuration'
    )

    parser.add_argument(
        '--input', '-i',
        type=str,
        help='Sortie de system_profiler sauvegardée à relire au lieu d\'interroger le système'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        help='Fichier de sortie (sortie standard par défaut)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Affiche les messages de debug'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser


def main(argv=None) -> int:
    """
    Point d'entrée principal avec gestion des arguments de ligne de commande

    Returns:
        int: Code de sortie (0 succès, 1 échec)
    """
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.format:
        overrides[('inventory', 'format')] = args.format
    if args.verbose:
        overrides[('inventory', 'log_level')] = 'DEBUG'

    app = UnisbomApp(args.config, overrides, source_file=args.input)

    if not app.config.validate():
        return 1

    settings = app.config.get_inventory_config()

    try:
        inventory = app.collect()
    except CollectionFailed as e:
        app.app_logger.error(f"Échec de la collecte: {e}")
        return 1

    output = format_inventory(inventory, settings['format'])

    if args.output:
        try:
            with open(args.output, 'w', encoding='utf-8') as f:
                f.write(output)
        except OSError as e:
            app.app_logger.error(f"Impossible d'écrire {args.output}: {e}")
            return 1
        app.app_logger.info(f"Inventaire sauvegardé dans: {args.output}")
    else:
        sys.stdout.write(output)

    return 0


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
