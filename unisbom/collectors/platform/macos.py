"""
Collecteur spécifique macOS

Une seule source brute : la sortie texte de system_profiler, qui couvre
le système (SPSoftwareDataType), les applications (SPApplicationsDataType)
et les extensions du noyau (SPExtensionsDataType).
"""

import platform
from typing import Optional

from ...core.record import EPOCH, Kind, Record
from ...parsers.blocks import parse_blocks
from ..base import BaseCollector, CollectResult, RawSourceAdapter

SOURCE_NAME = "system_profiler"

APPLE_DEFAULT_PUBLISHERS = (
    "Apple Code Signing Certification Authority",
    "Apple Root CA",
)


class MacOSCollector(BaseCollector):
    """
    Collecteur spécifique pour macOS

    Args:
        config: Instance de InventoryConfig
        logger: Logger à utiliser
        profiler: Source brute de remplacement (sortie de system_profiler)
        source_file: Sortie de system_profiler sauvegardée à relire
    """

    platform_name = "macOS"

    def __init__(self, config=None, logger=None, profiler: Optional[RawSourceAdapter] = None,
                 source_file: Optional[str] = None):
        super().__init__(config, logger)

        if profiler is not None:
            self.profiler = profiler
        elif source_file:
            self.profiler = self._file_source(source_file)
        else:
            self.profiler = self._run_system_profiler

    def collect(self) -> CollectResult:
        """
        Collecte le système, les applications et les extensions macOS

        Returns:
            tuple: (records ordonnés, diagnostics)
        """
        self._start_collection()

        raw = self._fetch(SOURCE_NAME, self.profiler)
        if raw is None:
            self._end_collection()
            return [], list(self.diagnostics)

        records = self._parse(SOURCE_NAME, lambda: parse_blocks(raw, Kind.APPLICATION))
        if not records:
            self._end_collection()
            return [], list(self.diagnostics)

        os_versions = [r.version for r in records if r.kind == Kind.OS]
        applications = [r for r in records if r.kind == Kind.APPLICATION]
        drivers = [r for r in records if r.kind == Kind.DRIVER]

        if not self.config.getboolean('inventory', 'collect_applications', True):
            applications = []
        if not self.config.getboolean('inventory', 'collect_drivers', True):
            drivers = []

        os_record = self._build_os_record(os_versions[0] if os_versions else None)

        self.logger.info(f"macOS: {len(applications)} application(s), {len(drivers)} extension(s)")
        self._end_collection()

        return [os_record] + applications + drivers, list(self.diagnostics)

    def _build_os_record(self, version: Optional[str]) -> Record:
        """
        Construit l'enregistrement du système hôte

        Args:
            version: Version lue dans system_profiler, ou None

        Returns:
            Record: Record de type OS
        """
        if not version:
            version = platform.mac_ver()[0]
            self.logger.debug(f"Version macOS absente de system_profiler, platform: {version!r}")

        return Record(
            kind=Kind.OS,
            name=self.platform_name,
            id=self.platform_name,
            version=version,
            path="/",
            modified=EPOCH,
            publishers=APPLE_DEFAULT_PUBLISHERS,
        )

    def _run_system_profiler(self) -> Optional[str]:
        """Source brute : system_profiler en niveau de détail complet"""
        self.logger.info("Collecte des applications et extensions, veuillez patienter...")
        return self._execute_command([
            "system_profiler",
            "SPSoftwareDataType",
            "SPApplicationsDataType",
            "SPExtensionsDataType",
            "-detailLevel", "full",
        ])
