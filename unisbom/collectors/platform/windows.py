"""
Collecteur spécifique Windows

Sources brutes :
- `cmd /c ver` pour la version du système
- `reg query ... /s` sur les clés Uninstall pour les applications
- `driverquery /v /FO CSV` pour les pilotes

La version des pilotes est lue dans la ressource de version du fichier
via pywin32 lorsque le module est disponible.
"""

import dataclasses
import os
import platform
import re
from typing import List, Optional

from ...core.record import EPOCH, Kind, Record
from ...parsers.registry import parse_registry
from ...parsers.table import DRIVERQUERY_LAYOUT, parse_table
from ..base import BaseCollector, CollectResult, RawSourceAdapter

MICROSOFT_DEFAULT_PUBLISHERS = ("Microsoft",)

UNINSTALL_LOCATIONS = (
    r"HKLM\SOFTWARE\Microsoft\Windows\CurrentVersion\Uninstall",
    r"HKLM\SOFTWARE\Wow6432Node\Microsoft\Windows\CurrentVersion\Uninstall",
)

_VER_PATTERN = re.compile(r'\[Version\s+([^\]]+)\]', re.IGNORECASE)


class WindowsCollector(BaseCollector):
    """
    Collecteur spécifique pour Windows

    Chaque source brute peut être remplacée (tests, relecture) par un
    callable sans argument retournant le texte brut ou None.
    """

    platform_name = "Microsoft Windows"

    def __init__(self, config=None, logger=None,
                 os_version: Optional[RawSourceAdapter] = None,
                 applications: Optional[RawSourceAdapter] = None,
                 drivers: Optional[RawSourceAdapter] = None,
                 resolve_versions: bool = True):
        super().__init__(config, logger)

        self.os_version_source = os_version or self._run_ver
        self.applications_source = applications or self._run_reg_query
        self.drivers_source = drivers or self._run_driverquery
        self.resolve_versions = resolve_versions

    def collect(self) -> CollectResult:
        """
        Collecte le système, les applications et les pilotes Windows

        Returns:
            tuple: (records ordonnés, diagnostics)
        """
        self._start_collection()
        self.logger.info("Collecte des applications et pilotes, veuillez patienter...")

        raw_ver = self._fetch("ver", self.os_version_source)
        any_source = raw_ver is not None

        applications: List[Record] = []
        if self.config.getboolean('inventory', 'collect_applications', True):
            raw_apps = self._fetch("registry", self.applications_source)
            if raw_apps is not None:
                any_source = True
                applications = self._parse("registry", lambda: parse_registry(raw_apps, Kind.APPLICATION))

        drivers: List[Record] = []
        if self.config.getboolean('inventory', 'collect_drivers', True):
            raw_drivers = self._fetch("driverquery", self.drivers_source)
            if raw_drivers is not None:
                any_source = True
                drivers = self._parse("driverquery", lambda: parse_table(raw_drivers, DRIVERQUERY_LAYOUT))
                drivers = [self._normalize_driver(d) for d in drivers]

        if not any_source:
            self._end_collection()
            return [], list(self.diagnostics)

        os_record = self._build_os_record(raw_ver)

        self.logger.info(f"Windows: {len(applications)} application(s), {len(drivers)} pilote(s)")
        self._end_collection()

        return [os_record] + applications + drivers, list(self.diagnostics)

    def _build_os_record(self, raw_ver: Optional[str]) -> Record:
        """
        Construit l'enregistrement du système hôte

        Args:
            raw_ver: Sortie de `ver` (ex: "Microsoft Windows [Version 10.0.19045.2130]")

        Returns:
            Record: Record de type OS
        """
        version = ""
        if raw_ver:
            match = _VER_PATTERN.search(raw_ver)
            if match:
                version = match.group(1).strip()
            else:
                self._add_diagnostic("ver", raw_ver.strip()[:80], "version introuvable")

        if not version:
            version = platform.version()

        system_drive = os.environ.get("SystemDrive", "C:")

        return Record(
            kind=Kind.OS,
            name=self.platform_name,
            id=self.platform_name,
            version=version,
            path=system_drive.rstrip("\\") + "\\",
            modified=EPOCH,
            publishers=MICROSOFT_DEFAULT_PUBLISHERS,
        )

    def _normalize_driver(self, driver: Record) -> Record:
        """
        Résout le chemin et la version d'un pilote

        Args:
            driver: Record issu de driverquery

        Returns:
            Record: Record complété (nouvelle instance)
        """
        path = expand_system_root(driver.path)
        version = driver.version

        if self.resolve_versions and path and not version:
            version = self._file_version(path)

        if path == driver.path and version == driver.version:
            return driver
        return dataclasses.replace(driver, path=path, version=version)

    def _file_version(self, path: str) -> str:
        """
        Lit la version produit d'un fichier via pywin32

        Args:
            path: Chemin du fichier

        Returns:
            str: Version "a.b.c.d", ou "" si indisponible
        """
        try:
            import win32api
        except ImportError:
            self.logger.debug("Module pywin32 non disponible, version des pilotes non résolue")
            self.resolve_versions = False
            return ""

        try:
            info = win32api.GetFileVersionInfo(path, "\\")
        except win32api.error as e:
            self.logger.warning(f"Version illisible pour {path}: {e}")
            return ""

        ms = info['ProductVersionMS']
        ls = info['ProductVersionLS']
        return f"{ms >> 16}.{ms & 0xFFFF}.{ls >> 16}.{ls & 0xFFFF}"

    def _run_ver(self) -> Optional[str]:
        """Source brute : version du système"""
        return self._execute_command(["cmd.exe", "/c", "ver"], encoding="oem")

    def _run_reg_query(self) -> Optional[str]:
        """Source brute : clés Uninstall du registre (natives et Wow6432Node)"""
        outputs = []
        for location in UNINSTALL_LOCATIONS:
            output = self._execute_command(["reg", "query", location, "/s"], encoding="oem")
            if output is not None:
                outputs.append(output)

        if not outputs:
            return None
        return "\n".join(outputs)

    def _run_driverquery(self) -> Optional[str]:
        """Source brute : liste détaillée des pilotes au format CSV"""
        return self._execute_command(["driverquery.exe", "/v", "/FO", "CSV"], encoding="oem")


def expand_system_root(path: str) -> str:
    r"""
    Remplace les préfixes \SystemRoot et \??\ des chemins de pilotes

    Args:
        path: Chemin brut

    Returns:
        str: Chemin absolu
    """
    if not path:
        return path

    system_root = os.environ.get("SystemRoot", r"C:\Windows")
    lowered = path.lower()

    if lowered.startswith("\\systemroot\\"):
        return system_root + path[len("\\SystemRoot"):]
    if lowered.startswith("system32\\"):
        return system_root + "\\" + path
    if path.startswith("\\??\\"):
        return path[4:]
    return path
