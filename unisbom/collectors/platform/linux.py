"""
Collecteur spécifique Linux

Sources brutes :
- /etc/os-release pour l'identité du système
- la base de paquets (dpkg-query, à défaut rpm) pour les paquets installés
"""

import shutil
from typing import Dict, List, Optional

from ...core.record import EPOCH, Kind, Record
from ...parsers.table import DPKG_COLUMNS, DPKG_LAYOUT, RPM_COLUMNS, RPM_LAYOUT, TableLayout, parse_table
from ..base import BaseCollector, CollectResult, RawSourceAdapter

OS_RELEASE_FILES = ("/etc/os-release", "/usr/lib/os-release")

# dpkg-query et rpm interprètent eux-mêmes les séquences \t et \n.
# Identifiants qualifiés par l'architecture : libc6:i386 (dpkg), glibc.i686 (rpm)
DPKG_FORMAT = r"${binary:Package}\t${Version}\t${Maintainer}\t${db:Status-Status}\t${db-fsys:Last-Modified}\n"
RPM_FORMAT = r"%{NAME}\t%{ARCH}\t%{VERSION}-%{RELEASE}\t%{VENDOR}\t%{INSTALLTIME}\n"


class LinuxCollector(BaseCollector):
    """
    Collecteur spécifique pour Linux

    Les paquets sont enregistrés avec le type "Package". La base utilisée
    est détectée à l'exécution (dpkg puis rpm) sauf si une source est fournie.
    """

    platform_name = "Linux"

    def __init__(self, config=None, logger=None,
                 os_release: Optional[RawSourceAdapter] = None,
                 packages: Optional[RawSourceAdapter] = None,
                 package_layout: TableLayout = DPKG_LAYOUT):
        super().__init__(config, logger)

        self.os_release_source = os_release or self._read_os_release

        if packages is not None:
            self.packages_source = packages
            self.package_layout = package_layout
        elif shutil.which("dpkg-query"):
            self.packages_source = self._run_dpkg_query
            self.package_layout = DPKG_LAYOUT
        elif shutil.which("rpm"):
            self.packages_source = self._run_rpm_query
            self.package_layout = RPM_LAYOUT
        else:
            self.packages_source = lambda: None
            self.package_layout = package_layout

    def collect(self) -> CollectResult:
        """
        Collecte le système et les paquets installés

        Returns:
            tuple: (records ordonnés, diagnostics)
        """
        self._start_collection()

        raw_release = self._fetch("os-release", self.os_release_source)
        any_source = raw_release is not None

        packages: List[Record] = []
        if self.config.getboolean('inventory', 'collect_applications', True):
            source = self.package_layout.source
            raw_packages = self._fetch(source, self.packages_source)
            if raw_packages is not None:
                any_source = True
                layout = self.package_layout
                packages = self._parse(source, lambda: parse_table(raw_packages, layout))

        if not any_source:
            self._end_collection()
            return [], list(self.diagnostics)

        os_record = self._build_os_record(parse_os_release(raw_release or ""))

        self.logger.info(f"Linux: {len(packages)} paquet(s)")
        self._end_collection()

        return [os_record] + packages, list(self.diagnostics)

    def _build_os_record(self, os_info: Dict[str, str]) -> Record:
        """
        Construit l'enregistrement du système hôte

        Args:
            os_info: Clés de /etc/os-release

        Returns:
            Record: Record de type OS
        """
        name = os_info.get('NAME') or self.platform_name
        version = os_info.get('VERSION_ID') or os_info.get('VERSION', '')

        return Record(
            kind=Kind.OS,
            name=name,
            id=name,
            version=version,
            path="/",
            modified=EPOCH,
            publishers=(),
        )

    def _read_os_release(self) -> Optional[str]:
        """Source brute : premier fichier os-release disponible"""
        for path in OS_RELEASE_FILES:
            content = self._read_file(path)
            if content is not None:
                return content
        return None

    def _run_dpkg_query(self) -> Optional[str]:
        """Source brute : paquets dpkg, précédés d'un en-tête de colonnes"""
        output = self._execute_command(["dpkg-query", "-W", "-f", DPKG_FORMAT])
        if output is None:
            return None
        return "\t".join(DPKG_COLUMNS) + "\n" + output

    def _run_rpm_query(self) -> Optional[str]:
        """Source brute : paquets rpm, précédés d'un en-tête de colonnes"""
        output = self._execute_command(["rpm", "-qa", "--queryformat", RPM_FORMAT])
        if output is None:
            return None
        return "\t".join(RPM_COLUMNS) + "\n" + output


def parse_os_release(content: str) -> Dict[str, str]:
    """
    Lit les paires CLÉ=valeur d'un fichier os-release

    Args:
        content: Contenu du fichier

    Returns:
        dict: Clés et valeurs, guillemets retirés
    """
    os_info = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, value = line.split('=', 1)
        os_info[key.strip()] = value.strip().strip('"').strip("'")
    return os_info
