"""Tests des collecteurs de plateforme avec sources brutes injectées."""

import sys
import types

import pytest

from unisbom.collectors import get_platform_collector
from unisbom.collectors.platform.linux import LinuxCollector, parse_os_release
from unisbom.collectors.platform.macos import APPLE_DEFAULT_PUBLISHERS, MacOSCollector
from unisbom.collectors.platform.windows import WindowsCollector, expand_system_root
from unisbom.core.collector import InventoryCollector
from unisbom.core.record import EPOCH, Kind
from unisbom.parsers import RPM_LAYOUT

from samples import DPKG_OUTPUT, DRIVERQUERY_OUTPUT, OS_RELEASE, PROFILER_OUTPUT, REGISTRY_OUTPUT, VER_OUTPUT


@pytest.fixture
def windows_env(monkeypatch):
    monkeypatch.setenv("SystemRoot", "C:\\Windows")
    monkeypatch.setenv("SystemDrive", "C:")


class TestMacOSCollector:

    def test_collect_orders_os_applications_drivers(self, config):
        collector = MacOSCollector(config, profiler=lambda: PROFILER_OUTPUT)

        records, diagnostics = collector.collect()

        assert [r.kind for r in records] == [Kind.OS, Kind.APPLICATION, Kind.APPLICATION, Kind.DRIVER]
        assert len(diagnostics) == 1

    def test_os_record(self, config):
        collector = MacOSCollector(config, profiler=lambda: PROFILER_OUTPUT)

        os_record = collector.collect()[0][0]

        assert os_record.id == "macOS"
        assert os_record.name == "macOS"
        assert os_record.version == "13.0 (22A380)"
        assert os_record.path == "/"
        assert os_record.modified == EPOCH
        assert os_record.publishers == APPLE_DEFAULT_PUBLISHERS

    def test_drivers_can_be_disabled(self, config):
        config.set('inventory', 'collect_drivers', 'false')
        collector = MacOSCollector(config, profiler=lambda: PROFILER_OUTPUT)

        records, _ = collector.collect()

        assert Kind.DRIVER not in {r.kind for r in records}

    def test_unavailable_source(self, config):
        collector = MacOSCollector(config, profiler=lambda: None)

        records, diagnostics = collector.collect()

        assert records == []
        assert len(diagnostics) == 1
        assert diagnostics[0].message == "source indisponible"

    def test_malformed_source_contributes_nothing(self, config):
        collector = MacOSCollector(config, profiler=lambda: "  \n")

        records, diagnostics = collector.collect()

        assert records == []
        assert diagnostics[0].source == "system_profiler"

    def test_saved_output_is_read(self, config, profiler_file):
        collector = MacOSCollector(config, source_file=str(profiler_file))

        records, _ = collector.collect()

        assert "Google Drive" in [r.id for r in records]
        assert collector.get_collection_stats()['diagnostics_count'] == 1


class TestWindowsCollector:

    def make_collector(self, config, **sources):
        defaults = {
            'os_version': lambda: VER_OUTPUT,
            'applications': lambda: REGISTRY_OUTPUT,
            'drivers': lambda: DRIVERQUERY_OUTPUT,
        }
        defaults.update(sources)
        return WindowsCollector(config, resolve_versions=False, **defaults)

    def test_collect(self, config, windows_env):
        records, diagnostics = self.make_collector(config).collect()

        assert [r.id for r in records] == ["Microsoft Windows", "7-Zip", "Git_is1", "ACPI", "disk"]
        assert diagnostics == []

    def test_os_record(self, config, windows_env):
        os_record = self.make_collector(config).collect()[0][0]

        assert os_record.kind == Kind.OS
        assert os_record.version == "10.0.19045.2130"
        assert os_record.path == "C:\\"
        assert os_record.publishers == ("Microsoft",)

    def test_driver_paths_are_expanded(self, config, windows_env):
        records, _ = self.make_collector(config).collect()
        acpi = next(r for r in records if r.id == "ACPI")

        assert acpi.path == "C:\\Windows\\system32\\drivers\\ACPI.sys"

    def test_unreadable_ver_output(self, config, windows_env):
        records, diagnostics = self.make_collector(config, os_version=lambda: "Windows").collect()

        assert records[0].kind == Kind.OS
        assert [d.source for d in diagnostics] == ["ver"]

    def test_failed_source_keeps_the_others(self, config, windows_env):
        records, diagnostics = self.make_collector(config, drivers=lambda: None).collect()

        assert [r.kind for r in records] == [Kind.OS, Kind.APPLICATION, Kind.APPLICATION]
        assert [d.source for d in diagnostics] == ["driverquery"]

    def test_all_sources_failed(self, config):
        collector = self.make_collector(
            config,
            os_version=lambda: None,
            applications=lambda: None,
            drivers=lambda: None,
        )

        records, diagnostics = collector.collect()

        assert records == []
        assert len(diagnostics) == 3

    def test_driver_version_from_file_resource(self, config, windows_env, monkeypatch):
        fake_win32api = types.ModuleType("win32api")
        fake_win32api.error = OSError
        fake_win32api.GetFileVersionInfo = lambda path, block: {
            'ProductVersionMS': (10 << 16) | 0,
            'ProductVersionLS': (19041 << 16) | 1,
        }
        monkeypatch.setitem(sys.modules, "win32api", fake_win32api)

        collector = WindowsCollector(
            config,
            os_version=lambda: VER_OUTPUT,
            applications=lambda: None,
            drivers=lambda: DRIVERQUERY_OUTPUT,
        )
        records, _ = collector.collect()

        assert [r.version for r in records if r.kind == Kind.DRIVER] == ["10.0.19041.1", "10.0.19041.1"]


@pytest.mark.parametrize("path, expected", [
    ("\\SystemRoot\\system32\\drivers\\acpi.sys", "C:\\Windows\\system32\\drivers\\acpi.sys"),
    ("system32\\DRIVERS\\disk.sys", "C:\\Windows\\system32\\DRIVERS\\disk.sys"),
    ("\\??\\C:\\Drivers\\vendor.sys", "C:\\Drivers\\vendor.sys"),
    ("D:\\custom.sys", "D:\\custom.sys"),
    ("", ""),
])
def test_expand_system_root(path, expected, windows_env):
    assert expand_system_root(path) == expected


class TestLinuxCollector:

    def test_collect(self, config):
        collector = LinuxCollector(config, os_release=lambda: OS_RELEASE, packages=lambda: DPKG_OUTPUT)

        records, diagnostics = collector.collect()

        assert [r.id for r in records] == ["Ubuntu", "bash", "coreutils"]
        assert diagnostics == []

        os_record = records[0]
        assert os_record.kind == Kind.OS
        assert os_record.version == "22.04"
        assert os_record.path == "/"
        assert os_record.publishers == ()

    def test_rpm_database(self, config):
        rpm_output = "Name\tVersion\tVendor\tInstallTime\nbash\t5.1.8-4.el9\tRed Hat, Inc.\t1665000000\n"
        collector = LinuxCollector(
            config,
            os_release=lambda: 'NAME="Rocky Linux"\nVERSION_ID="9.0"\n',
            packages=lambda: rpm_output,
            package_layout=RPM_LAYOUT,
        )

        records, _ = collector.collect()

        assert [(r.kind, r.id) for r in records] == [(Kind.OS, "Rocky Linux"), (Kind.PACKAGE, "bash")]

    def test_multiarch_packages_stay_distinct(self, config, monkeypatch):
        commands = []

        def fake_execute(self, command, encoding='utf-8'):
            commands.append(command)
            return (
                "libc6:amd64\t2.35-0ubuntu3.1\tUbuntu Developers\tinstalled\t1665000000\n"
                "libc6:i386\t2.35-0ubuntu3.1\tUbuntu Developers\tinstalled\t1665000000\n"
            )

        monkeypatch.setattr("unisbom.collectors.platform.linux.shutil.which",
                            lambda name: "/usr/bin/dpkg-query" if name == "dpkg-query" else None)
        monkeypatch.setattr(LinuxCollector, "_execute_command", fake_execute)

        collector = LinuxCollector(config, os_release=lambda: OS_RELEASE)
        result = InventoryCollector().run(collector)

        assert "${binary:Package}" in commands[0][-1]
        assert [r.id for r in result.records if r.kind == Kind.PACKAGE] == ["libc6:amd64", "libc6:i386"]

    def test_multilib_rpm_packages_stay_distinct(self, config):
        rpm_output = (
            "Name\tArch\tVersion\tVendor\tInstallTime\n"
            "glibc\tx86_64\t2.34-40.el9\tRocky Enterprise Software Foundation\t1665000000\n"
            "glibc\ti686\t2.34-40.el9\tRocky Enterprise Software Foundation\t1665000000\n"
        )
        collector = LinuxCollector(
            config,
            os_release=lambda: 'NAME="Rocky Linux"\nVERSION_ID="9.0"\n',
            packages=lambda: rpm_output,
            package_layout=RPM_LAYOUT,
        )

        result = InventoryCollector().run(collector)

        assert [r.id for r in result.records if r.kind == Kind.PACKAGE] == ["glibc.x86_64", "glibc.i686"]

    def test_missing_os_release(self, config):
        collector = LinuxCollector(config, os_release=lambda: None, packages=lambda: DPKG_OUTPUT)

        records, diagnostics = collector.collect()

        assert records[0].id == "Linux"
        assert [d.source for d in diagnostics] == ["os-release"]

    def test_all_sources_failed(self, config):
        collector = LinuxCollector(config, os_release=lambda: None, packages=lambda: None)

        records, diagnostics = collector.collect()

        assert records == []
        assert len(diagnostics) == 2


def test_parse_os_release():
    info = parse_os_release(OS_RELEASE + "# commentaire\n\nBROKEN LINE\n")

    assert info['NAME'] == "Ubuntu"
    assert info['VERSION_ID'] == "22.04"
    assert info['ID'] == "ubuntu"
    assert "BROKEN LINE" not in info


@pytest.mark.parametrize("platform_name, expected", [
    ("darwin", MacOSCollector),
    ("win32", WindowsCollector),
    ("linux", LinuxCollector),
    ("freebsd13", LinuxCollector),
])
def test_get_platform_collector(platform_name, expected, config, monkeypatch):
    monkeypatch.setattr(sys, "platform", platform_name)

    assert isinstance(get_platform_collector(config), expected)


def test_saved_output_always_uses_macos_collector(config, profiler_file, monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")

    collector = get_platform_collector(config, source_file=str(profiler_file))

    assert isinstance(collector, MacOSCollector)
