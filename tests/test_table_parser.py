"""Tests du parseur de sorties tabulaires."""

from datetime import datetime, timezone

import pytest

from unisbom.core.errors import MalformedSource
from unisbom.core.record import EPOCH, Kind, ParseDiagnostic, Record
from unisbom.parsers import DPKG_LAYOUT, DRIVERQUERY_LAYOUT, RPM_LAYOUT, parse_table, split_results

from samples import DPKG_OUTPUT, DRIVERQUERY_OUTPUT


def test_driverquery_rows():
    records, diagnostics = split_results(parse_table(DRIVERQUERY_OUTPUT, DRIVERQUERY_LAYOUT))

    assert diagnostics == []
    assert [r.id for r in records] == ["ACPI", "disk"]

    acpi = records[0]
    assert acpi.kind == Kind.DRIVER
    assert acpi.name == "Microsoft ACPI Driver"
    assert acpi.path == "\\SystemRoot\\system32\\drivers\\ACPI.sys"
    assert acpi.version == ""
    assert acpi.modified == datetime(2006, 6, 21, tzinfo=timezone.utc)
    assert records[1].modified == EPOCH


def test_column_reordering_gives_identical_records():
    swapped = (
        '"Path","Display Name","Driver Type","Link Date","Module Name"\n'
        '"\\SystemRoot\\system32\\drivers\\ACPI.sys","Microsoft ACPI Driver","Kernel ",'
        '"6/21/2006 12:00:00 AM","ACPI"\n'
        '"C:\\Windows\\system32\\drivers\\disk.sys","Disk Driver","Kernel ","","disk"\n'
    )

    assert parse_table(swapped, DRIVERQUERY_LAYOUT) == parse_table(DRIVERQUERY_OUTPUT, DRIVERQUERY_LAYOUT)


def test_short_row_is_a_diagnostic_and_parsing_continues():
    text = (
        '"Module Name","Display Name","Driver Type","Link Date","Path"\n'
        '"broken","Broken"\n'
        '"disk","Disk Driver","Kernel ","","C:\\Windows\\system32\\drivers\\disk.sys"\n'
    )

    results = parse_table(text, DRIVERQUERY_LAYOUT)

    assert len(results) == 2
    assert isinstance(results[0], ParseDiagnostic)
    assert results[0].fragment == "ligne 2"
    assert isinstance(results[1], Record)
    assert results[1].id == "disk"


def test_empty_id_is_a_diagnostic():
    text = (
        '"Module Name","Display Name","Driver Type","Link Date","Path"\n'
        '"","Nameless","Kernel ","",""\n'
    )

    [result] = parse_table(text, DRIVERQUERY_LAYOUT)

    assert isinstance(result, ParseDiagnostic)
    assert result.source == "driverquery"


def test_missing_id_column_raises():
    text = '"Display Name","Path"\n"Disk Driver","disk.sys"\n'

    with pytest.raises(MalformedSource):
        parse_table(text, DRIVERQUERY_LAYOUT)


def test_dpkg_keeps_installed_packages_only():
    records, diagnostics = split_results(parse_table(DPKG_OUTPUT, DPKG_LAYOUT))

    assert diagnostics == []
    assert [r.id for r in records] == ["bash", "coreutils"]

    bash = records[0]
    assert bash.kind == Kind.PACKAGE
    assert bash.name == "bash"
    assert bash.version == "5.1-6ubuntu1"
    assert bash.publishers == ("Ubuntu Developers <ubuntu-devel-discuss@lists.ubuntu.com>",)
    assert bash.modified == datetime.fromtimestamp(1665000000, tz=timezone.utc)
    assert records[1].modified == EPOCH


def test_rpm_layout_qualifies_id_with_arch():
    text = (
        "Name\tArch\tVersion\tVendor\tInstallTime\n"
        "glibc\tx86_64\t2.34-40.el9\tRed Hat, Inc.\t1665000000\n"
        "glibc\ti686\t2.34-40.el9\tRed Hat, Inc.\t1665000000\n"
        "gpg-pubkey\t(none)\t8483c65d-5ccc5b19\t(none)\t1664000000\n"
    )

    records, _ = split_results(parse_table(text, RPM_LAYOUT))

    assert [r.id for r in records] == ["glibc.x86_64", "glibc.i686", "gpg-pubkey"]
    assert [r.name for r in records] == ["glibc", "glibc", "gpg-pubkey"]
    assert records[0].publishers == ("Red Hat, Inc.",)
    assert records[2].publishers == ()
    assert records[2].version == "8483c65d-5ccc5b19"
