import pytest

from app.enums import ExportFormat, RequestKind
from app.services.application.request_classifier import classify, export_format, is_write_request


@pytest.mark.parametrize("key", ["CPM", "cpm", "ID", "id", "AID", "aid", "GID", "gid"])
def test_each_marker_spelling_makes_a_write(key):
    assert classify({key: "1"}) is RequestKind.WRITE


def test_marker_with_empty_value_still_counts():
    assert is_write_request({"id": ""})


@pytest.mark.parametrize("key", ["Cpm", "Id", "ACPM", "USV", "dose"])
def test_other_spellings_are_not_markers(key):
    assert not is_write_request({key: "5"})


def test_write_wins_over_export():
    assert classify({"CPM": "20", "export": "csv"}) is RequestKind.WRITE


@pytest.mark.parametrize(
    "value,expected",
    [("csv", ExportFormat.CSV), (" XLSX ", ExportFormat.XLSX), ("Csv", ExportFormat.CSV)],
)
def test_export_format_is_trimmed_and_case_folded(value, expected):
    assert export_format({"export": value}) is expected
    assert classify({"export": value}) is RequestKind.EXPORT


def test_unknown_export_value_falls_back_to_view():
    assert export_format({"export": "pdf"}) is None
    assert classify({"export": "pdf"}) is RequestKind.VIEW


def test_plain_request_is_a_view():
    assert classify({}) is RequestKind.VIEW
    assert classify({"theme": "dark", "f_timestamp_from": "2026-02-01"}) is RequestKind.VIEW
