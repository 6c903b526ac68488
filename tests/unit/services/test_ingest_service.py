import json

import pytest

from app.domain.date_range import Predicate
from app.domain.exceptions import ConfigError
from app.enums import IngestOutcome
from app.services.application.device_authorizer import DeviceAuthorizer
from app.services.application.ingest_service import ReadingIngestor, read_param, serialize_params
from app.utils.http import ClientAddress

LOCAL = ClientAddress(remote_addr="203.0.113.7")


@pytest.fixture()
def open_authorizer(tmp_path):
    return DeviceAuthorizer(tmp_path / "missing-whitelist.txt")


@pytest.fixture()
def ingestor(reading_repo, open_authorizer, fixed_clock, mock_audit_logger):
    return ReadingIngestor(reading_repo, open_authorizer, audit_logger=mock_audit_logger, clock=fixed_clock)


def test_read_param_takes_first_non_blank_alias():
    params = {"ID": "  ", "id": " gmc-1 ", "AID": "other"}
    assert read_param(params, ("ID", "id", "AID"), "UNKNOWN") == "gmc-1"
    assert read_param({}, ("ID",), "UNKNOWN") == "UNKNOWN"


def test_serialize_params_is_compact_json():
    assert serialize_params({}) == "{}"
    assert json.loads(serialize_params({"CPM": "20", "id": "µ"})) == {"CPM": "20", "id": "µ"}
    assert " " not in serialize_params({"a": "1", "b": "2"})


def test_full_upload_stores_one_row(ingestor, reading_repo):
    params = {"AID": "0230111", "GID": "0034021", "CPM": "15", "ACPM": "13.2", "uSV": "0.075"}

    assert ingestor.ingest(params, LOCAL) is IngestOutcome.ACCEPTED

    rows = reading_repo.query(Predicate())
    assert len(rows) == 1
    row = rows[0]
    assert row.timestamp == "2026-02-20 12:30:45"
    assert row.device_id == "0230111"
    assert row.cpm == "15"
    assert row.acpm == "13.2"
    assert row.usv == "0.075"
    assert row.dose == "0"
    assert row.client_ip == "203.0.113.7"
    assert json.loads(row.raw_data) == params


def test_missing_fields_are_defaulted(ingestor, reading_repo):
    assert ingestor.ingest({"cpm": ""}, ClientAddress()) is IngestOutcome.ACCEPTED

    row = reading_repo.query(Predicate())[0]
    assert (row.device_id, row.cpm, row.acpm, row.usv, row.dose) == ("UNKNOWN", "0", "0", "0.0", "0")
    assert row.client_ip == "UNKNOWN"


def test_forbidden_device_writes_nothing(tmp_path, reading_repo, fixed_clock, mock_audit_logger):
    allowlist = tmp_path / "whitelist.txt"
    allowlist.write_text("ABC123\n", encoding="utf-8")
    ingestor = ReadingIngestor(
        reading_repo, DeviceAuthorizer(allowlist), audit_logger=mock_audit_logger, clock=fixed_clock
    )

    assert ingestor.ingest({"ID": "xyz999", "CPM": "20"}, LOCAL) is IngestOutcome.FORBIDDEN
    assert reading_repo.count() == 0
    assert mock_audit_logger.log_event.call_args.kwargs["outcome"] == "forbidden"

    assert ingestor.ingest({"ID": "abc123", "CPM": "20"}, LOCAL) is IngestOutcome.ACCEPTED
    assert reading_repo.count() == 1


def test_unreadable_allowlist_propagates(tmp_path, reading_repo, fixed_clock):
    allowlist = tmp_path / "whitelist.txt"
    allowlist.mkdir()
    ingestor = ReadingIngestor(reading_repo, DeviceAuthorizer(allowlist), clock=fixed_clock)

    with pytest.raises(ConfigError):
        ingestor.ingest({"ID": "abc123"}, LOCAL)
    assert reading_repo.count() == 0


def test_accepted_reading_is_audited_with_its_id(ingestor, mock_audit_logger):
    ingestor.ingest({"ID": "gmc-1", "CPM": "20"}, LOCAL)

    kwargs = mock_audit_logger.log_event.call_args.kwargs
    assert kwargs["actor"] == "gmc-1"
    assert kwargs["outcome"] == "accepted"
    assert kwargs["reading_id"] == 1
    assert kwargs["client_ip"] == "203.0.113.7"
