"""
HTTP-level tests for the logger endpoint and the chart API.

The Flask app is built on temp-dir storage; the allow-list path points at a
file that only exists when a test writes it.
"""

import csv
import io
import json
from pathlib import Path

import pytest

from app.domain.date_range import Predicate
from app.domain.exceptions import StorageError


def _stored(container):
    return container.reading_repo.query(Predicate())


class TestIngest:
    def test_upload_is_acknowledged_and_stored(self, client, container):
        resp = client.get(
            "/gmc_log.php?AID=0230111&GID=0034021&CPM=15&ACPM=13.2&uSV=0.075",
            headers={"X-Forwarded-For": "198.51.100.4, 10.0.0.1"},
        )

        assert resp.status_code == 200
        assert resp.data == b"OK"
        assert resp.mimetype == "text/plain"

        rows = _stored(container)
        assert len(rows) == 1
        assert rows[0].device_id == "0230111"
        assert rows[0].cpm == "15"
        assert rows[0].client_ip == "198.51.100.4"

    def test_root_path_accepts_uploads_too(self, client, container):
        resp = client.get("/?id=gmc-1&cpm=20")

        assert resp.data == b"OK"
        assert len(_stored(container)) == 1

    def test_forbidden_device(self, client, container, app_paths):
        Path(app_paths["allowlist_path"]).write_text("ABC123\n", encoding="utf-8")

        resp = client.get("/gmc_log.php?ID=xyz999&CPM=20")

        assert resp.status_code == 403
        assert resp.data == b"FORBIDDEN"
        assert _stored(container) == []

        assert client.get("/gmc_log.php?ID=abc123&CPM=20").data == b"OK"

    def test_ingest_is_audited(self, client, app_paths):
        client.get("/gmc_log.php?ID=gmc-1&CPM=20")

        lines = Path(app_paths["audit_log_path"]).read_text(encoding="utf-8").splitlines()
        record = json.loads(lines[-1].split(" | ", 2)[2])
        assert record["actor"] == "gmc-1"
        assert record["outcome"] == "accepted"

    def test_storage_failure_answers_error(self, client, container, monkeypatch):
        def broken_insert(reading):
            raise StorageError("disk full")

        monkeypatch.setattr(container.reading_repo, "insert", broken_insert)

        resp = client.get("/gmc_log.php?ID=gmc-1&CPM=20")

        assert resp.status_code == 500
        assert resp.data == b"ERROR"

    def test_unreadable_allowlist_answers_error(self, client, container, app_paths):
        Path(app_paths["allowlist_path"]).mkdir()

        resp = client.get("/gmc_log.php?ID=gmc-1&CPM=20")

        assert resp.status_code == 500
        assert resp.data == b"ERROR"
        assert _stored(container) == []


class TestExport:
    def test_csv_download(self, client, container):
        client.get("/gmc_log.php?ID=gmc-1&CPM=20")

        resp = client.get("/gmc_log.php?export=CSV")

        assert resp.status_code == 200
        assert resp.headers["Content-Type"] == "text/csv; charset=utf-8"
        disposition = resp.headers["Content-Disposition"]
        assert disposition.startswith('attachment; filename="gmc_readings_')
        assert disposition.endswith('.csv"')

        rows = list(csv.reader(io.StringIO(resp.data.decode("utf-8-sig"))))
        assert rows[0][:3] == ["Timestamp", "DeviceID", "CPM"]
        assert rows[1][1:3] == ["gmc-1", "20"]

    def test_xlsx_download_is_tab_separated(self, client):
        client.get("/gmc_log.php?ID=gmc-1&CPM=20")

        resp = client.get("/gmc_log.php?export=xlsx")

        assert resp.headers["Content-Type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert resp.headers["Content-Disposition"].endswith('.xlsx"')
        assert resp.data.decode("utf-8-sig").splitlines()[1].split("\t")[1] == "gmc-1"

    def test_unknown_export_format_renders_viewer(self, client):
        resp = client.get("/gmc_log.php?export=pdf")

        assert resp.status_code == 200
        assert resp.mimetype == "text/html"


class TestViewer:
    def test_viewer_renders_rows_and_chart_data(self, client):
        client.get("/gmc_log.php?ID=gmc-viewer&CPM=42")

        resp = client.get("/gmc_log.php")

        assert resp.status_code == 200
        html = resp.data.decode("utf-8")
        assert "gmc-viewer" in html
        assert '<html lang="en" data-theme="light">' in html
        assert "const chartSeries = {" in html
        assert "42.0" in html

    def test_theme_selection_and_fallback(self, client):
        assert '<html lang="en" data-theme="ocean">' in client.get("/?theme=Ocean").data.decode("utf-8")
        assert '<html lang="en" data-theme="light">' in client.get("/?theme=neon").data.decode("utf-8")

    def test_row_cap_applies_to_viewer(self, client, container):
        from app.domain.reading import Reading

        for i in range(container.config.max_view_rows + 5):
            container.reading_repo.insert(Reading(timestamp="2026-02-01 10:00:00", device_id=f"dev-{i:03d}"))

        html = client.get("/gmc_log.php").data.decode("utf-8")

        assert "dev-104" in html
        assert "dev-004" not in html
        assert "dev-005" in html

    def test_filters_are_echoed_back(self, client):
        html = client.get("/?f_timestamp_from=2026-02-01&f_timestamp_to=garbage").data.decode("utf-8")

        assert 'value="2026-02-01"' in html


class TestChartApi:
    def test_chart_series(self, client, container):
        from app.domain.reading import Reading

        container.reading_repo.insert(Reading(timestamp="2026-02-01 08:00:00", cpm="10", acpm="12"))
        container.reading_repo.insert(Reading(timestamp="2026-02-01 20:00:00", cpm="20", acpm="13"))

        resp = client.get("/api/v1/chart?bucket=daily&f_timestamp_from=2026-02-01")

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["ok"] is True
        assert body["data"]["bucket"] == "daily"
        assert body["data"]["series"] == {"labels": ["2026-02-01"], "cpm": [15.0], "acpm": [12.5]}
        assert body["data"]["filters"] == {"timestamp_from": "2026-02-01", "timestamp_to": ""}

    def test_unknown_bucket_is_rejected(self, client):
        resp = client.get("/api/v1/chart?bucket=yearly")

        assert resp.status_code == 400
        body = resp.get_json()
        assert body["ok"] is False
        assert body["error"]["errors"]

    def test_storage_failure_uses_json_envelope(self, client, container, monkeypatch):
        def broken(*_args, **_kwargs):
            raise StorageError("locked")

        monkeypatch.setattr(container.chart_aggregator, "aggregate", broken)

        resp = client.get("/api/v1/chart")

        assert resp.status_code == 500
        assert resp.get_json()["error"]["message"] == "An internal error occurred"


@pytest.mark.parametrize("path", ["/nope", "/api/v1/nope"])
def test_unknown_paths_are_404(client, path):
    assert client.get(path).status_code == 404


def test_repeated_key_uses_first_value(client, container):
    assert client.get("/gmc_log.php?ID=first&ID=second&CPM=20&CPM=99").data == b"OK"

    row = _stored(container)[0]
    assert (row.device_id, row.cpm) == ("first", "20")
